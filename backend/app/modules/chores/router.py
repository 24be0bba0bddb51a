from fastapi import APIRouter

from app.modules.chores.routes.achievements import router as achievements_router
from app.modules.chores.routes.chores import router as chores_router
from app.modules.chores.routes.claims import router as claims_router
from app.modules.chores.routes.completions import router as completions_router
from app.modules.chores.routes.progress import router as progress_router
from app.modules.chores.routes.rewards import router as rewards_router

router = APIRouter(prefix="/api")

router.include_router(chores_router, prefix="/chores", tags=["chores"])
router.include_router(completions_router, prefix="/chore-completions", tags=["chore-completions"])
router.include_router(rewards_router, prefix="/rewards", tags=["rewards"])
router.include_router(claims_router, prefix="/reward-claims", tags=["reward-claims"])
router.include_router(achievements_router, prefix="/achievements", tags=["achievements"])
router.include_router(progress_router, prefix="/progress", tags=["progress"])
