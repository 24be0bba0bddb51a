import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db import GetDb
from app.modules.auth.access import RequireFamilyChild, RequireOwnedByFamily, ResolveScopeUserIds
from app.modules.auth.deps import RequireAuthenticated, RequireParent, UserContext
from app.modules.chores.schemas import AchievementCreate, AchievementOut, AchievementPatch
from app.modules.chores.services.entities_service import (
    CreateAchievement,
    GetAchievement,
    ListAchievements,
    UpdateAchievement,
)

router = APIRouter()
logger = logging.getLogger("chores.achievements")


@router.get("", response_model=list[AchievementOut])
def ListAchievementItems(
    user_id: int | None = None,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> list[AchievementOut]:
    achievements = ListAchievements(db, ResolveScopeUserIds(db, user, user_id))
    return [AchievementOut.model_validate(achievement) for achievement in achievements]


@router.post("", response_model=AchievementOut, status_code=status.HTTP_201_CREATED)
def CreateAchievementItem(
    payload: AchievementCreate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> AchievementOut:
    RequireFamilyChild(db, user, payload.UserId)
    achievement = CreateAchievement(db, payload.model_dump())
    logger.info("achievement created achievement_id=%s user_id=%s", achievement.Id, achievement.UserId)
    return AchievementOut.model_validate(achievement)


@router.patch("/{achievement_id}", response_model=AchievementOut)
def UpdateAchievementItem(
    achievement_id: int,
    payload: AchievementPatch,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> AchievementOut:
    existing = GetAchievement(db, achievement_id)
    if not existing:
        raise NotFoundError("Achievement not found")
    RequireOwnedByFamily(db, user, existing.UserId, "Achievement")
    achievement = UpdateAchievement(db, achievement_id, payload.model_dump(exclude_unset=True))
    if not achievement:
        raise NotFoundError("Achievement not found")
    return AchievementOut.model_validate(achievement)
