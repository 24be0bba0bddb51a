from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.db import GetDb
from app.modules.auth.access import RequireVisibleUser
from app.modules.auth.deps import RequireAuthenticated, UserContext
from app.modules.auth.models import ROLE_CHILD
from app.modules.chores.schemas import DayActivityOut, ProgressOut, RewardOut
from app.modules.chores.services.progress_service import BuildProgress

router = APIRouter()


@router.get("", response_model=ProgressOut)
def GetProgress(
    user_id: int | None = None,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> ProgressOut:
    if user_id is None:
        if user.IsParent:
            raise ValidationError("user_id is required for parents", ["user_id"])
        user_id = user.Id
    target = RequireVisibleUser(db, user, user_id)
    if target.Role != ROLE_CHILD:
        raise ValidationError("Progress is tracked for children only", ["user_id"])

    summary = BuildProgress(db, target)
    return ProgressOut(
        UserId=summary.UserId,
        Points=summary.Points,
        ChoresTotal=summary.ChoresTotal,
        ChoresDone=summary.ChoresDone,
        ChoresDue=summary.ChoresDue,
        CompletionPercent=summary.CompletionPercent,
        PendingCompletions=summary.PendingCompletions,
        Activity=[
            DayActivityOut(Date=day.Date, Day=day.Day, Points=day.Points, Completions=day.Completions)
            for day in summary.Activity
        ],
        ClaimedRewards=summary.ClaimedRewards,
        NextReward=RewardOut.model_validate(summary.NextReward) if summary.NextReward else None,
    )
