from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from app.core.errors import ConflictError, ValidationError
from app.core.validation import ValidatePatch, ValidatePayload
from app.modules.chores.models import STATUS_PENDING, Achievement, Chore, Reward, RewardClaim
from app.modules.chores.schemas import (
    AchievementCreate,
    AchievementPatch,
    ChoreCreate,
    ChorePatch,
    RewardCreate,
    RewardPatch,
)


def _EnsureDuration(is_duration: bool, duration: int | None) -> None:
    if is_duration and duration is None:
        raise ValidationError("Duration chores need a duration in minutes", ["Duration"])


def _Save(db: Session, record):
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def _Apply(db: Session, record, changes: dict[str, Any]):
    for key, value in changes.items():
        setattr(record, key, value)
    return _Save(db, record)


def _Delete(db: Session, record) -> bool:
    if not record:
        return False
    db.delete(record)
    db.commit()
    return True


def GetChore(db: Session, chore_id: int) -> Chore | None:
    return db.query(Chore).filter(Chore.Id == chore_id).first()


def ListChores(db: Session, user_ids: list[int]) -> list[Chore]:
    if not user_ids:
        return []
    return (
        db.query(Chore)
        .filter(Chore.UserId.in_(user_ids))
        .order_by(Chore.CreatedAt.asc(), Chore.Id.asc())
        .all()
    )


def ListChoresForUser(db: Session, user_id: int) -> list[Chore]:
    return ListChores(db, [user_id])


def CreateChore(db: Session, payload: dict[str, Any]) -> Chore:
    data = ValidatePayload(ChoreCreate, payload)
    _EnsureDuration(data.IsDurationChore, data.Duration)
    record = Chore(
        Title=data.Title.strip(),
        Points=data.Points,
        Frequency=data.Frequency,
        UserId=data.UserId,
        ImageUrl=data.ImageUrl,
        IsDurationChore=data.IsDurationChore,
        Duration=data.Duration if data.IsDurationChore else None,
        RequiresProof=data.RequiresProof,
    )
    return _Save(db, record)


def UpdateChore(db: Session, chore_id: int, patch: dict[str, Any]) -> Chore | None:
    changes = ValidatePatch(ChorePatch, patch)
    record = GetChore(db, chore_id)
    if not record:
        return None
    is_duration = changes.get("IsDurationChore", record.IsDurationChore)
    duration = changes.get("Duration", record.Duration)
    _EnsureDuration(is_duration, duration)
    if not is_duration:
        changes["Duration"] = None
    if "Title" in changes:
        changes["Title"] = changes["Title"].strip()
    return _Apply(db, record, changes)


def DeleteChore(db: Session, chore_id: int) -> bool:
    return _Delete(db, GetChore(db, chore_id))


def GetReward(db: Session, reward_id: int) -> Reward | None:
    return db.query(Reward).filter(Reward.Id == reward_id).first()


def ListRewards(db: Session, user_ids: list[int]) -> list[Reward]:
    if not user_ids:
        return []
    return (
        db.query(Reward)
        .filter(Reward.UserId.in_(user_ids))
        .order_by(Reward.Points.asc(), Reward.Id.asc())
        .all()
    )


def ListRewardsForUser(db: Session, user_id: int) -> list[Reward]:
    return ListRewards(db, [user_id])


def CreateReward(db: Session, payload: dict[str, Any]) -> Reward:
    data = ValidatePayload(RewardCreate, payload)
    record = Reward(
        Title=data.Title.strip(),
        Points=data.Points,
        UserId=data.UserId,
        ImageUrl=data.ImageUrl,
        Claimed=False,
    )
    return _Save(db, record)


def HasPendingClaim(db: Session, reward_id: int) -> bool:
    return (
        db.query(RewardClaim.Id)
        .filter(RewardClaim.RewardId == reward_id, RewardClaim.Status == STATUS_PENDING)
        .first()
        is not None
    )


def UpdateReward(db: Session, reward_id: int, patch: dict[str, Any]) -> Reward | None:
    changes = ValidatePatch(RewardPatch, patch)
    record = GetReward(db, reward_id)
    if not record:
        return None
    if changes.get("UserId", record.UserId) != record.UserId and HasPendingClaim(db, record.Id):
        raise ConflictError("Reward has a claim waiting for approval")
    if "Title" in changes:
        changes["Title"] = changes["Title"].strip()
    return _Apply(db, record, changes)


def DeleteReward(db: Session, reward_id: int) -> bool:
    record = GetReward(db, reward_id)
    if record and HasPendingClaim(db, record.Id):
        raise ConflictError("Reward has a claim waiting for approval")
    return _Delete(db, record)


def GetAchievement(db: Session, achievement_id: int) -> Achievement | None:
    return db.query(Achievement).filter(Achievement.Id == achievement_id).first()


def ListAchievements(db: Session, user_ids: list[int]) -> list[Achievement]:
    if not user_ids:
        return []
    return (
        db.query(Achievement)
        .filter(Achievement.UserId.in_(user_ids))
        .order_by(Achievement.Id.asc())
        .all()
    )


def ListAchievementsForUser(db: Session, user_id: int) -> list[Achievement]:
    return ListAchievements(db, [user_id])


def CreateAchievement(db: Session, payload: dict[str, Any]) -> Achievement:
    data = ValidatePayload(AchievementCreate, payload)
    record = Achievement(
        Title=data.Title.strip(),
        Icon=data.Icon.strip(),
        UserId=data.UserId,
        Unlocked=data.Unlocked,
    )
    return _Save(db, record)


def UpdateAchievement(db: Session, achievement_id: int, patch: dict[str, Any]) -> Achievement | None:
    changes = ValidatePatch(AchievementPatch, patch)
    record = GetAchievement(db, achievement_id)
    if not record:
        return None
    return _Apply(db, record, changes)


def DeleteAchievement(db: Session, achievement_id: int) -> bool:
    return _Delete(db, GetAchievement(db, achievement_id))
