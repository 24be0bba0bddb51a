from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from app.modules.auth.models import User
from app.modules.auth.service import NowUtc
from app.modules.chores.models import STATUS_APPROVED, STATUS_PENDING, ChoreCompletion, Reward, RewardClaim
from app.modules.chores.services.entities_service import ListChoresForUser
from app.modules.chores.services.schedule_service import IsChoreDue, LatestCountingCompletionsByChore

ACTIVITY_DAYS = 7


@dataclass(frozen=True)
class DayActivity:
    Date: date
    Day: str
    Points: int
    Completions: int


@dataclass(frozen=True)
class ProgressSummary:
    UserId: int
    Points: int
    ChoresTotal: int
    ChoresDone: int
    ChoresDue: int
    CompletionPercent: int
    PendingCompletions: int
    Activity: list[DayActivity]
    ClaimedRewards: int
    NextReward: Reward | None


def ListCompletionsInRange(
    db: Session,
    user_id: int,
    start: datetime,
    end: datetime,
    status: str | None = None,
) -> list[ChoreCompletion]:
    query = db.query(ChoreCompletion).filter(
        ChoreCompletion.UserId == user_id,
        ChoreCompletion.CompletedAt >= start,
        ChoreCompletion.CompletedAt < end,
    )
    if status:
        query = query.filter(ChoreCompletion.Status == status)
    return query.order_by(ChoreCompletion.CompletedAt.asc(), ChoreCompletion.Id.asc()).all()


def BuildActivity(completions: list[ChoreCompletion], today: date, days: int = ACTIVITY_DAYS) -> list[DayActivity]:
    points_by_day: dict[date, int] = {}
    count_by_day: dict[date, int] = {}
    for completion in completions:
        if completion.Status != STATUS_APPROVED:
            continue
        day = completion.CompletedAt.date()
        points_by_day[day] = points_by_day.get(day, 0) + completion.Points
        count_by_day[day] = count_by_day.get(day, 0) + 1

    activity = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        activity.append(
            DayActivity(
                Date=day,
                Day=day.strftime("%a"),
                Points=points_by_day.get(day, 0),
                Completions=count_by_day.get(day, 0),
            )
        )
    return activity


def FindNextReward(db: Session, user: User) -> Reward | None:
    return (
        db.query(Reward)
        .filter(
            Reward.UserId == user.Id,
            Reward.Claimed.is_(False),
            Reward.Points <= user.Points,
        )
        .order_by(Reward.Points.asc(), Reward.Id.asc())
        .first()
    )


def BuildProgress(db: Session, user: User, now: datetime | None = None) -> ProgressSummary:
    now = now or NowUtc()
    chores = ListChoresForUser(db, user.Id)
    completions = (
        db.query(ChoreCompletion)
        .filter(ChoreCompletion.UserId == user.Id)
        .all()
    )
    latest = LatestCountingCompletionsByChore(completions)
    done = sum(1 for chore in chores if not IsChoreDue(chore, latest.get(chore.Id), now))
    total = len(chores)
    percent = round(done * 100 / total) if total else 0
    pending = sum(1 for completion in completions if completion.Status == STATUS_PENDING)

    today = now.date()
    window_start = datetime(today.year, today.month, today.day) - timedelta(days=ACTIVITY_DAYS - 1)
    window_end = datetime(today.year, today.month, today.day) + timedelta(days=1)
    recent = ListCompletionsInRange(db, user.Id, window_start, window_end, status=STATUS_APPROVED)

    claimed = (
        db.query(RewardClaim)
        .filter(RewardClaim.UserId == user.Id, RewardClaim.Status == STATUS_APPROVED)
        .count()
    )
    return ProgressSummary(
        UserId=user.Id,
        Points=user.Points,
        ChoresTotal=total,
        ChoresDone=done,
        ChoresDue=total - done,
        CompletionPercent=percent,
        PendingCompletions=pending,
        Activity=BuildActivity(recent, today),
        ClaimedRewards=claimed,
        NextReward=FindNextReward(db, user),
    )
