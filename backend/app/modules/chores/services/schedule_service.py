from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from app.modules.auth.service import NowUtc
from app.modules.chores.models import (
    FREQUENCY_WEEKLY,
    STATUS_REJECTED,
    Chore,
    ChoreCompletion,
)


def WeekStart(on_date: date) -> date:
    return on_date - timedelta(days=on_date.weekday())


def PeriodStart(frequency: str, now: datetime) -> datetime:
    today = now.date()
    start = WeekStart(today) if frequency == FREQUENCY_WEEKLY else today
    return datetime(start.year, start.month, start.day)


def PeriodEnd(frequency: str, now: datetime) -> datetime:
    days = 7 if frequency == FREQUENCY_WEEKLY else 1
    return PeriodStart(frequency, now) + timedelta(days=days)


def IsInCurrentPeriod(frequency: str, moment: datetime, now: datetime) -> bool:
    return PeriodStart(frequency, now) <= moment < PeriodEnd(frequency, now)


def IsChoreDue(chore: Chore, last_completion: ChoreCompletion | None, now: datetime | None = None) -> bool:
    # A rejected attempt never counts towards the period.
    if last_completion is None or last_completion.Status == STATUS_REJECTED:
        return True
    now = now or NowUtc()
    return not IsInCurrentPeriod(chore.Frequency, last_completion.CompletedAt, now)


def LatestCompletionsByChore(completions: list[ChoreCompletion]) -> dict[int, ChoreCompletion]:
    latest: dict[int, ChoreCompletion] = {}
    for completion in completions:
        current = latest.get(completion.ChoreId)
        if current is None or (completion.CompletedAt, completion.Id) > (current.CompletedAt, current.Id):
            latest[completion.ChoreId] = completion
    return latest


def LatestCountingCompletionsByChore(completions: list[ChoreCompletion]) -> dict[int, ChoreCompletion]:
    return LatestCompletionsByChore(
        [completion for completion in completions if completion.Status != STATUS_REJECTED]
    )


@dataclass(frozen=True)
class ChoreStatus:
    IsDue: bool
    LastCompletionStatus: str | None
    LastCompletedAt: datetime | None


def LoadChoreStatuses(db: Session, chores: list[Chore], now: datetime | None = None) -> dict[int, ChoreStatus]:
    now = now or NowUtc()
    chore_ids = [chore.Id for chore in chores]
    completions = []
    if chore_ids:
        completions = db.query(ChoreCompletion).filter(ChoreCompletion.ChoreId.in_(chore_ids)).all()
    latest = LatestCompletionsByChore(completions)
    counting = LatestCountingCompletionsByChore(completions)

    statuses: dict[int, ChoreStatus] = {}
    for chore in chores:
        last = latest.get(chore.Id)
        statuses[chore.Id] = ChoreStatus(
            IsDue=IsChoreDue(chore, counting.get(chore.Id), now),
            LastCompletionStatus=last.Status if last else None,
            LastCompletedAt=last.CompletedAt if last else None,
        )
    return statuses
