from app.modules.chores.models import Chore
from app.modules.chores.schemas import ChoreOut
from app.modules.chores.services.schedule_service import ChoreStatus


def BuildChoreOut(chore: Chore, chore_status: ChoreStatus | None = None) -> ChoreOut:
    return ChoreOut(
        Id=chore.Id,
        Title=chore.Title,
        Points=chore.Points,
        Frequency=chore.Frequency,
        UserId=chore.UserId,
        ImageUrl=chore.ImageUrl,
        IsDurationChore=bool(chore.IsDurationChore),
        Duration=chore.Duration,
        RequiresProof=bool(chore.RequiresProof),
        CreatedAt=chore.CreatedAt,
        IsDue=chore_status.IsDue if chore_status else True,
        LastCompletionStatus=chore_status.LastCompletionStatus if chore_status else None,
        LastCompletedAt=chore_status.LastCompletedAt if chore_status else None,
    )
