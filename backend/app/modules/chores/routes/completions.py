from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import GetDb
from app.modules.auth.access import RequireVisibleUser
from app.modules.auth.deps import RequireAuthenticated, RequireParent, UserContext
from app.modules.auth.schemas import UserOut
from app.modules.chores.schemas import (
    ChoreCompletionOut,
    CompletionReviewResponse,
    PendingCompletionOut,
    ReviewRequest,
)
from app.modules.chores.services.approval_service import (
    ListCompletionsForUser,
    ListPendingCompletions,
    NormalizeStatus,
    ReviewChoreCompletion,
)
from app.modules.chores.services.schedule_service import LoadChoreStatuses
from app.modules.chores.utils.builders import BuildChoreOut

router = APIRouter()


@router.get("/user", response_model=list[ChoreCompletionOut])
def ListOwnCompletions(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> list[ChoreCompletionOut]:
    return [ChoreCompletionOut.model_validate(entry) for entry in ListCompletionsForUser(db, user.Id)]


@router.get("/user/{user_id}/{completion_status}", response_model=list[ChoreCompletionOut])
def ListCompletionsByStatus(
    user_id: int,
    completion_status: str,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> list[ChoreCompletionOut]:
    status_value = NormalizeStatus(completion_status)
    target = RequireVisibleUser(db, user, user_id)
    entries = ListCompletionsForUser(db, target.Id, status_value)
    return [ChoreCompletionOut.model_validate(entry) for entry in entries]


@router.get("/pending", response_model=list[PendingCompletionOut])
def ListPendingCompletionItems(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> list[PendingCompletionOut]:
    rows = ListPendingCompletions(db, user.FamilyId)
    statuses = LoadChoreStatuses(db, [chore for _, chore, _ in rows if chore])
    return [
        PendingCompletionOut(
            Completion=ChoreCompletionOut.model_validate(completion),
            Chore=BuildChoreOut(chore, statuses.get(chore.Id)) if chore else None,
            Child=UserOut.model_validate(child),
        )
        for completion, chore, child in rows
    ]


@router.post("/{completion_id}/review", response_model=CompletionReviewResponse)
def ReviewCompletion(
    completion_id: int,
    payload: ReviewRequest,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> CompletionReviewResponse:
    completion, chore, child = ReviewChoreCompletion(
        db,
        completion_id,
        payload.Status,
        reviewer_id=user.Id,
        family_id=user.FamilyId,
    )
    chore_out = None
    if chore:
        chore_out = BuildChoreOut(chore, LoadChoreStatuses(db, [chore]).get(chore.Id))
    return CompletionReviewResponse(
        Message=f"Chore {completion.Status}",
        Completion=ChoreCompletionOut.model_validate(completion),
        Chore=chore_out,
        Child=UserOut.model_validate(child),
    )
