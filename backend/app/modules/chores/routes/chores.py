import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from app.core.errors import DomainError, NotFoundError
from app.core.image_storage import DeleteStoredImage, SaveUploadImage
from app.core.validation import ValidatePayload
from app.db import GetDb
from app.modules.auth.access import RequireFamilyChild, RequireOwnedByFamily, ResolveScopeUserIds
from app.modules.auth.deps import RequireAuthenticated, RequireChild, RequireParent, UserContext
from app.modules.auth.schemas import MessageResponse, UserOut
from app.modules.chores.schemas import (
    ChoreCompletionOut,
    ChoreCreate,
    ChoreOut,
    ChorePatch,
    CompleteChoreResponse,
)
from app.modules.chores.services.approval_service import CheckChoreSubmission, SubmitChoreCompletion
from app.modules.chores.services.entities_service import (
    CreateChore,
    DeleteChore,
    GetChore,
    ListChores,
    UpdateChore,
)
from app.modules.chores.services.schedule_service import LoadChoreStatuses
from app.modules.chores.utils.builders import BuildChoreOut

router = APIRouter()
logger = logging.getLogger("chores.items")


def _LoadChoreOut(db: Session, chore) -> ChoreOut:
    statuses = LoadChoreStatuses(db, [chore])
    return BuildChoreOut(chore, statuses.get(chore.Id))


def _RequireFamilyChore(db: Session, user: UserContext, chore_id: int):
    chore = GetChore(db, chore_id)
    if not chore:
        raise NotFoundError("Chore not found")
    RequireOwnedByFamily(db, user, chore.UserId, "Chore")
    return chore


@router.get("", response_model=list[ChoreOut])
def ListChoreItems(
    user_id: int | None = None,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> list[ChoreOut]:
    chores = ListChores(db, ResolveScopeUserIds(db, user, user_id))
    statuses = LoadChoreStatuses(db, chores)
    return [BuildChoreOut(chore, statuses.get(chore.Id)) for chore in chores]


@router.post("", response_model=ChoreOut, status_code=status.HTTP_201_CREATED)
def CreateChoreItem(
    payload: ChoreCreate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> ChoreOut:
    RequireFamilyChild(db, user, payload.UserId)
    chore = CreateChore(db, payload.model_dump())
    logger.info("chore created chore_id=%s user_id=%s by=%s", chore.Id, chore.UserId, user.Id)
    return _LoadChoreOut(db, chore)


@router.post("/upload", response_model=ChoreOut, status_code=status.HTTP_201_CREATED)
def CreateChoreWithImage(
    Title: str = Form(...),
    Points: int = Form(...),
    Frequency: str = Form(...),
    UserId: int = Form(...),
    IsDurationChore: bool = Form(default=False),
    Duration: int | None = Form(default=None),
    RequiresProof: bool = Form(default=False),
    image: UploadFile | None = File(default=None),
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> ChoreOut:
    payload = {
        "Title": Title,
        "Points": Points,
        "Frequency": Frequency,
        "UserId": UserId,
        "IsDurationChore": IsDurationChore,
        "Duration": Duration,
        "RequiresProof": RequiresProof,
    }
    ValidatePayload(ChoreCreate, payload)
    RequireFamilyChild(db, user, UserId)
    if image is not None and image.filename:
        payload["ImageUrl"] = SaveUploadImage(image, "chores", user.Id).Url
    try:
        chore = CreateChore(db, payload)
    except DomainError:
        DeleteStoredImage(payload.get("ImageUrl"))
        raise
    logger.info("chore created with image chore_id=%s user_id=%s by=%s", chore.Id, chore.UserId, user.Id)
    return _LoadChoreOut(db, chore)


@router.put("/{chore_id}", response_model=ChoreOut)
def UpdateChoreItem(
    chore_id: int,
    payload: ChorePatch,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> ChoreOut:
    _RequireFamilyChore(db, user, chore_id)
    changes = payload.model_dump(exclude_unset=True)
    if "UserId" in changes:
        RequireFamilyChild(db, user, changes["UserId"])
    chore = UpdateChore(db, chore_id, changes)
    if not chore:
        raise NotFoundError("Chore not found")
    logger.info("chore updated chore_id=%s by=%s fields=%s", chore.Id, user.Id, ",".join(sorted(changes)))
    return _LoadChoreOut(db, chore)


@router.delete("/{chore_id}", response_model=MessageResponse)
def DeleteChoreItem(
    chore_id: int,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> MessageResponse:
    _RequireFamilyChore(db, user, chore_id)
    if not DeleteChore(db, chore_id):
        raise NotFoundError("Chore not found")
    logger.info("chore deleted chore_id=%s by=%s", chore_id, user.Id)
    return MessageResponse(Message="Chore deleted")


@router.post("/{chore_id}/complete", response_model=CompleteChoreResponse, status_code=status.HTTP_201_CREATED)
def CompleteChore(
    chore_id: int,
    proofImage: UploadFile | None = File(default=None),
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireChild()),
) -> CompleteChoreResponse:
    has_proof = proofImage is not None and bool(proofImage.filename)
    CheckChoreSubmission(db, chore_id, user.Id, has_proof)
    proof_url = SaveUploadImage(proofImage, "proofs", user.Id).Url if has_proof else None
    try:
        completion, chore, child = SubmitChoreCompletion(db, chore_id, user.Id, proof_url)
    except DomainError:
        DeleteStoredImage(proof_url)
        raise
    return CompleteChoreResponse(
        Message="Chore submitted for approval",
        Completion=ChoreCompletionOut.model_validate(completion),
        Chore=_LoadChoreOut(db, chore),
        User=UserOut.model_validate(child),
    )
