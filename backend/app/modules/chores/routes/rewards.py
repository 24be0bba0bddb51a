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
    ClaimRewardResponse,
    RewardClaimOut,
    RewardCreate,
    RewardOut,
    RewardPatch,
)
from app.modules.chores.services.approval_service import ClaimReward
from app.modules.chores.services.entities_service import (
    CreateReward,
    DeleteReward,
    GetReward,
    ListRewards,
    UpdateReward,
)

router = APIRouter()
logger = logging.getLogger("chores.rewards")


def _RequireFamilyReward(db: Session, user: UserContext, reward_id: int):
    reward = GetReward(db, reward_id)
    if not reward:
        raise NotFoundError("Reward not found")
    RequireOwnedByFamily(db, user, reward.UserId, "Reward")
    return reward


@router.get("", response_model=list[RewardOut])
def ListRewardItems(
    user_id: int | None = None,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> list[RewardOut]:
    rewards = ListRewards(db, ResolveScopeUserIds(db, user, user_id))
    return [RewardOut.model_validate(reward) for reward in rewards]


@router.post("", response_model=RewardOut, status_code=status.HTTP_201_CREATED)
def CreateRewardItem(
    payload: RewardCreate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> RewardOut:
    RequireFamilyChild(db, user, payload.UserId)
    reward = CreateReward(db, payload.model_dump())
    logger.info("reward created reward_id=%s user_id=%s by=%s", reward.Id, reward.UserId, user.Id)
    return RewardOut.model_validate(reward)


@router.post("/upload", response_model=RewardOut, status_code=status.HTTP_201_CREATED)
def CreateRewardWithImage(
    Title: str = Form(...),
    Points: int = Form(...),
    UserId: int = Form(...),
    image: UploadFile | None = File(default=None),
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> RewardOut:
    payload = {"Title": Title, "Points": Points, "UserId": UserId}
    ValidatePayload(RewardCreate, payload)
    RequireFamilyChild(db, user, UserId)
    if image is not None and image.filename:
        payload["ImageUrl"] = SaveUploadImage(image, "rewards", user.Id).Url
    try:
        reward = CreateReward(db, payload)
    except DomainError:
        DeleteStoredImage(payload.get("ImageUrl"))
        raise
    logger.info("reward created with image reward_id=%s user_id=%s by=%s", reward.Id, reward.UserId, user.Id)
    return RewardOut.model_validate(reward)


@router.put("/{reward_id}", response_model=RewardOut)
def UpdateRewardItem(
    reward_id: int,
    payload: RewardPatch,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> RewardOut:
    _RequireFamilyReward(db, user, reward_id)
    changes = payload.model_dump(exclude_unset=True)
    if "UserId" in changes:
        RequireFamilyChild(db, user, changes["UserId"])
    reward = UpdateReward(db, reward_id, changes)
    if not reward:
        raise NotFoundError("Reward not found")
    logger.info("reward updated reward_id=%s by=%s fields=%s", reward.Id, user.Id, ",".join(sorted(changes)))
    return RewardOut.model_validate(reward)


@router.delete("/{reward_id}", response_model=MessageResponse)
def DeleteRewardItem(
    reward_id: int,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> MessageResponse:
    _RequireFamilyReward(db, user, reward_id)
    if not DeleteReward(db, reward_id):
        raise NotFoundError("Reward not found")
    logger.info("reward deleted reward_id=%s by=%s", reward_id, user.Id)
    return MessageResponse(Message="Reward deleted")


@router.post("/{reward_id}/claim", response_model=ClaimRewardResponse, status_code=status.HTTP_201_CREATED)
def ClaimRewardItem(
    reward_id: int,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireChild()),
) -> ClaimRewardResponse:
    claim, reward, child = ClaimReward(db, reward_id, user.Id)
    return ClaimRewardResponse(
        Message="Reward claim sent for approval",
        Claim=RewardClaimOut.model_validate(claim),
        Reward=RewardOut.model_validate(reward),
        User=UserOut.model_validate(child),
    )
