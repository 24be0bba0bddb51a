from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import GetDb
from app.modules.auth.deps import RequireAuthenticated, RequireParent, UserContext
from app.modules.auth.schemas import UserOut
from app.modules.chores.models import Reward
from app.modules.chores.schemas import (
    ClaimReviewResponse,
    PendingClaimOut,
    ReviewRequest,
    RewardClaimDetailOut,
    RewardClaimOut,
    RewardOut,
)
from app.modules.chores.services.approval_service import (
    ListClaimsForUser,
    ListPendingClaims,
    ReviewRewardClaim,
)

router = APIRouter()


@router.get("/user", response_model=list[RewardClaimDetailOut])
def ListOwnClaims(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> list[RewardClaimDetailOut]:
    claims = ListClaimsForUser(db, user.Id)
    reward_ids = {claim.RewardId for claim in claims}
    rewards = {}
    if reward_ids:
        rewards = {reward.Id: reward for reward in db.query(Reward).filter(Reward.Id.in_(reward_ids)).all()}
    results = []
    for claim in claims:
        reward = rewards.get(claim.RewardId)
        results.append(
            RewardClaimDetailOut(
                **RewardClaimOut.model_validate(claim).model_dump(),
                Reward=RewardOut.model_validate(reward) if reward else None,
            )
        )
    return results


@router.get("/pending", response_model=list[PendingClaimOut])
def ListPendingClaimItems(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> list[PendingClaimOut]:
    return [
        PendingClaimOut(
            Claim=RewardClaimOut.model_validate(claim),
            Reward=RewardOut.model_validate(reward) if reward else None,
            Child=UserOut.model_validate(child),
        )
        for claim, reward, child in ListPendingClaims(db, user.FamilyId)
    ]


@router.post("/{claim_id}/review", response_model=ClaimReviewResponse)
def ReviewClaim(
    claim_id: int,
    payload: ReviewRequest,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> ClaimReviewResponse:
    claim, reward, child = ReviewRewardClaim(
        db,
        claim_id,
        payload.Status,
        reviewer_id=user.Id,
        family_id=user.FamilyId,
    )
    return ClaimReviewResponse(
        Message=f"Reward claim {claim.Status}",
        Claim=RewardClaimOut.model_validate(claim),
        Reward=RewardOut.model_validate(reward) if reward else None,
        Child=UserOut.model_validate(child),
    )
