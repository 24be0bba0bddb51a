from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.errors import (
    AccessDeniedError,
    ConflictError,
    InsufficientPointsError,
    NotFoundError,
    ValidationError,
)
from app.modules.auth.models import User
from app.modules.auth.service import NowUtc
from app.modules.chores.models import (
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    Chore,
    ChoreCompletion,
    Reward,
    RewardClaim,
)
from app.modules.chores.services.schedule_service import IsChoreDue

logger = logging.getLogger("chores.approval")

STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
REVIEW_DECISIONS = (STATUS_APPROVED, STATUS_REJECTED)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_PENDING: frozenset({STATUS_APPROVED, STATUS_REJECTED}),
    STATUS_APPROVED: frozenset(),
    STATUS_REJECTED: frozenset(),
}


def CanTransition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def NormalizeStatus(value: str | None) -> str:
    status = (value or "").strip().lower()
    if status not in STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(STATUSES)}", ["Status"])
    return status


def NormalizeDecision(value: str | None) -> str:
    decision = (value or "").strip().lower()
    if decision not in REVIEW_DECISIONS:
        raise ValidationError("Status must be approved or rejected", ["Status"])
    return decision


def _GetUser(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.Id == user_id).first()


def _EnsureReviewerFamily(child: User | None, family_id: int) -> User:
    if not child or child.FamilyId != family_id:
        raise AccessDeniedError("This request belongs to another family")
    return child


# Chore completions


def CheckChoreSubmission(
    db: Session,
    chore_id: int,
    user_id: int,
    has_proof: bool,
) -> tuple[Chore, User]:
    """Run every check a submission must pass, without writing anything.

    Routes call this before a proof image is written to storage.
    """
    chore = db.query(Chore).filter(Chore.Id == chore_id).first()
    if not chore:
        raise NotFoundError("Chore not found")
    if chore.UserId != user_id:
        raise AccessDeniedError("This chore belongs to someone else")
    if chore.RequiresProof and not has_proof:
        raise ValidationError("Proof image is required for this chore", ["ProofImageUrl"])

    user = _GetUser(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    latest = (
        db.query(ChoreCompletion)
        .filter(
            ChoreCompletion.ChoreId == chore.Id,
            ChoreCompletion.UserId == user_id,
            ChoreCompletion.Status != STATUS_REJECTED,
        )
        .order_by(ChoreCompletion.CompletedAt.desc(), ChoreCompletion.Id.desc())
        .first()
    )
    if latest is not None and latest.Status == STATUS_PENDING:
        raise ConflictError("This chore is already waiting for approval")
    if not IsChoreDue(chore, latest):
        raise ConflictError("This chore is not due yet")
    return chore, user


def SubmitChoreCompletion(
    db: Session,
    chore_id: int,
    user_id: int,
    proof_image_url: str | None = None,
) -> tuple[ChoreCompletion, Chore, User]:
    chore, user = CheckChoreSubmission(db, chore_id, user_id, bool(proof_image_url))

    completion = ChoreCompletion(
        ChoreId=chore.Id,
        UserId=user_id,
        Points=chore.Points,
        ProofImageUrl=proof_image_url,
        Status=STATUS_PENDING,
        CompletedAt=NowUtc(),
    )
    db.add(completion)
    db.commit()
    db.refresh(completion)
    logger.info(
        "chore completion submitted completion_id=%s chore_id=%s user_id=%s points=%s",
        completion.Id,
        chore.Id,
        user_id,
        completion.Points,
    )
    return completion, chore, user


def ReviewChoreCompletion(
    db: Session,
    completion_id: int,
    decision: str,
    reviewer_id: int,
    family_id: int,
) -> tuple[ChoreCompletion, Chore | None, User]:
    decision = NormalizeDecision(decision)
    completion = db.query(ChoreCompletion).filter(ChoreCompletion.Id == completion_id).first()
    if not completion:
        raise NotFoundError("Chore completion not found")
    child = _EnsureReviewerFamily(_GetUser(db, completion.UserId), family_id)
    if not CanTransition(completion.Status, decision):
        raise ConflictError(f"Chore completion is already {completion.Status}")

    updated = (
        db.query(ChoreCompletion)
        .filter(ChoreCompletion.Id == completion.Id, ChoreCompletion.Status == STATUS_PENDING)
        .update(
            {
                ChoreCompletion.Status: decision,
                ChoreCompletion.ReviewedBy: reviewer_id,
                ChoreCompletion.ReviewedAt: NowUtc(),
            },
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        raise ConflictError("Chore completion was already reviewed")

    if decision == STATUS_APPROVED:
        db.query(User).filter(User.Id == completion.UserId).update(
            {User.Points: User.Points + completion.Points},
            synchronize_session=False,
        )
    db.commit()
    db.refresh(completion)
    db.refresh(child)

    chore = db.query(Chore).filter(Chore.Id == completion.ChoreId).first()
    logger.info(
        "chore completion reviewed completion_id=%s status=%s reviewer_id=%s user_id=%s balance=%s",
        completion.Id,
        decision,
        reviewer_id,
        child.Id,
        child.Points,
    )
    return completion, chore, child


def ListCompletionsForUser(db: Session, user_id: int, status: str | None = None) -> list[ChoreCompletion]:
    query = db.query(ChoreCompletion).filter(ChoreCompletion.UserId == user_id)
    if status:
        query = query.filter(ChoreCompletion.Status == NormalizeStatus(status))
    return query.order_by(ChoreCompletion.CompletedAt.desc(), ChoreCompletion.Id.desc()).all()


def ListPendingCompletions(db: Session, family_id: int) -> list[tuple[ChoreCompletion, Chore | None, User]]:
    rows = (
        db.query(ChoreCompletion, User)
        .join(User, User.Id == ChoreCompletion.UserId)
        .filter(User.FamilyId == family_id, ChoreCompletion.Status == STATUS_PENDING)
        .order_by(ChoreCompletion.CompletedAt.asc(), ChoreCompletion.Id.asc())
        .all()
    )
    chore_ids = {completion.ChoreId for completion, _ in rows}
    chores = {}
    if chore_ids:
        chores = {chore.Id: chore for chore in db.query(Chore).filter(Chore.Id.in_(chore_ids)).all()}
    return [(completion, chores.get(completion.ChoreId), child) for completion, child in rows]


# Reward claims


def ClaimReward(db: Session, reward_id: int, user_id: int) -> tuple[RewardClaim, Reward, User]:
    reward = db.query(Reward).filter(Reward.Id == reward_id).first()
    if not reward:
        raise NotFoundError("Reward not found")
    if reward.UserId != user_id:
        raise AccessDeniedError("This reward belongs to someone else")
    if reward.Claimed:
        raise ConflictError("Reward already claimed")

    user = _GetUser(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    pending = (
        db.query(RewardClaim.Id)
        .filter(RewardClaim.RewardId == reward.Id, RewardClaim.Status == STATUS_PENDING)
        .first()
    )
    if pending:
        raise ConflictError("This reward is already waiting for approval")
    if user.Points < reward.Points:
        raise InsufficientPointsError("Not enough points", reward.Points - user.Points)

    claim = RewardClaim(
        RewardId=reward.Id,
        UserId=user_id,
        Points=reward.Points,
        Status=STATUS_PENDING,
        ClaimedAt=NowUtc(),
    )
    db.add(claim)
    db.commit()
    db.refresh(claim)
    logger.info(
        "reward claim submitted claim_id=%s reward_id=%s user_id=%s cost=%s",
        claim.Id,
        reward.Id,
        user_id,
        claim.Points,
    )
    return claim, reward, user


def ReviewRewardClaim(
    db: Session,
    claim_id: int,
    decision: str,
    reviewer_id: int,
    family_id: int,
) -> tuple[RewardClaim, Reward | None, User]:
    decision = NormalizeDecision(decision)
    claim = db.query(RewardClaim).filter(RewardClaim.Id == claim_id).first()
    if not claim:
        raise NotFoundError("Reward claim not found")
    child = _EnsureReviewerFamily(_GetUser(db, claim.UserId), family_id)
    if not CanTransition(claim.Status, decision):
        raise ConflictError(f"Reward claim is already {claim.Status}")

    updated = (
        db.query(RewardClaim)
        .filter(RewardClaim.Id == claim.Id, RewardClaim.Status == STATUS_PENDING)
        .update(
            {
                RewardClaim.Status: decision,
                RewardClaim.ReviewedBy: reviewer_id,
                RewardClaim.ReviewedAt: NowUtc(),
            },
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        raise ConflictError("Reward claim was already reviewed")

    if decision == STATUS_APPROVED:
        marked = (
            db.query(Reward)
            .filter(
                Reward.Id == claim.RewardId,
                Reward.UserId == claim.UserId,
                Reward.Claimed.is_(False),
            )
            .update({Reward.Claimed: True}, synchronize_session=False)
        )
        if marked != 1:
            db.rollback()
            logger.warning(
                "reward claim approval blocked claim_id=%s reward_id=%s reason=reward_unavailable",
                claim.Id,
                claim.RewardId,
            )
            raise ConflictError("Reward is no longer available for this claim")
        deducted = (
            db.query(User)
            .filter(User.Id == claim.UserId, User.Points >= claim.Points)
            .update({User.Points: User.Points - claim.Points}, synchronize_session=False)
        )
        if deducted == 0:
            db.rollback()
            db.refresh(child)
            logger.warning(
                "reward claim approval blocked claim_id=%s user_id=%s balance=%s cost=%s",
                claim.Id,
                child.Id,
                child.Points,
                claim.Points,
            )
            raise InsufficientPointsError("Not enough points", claim.Points - child.Points)
    db.commit()
    db.refresh(claim)
    db.refresh(child)

    reward = db.query(Reward).filter(Reward.Id == claim.RewardId).first()
    logger.info(
        "reward claim reviewed claim_id=%s status=%s reviewer_id=%s user_id=%s balance=%s",
        claim.Id,
        decision,
        reviewer_id,
        child.Id,
        child.Points,
    )
    return claim, reward, child


def ListClaimsForUser(db: Session, user_id: int, status: str | None = None) -> list[RewardClaim]:
    query = db.query(RewardClaim).filter(RewardClaim.UserId == user_id)
    if status:
        query = query.filter(RewardClaim.Status == NormalizeStatus(status))
    return query.order_by(RewardClaim.ClaimedAt.desc(), RewardClaim.Id.desc()).all()


def ListPendingClaims(db: Session, family_id: int) -> list[tuple[RewardClaim, Reward | None, User]]:
    rows = (
        db.query(RewardClaim, User)
        .join(User, User.Id == RewardClaim.UserId)
        .filter(User.FamilyId == family_id, RewardClaim.Status == STATUS_PENDING)
        .order_by(RewardClaim.ClaimedAt.asc(), RewardClaim.Id.asc())
        .all()
    )
    reward_ids = {claim.RewardId for claim, _ in rows}
    rewards = {}
    if reward_ids:
        rewards = {reward.Id: reward for reward in db.query(Reward).filter(Reward.Id.in_(reward_ids)).all()}
    return [(claim, rewards.get(claim.RewardId), child) for claim, child in rows]
