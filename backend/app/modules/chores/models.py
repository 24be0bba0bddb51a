from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String

from app.db import Base

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


class Chore(Base):
    __tablename__ = "chores"
    __table_args__ = (
        CheckConstraint("Frequency IN ('daily', 'weekly')", name="ck_chores_frequency"),
    )

    Id = Column(Integer, primary_key=True, index=True)
    Title = Column(String(200), nullable=False)
    Points = Column(Integer, nullable=False)
    ImageUrl = Column(String(512))
    Frequency = Column(String(20), nullable=False, default=FREQUENCY_DAILY)
    UserId = Column(Integer, nullable=False, index=True)
    IsDurationChore = Column(Boolean, nullable=False, default=False)
    Duration = Column(Integer)
    RequiresProof = Column(Boolean, nullable=False, default=False)
    CreatedAt = Column(DateTime, default=datetime.utcnow, nullable=False)


class Reward(Base):
    __tablename__ = "rewards"

    Id = Column(Integer, primary_key=True, index=True)
    Title = Column(String(200), nullable=False)
    Points = Column(Integer, nullable=False)
    ImageUrl = Column(String(512))
    Claimed = Column(Boolean, nullable=False, default=False)
    UserId = Column(Integer, nullable=False, index=True)
    CreatedAt = Column(DateTime, default=datetime.utcnow, nullable=False)


class Achievement(Base):
    __tablename__ = "achievements"

    Id = Column(Integer, primary_key=True, index=True)
    Title = Column(String(200), nullable=False)
    Icon = Column(String(120), nullable=False)
    Unlocked = Column(Boolean, nullable=False, default=False)
    UserId = Column(Integer, nullable=False, index=True)


class ChoreCompletion(Base):
    __tablename__ = "chore_completions"
    __table_args__ = (
        Index("ix_chore_completions_user_status", "UserId", "Status"),
    )

    Id = Column(Integer, primary_key=True, index=True)
    ChoreId = Column(Integer, nullable=False, index=True)
    UserId = Column(Integer, nullable=False, index=True)
    Points = Column(Integer, nullable=False)
    ProofImageUrl = Column(String(512))
    Status = Column(String(20), nullable=False, default=STATUS_PENDING)
    ReviewedBy = Column(Integer)
    ReviewedAt = Column(DateTime)
    CompletedAt = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class RewardClaim(Base):
    __tablename__ = "reward_claims"
    __table_args__ = (
        Index("ix_reward_claims_user_status", "UserId", "Status"),
    )

    Id = Column(Integer, primary_key=True, index=True)
    RewardId = Column(Integer, nullable=False, index=True)
    UserId = Column(Integer, nullable=False, index=True)
    Points = Column(Integer, nullable=False)
    Status = Column(String(20), nullable=False, default=STATUS_PENDING)
    ReviewedBy = Column(Integer)
    ReviewedAt = Column(DateTime)
    ClaimedAt = Column(DateTime, default=datetime.utcnow, nullable=False)
