from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.modules.auth.schemas import UserOut

FrequencyValue = Literal["daily", "weekly"]


class ChoreCreate(BaseModel):
    Title: str = Field(min_length=1, max_length=200)
    Points: int = Field(ge=1, le=100)
    Frequency: FrequencyValue
    UserId: int = Field(ge=1)
    ImageUrl: str | None = Field(default=None, max_length=512)
    IsDurationChore: bool = False
    Duration: int | None = Field(default=None, ge=1, le=120)
    RequiresProof: bool = False


class ChorePatch(BaseModel):
    Title: str = Field(default=None, min_length=1, max_length=200)
    Points: int = Field(default=None, ge=1, le=100)
    Frequency: FrequencyValue = None
    UserId: int = Field(default=None, ge=1)
    ImageUrl: str | None = Field(default=None, max_length=512)
    IsDurationChore: bool = None
    Duration: int | None = Field(default=None, ge=1, le=120)
    RequiresProof: bool = None


class ChoreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    Id: int
    Title: str
    Points: int
    Frequency: str
    UserId: int
    ImageUrl: str | None = None
    IsDurationChore: bool
    Duration: int | None = None
    RequiresProof: bool
    CreatedAt: datetime
    IsDue: bool = True
    LastCompletionStatus: str | None = None
    LastCompletedAt: datetime | None = None


class RewardCreate(BaseModel):
    Title: str = Field(min_length=1, max_length=200)
    Points: int = Field(ge=1, le=100)
    UserId: int = Field(ge=1)
    ImageUrl: str | None = Field(default=None, max_length=512)


class RewardPatch(BaseModel):
    Title: str = Field(default=None, min_length=1, max_length=200)
    Points: int = Field(default=None, ge=1, le=100)
    UserId: int = Field(default=None, ge=1)
    ImageUrl: str | None = Field(default=None, max_length=512)
    Claimed: bool = None


class RewardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    Id: int
    Title: str
    Points: int
    UserId: int
    ImageUrl: str | None = None
    Claimed: bool
    CreatedAt: datetime


class AchievementCreate(BaseModel):
    Title: str = Field(min_length=1, max_length=200)
    Icon: str = Field(min_length=1, max_length=120)
    UserId: int = Field(ge=1)
    Unlocked: bool = False


class AchievementPatch(BaseModel):
    Title: str = Field(default=None, min_length=1, max_length=200)
    Icon: str = Field(default=None, min_length=1, max_length=120)
    Unlocked: bool = None


class AchievementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    Id: int
    Title: str
    Icon: str
    Unlocked: bool
    UserId: int


class ReviewRequest(BaseModel):
    Status: str = Field(..., max_length=20)


class ChoreCompletionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    Id: int
    ChoreId: int
    UserId: int
    Points: int
    ProofImageUrl: str | None = None
    Status: str
    ReviewedBy: int | None = None
    ReviewedAt: datetime | None = None
    CompletedAt: datetime


class RewardClaimOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    Id: int
    RewardId: int
    UserId: int
    Points: int
    Status: str
    ReviewedBy: int | None = None
    ReviewedAt: datetime | None = None
    ClaimedAt: datetime


class CompleteChoreResponse(BaseModel):
    Message: str
    Completion: ChoreCompletionOut
    Chore: ChoreOut
    User: UserOut


class ClaimRewardResponse(BaseModel):
    Message: str
    Claim: RewardClaimOut
    Reward: RewardOut
    User: UserOut


class CompletionReviewResponse(BaseModel):
    Message: str
    Completion: ChoreCompletionOut
    Chore: ChoreOut | None = None
    Child: UserOut


class ClaimReviewResponse(BaseModel):
    Message: str
    Claim: RewardClaimOut
    Reward: RewardOut | None = None
    Child: UserOut


class PendingCompletionOut(BaseModel):
    Completion: ChoreCompletionOut
    Chore: ChoreOut | None = None
    Child: UserOut


class PendingClaimOut(BaseModel):
    Claim: RewardClaimOut
    Reward: RewardOut | None = None
    Child: UserOut


class RewardClaimDetailOut(RewardClaimOut):
    Reward: RewardOut | None = None


class DayActivityOut(BaseModel):
    Date: date
    Day: str
    Points: int
    Completions: int


class ProgressOut(BaseModel):
    UserId: int
    Points: int
    ChoresTotal: int
    ChoresDone: int
    ChoresDue: int
    CompletionPercent: int
    PendingCompletions: int
    Activity: list[DayActivityOut]
    ClaimedRewards: int
    NextReward: RewardOut | None = None
