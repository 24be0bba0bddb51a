from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    Username: str = Field(..., min_length=1, max_length=120)
    Password: str = Field(..., min_length=1, max_length=200)


class ParentUnlockRequest(BaseModel):
    Password: str = Field(..., min_length=1, max_length=200)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    Id: int
    Username: str
    Role: str
    Name: str
    FamilyId: int
    ParentId: int | None = None
    Points: int
    ProfilePhoto: str | None = None
    CreatedAt: datetime


class UserCreateData(BaseModel):
    Username: str = Field(min_length=1, max_length=120)
    Password: str = Field(min_length=1, max_length=200)
    Role: Literal["parent", "child"]
    Name: str = Field(min_length=1, max_length=120)
    FamilyId: int = Field(ge=1)
    ParentId: int | None = Field(default=None, ge=1)
    Points: int = Field(default=0, ge=0)
    ProfilePhoto: str | None = Field(default=None, max_length=512)


class UserPatchData(BaseModel):
    Name: str = Field(default=None, min_length=1, max_length=120)
    Points: int = Field(default=None, ge=0)
    ProfilePhoto: str | None = Field(default=None, max_length=512)


class ChildCreate(BaseModel):
    Username: str = Field(..., min_length=1, max_length=120)
    Password: str = Field(..., min_length=1, max_length=200)
    Name: str = Field(..., min_length=1, max_length=120)
    ProfilePhoto: str | None = Field(default=None, max_length=512)


class AvatarUpdate(BaseModel):
    AvatarUrl: str = Field(..., min_length=1, max_length=512)


class PointsUpdate(BaseModel):
    Points: int = Field(..., ge=0)


class UserMessageResponse(BaseModel):
    Message: str
    User: UserOut


class MessageResponse(BaseModel):
    Message: str


class LoginResponse(BaseModel):
    Message: str
    User: UserOut
    ExpiresAt: datetime
