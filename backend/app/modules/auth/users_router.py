import logging

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from app.core.errors import AuthError, NotFoundError
from app.core.image_storage import URL_PREFIX, DeleteStoredImage, SaveUploadImage
from app.db import GetDb
from app.modules.auth.access import RequireFamilyChild, RequireVisibleUser
from app.modules.auth.deps import RequireAuthenticated, RequireParent, UserContext
from app.modules.auth.models import ROLE_CHILD
from app.modules.auth.schemas import (
    AvatarUpdate,
    ChildCreate,
    PointsUpdate,
    UserMessageResponse,
    UserOut,
)
from app.modules.auth.users_service import CreateUser, GetUser, ListUsersByFamily, UpdateUser

router = APIRouter(prefix="/api", tags=["users"])
logger = logging.getLogger("app.users")


@router.get("/user", response_model=UserOut)
def GetCurrentUser(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> UserOut:
    record = GetUser(db, user.Id)
    if not record:
        raise AuthError("User not found")
    return UserOut.model_validate(record)


@router.get("/users/{user_id}", response_model=UserOut)
def GetUserById(
    user_id: int,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> UserOut:
    return UserOut.model_validate(RequireVisibleUser(db, user, user_id))


@router.get("/family", response_model=list[UserOut])
def ListFamily(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> list[UserOut]:
    return [UserOut.model_validate(member) for member in ListUsersByFamily(db, user.FamilyId)]


@router.post("/family/children", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def AddChild(
    payload: ChildCreate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> UserOut:
    child = CreateUser(
        db,
        {
            "Username": payload.Username,
            "Password": payload.Password,
            "Role": ROLE_CHILD,
            "Name": payload.Name,
            "FamilyId": user.FamilyId,
            "ParentId": user.Id,
            "ProfilePhoto": payload.ProfilePhoto,
        },
    )
    logger.info("child added child_id=%s family_id=%s by=%s", child.Id, child.FamilyId, user.Id)
    return UserOut.model_validate(child)


@router.put("/user/{user_id}/avatar", response_model=UserMessageResponse)
def UpdateAvatar(
    user_id: int,
    payload: AvatarUpdate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> UserMessageResponse:
    target = RequireVisibleUser(db, user, user_id)
    record = UpdateUser(db, target.Id, {"ProfilePhoto": payload.AvatarUrl})
    if not record:
        raise NotFoundError("User not found")
    return UserMessageResponse(Message="Avatar updated", User=UserOut.model_validate(record))


@router.post("/user/photo", response_model=UserMessageResponse)
def UploadProfilePhoto(
    photo: UploadFile = File(...),
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> UserMessageResponse:
    current = GetUser(db, user.Id)
    if not current:
        raise AuthError("User not found")
    previous = current.ProfilePhoto
    stored = SaveUploadImage(photo, "profiles", user.Id)
    record = UpdateUser(db, user.Id, {"ProfilePhoto": stored.Url})
    if not record:
        DeleteStoredImage(stored.Url)
        raise AuthError("User not found")
    # Only files this user uploaded as a profile photo are removed.
    if previous and previous.startswith(f"{URL_PREFIX}/profiles/{user.Id}/"):
        DeleteStoredImage(previous)
    logger.info("profile photo updated user_id=%s bytes=%s", user.Id, stored.FileSizeBytes)
    return UserMessageResponse(Message="Profile photo updated", User=UserOut.model_validate(record))


@router.put("/user/{user_id}/points", response_model=UserMessageResponse)
def SetPoints(
    user_id: int,
    payload: PointsUpdate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireParent()),
) -> UserMessageResponse:
    child = RequireFamilyChild(db, user, user_id, field="Id")
    previous = child.Points
    record = UpdateUser(db, child.Id, {"Points": payload.Points})
    if not record:
        raise NotFoundError("User not found")
    logger.info(
        "points adjusted user_id=%s from=%s to=%s by=%s",
        record.Id,
        previous,
        record.Points,
        user.Id,
    )
    return UserMessageResponse(Message="Points updated", User=UserOut.model_validate(record))
