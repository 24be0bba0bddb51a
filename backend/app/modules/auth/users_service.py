from __future__ import annotations

import os
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, ValidationError
from app.core.validation import ValidatePatch, ValidatePayload
from app.modules.auth.models import ROLE_CHILD, ROLE_PARENT, User
from app.modules.auth.schemas import UserCreateData, UserPatchData
from app.modules.auth.service import HashPassword

DEFAULT_PASSWORD_MIN_LENGTH = 6


def _PasswordMinLength() -> int:
    raw = os.getenv("AUTH_PASSWORD_MIN_LENGTH", "").strip()
    if not raw:
        return DEFAULT_PASSWORD_MIN_LENGTH
    try:
        return max(1, int(raw))
    except ValueError:
        return DEFAULT_PASSWORD_MIN_LENGTH


def GetUser(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.Id == user_id).first()


def GetUserByUsername(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.Username == username.strip()).first()


def ListUsersByFamily(db: Session, family_id: int) -> list[User]:
    return db.query(User).filter(User.FamilyId == family_id).order_by(User.Id.asc()).all()


def ListChildren(db: Session, family_id: int) -> list[User]:
    return (
        db.query(User)
        .filter(User.FamilyId == family_id, User.Role == ROLE_CHILD)
        .order_by(User.Id.asc())
        .all()
    )


def _EnsureParentLink(db: Session, data: UserCreateData) -> None:
    if data.Role == ROLE_PARENT:
        if data.ParentId is not None:
            raise ValidationError("Parents cannot have a parent link", ["ParentId"])
        return

    if data.ParentId is None:
        raise ValidationError("Child accounts need a parent", ["ParentId"])
    parent = GetUser(db, data.ParentId)
    if not parent or parent.Role != ROLE_PARENT or parent.FamilyId != data.FamilyId:
        raise ValidationError("Parent must be a parent in the same family", ["ParentId"])


def CreateUser(db: Session, payload: dict[str, Any]) -> User:
    data = ValidatePayload(UserCreateData, payload)
    min_length = _PasswordMinLength()
    if len(data.Password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters", ["Password"])
    _EnsureParentLink(db, data)

    username = data.Username.strip()
    if GetUserByUsername(db, username):
        raise ConflictError("Username already exists")

    record = User(
        Username=username,
        PasswordHash=HashPassword(data.Password),
        Role=data.Role,
        Name=data.Name.strip(),
        FamilyId=data.FamilyId,
        ParentId=data.ParentId,
        Points=data.Points if data.Role == ROLE_CHILD else 0,
        ProfilePhoto=data.ProfilePhoto,
        FailedLoginCount=0,
    )
    db.add(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Username already exists") from exc
    db.refresh(record)
    return record


def UpdateUser(db: Session, user_id: int, patch: dict[str, Any]) -> User | None:
    changes = ValidatePatch(UserPatchData, patch)
    record = GetUser(db, user_id)
    if not record:
        return None
    for key, value in changes.items():
        setattr(record, key, value)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def DeleteUser(db: Session, user_id: int) -> bool:
    record = GetUser(db, user_id)
    if not record:
        return False
    db.delete(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User still has linked children") from exc
    return True
