import os
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.errors import AccessDeniedError, AuthError
from app.db import GetDb
from app.modules.auth.models import ROLE_CHILD, ROLE_PARENT, User, UserSession
from app.modules.auth.service import DecodeSessionToken, NowUtc

DEFAULT_SESSION_COOKIE_NAME = "chorechart_session"


def SessionCookieName() -> str:
    return os.getenv("SESSION_COOKIE_NAME", "").strip() or DEFAULT_SESSION_COOKIE_NAME


@dataclass
class UserContext:
    Id: int
    Username: str
    Role: str
    FamilyId: int
    ParentId: int | None = None
    SessionId: int | None = None

    @property
    def IsParent(self) -> bool:
        return self.Role == ROLE_PARENT


def _ExtractToken(request: Request) -> str | None:
    token = request.cookies.get(SessionCookieName())
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.replace("Bearer ", "", 1).strip() or None
    return None


def LoadActiveSession(db: Session, token: str) -> tuple[UserSession, User]:
    user_id, token_id = DecodeSessionToken(token)
    record = db.query(UserSession).filter(UserSession.TokenId == token_id).first()
    if not record or record.UserId != user_id:
        raise AuthError("Invalid session")
    if record.RevokedAt is not None or record.ExpiresAt <= NowUtc():
        raise AuthError("Session expired")

    user = db.query(User).filter(User.Id == user_id).first()
    if not user:
        raise AuthError("User not found")
    return record, user


def BuildUserContext(user: User, session_id: int | None = None) -> UserContext:
    return UserContext(
        Id=user.Id,
        Username=user.Username,
        Role=user.Role,
        FamilyId=user.FamilyId,
        ParentId=user.ParentId,
        SessionId=session_id,
    )


def RequireAuthenticated(
    request: Request,
    db: Session = Depends(GetDb),
) -> UserContext:
    token = _ExtractToken(request)
    if not token:
        raise AuthError("Authentication required")
    record, user = LoadActiveSession(db, token)
    return BuildUserContext(user, record.Id)


def RequireParent():
    def _checker(user: UserContext = Depends(RequireAuthenticated)) -> UserContext:
        if user.Role != ROLE_PARENT:
            raise AccessDeniedError("Parent access required")
        return user

    return _checker


def RequireChild():
    def _checker(user: UserContext = Depends(RequireAuthenticated)) -> UserContext:
        if user.Role != ROLE_CHILD:
            raise AccessDeniedError("Only children can do this")
        return user

    return _checker
