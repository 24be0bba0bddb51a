from datetime import timedelta
import logging
import os

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.errors import AccessDeniedError, AuthError, ValidationError
from app.db import GetDb
from app.modules.auth.deps import RequireAuthenticated, SessionCookieName, UserContext
from app.modules.auth.models import ROLE_PARENT, User, UserSession
from app.modules.auth.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ParentUnlockRequest,
    UserMessageResponse,
    UserOut,
)
from app.modules.auth.service import (
    CreateSessionToken,
    CreateSessionTokenId,
    NowUtc,
    SessionTtl,
    VerifyPassword,
    _read_int_env,
)
from app.modules.auth.users_service import GetUser, GetUserByUsername

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger("app.auth")

DEFAULT_LOGIN_MAX_ATTEMPTS = 5
DEFAULT_LOGIN_LOCKOUT_MINUTES = 15


def _CookieSecure() -> bool:
    return os.getenv("SESSION_COOKIE_SECURE", "").strip().lower() in {"1", "true", "yes", "on"}


def _StartSession(db: Session, user: User, response: Response) -> UserSession:
    now = NowUtc()
    ttl = SessionTtl()
    record = UserSession(
        UserId=user.Id,
        TokenId=CreateSessionTokenId(),
        CreatedAt=now,
        ExpiresAt=now + ttl,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    token = CreateSessionToken(user.Id, record.TokenId, record.ExpiresAt)
    response.set_cookie(
        key=SessionCookieName(),
        value=token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=_CookieSecure(),
        samesite="lax",
        path="/",
    )
    return record


def _RevokeSession(db: Session, session_id: int | None) -> None:
    if session_id is None:
        return
    record = db.query(UserSession).filter(UserSession.Id == session_id).first()
    if record and record.RevokedAt is None:
        record.RevokedAt = NowUtc()
        db.add(record)
        db.commit()


def _RecordFailedLogin(db: Session, user: User) -> None:
    max_attempts = _read_int_env("AUTH_LOGIN_MAX_ATTEMPTS", DEFAULT_LOGIN_MAX_ATTEMPTS)
    lockout_minutes = _read_int_env("AUTH_LOGIN_LOCKOUT_MINUTES", DEFAULT_LOGIN_LOCKOUT_MINUTES)
    user.FailedLoginCount = (user.FailedLoginCount or 0) + 1
    if user.FailedLoginCount >= max_attempts:
        user.LockedUntil = NowUtc() + timedelta(minutes=lockout_minutes)
        user.FailedLoginCount = 0
        logger.warning("account locked user_id=%s minutes=%s", user.Id, lockout_minutes)
    db.commit()


@router.post("/login", response_model=LoginResponse)
def Login(payload: LoginRequest, response: Response, db: Session = Depends(GetDb)) -> LoginResponse:
    user = GetUserByUsername(db, payload.Username)
    now = NowUtc()
    if user and user.LockedUntil and user.LockedUntil > now:
        raise AccessDeniedError("Account locked. Try again later.")

    if not user or not VerifyPassword(payload.Password, user.PasswordHash):
        if user:
            _RecordFailedLogin(db, user)
        logger.info("login failed username=%s", payload.Username)
        raise AuthError("Invalid credentials")

    user.FailedLoginCount = 0
    user.LockedUntil = None
    db.commit()

    record = _StartSession(db, user, response)
    logger.info("login ok user_id=%s role=%s", user.Id, user.Role)
    return LoginResponse(Message="Logged in", User=UserOut.model_validate(user), ExpiresAt=record.ExpiresAt)


@router.post("/logout", response_model=MessageResponse)
def Logout(
    response: Response,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> MessageResponse:
    _RevokeSession(db, user.SessionId)
    response.delete_cookie(SessionCookieName(), path="/")
    logger.info("logout user_id=%s", user.Id)
    return MessageResponse(Message="Logged out")


@router.post("/parent", response_model=UserMessageResponse)
def UnlockParent(
    payload: ParentUnlockRequest,
    response: Response,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> UserMessageResponse:
    parent_id = user.Id if user.IsParent else user.ParentId
    if parent_id is None:
        raise ValidationError("No parent linked to this account", ["ParentId"])
    parent = GetUser(db, parent_id)
    if not parent or parent.Role != ROLE_PARENT:
        raise ValidationError("No parent linked to this account", ["ParentId"])
    if not VerifyPassword(payload.Password, parent.PasswordHash):
        logger.info("parent unlock failed user_id=%s parent_id=%s", user.Id, parent.Id)
        raise AuthError("Invalid parent password")

    _RevokeSession(db, user.SessionId)
    _StartSession(db, parent, response)
    logger.info("parent unlock user_id=%s parent_id=%s", user.Id, parent.Id)
    return UserMessageResponse(Message="Parent mode unlocked", User=UserOut.model_validate(parent))
