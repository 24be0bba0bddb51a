import os
import secrets
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from app.core.errors import AuthError

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

SESSION_ALGORITHM = "HS256"
DEFAULT_SESSION_TTL_DAYS = 30


def _require_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(f"Missing required env var: {name}")
    return value


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def NowUtc() -> datetime:
    # Naive UTC, matching what SQLite hands back.
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)


def HashPassword(password: str) -> str:
    return pwd_context.hash(password)


def VerifyPassword(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def SessionTtl() -> timedelta:
    return timedelta(days=_read_int_env("SESSION_TTL_DAYS", DEFAULT_SESSION_TTL_DAYS))


def CreateSessionTokenId() -> str:
    return secrets.token_urlsafe(32)


def CreateSessionToken(user_id: int, token_id: str, expires_at: datetime) -> str:
    secret = _require_env("SESSION_SECRET_KEY")
    now = NowUtc()
    payload = {
        "sub": str(user_id),
        "sid": token_id,
        "iat": int(now.replace(tzinfo=timezone.utc).timestamp()),
        "exp": int(expires_at.replace(tzinfo=timezone.utc).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=SESSION_ALGORITHM)


def DecodeSessionToken(token: str) -> tuple[int, str]:
    secret = _require_env("SESSION_SECRET_KEY")
    try:
        payload = jwt.decode(token, secret, algorithms=[SESSION_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Session expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid session") from exc

    token_id = payload.get("sid")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError) as exc:
        raise AuthError("Invalid session") from exc
    if not token_id:
        raise AuthError("Invalid session")
    return user_id, token_id
