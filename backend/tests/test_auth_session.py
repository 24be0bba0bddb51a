from datetime import timedelta

import pytest

from app.core.errors import AccessDeniedError, AuthError
from app.modules.auth.deps import LoadActiveSession, RequireChild, RequireParent, UserContext
from app.modules.auth.models import UserSession
from app.modules.auth.service import (
    CreateSessionToken,
    CreateSessionTokenId,
    DecodeSessionToken,
    NowUtc,
)


def _Session(db, user_id: int, expires_in: timedelta = timedelta(days=1)) -> tuple[UserSession, str]:
    record = UserSession(UserId=user_id, TokenId=CreateSessionTokenId(), ExpiresAt=NowUtc() + expires_in)
    db.add(record)
    db.commit()
    return record, CreateSessionToken(user_id, record.TokenId, record.ExpiresAt)


def test_token_round_trip(db, family):
    record, token = _Session(db, family.child.Id)
    assert DecodeSessionToken(token) == (family.child.Id, record.TokenId)


def test_tampered_token_is_rejected():
    with pytest.raises(AuthError):
        DecodeSessionToken("not-a-token")


def test_missing_secret_is_a_configuration_error(monkeypatch):
    monkeypatch.delenv("SESSION_SECRET_KEY")
    with pytest.raises(RuntimeError):
        CreateSessionToken(1, "abc", NowUtc() + timedelta(days=1))


def test_active_session_loads_user(db, family):
    record, token = _Session(db, family.parent.Id)
    session, user = LoadActiveSession(db, token)
    assert session.Id == record.Id
    assert user.Id == family.parent.Id


def test_revoked_session_is_rejected(db, family):
    record, token = _Session(db, family.parent.Id)
    record.RevokedAt = NowUtc()
    db.commit()
    with pytest.raises(AuthError):
        LoadActiveSession(db, token)


def test_role_checkers():
    parent = UserContext(Id=1, Username="parent", Role="parent", FamilyId=1)
    child = UserContext(Id=2, Username="child", Role="child", FamilyId=1, ParentId=1)

    assert RequireParent()(parent) == parent
    assert RequireChild()(child) == child
    with pytest.raises(AccessDeniedError):
        RequireParent()(child)
    with pytest.raises(AccessDeniedError):
        RequireChild()(parent)
