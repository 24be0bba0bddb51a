import os
import tempfile
from types import SimpleNamespace

os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("DB_BOOTSTRAP_ON_STARTUP", "false")
os.environ.setdefault("UPLOAD_STORAGE_ROOT", tempfile.mkdtemp(prefix="chorechart-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base, GetDb, _EnableSqliteForeignKeys
from app.main import app
from app.modules.auth.users_service import CreateUser
from app.modules.chores.services.entities_service import CreateChore, CreateReward

PARENT_PASSWORD = "parent-pass"
CHILD_PASSWORD = "child-pass"


@pytest.fixture()
def engine():
    created = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(created, "connect", _EnableSqliteForeignKeys)
    Base.metadata.create_all(created)
    yield created
    created.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def make_client(session_factory):
    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[GetDb] = _override_db
    clients = []

    def _make() -> TestClient:
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()
    app.dependency_overrides.pop(GetDb, None)


@pytest.fixture()
def client(make_client):
    return make_client()


def BuildFamily(db, family_id: int = 1, prefix: str = "", child_points: int = 0) -> SimpleNamespace:
    parent = CreateUser(
        db,
        {
            "Username": f"{prefix}parent",
            "Password": PARENT_PASSWORD,
            "Role": "parent",
            "Name": "Parent",
            "FamilyId": family_id,
        },
    )
    child = CreateUser(
        db,
        {
            "Username": f"{prefix}child",
            "Password": CHILD_PASSWORD,
            "Role": "child",
            "Name": "Child",
            "FamilyId": family_id,
            "ParentId": parent.Id,
            "Points": child_points,
        },
    )
    return SimpleNamespace(parent=parent, child=child)


@pytest.fixture()
def family(db):
    return BuildFamily(db)


@pytest.fixture()
def other_family(db):
    return BuildFamily(db, family_id=2, prefix="other-")


@pytest.fixture()
def chore(db, family):
    return CreateChore(db, {"Title": "Feed the cat", "Points": 10, "Frequency": "daily", "UserId": family.child.Id})


@pytest.fixture()
def reward(db, family):
    return CreateReward(db, {"Title": "Movie night", "Points": 30, "UserId": family.child.Id})


def Login(client: TestClient, username: str, password: str):
    return client.post("/api/auth/login", json={"Username": username, "Password": password})


@pytest.fixture()
def parent_client(make_client, family):
    client = make_client()
    assert Login(client, family.parent.Username, PARENT_PASSWORD).status_code == 200
    return client


@pytest.fixture()
def child_client(make_client, family):
    client = make_client()
    assert Login(client, family.child.Username, CHILD_PASSWORD).status_code == 200
    return client
