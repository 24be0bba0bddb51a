from app.modules.auth.deps import SessionCookieName
from app.modules.auth.models import User

from conftest import CHILD_PASSWORD, PARENT_PASSWORD, Login


def test_login_sets_session_cookie(client, family):
    response = Login(client, family.child.Username, CHILD_PASSWORD)
    assert response.status_code == 200
    body = response.json()
    assert body["User"]["Id"] == family.child.Id
    assert "PasswordHash" not in body["User"]
    assert client.cookies.get(SessionCookieName())

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["Username"] == family.child.Username


def test_request_without_session_is_rejected(client):
    response = client.get("/api/user")
    assert response.status_code == 401
    assert response.json() == {"detail": "Authentication required", "kind": "auth"}


def test_bad_credentials(client, family):
    response = Login(client, family.child.Username, "wrong")
    assert response.status_code == 401
    assert response.json()["kind"] == "auth"


def test_repeated_failures_lock_account(client, family, db, monkeypatch):
    monkeypatch.setenv("AUTH_LOGIN_MAX_ATTEMPTS", "2")
    Login(client, family.child.Username, "wrong")
    Login(client, family.child.Username, "wrong")

    response = Login(client, family.child.Username, CHILD_PASSWORD)
    assert response.status_code == 403
    db.expire_all()
    assert db.query(User).filter(User.Id == family.child.Id).one().LockedUntil is not None


def test_logout_revokes_session(client, family):
    Login(client, family.child.Username, CHILD_PASSWORD)
    token = client.cookies.get(SessionCookieName())

    assert client.post("/api/auth/logout").status_code == 200

    response = client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Session expired"


def test_parent_unlock_switches_session(child_client, family):
    denied = child_client.post("/api/auth/parent", json={"Password": "nope"})
    assert denied.status_code == 401

    response = child_client.post("/api/auth/parent", json={"Password": PARENT_PASSWORD})
    assert response.status_code == 200
    assert response.json()["User"]["Id"] == family.parent.Id
    assert child_client.get("/api/user").json()["Role"] == "parent"


def test_family_listing_and_add_child(parent_client, child_client, family):
    members = parent_client.get("/api/family").json()
    assert {member["Id"] for member in members} == {family.parent.Id, family.child.Id}

    created = parent_client.post(
        "/api/family/children",
        json={"Username": "newkid", "Password": "newkid-pass", "Name": "New Kid"},
    )
    assert created.status_code == 201
    assert created.json()["ParentId"] == family.parent.Id
    assert created.json()["FamilyId"] == 1

    denied = child_client.post(
        "/api/family/children",
        json={"Username": "sneaky", "Password": "sneaky-pass", "Name": "Sneaky"},
    )
    assert denied.status_code == 403
    assert denied.json()["kind"] == "access_denied"


def test_user_lookup_respects_family(parent_client, child_client, family, other_family):
    assert parent_client.get(f"/api/users/{family.child.Id}").status_code == 200
    assert parent_client.get(f"/api/users/{other_family.child.Id}").status_code == 403
    assert child_client.get(f"/api/users/{family.parent.Id}").status_code == 403
    assert parent_client.get("/api/users/999").status_code == 404


def test_parent_adjusts_points(parent_client, child_client, family):
    response = parent_client.put(f"/api/user/{family.child.Id}/points", json={"Points": 25})
    assert response.status_code == 200
    assert response.json()["User"]["Points"] == 25

    negative = parent_client.put(f"/api/user/{family.child.Id}/points", json={"Points": -5})
    assert negative.status_code == 422

    assert child_client.put(f"/api/user/{family.child.Id}/points", json={"Points": 99}).status_code == 403


def test_avatar_and_photo_upload(child_client, family):
    response = child_client.put(f"/api/user/{family.child.Id}/avatar", json={"AvatarUrl": "/avatars/fox.png"})
    assert response.status_code == 200
    assert response.json()["User"]["ProfilePhoto"] == "/avatars/fox.png"

    upload = child_client.post(
        "/api/user/photo",
        files={"photo": ("me.png", b"\x89PNG\r\n\x1a\n0000", "image/png")},
    )
    assert upload.status_code == 200
    photo_url = upload.json()["User"]["ProfilePhoto"]
    assert photo_url.startswith(f"/uploads/profiles/{family.child.Id}/")
    assert child_client.get(photo_url).status_code == 200


def test_new_profile_photo_replaces_old_file(child_client, family, tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOAD_STORAGE_ROOT", str(tmp_path))
    photo = {"photo": ("me.png", b"\x89PNG\r\n\x1a\n0000", "image/png")}

    first = child_client.post("/api/user/photo", files=photo).json()["User"]["ProfilePhoto"]
    second = child_client.post("/api/user/photo", files=photo).json()["User"]["ProfilePhoto"]

    assert first != second
    stored = [path for path in (tmp_path / "profiles").rglob("*") if path.is_file()]
    assert [f"/uploads/{path.relative_to(tmp_path).as_posix()}" for path in stored] == [second]
