from app.modules.auth.models import User
from app.modules.chores.models import RewardClaim

from conftest import PARENT_PASSWORD, Login


def _Balance(db, user_id: int) -> int:
    db.expire_all()
    return db.query(User).filter(User.Id == user_id).one().Points


def test_parent_creates_chore_and_child_sees_it(parent_client, child_client, family):
    created = parent_client.post(
        "/api/chores",
        json={"Title": "Set the table", "Points": 15, "Frequency": "weekly", "UserId": family.child.Id},
    )
    assert created.status_code == 201
    assert created.json()["IsDue"] is True

    chores = child_client.get("/api/chores").json()
    assert [(item["Title"], item["Points"], item["Frequency"]) for item in chores] == [("Set the table", 15, "weekly")]


def test_child_cannot_manage_chores(child_client, family, chore):
    response = child_client.post(
        "/api/chores",
        json={"Title": "Free points", "Points": 100, "Frequency": "daily", "UserId": family.child.Id},
    )
    assert response.status_code == 403
    assert child_client.delete(f"/api/chores/{chore.Id}").status_code == 403


def test_chore_for_child_outside_family_is_rejected(parent_client, other_family):
    response = parent_client.post(
        "/api/chores",
        json={"Title": "Walk dog", "Points": 10, "Frequency": "daily", "UserId": other_family.child.Id},
    )
    assert response.status_code == 400
    assert response.json() == {
        "detail": "UserId must be a child in your family",
        "kind": "validation",
        "fields": ["UserId"],
    }


def test_update_and_delete_chore(parent_client, chore):
    updated = parent_client.put(f"/api/chores/{chore.Id}", json={"Points": 20})
    assert updated.status_code == 200
    assert updated.json()["Points"] == 20
    assert updated.json()["Title"] == "Feed the cat"

    deleted = parent_client.delete(f"/api/chores/{chore.Id}")
    assert deleted.json() == {"Message": "Chore deleted"}
    assert parent_client.delete(f"/api/chores/{chore.Id}").status_code == 404


def test_upload_chore_with_image(parent_client, family):
    response = parent_client.post(
        "/api/chores/upload",
        data={"Title": "Feed fish", "Points": "5", "Frequency": "daily", "UserId": str(family.child.Id)},
        files={"image": ("fish.png", b"\x89PNG\r\n\x1a\n0000", "image/png")},
    )
    assert response.status_code == 201
    assert response.json()["ImageUrl"].startswith("/uploads/chores/")


def test_completion_approval_flow_over_http(parent_client, child_client, family, chore, db):
    submitted = child_client.post(f"/api/chores/{chore.Id}/complete")
    assert submitted.status_code == 201
    body = submitted.json()
    assert body["Completion"]["Status"] == "pending"
    assert body["Chore"]["IsDue"] is False
    assert body["User"]["Points"] == 0

    pending = parent_client.get("/api/chore-completions/pending").json()
    assert [item["Completion"]["Id"] for item in pending] == [body["Completion"]["Id"]]
    assert pending[0]["Child"]["Id"] == family.child.Id

    completion_id = body["Completion"]["Id"]
    approved = parent_client.post(f"/api/chore-completions/{completion_id}/review", json={"Status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["Child"]["Points"] == 10

    again = parent_client.post(f"/api/chore-completions/{completion_id}/review", json={"Status": "approved"})
    assert again.status_code == 409
    assert again.json()["kind"] == "conflict"
    assert _Balance(db, family.child.Id) == 10

    history = child_client.get(f"/api/chore-completions/user/{family.child.Id}/approved").json()
    assert [item["Id"] for item in history] == [completion_id]
    assert child_client.get(f"/api/chore-completions/user/{family.child.Id}/bogus").status_code == 400


def test_child_cannot_review(child_client, chore):
    submitted = child_client.post(f"/api/chores/{chore.Id}/complete").json()
    response = child_client.post(
        f"/api/chore-completions/{submitted['Completion']['Id']}/review",
        json={"Status": "approved"},
    )
    assert response.status_code == 403


def test_other_family_parent_cannot_review(make_client, child_client, other_family, chore):
    outsider = make_client()
    Login(outsider, other_family.parent.Username, PARENT_PASSWORD)
    submitted = child_client.post(f"/api/chores/{chore.Id}/complete").json()

    response = outsider.post(
        f"/api/chore-completions/{submitted['Completion']['Id']}/review",
        json={"Status": "approved"},
    )
    assert response.status_code == 403
    assert outsider.get(f"/api/chores?user_id={chore.UserId}").status_code == 403


def test_proof_required_over_http(parent_client, child_client, family):
    chore = parent_client.post(
        "/api/chores",
        json={
            "Title": "Clean room",
            "Points": 20,
            "Frequency": "daily",
            "UserId": family.child.Id,
            "RequiresProof": True,
        },
    ).json()

    missing = child_client.post(f"/api/chores/{chore['Id']}/complete")
    assert missing.status_code == 400
    assert missing.json()["fields"] == ["ProofImageUrl"]

    with_proof = child_client.post(
        f"/api/chores/{chore['Id']}/complete",
        files={"proofImage": ("room.jpg", b"\xff\xd8\xff\xe0jpeg", "image/jpeg")},
    )
    assert with_proof.status_code == 201
    assert with_proof.json()["Completion"]["ProofImageUrl"].startswith("/uploads/proofs/")


def test_reward_claim_flow_over_http(parent_client, child_client, family, reward, db):
    poor = child_client.post(f"/api/rewards/{reward.Id}/claim")
    assert poor.status_code == 400
    assert poor.json() == {"detail": "Not enough points", "kind": "insufficient_points", "pointsNeeded": 30}
    assert db.query(RewardClaim).count() == 0

    parent_client.put(f"/api/user/{family.child.Id}/points", json={"Points": 40})
    claimed = child_client.post(f"/api/rewards/{reward.Id}/claim")
    assert claimed.status_code == 201
    claim_id = claimed.json()["Claim"]["Id"]

    pending = parent_client.get("/api/reward-claims/pending").json()
    assert [item["Claim"]["Id"] for item in pending] == [claim_id]

    approved = parent_client.post(f"/api/reward-claims/{claim_id}/review", json={"Status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["Reward"]["Claimed"] is True
    assert approved.json()["Child"]["Points"] == 10

    again = parent_client.post(f"/api/reward-claims/{claim_id}/review", json={"Status": "approved"})
    assert again.status_code == 409
    assert _Balance(db, family.child.Id) == 10

    own = child_client.get("/api/reward-claims/user").json()
    assert own[0]["Reward"]["Title"] == "Movie night"


def test_rewards_and_achievements_listing(parent_client, child_client, family, reward):
    assert [item["Id"] for item in child_client.get("/api/rewards").json()] == [reward.Id]

    created = parent_client.post(
        "/api/achievements",
        json={"Title": "10 Chores", "Icon": "ri-award-line", "UserId": family.child.Id},
    )
    assert created.status_code == 201
    achievement_id = created.json()["Id"]

    unlocked = parent_client.patch(f"/api/achievements/{achievement_id}", json={"Unlocked": True})
    assert unlocked.json()["Unlocked"] is True
    assert [item["Unlocked"] for item in child_client.get("/api/achievements").json()] == [True]


def test_progress_endpoint(parent_client, child_client, family, chore):
    child_client.post(f"/api/chores/{chore.Id}/complete")

    progress = child_client.get("/api/progress").json()
    assert progress["UserId"] == family.child.Id
    assert progress["ChoresTotal"] == 1
    assert progress["PendingCompletions"] == 1
    assert len(progress["Activity"]) == 7

    assert parent_client.get("/api/progress").status_code == 400
    assert parent_client.get(f"/api/progress?user_id={family.child.Id}").status_code == 200


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}
    response = client.post("/api/logs", json={"level": "warning", "message": "client hiccup"})
    assert response.json()["status"] == "ok"


def _StoredFiles(root) -> list:
    return [path for path in root.rglob("*") if path.is_file()]


def test_daily_chore_cannot_be_completed_twice_in_one_day(parent_client, child_client, family, chore, db):
    first = child_client.post(f"/api/chores/{chore.Id}/complete").json()
    parent_client.post(f"/api/chore-completions/{first['Completion']['Id']}/review", json={"Status": "approved"})

    again = child_client.post(f"/api/chores/{chore.Id}/complete")
    assert again.status_code == 409
    assert again.json() == {"detail": "This chore is not due yet", "kind": "conflict"}
    assert _Balance(db, family.child.Id) == 10


def test_rejected_proof_submission_leaves_no_file(parent_client, child_client, family, tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOAD_STORAGE_ROOT", str(tmp_path))
    chore = parent_client.post(
        "/api/chores",
        json={"Title": "Clean room", "Points": 20, "Frequency": "daily", "UserId": family.child.Id, "RequiresProof": True},
    ).json()
    proof = {"proofImage": ("room.jpg", b"\xff\xd8\xff\xe0jpeg", "image/jpeg")}

    assert child_client.post(f"/api/chores/{chore['Id']}/complete", files=proof).status_code == 201
    assert child_client.post(f"/api/chores/{chore['Id']}/complete", files=proof).status_code == 409
    assert child_client.post("/api/chores/999/complete", files=proof).status_code == 404
    assert len(_StoredFiles(tmp_path / "proofs" / str(family.child.Id))) == 1


def test_failed_upload_create_removes_stored_image(parent_client, family, tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOAD_STORAGE_ROOT", str(tmp_path))
    response = parent_client.post(
        "/api/chores/upload",
        data={
            "Title": "Practice piano",
            "Points": "10",
            "Frequency": "daily",
            "UserId": str(family.child.Id),
            "IsDurationChore": "true",
        },
        files={"image": ("piano.png", b"\x89PNG\r\n\x1a\n0000", "image/png")},
    )
    assert response.status_code == 400
    assert response.json()["fields"] == ["Duration"]
    assert _StoredFiles(tmp_path) == []


def test_reward_with_pending_claim_cannot_be_deleted(parent_client, child_client, family, reward, db):
    parent_client.put(f"/api/user/{family.child.Id}/points", json={"Points": 40})
    claim_id = child_client.post(f"/api/rewards/{reward.Id}/claim").json()["Claim"]["Id"]

    blocked = parent_client.delete(f"/api/rewards/{reward.Id}")
    assert blocked.status_code == 409
    assert blocked.json()["kind"] == "conflict"

    approved = parent_client.post(f"/api/reward-claims/{claim_id}/review", json={"Status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["Reward"]["Claimed"] is True
    assert _Balance(db, family.child.Id) == 10
