import pytest

from app.core.errors import ValidationError
from app.modules.chores.services.entities_service import (
    CreateAchievement,
    CreateChore,
    CreateReward,
    DeleteAchievement,
    DeleteChore,
    DeleteReward,
    GetChore,
    ListAchievementsForUser,
    ListChoresForUser,
    ListRewardsForUser,
    UpdateAchievement,
    UpdateChore,
    UpdateReward,
)


def test_created_chore_round_trips_through_listing(db, family):
    CreateChore(db, {"Title": "Water plants", "Points": 15, "Frequency": "weekly", "UserId": family.child.Id})

    chores = ListChoresForUser(db, family.child.Id)
    assert [(chore.Title, chore.Points, chore.Frequency) for chore in chores] == [("Water plants", 15, "weekly")]
    assert ListChoresForUser(db, family.parent.Id) == []


def test_create_chore_names_every_invalid_field(db, family):
    with pytest.raises(ValidationError) as exc:
        CreateChore(db, {"Title": "", "Points": 0, "Frequency": "monthly", "UserId": family.child.Id})
    assert set(exc.value.Fields) == {"Title", "Points", "Frequency"}
    assert exc.value.ToPayload()["kind"] == "validation"


def test_duration_chore_requires_minutes(db, family):
    payload = {"Title": "Read", "Points": 10, "Frequency": "daily", "UserId": family.child.Id, "IsDurationChore": True}
    with pytest.raises(ValidationError) as exc:
        CreateChore(db, payload)
    assert exc.value.Fields == ["Duration"]

    chore = CreateChore(db, {**payload, "Duration": 20})
    assert chore.Duration == 20

    updated = UpdateChore(db, chore.Id, {"IsDurationChore": False})
    assert updated.Duration is None


def test_update_chore_applies_only_present_keys(db, chore):
    updated = UpdateChore(db, chore.Id, {"Title": "  Feed the dog  "})
    assert updated.Title == "Feed the dog"
    assert updated.Points == 10
    assert updated.Frequency == "daily"


def test_update_rejects_unknown_and_null_fields(db, chore):
    with pytest.raises(ValidationError) as exc:
        UpdateChore(db, chore.Id, {"Completed": True})
    assert exc.value.Fields == ["Completed"]

    with pytest.raises(ValidationError) as exc:
        UpdateChore(db, chore.Id, {"Points": None})
    assert exc.value.Fields == ["Points"]


def test_update_and_delete_missing_rows(db):
    assert UpdateChore(db, 404, {"Title": "Nope"}) is None
    assert DeleteChore(db, 404) is False
    assert UpdateReward(db, 404, {"Title": "Nope"}) is None
    assert DeleteReward(db, 404) is False
    assert UpdateAchievement(db, 404, {"Unlocked": True}) is None
    assert DeleteAchievement(db, 404) is False


def test_delete_chore_removes_row(db, chore):
    assert DeleteChore(db, chore.Id) is True
    assert GetChore(db, chore.Id) is None


def test_reward_points_bounds(db, family):
    with pytest.raises(ValidationError) as exc:
        CreateReward(db, {"Title": "Car", "Points": 500, "UserId": family.child.Id})
    assert exc.value.Fields == ["Points"]

    reward = CreateReward(db, {"Title": "Sticker", "Points": 1, "UserId": family.child.Id})
    assert reward.Claimed is False
    assert [item.Id for item in ListRewardsForUser(db, family.child.Id)] == [reward.Id]


def test_achievement_unlock(db, family):
    achievement = CreateAchievement(db, {"Title": "First Chore", "Icon": "ri-rocket-line", "UserId": family.child.Id})
    assert achievement.Unlocked is False

    UpdateAchievement(db, achievement.Id, {"Unlocked": True})
    assert [item.Unlocked for item in ListAchievementsForUser(db, family.child.Id)] == [True]
