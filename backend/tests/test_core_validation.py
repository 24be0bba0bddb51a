import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.validation import ValidatePatch, ValidatePayload
from app.main import app
from app.modules.chores.schemas import RewardCreate, RewardPatch


def test_validate_payload_collects_fields():
    with pytest.raises(ValidationError) as exc:
        ValidatePayload(RewardCreate, {"Title": "", "Points": "lots"})
    assert exc.value.Fields == ["Title", "Points", "UserId"]
    assert exc.value.Message == "Invalid value for: Title, Points, UserId"


def test_validate_patch_keeps_only_present_keys():
    assert ValidatePatch(RewardPatch, {"Claimed": True}) == {"Claimed": True}
    assert ValidatePatch(RewardPatch, {"ImageUrl": None}) == {"ImageUrl": None}


def test_error_payloads():
    assert NotFoundError("Chore not found").ToPayload() == {"detail": "Chore not found", "kind": "not_found"}
    assert ConflictError("done").StatusCode == 409
    assert isinstance(NotFoundError("x"), ValueError)


def test_unexpected_errors_do_not_leak_detail():
    router = APIRouter()

    @router.get("/api/test-boom")
    def _Boom():
        raise RuntimeError("secret internals")

    app.include_router(router)
    try:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/test-boom")
    finally:
        app.router.routes[:] = [route for route in app.router.routes if getattr(route, "path", "") != "/api/test-boom"]
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error", "kind": "internal"}
