"""Tests for bearer token authentication and the error envelope."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

from nextrep.api.app import create_app
from nextrep.api.auth import decode_token, user_id_from_claims
from nextrep.config import Settings
from nextrep.containers import AppContainer
from nextrep.errors import AuthenticationError
from tests.conftest import JWT_SECRET, USER_ID, make_token


def test_health_is_public(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_token_is_rejected(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/goals")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Not authenticated"}


def test_sub_claim_is_accepted(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    token = make_token(claim="sub")

    response = client.get(
        "/goals/count", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200


def test_decode_token_rejects_bad_tokens(settings: Settings) -> None:
    expired = jwt.encode(
        {"id": str(USER_ID), "exp": datetime.now(tz=UTC) - timedelta(minutes=1)},
        JWT_SECRET,
        algorithm="HS256",
    )
    forged = jwt.encode(
        {"id": str(USER_ID)}, "another-secret-with-enough-length", algorithm="HS256"
    )

    with pytest.raises(AuthenticationError, match="Token expired"):
        decode_token(expired, settings)
    with pytest.raises(AuthenticationError, match="Invalid token"):
        decode_token(forged, settings)
    assert decode_token(make_token(), settings)["id"] == str(USER_ID)


def test_user_id_from_claims() -> None:
    assert user_id_from_claims({"id": str(USER_ID)}) == USER_ID
    with pytest.raises(AuthenticationError, match="Token has no user id"):
        user_id_from_claims({"email": "someone@example.com"})
    with pytest.raises(AuthenticationError, match="Invalid user id in token"):
        user_id_from_claims({"sub": "user-42"})


def test_unexpected_errors_are_wrapped(
    container: AppContainer, auth_headers: dict[str, str]
) -> None:
    def explode(user_id: object) -> int:
        raise RuntimeError("database exploded")

    container.goal_service.mark_overdue = explode  # type: ignore[method-assign]
    client = TestClient(create_app(container), raise_server_exceptions=False)

    response = client.post("/goals/refresh-status", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
