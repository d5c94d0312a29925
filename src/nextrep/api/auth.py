"""Bearer JWT authentication."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nextrep.errors import AuthenticationError

if TYPE_CHECKING:
    from nextrep.config import Settings
    from nextrep.containers import AppContainer

security = HTTPBearer(auto_error=False)


def decode_token(token: str, settings: Settings) -> dict[str, object]:
    """Decode and verify a token signed with the configured secret."""
    try:
        return jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid token") from exc


def user_id_from_claims(claims: dict[str, object]) -> UUID:
    """Return the user id carried in the ``id`` or ``sub`` claim."""
    raw = claims.get("id") or claims.get("sub")
    if not raw:
        raise AuthenticationError("Token has no user id")
    try:
        return UUID(str(raw))
    except ValueError as exc:
        raise AuthenticationError("Invalid user id in token") from exc


async def current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID:
    """Resolve the authenticated user's id."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    container: AppContainer = request.app.state.container
    claims = decode_token(credentials.credentials, container.settings)
    return user_id_from_claims(claims)
