"""Application errors mapped to HTTP status codes."""

from uuid import UUID


class NextRepError(Exception):
    """Base error carrying the HTTP status the API should answer with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidIdError(NextRepError):
    """A supplied identifier is not a well-formed UUID."""

    status_code = 400


class NotFoundError(NextRepError):
    """A well-formed identifier did not resolve to a record."""

    status_code = 404


class InvalidCategoryError(NextRepError):
    """A goal exists but belongs to a different category."""

    status_code = 400


class InvalidGoalDurationError(NextRepError):
    """A workout goal ends on or before its start."""

    status_code = 400


class InvalidGoalDataError(NextRepError):
    """Goal data does not match the goal category."""

    status_code = 400


class ValidationError(NextRepError):
    """A request parameter is out of range."""

    status_code = 400


class AuthenticationError(NextRepError):
    """The bearer token is missing or invalid."""

    status_code = 401


class UpstreamServiceError(NextRepError):
    """A third-party API call failed."""

    status_code = 502


def parse_id(raw: str | UUID, label: str = "ID") -> UUID:
    """Parse a UUID or raise InvalidIdError."""
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except ValueError as exc:
        raise InvalidIdError(f"Invalid {label}") from exc
