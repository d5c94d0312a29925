"""Tests for the user profile service."""

from datetime import date, datetime

import pytest

from nextrep.domain.users import UserProfile
from nextrep.errors import NotFoundError, ValidationError
from nextrep.services.users import UserService
from tests.conftest import NOW, OTHER_USER_ID, USER_ID, Stores


def _add_user(stores: Stores) -> UserProfile:
    profile = UserProfile(
        id=USER_ID, email="ada@example.com", username="ada", country="UK"
    )
    stores.users.users[USER_ID] = profile
    return profile


def test_get_profile(user_service: UserService, stores: Stores) -> None:
    profile = _add_user(stores)

    assert user_service.get_profile(USER_ID) == profile
    with pytest.raises(NotFoundError, match="User not found"):
        user_service.get_profile(OTHER_USER_ID)


def test_update_profile_applies_details(
    user_service: UserService, stores: Stores
) -> None:
    _add_user(stores)

    updated = user_service.update_profile(
        USER_ID,
        {
            "phone_num": " +44 20 7946 0000 ",
            "dob": datetime(1990, 12, 10, 8),
            "height": 172.5,
            "weight": 68,
            "country": None,
        },
    )

    assert updated.phone_num == "+44 20 7946 0000"
    assert updated.dob == date(1990, 12, 10)
    assert (updated.height, updated.weight) == (172.5, 68)
    assert updated.country == "UK"
    assert updated.updated_at == NOW
    assert stores.users.users[USER_ID] == updated


@pytest.mark.parametrize(
    ("changes", "message"),
    [
        ({"height": 0}, "Height must be positive"),
        ({"weight": -3}, "Weight must be positive"),
        ({"dob": date(2024, 5, 16)}, "Date of birth cannot be in the future"),
        ({"username": "   "}, "username cannot be empty"),
        ({"email": "new@example.com"}, "Cannot update fields: email"),
        ({"country": None}, "No profile fields to update"),
    ],
)
def test_update_profile_rejects_invalid_changes(
    user_service: UserService,
    stores: Stores,
    changes: dict[str, object],
    message: str,
) -> None:
    profile = _add_user(stores)

    with pytest.raises(ValidationError, match=message):
        user_service.update_profile(USER_ID, changes)
    assert stores.users.users[USER_ID] == profile


def test_update_profile_for_missing_user(user_service: UserService) -> None:
    with pytest.raises(NotFoundError, match="User not found"):
        user_service.update_profile(OTHER_USER_ID, {"country": "FR"})
