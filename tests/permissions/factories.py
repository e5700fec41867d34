from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model

from travelxguide.users.models import User
from travelxguide.users.services import mark_verified

TEST_PASSWORD = "TestPass123!"  # noqa: S105 - test credentials only


@dataclass
class RoleContext:
    user: User
    role: str


def create_user_with_role(
    username: str,
    *,
    role: str = User.Role.TRAVELER,
    is_staff: bool = False,
    verified: bool = True,
) -> RoleContext:
    user = get_user_model().objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=TEST_PASSWORD,
        name=username.title(),
        role=role,
        is_staff=is_staff,
    )
    if verified:
        mark_verified(user)
    return RoleContext(user=user, role=role)
