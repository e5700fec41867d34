from __future__ import annotations

import datetime as dt
import itertools

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from travelxguide.tours.models import Tour
from travelxguide.users.services import mark_verified

DEFAULT_PASSWORD = "TravelPass!123"  # noqa: S105

_seq = itertools.count(1)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make_user(
        email: str | None = None,
        *,
        role: str = "traveler",
        verified: bool = True,
        password: str = DEFAULT_PASSWORD,
        **extra,
    ):
        n = next(_seq)
        email = email or f"user{n}@example.com"
        user = get_user_model().objects.create_user(
            username=extra.pop("username", f"user{n}"),
            email=email,
            password=password,
            name=extra.pop("name", f"User {n}"),
            role=role,
            **extra,
        )
        if verified:
            mark_verified(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user("traveler@example.com", name="Tina Traveler")


@pytest.fixture
def other_user(make_user):
    return make_user("other@example.com", name="Omar Other")


@pytest.fixture
def platform_admin(make_user):
    return make_user("admin@example.com", role="admin", name="Ada Admin")


@pytest.fixture
def client_for():
    def _client_for(user) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client_for


@pytest.fixture
def make_tour(db):
    def _make_tour(host, **fields):
        start = fields.pop("start_date", timezone.localdate() + dt.timedelta(days=10))
        end = fields.pop("end_date", start + dt.timedelta(days=3))
        defaults = {
            "title": "Old Town Walk",
            "description": "A walk through the old town.",
            "location": "Lisbon",
            "price": "120.00",
            "max_participants": 10,
            "category": Tour.Category.CITY,
            "difficulty": Tour.Difficulty.EASY,
        }
        defaults.update(fields)
        return Tour.objects.create(
            host=host,
            start_date=start,
            end_date=end,
            **defaults,
        )

    return _make_tour
