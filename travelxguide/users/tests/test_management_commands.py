from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

pytestmark = pytest.mark.django_db


def test_promote_admin_creates_account():
    out = StringIO()
    call_command(
        "promote_admin",
        "Boss@Example.com",
        "--name",
        "Big Boss",
        "--password",
        "AdminPass!123",
        "--staff",
        stdout=out,
    )

    user = get_user_model().objects.get(email="boss@example.com")
    assert user.role == "admin"
    assert user.name == "Big Boss"
    assert user.is_staff is True
    assert user.is_account_verified is True
    assert user.check_password("AdminPass!123")
    assert "Created admin boss@example.com" in out.getvalue()


def test_promote_admin_promotes_existing_account(make_user):
    existing = make_user("guide@example.com", role="guide", is_blocked=True)
    out = StringIO()

    call_command("promote_admin", "guide@example.com", stdout=out)

    existing.refresh_from_db()
    assert existing.role == "admin"
    assert existing.is_blocked is False
    assert existing.is_staff is False
    assert existing.is_platform_admin is True
    assert "Promoted admin guide@example.com" in out.getvalue()
