from http import HTTPStatus

import pytest
from django.urls import reverse


def test_api_v1_docs_accessible_by_admin(admin_client):
    url = reverse("api-docs-v1")
    response = admin_client.get(url)
    assert response.status_code == HTTPStatus.OK


@pytest.mark.django_db
def test_api_v1_docs_not_accessible_by_anonymous_users(client):
    url = reverse("api-docs-v1")
    response = client.get(url)
    # JWT is the first authenticator, so anonymous callers are challenged
    assert response.status_code == HTTPStatus.UNAUTHORIZED


def test_api_v1_schema_generated_successfully(admin_client):
    url = reverse("api-schema-v1")
    response = admin_client.get(url)
    assert response.status_code == HTTPStatus.OK


@pytest.mark.django_db
def test_api_v1_docs_require_staff_flag(make_user, client_for):
    # The admin role moderates content but the docs are for staff only
    moderator = make_user(role="admin")
    response = client_for(moderator).get(reverse("api-docs-v1"))
    assert response.status_code == HTTPStatus.FORBIDDEN
