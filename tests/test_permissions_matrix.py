"""Integration-style permission tests covering the role matrix of read endpoints."""

from rest_framework import status

from tests.permissions.mixins import ANONYMOUS
from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_GUIDE
from tests.permissions.mixins import ROLE_STAFF
from tests.permissions.mixins import ROLE_TRAVELER
from tests.permissions.mixins import ROLE_UNVERIFIED
from tests.permissions.mixins import RoleAPITestCase

OK = status.HTTP_200_OK
FORBIDDEN = status.HTTP_403_FORBIDDEN
UNAUTHORIZED = status.HTTP_401_UNAUTHORIZED

ROLES = [ROLE_ADMIN, ROLE_STAFF, ROLE_GUIDE, ROLE_TRAVELER, ROLE_UNVERIFIED, ANONYMOUS]

# url name -> expected status per role, in ROLES order
MATRIX = {
    "api_v1:tours-list": [OK, OK, OK, OK, OK, OK],
    "api_v1:guides-list": [OK, OK, OK, OK, OK, OK],
    "api_v1:tours-mine": [OK, OK, OK, OK, OK, UNAUTHORIZED],
    "api_v1:user-list": [OK, OK, OK, OK, OK, UNAUTHORIZED],
    "api_v1:user-me": [OK, OK, OK, OK, OK, UNAUTHORIZED],
    "api_v1:notifications-list": [OK, OK, OK, OK, OK, UNAUTHORIZED],
    "api_v1:chat:online": [OK, OK, OK, OK, OK, UNAUTHORIZED],
    "api_v1:tours-pending": [OK, OK, FORBIDDEN, FORBIDDEN, FORBIDDEN, UNAUTHORIZED],
    "api_v1:tours-all-tours": [OK, OK, FORBIDDEN, FORBIDDEN, FORBIDDEN, UNAUTHORIZED],
    "api_v1:guide-applications-list": [
        OK,
        OK,
        FORBIDDEN,
        FORBIDDEN,
        FORBIDDEN,
        UNAUTHORIZED,
    ],
    "api_v1:audit:recent": [OK, OK, FORBIDDEN, FORBIDDEN, FORBIDDEN, UNAUTHORIZED],
}


class PermissionMatrixAPITests(RoleAPITestCase):
    """Validate the read permissions of every role against each listing."""

    def test_read_matrix(self):
        for url_name, expected in MATRIX.items():
            for role, code in zip(ROLES, expected, strict=True):
                with self.subTest(url=url_name, role=role):
                    response = self.get(url_name, role=role)
                    self.assert_http_status(response, code)

    def test_public_tour_listing_hides_pending(self):
        response = self.get("api_v1:tours-list", role=ANONYMOUS)
        ids = [row["id"] for row in self.extract_results(response)]
        assert ids == [self.tours["approved"].id]

    def test_admin_sees_every_user(self):
        response = self.get("api_v1:user-list", role=ROLE_ADMIN)
        assert len(self.extract_results(response)) == len(self.roles)

    def test_traveler_sees_only_self(self):
        response = self.get("api_v1:user-list", role=ROLE_TRAVELER)
        emails = [row["email"] for row in self.extract_results(response)]
        assert emails == ["traveler@example.com"]
