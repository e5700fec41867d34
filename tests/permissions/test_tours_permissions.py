from datetime import timedelta

from django.utils import timezone
from rest_framework import status

from tests.permissions.mixins import ANONYMOUS
from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_GUIDE
from tests.permissions.mixins import ROLE_STAFF
from tests.permissions.mixins import ROLE_TRAVELER
from tests.permissions.mixins import ROLE_UNVERIFIED
from tests.permissions.mixins import RoleAPITestCase
from travelxguide.tours.models import Tour


class TourPermissionTests(RoleAPITestCase):
    def _payload(self):
        start = timezone.localdate() + timedelta(days=5)
        return {
            "title": "Night Tram",
            "description": "Ride tram 28 after dark.",
            "location": "Lisbon",
            "price": "40.00",
            "max_participants": 6,
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=1)).isoformat(),
            "category": "City",
            "difficulty": "Easy",
        }

    def test_create_requires_verified_account(self):
        for role in (ROLE_ADMIN, ROLE_GUIDE, ROLE_TRAVELER):
            with self.subTest(role=role):
                res = self.post("api_v1:tours-list", role=role, payload=self._payload())
                self.assert_http_status(res, status.HTTP_201_CREATED)

        res = self.post(
            "api_v1:tours-list", role=ROLE_UNVERIFIED, payload=self._payload()
        )
        self.assert_denied(res)
        res = self.post("api_v1:tours-list", role=ANONYMOUS, payload=self._payload())
        self.assert_denied(res, status.HTTP_401_UNAUTHORIZED)

    def test_pending_tour_detail_visibility(self):
        kwargs = {"pk": self.tours["pending"].pk}
        for role in (ROLE_ADMIN, ROLE_STAFF, ROLE_TRAVELER):
            with self.subTest(role=role):
                res = self.get("api_v1:tours-detail", role=role, reverse_kwargs=kwargs)
                self.assert_allowed(res)
        res = self.get("api_v1:tours-detail", role=ROLE_GUIDE, reverse_kwargs=kwargs)
        self.assert_denied(res, status.HTTP_404_NOT_FOUND)

    def test_only_admins_review(self):
        kwargs = {"pk": self.tours["pending"].pk}
        for role in (ROLE_GUIDE, ROLE_TRAVELER):
            with self.subTest(role=role):
                res = self.post(
                    "api_v1:tours-review",
                    role=role,
                    reverse_kwargs=kwargs,
                    payload={"status": "approved"},
                )
                self.assert_denied(res)

        res = self.post(
            "api_v1:tours-review",
            role=ROLE_STAFF,
            reverse_kwargs=kwargs,
            payload={"status": "rejected", "admin_notes": "Too vague"},
        )
        self.assert_allowed(res)
        self.tours["pending"].refresh_from_db()
        assert self.tours["pending"].status == Tour.Status.REJECTED
        assert self.tours["pending"].admin_notes == "Too vague"

    def test_cancel_by_host_admin_only(self):
        kwargs = {"pk": self.tours["approved"].pk}
        res = self.post("api_v1:tours-cancel", role=ROLE_TRAVELER, reverse_kwargs=kwargs)
        self.assert_denied(res)

        res = self.post("api_v1:tours-cancel", role=ROLE_ADMIN, reverse_kwargs=kwargs)
        self.assert_allowed(res)
        assert res.data["tour"]["status"] == "cancelled"
