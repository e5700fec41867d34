import pytest

from travelxguide.guides.models import GuideApplication


@pytest.fixture
def application_payload():
    return {
        "name": "Gus Guide",
        "email": "gus@example.com",
        "phone": "351 912 345 678",
        "experience": "Ten years walking people around Lisbon.",
        "languages": ["English", "Portuguese"],
        "destinations": ["Lisbon", "Sintra"],
        "bio": "Local historian and storyteller.",
        "hourly_rate": "150.00",
    }


@pytest.fixture
def make_application(db):
    def _make_application(applicant, **fields):
        defaults = {
            "name": applicant.name,
            "email": applicant.email,
            "phone": "0123456789",
            "experience": "Plenty",
            "languages": ["English"],
            "destinations": ["Lisbon"],
            "bio": "Hello",
            "hourly_rate": "120.00",
        }
        defaults.update(fields)
        return GuideApplication.objects.create(applicant=applicant, **defaults)

    return _make_application
