"""
Pytest configuration and fixtures for the SeatPulse tests.

The fixtures build a small slice of the Philippine jurisdiction hierarchy
(one region, province, city, barangay and congressional district), a handful
of positions at each level, three politicians, two parties and one scheduled
election.
"""

from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import caches
from loguru import logger

from seatpulse.jurisdiction import Jurisdiction, JurisdictionLevel
from seatpulse.models import (
    Barangay,
    CityMunicipality,
    CongressionalDistrict,
    ElectionEvent,
    GovernmentPosition,
    Politician,
    PoliticalParty,
    Province,
    Region,
)

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    """Start every test with an empty cache."""
    caches["default"].clear()
    yield
    caches["default"].clear()


@pytest.fixture
def loguru_messages():
    """Collect everything seatpulse logs through loguru during the test."""
    messages = []
    handler_id = logger.add(
        messages.append, format="{level} {message}", level="DEBUG", diagnose=False
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def admin_user(db):
    """Create an admin user for created_by fields."""
    return User.objects.create_user(
        username="admin", email="admin@test.com", password="testpass123", role="admin"
    )


# ============================================================================
# Locations
# ============================================================================


@pytest.fixture
def region(db):
    return Region.objects.create(code="NCR", name="National Capital Region", slug="ncr")


@pytest.fixture
def province(db, region):
    return Province.objects.create(
        region=region, code="PH-CAV", name="Cavite", slug="cavite"
    )


@pytest.fixture
def city(db, province):
    return CityMunicipality.objects.create(
        province=province,
        code="PH-CAV-BAC",
        name="Bacoor",
        slug="bacoor",
        is_city=True,
    )


@pytest.fixture
def other_city(db, province):
    return CityMunicipality.objects.create(
        province=province,
        code="PH-CAV-IMU",
        name="Imus",
        slug="imus",
        is_city=True,
    )


@pytest.fixture
def barangay(db, city):
    return Barangay.objects.create(
        city_municipality=city, code="PH-CAV-BAC-001", name="Molino I", slug="molino-i"
    )


@pytest.fixture
def district(db, province):
    return CongressionalDistrict.objects.create(
        province=province,
        district_number=2,
        name="Cavite 2nd District",
        slug="cavite-2nd",
    )


# ============================================================================
# Positions
# ============================================================================


@pytest.fixture
def senator(db):
    return GovernmentPosition.objects.create(
        name="Senator",
        slug="senator",
        level="national",
        branch="legislative",
        term_years=6,
    )


@pytest.fixture
def governor(db):
    return GovernmentPosition.objects.create(
        name="Governor", slug="governor", level="provincial", branch="executive"
    )


@pytest.fixture
def mayor(db):
    return GovernmentPosition.objects.create(
        name="City Mayor", slug="city-mayor", level="city", branch="executive"
    )


@pytest.fixture
def vice_mayor(db):
    return GovernmentPosition.objects.create(
        name="City Vice Mayor",
        slug="city-vice-mayor",
        level="city",
        branch="executive",
    )


@pytest.fixture
def captain(db):
    return GovernmentPosition.objects.create(
        name="Punong Barangay",
        slug="punong-barangay",
        level="barangay",
        branch="executive",
    )


@pytest.fixture
def representative(db):
    return GovernmentPosition.objects.create(
        name="District Representative",
        slug="district-representative",
        level="district",
        branch="legislative",
    )


# ============================================================================
# People and parties
# ============================================================================


@pytest.fixture
def party(db):
    return PoliticalParty.objects.create(
        name="Lakas-CMD", slug="lakas-cmd", abbreviation="LAKAS"
    )


@pytest.fixture
def other_party(db):
    return PoliticalParty.objects.create(
        name="Nacionalista Party", slug="nacionalista", abbreviation="NP"
    )


@pytest.fixture
def alice(db):
    return Politician.objects.create(name="Alice Reyes", slug="alice-reyes")


@pytest.fixture
def bob(db):
    return Politician.objects.create(name="Bob Santos", slug="bob-santos")


@pytest.fixture
def carol(db):
    return Politician.objects.create(name="Carol Cruz", slug="carol-cruz")


@pytest.fixture
def election(db, admin_user):
    return ElectionEvent.objects.create(
        name="2025 Midterm Elections",
        election_date=date(2025, 5, 12),
        level="national",
        created_by=admin_user,
    )


# ============================================================================
# Jurisdictions
# ============================================================================


@pytest.fixture
def national():
    return Jurisdiction.national()


@pytest.fixture
def city_jurisdiction(city):
    return Jurisdiction(JurisdictionLevel.CITY, city.id)


@pytest.fixture
def other_city_jurisdiction(other_city):
    return Jurisdiction(JurisdictionLevel.CITY, other_city.id)
