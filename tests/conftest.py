from datetime import date, datetime, timezone

import pytest

from nannymatch.profile.models import (
    Activity,
    AgeRange,
    Certification,
    ChildData,
    ContractRegime,
    Coordinates,
    Day,
    FamilyData,
    Gender,
    HourlyRateRange,
    JobData,
    NannyProfile,
    NannyType,
    PetComfort,
    Shift,
    TravelDistance,
)

# Fixed evaluation time so ages and document expiry are deterministic
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)

# Avenida Paulista, Sao Paulo
FAMILY_ADDRESS = Coordinates(latitude=-23.5614, longitude=-46.6558)
# A few km away
NEARBY_ADDRESS = Coordinates(latitude=-23.5670, longitude=-46.6930)
# ~49 km due south of the family
FAR_ADDRESS = Coordinates(latitude=-24.0, longitude=-46.6558)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def empty_job() -> JobData:
    return JobData(id=1)


@pytest.fixture
def empty_family() -> FamilyData:
    return FamilyData(id=10)


@pytest.fixture
def blank_nanny() -> NannyProfile:
    return NannyProfile(id=100)


@pytest.fixture
def family() -> FamilyData:
    """A family that declares every preference the scorer looks at."""
    return FamilyData(
        id=10,
        has_pets=True,
        number_of_children=2,
        nanny_type=NannyType.MENSALISTA,
        contract_regime=ContractRegime.CLT,
        hourly_rate_range=HourlyRateRange.FROM_31_TO_40,
        domestic_help_expected=frozenset({Activity.COOKING, Activity.HOMEWORK}),
        needed_days=frozenset({Day.MONDAY, Day.WEDNESDAY}),
        needed_shifts=frozenset({Shift.MORNING}),
        address=FAMILY_ADDRESS,
    )


@pytest.fixture
def children() -> list[ChildData]:
    return [
        ChildData(id=1, age_in_months=6),
        ChildData(id=2, age_in_months=40),
    ]


@pytest.fixture
def job() -> JobData:
    return JobData(id=1, children_ids=(1, 2))


@pytest.fixture
def strong_nanny() -> NannyProfile:
    """A verified nanny who satisfies everything the family asks for."""
    return NannyProfile(
        id=100,
        name="Ana",
        gender=Gender.FEMALE,
        is_smoker=False,
        has_cnh=True,
        experience_years=8,
        certifications=frozenset({Certification.FIRST_AID, Certification.CPR}),
        age_ranges_experience=frozenset({AgeRange.BABY, AgeRange.PRESCHOOL}),
        max_travel_distance=TravelDistance.UP_TO_10KM,
        max_children_care=3,
        comfortable_with_pets=PetComfort.YES_ANY,
        accepted_activities=frozenset({Activity.COOKING, Activity.HOMEWORK}),
        nanny_types=frozenset({NannyType.MENSALISTA}),
        contract_regimes=frozenset({ContractRegime.CLT}),
        hourly_rate_range=HourlyRateRange.FROM_31_TO_40,
        document_validated=True,
        document_expiration_date=date(2030, 1, 1),
        personal_data_validated=True,
        criminal_background_validated=True,
        has_active_subscription=True,
        address=NEARBY_ADDRESS,
        availability_slots=frozenset({(Day.MONDAY, Shift.MORNING), (Day.WEDNESDAY, Shift.MORNING)}),
        average_rating=5.0,
        review_count=12,
    )


@pytest.fixture
def scenario_records() -> dict:
    """Raw camelCase records, as they come out of the persistence layer."""
    return {
        "job": {
            "id": 7,
            "mandatoryRequirements": ["NON_SMOKER"],
            "childrenIds": [1],
        },
        "family": {
            "id": 10,
            "hasPets": False,
            "numberOfChildren": 1,
            "nannyType": "MENSALISTA",
            "hourlyRateRange": "FROM_31_TO_40",
            "domesticHelpExpected": ["COOKING"],
            "neededDays": ["MONDAY"],
            "neededShifts": ["MORNING"],
            "address": {"latitude": -23.5614, "longitude": -46.6558},
        },
        "children": [
            {"id": 1, "birthDate": "2025-09-15"},
            {"id": 2, "birthDate": "2015-01-01"},
        ],
        "nannies": [
            {
                "id": 100,
                "name": "Ana",
                "isSmoker": False,
                "nannyTypes": ["MENSALISTA"],
                "ageRangesExperience": ["BABY"],
                "acceptedActivities": ["COOKING"],
                "hourlyRateRange": "FROM_31_TO_40",
                "availabilityJson": {"monday": {"enabled": True, "periods": ["morning"]}},
                "address": {"latitude": -23.5670, "longitude": -46.6930},
            },
            {
                "id": 101,
                "name": "Bia",
                "isSmoker": True,
                "nannyTypes": ["MENSALISTA"],
            },
            {
                "id": 102,
                "name": "Carla",
                "isSmoker": False,
                "nannyTypes": ["DIARISTA"],
                "ageRangesExperience": ["TEENAGER"],
            },
        ],
    }
