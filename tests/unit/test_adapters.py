from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from nannymatch.processing.adapters import (
    to_child_data,
    to_family_data,
    to_job_data,
    to_nanny_profile,
)
from nannymatch.profile.models import (
    Activity,
    Certification,
    Coordinates,
    Day,
    Gender,
    NannyType,
    RequirementCode,
    ReviewStats,
    Shift,
    SpecialNeed,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_job_requirements_keep_declaration_order_and_drop_unknown(caplog):
    with caplog.at_level("WARNING"):
        job = to_job_data({
            "id": 7,
            "mandatoryRequirements": ["FIRST_AID", "NON_SMOKER", "FIRST_AID", "HAS_JETPACK"],
            "childrenIds": [3, "4"],
        })
    assert job.mandatory_requirements == (RequirementCode.FIRST_AID, RequirementCode.NON_SMOKER)
    assert job.children_ids == (3, 4)
    assert "HAS_JETPACK" in caplog.text


def test_job_accepts_attribute_objects_with_snake_case():
    row = SimpleNamespace(id=8, mandatory_requirements=["CPR"], children_ids=None)
    job = to_job_data(row)
    assert job.mandatory_requirements == (RequirementCode.CPR,)
    assert job.children_ids == ()


@pytest.mark.parametrize("adapter", [to_job_data, to_family_data, to_child_data, to_nanny_profile])
def test_missing_id_raises_validation_error(adapter):
    with pytest.raises(ValidationError):
        adapter({"name": "no id"})


def test_family_defaults_for_absent_fields():
    family = to_family_data({"id": 10})
    assert family.has_pets is False
    assert family.number_of_children is None
    assert family.nanny_type is None
    assert family.domestic_help_expected == frozenset()
    assert family.availability_slots == frozenset()
    assert family.address is None


def test_family_full_record():
    family = to_family_data({
        "id": 10,
        "hasPets": "true",
        "numberOfChildren": 2,
        "nannyType": "mensalista",
        "domesticHelpExpected": ["COOKING", "HOMEWORK", "JUGGLING"],
        "neededDays": ["MONDAY", "FRIDAY"],
        "neededShifts": ["MORNING"],
        "address": {"lat": -23.56, "lng": -46.65},
    })
    assert family.has_pets is True
    assert family.number_of_children == 2
    assert family.nanny_type == NannyType.MENSALISTA
    assert family.domestic_help_expected == frozenset({Activity.COOKING, Activity.HOMEWORK})
    assert family.availability_slots == frozenset({
        (Day.MONDAY, Shift.MORNING),
        (Day.FRIDAY, Shift.MORNING),
    })
    assert family.address == Coordinates(latitude=-23.56, longitude=-46.65)


def test_family_out_of_range_coordinates_are_dropped():
    family = to_family_data({"id": 10, "address": {"latitude": 123.0, "longitude": -46.6}})
    assert family.address is None


def test_child_age_in_whole_months():
    assert to_child_data({"id": 1, "birthDate": "2025-09-15"}, NOW).age_in_months == 6
    assert to_child_data({"id": 1, "birthDate": "2025-09-16"}, NOW).age_in_months == 5
    assert to_child_data({"id": 1, "birthDate": date(2016, 3, 15)}, NOW).age_in_months == 120


def test_unborn_child_has_no_age():
    child = to_child_data({"id": 1, "unborn": True, "birthDate": "2026-06-01"}, NOW)
    assert child.unborn is True
    assert child.age_in_months is None
    assert child.age_range is None


def test_child_without_birth_date_has_no_age():
    assert to_child_data({"id": 1}, NOW).age_in_months is None


def test_child_special_needs():
    child = to_child_data({
        "id": 1,
        "birthDate": "2020-01-01",
        "hasSpecialNeeds": True,
        "specialNeedsTypes": ["AUTISM", "UNKNOWN_THING"],
        "specialNeedsDescription": "Needs routine",
    }, NOW)
    assert child.has_special_needs is True
    assert child.special_needs_types == frozenset({SpecialNeed.AUTISM})
    assert child.special_needs_description == "Needs routine"


def test_nanny_profile_from_record():
    nanny = to_nanny_profile({
        "id": 100,
        "name": "Ana",
        "gender": "FEMALE",
        "isSmoker": False,
        "hasCnh": True,
        "certifications": ["FIRST_AID", "CPR"],
        "documentValidated": True,
        "documentExpirationDate": "2030-01-01",
        "lastActiveAt": "2026-03-10T09:00:00Z",
        "availabilityJson": {"monday": {"enabled": True, "periods": ["morning"]}},
        "averageRating": 4.5,
        "reviewCount": 3,
    })
    assert nanny.gender == Gender.FEMALE
    assert nanny.is_smoker is False
    assert nanny.has_cnh is True
    assert nanny.certifications == frozenset({Certification.FIRST_AID, Certification.CPR})
    assert nanny.document_expiration_date == date(2030, 1, 1)
    assert nanny.last_active_at == datetime(2026, 3, 10, 9, tzinfo=timezone.utc)
    assert nanny.availability_slots == frozenset({(Day.MONDAY, Shift.MORNING)})
    assert nanny.average_rating == 4.5
    assert nanny.review_count == 3


def test_nanny_review_stats_override_record():
    record = {"id": 100, "averageRating": 3.0, "reviewCount": 1}
    nanny = to_nanny_profile(record, ReviewStats(average_rating=4.9, review_count=20))
    assert nanny.average_rating == 4.9
    assert nanny.review_count == 20

    nanny = to_nanny_profile(record, {"averageRating": 4.0, "reviewCount": 5})
    assert nanny.average_rating == 4.0
    assert nanny.review_count == 5


def test_blank_nanny_record():
    nanny = to_nanny_profile({"id": 100})
    assert nanny.is_smoker is None
    assert nanny.certifications == frozenset()
    assert nanny.availability_slots is None
    assert nanny.review_count == 0
    assert nanny.average_rating is None
    assert nanny.has_active_subscription is None


def test_nanny_availability_from_nested_schedule():
    nanny = to_nanny_profile({
        "id": 100,
        "availability": {"schedule": {"tuesday": {"enabled": True, "periods": ["night"]}}},
    })
    assert nanny.availability_slots == frozenset({(Day.TUESDAY, Shift.NIGHT)})


def test_nanny_subscription_from_nested_record():
    paid = to_nanny_profile({"id": 1, "subscription": {"status": "ACTIVE", "plan": "NANNY_PRO"}})
    free = to_nanny_profile({"id": 2, "subscription": {"status": "ACTIVE", "plan": "NANNY_FREE"}})
    canceled = to_nanny_profile({"id": 3, "subscription": {"status": "CANCELED", "plan": "NANNY_PRO"}})
    assert paid.has_active_subscription is True
    assert free.has_active_subscription is False
    assert canceled.has_active_subscription is False


def test_nanny_unknown_gender_is_dropped(caplog):
    with caplog.at_level("WARNING"):
        nanny = to_nanny_profile({"id": 100, "gender": "ROBOT"})
    assert nanny.gender is None
    assert "ROBOT" in caplog.text


@pytest.mark.parametrize("adapter,record", [
    (to_job_data, {"id": 1, "childrenIds": 3}),
    (to_job_data, {"id": 1, "mandatoryRequirements": 7}),
    (to_job_data, {"id": 1, "mandatoryRequirements": {"code": "NON_SMOKER"}}),
    (to_family_data, {"id": 1, "neededDays": True}),
    (to_family_data, {"id": 1, "numberOfChildren": float("inf"), "address": "Rua A, 10"}),
    (to_family_data, {"id": 1, "hasPets": ["cat"], "domesticHelpExpected": 3.5}),
    (to_child_data, {"id": 1, "birthDate": 20200101, "specialNeedsTypes": 4}),
    (to_child_data, {"id": 1, "hasSpecialNeeds": {}, "specialNeedsDescription": 12}),
    (to_nanny_profile, {"id": 1, "certifications": 5, "maxChildrenCare": float("inf")}),
    (to_nanny_profile, {"id": 1, "name": 123, "experienceYears": float("nan")}),
    (to_nanny_profile, {"id": 1, "availabilityJson": {"monday": {"enabled": True, "periods": 1}}}),
    (to_nanny_profile, {"id": 1, "averageRating": float("inf"), "lastActiveAt": 1700000000}),
])
def test_wrong_typed_optional_fields_are_dropped(adapter, record):
    result = adapter(record)
    assert result.id == 1


def test_scalar_collections_become_empty(caplog):
    with caplog.at_level("WARNING"):
        job = to_job_data({"id": 1, "childrenIds": 3, "mandatoryRequirements": 7})
        family = to_family_data({"id": 1, "neededDays": True})
    assert job.children_ids == ()
    assert job.mandatory_requirements == ()
    assert family.needed_days == frozenset()
    assert "Expected a list" in caplog.text


def test_nanny_non_finite_capacity_is_dropped():
    nanny = to_nanny_profile({"id": 1, "maxChildrenCare": float("inf")})
    assert nanny.max_children_care is None


def test_nanny_non_string_name_is_kept_as_text():
    assert to_nanny_profile({"id": 1, "name": 123}).name == "123"
    assert to_nanny_profile({"id": 1}).name == ""
