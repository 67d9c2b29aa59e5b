"""Adapters from raw persisted records to matching value objects.

Each adapter accepts either a mapping (API payload, YAML fixture) or an
object exposing attributes (ORM row), with camelCase or snake_case keys.
Malformed optional fields are dropped with a warning; a missing ``id``
fails with ``pydantic.ValidationError``.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional, Union

from nannymatch.processing.normalizer import Normalizer, get_field
from nannymatch.profile.models import (
    Activity,
    AgeRange,
    Certification,
    ChildData,
    ContractRegime,
    Day,
    FamilyData,
    Gender,
    HourlyRateRange,
    JobData,
    NannyProfile,
    NannyType,
    PetComfort,
    RequirementCode,
    ReviewStats,
    Shift,
    SpecialNeed,
    TravelDistance,
)

logger = logging.getLogger(__name__)

_normalizer = Normalizer()

# Subscription plans that do not count as a paid subscription
FREE_PLANS = {"FREE", "NANNY_FREE", "FAMILY_FREE"}


def to_job_data(record: Any) -> JobData:
    """Build JobData from a job record.

    Args:
        record: Raw job record

    Returns:
        JobData with requirements in declaration order
    """
    return JobData(
        id=get_field(record, "id"),
        mandatory_requirements=_normalizer.normalize_ordered_codes(
            get_field(record, "mandatoryRequirements"), RequirementCode
        ),
        children_ids=_normalizer.normalize_ids(get_field(record, "childrenIds")),
    )


def to_family_data(record: Any) -> FamilyData:
    """Build FamilyData from a family record."""
    return FamilyData(
        id=get_field(record, "id"),
        has_pets=bool(_normalizer.normalize_bool(get_field(record, "hasPets"))),
        number_of_children=_normalizer.normalize_int(
            get_field(record, "numberOfChildren"), minimum=0
        ),
        nanny_type=_normalizer.normalize_code(get_field(record, "nannyType"), NannyType),
        contract_regime=_normalizer.normalize_code(
            get_field(record, "contractRegime"), ContractRegime
        ),
        hourly_rate_range=_normalizer.normalize_code(
            get_field(record, "hourlyRateRange"), HourlyRateRange
        ),
        domestic_help_expected=_normalizer.normalize_codes(
            get_field(record, "domesticHelpExpected"), Activity
        ),
        needed_days=_normalizer.normalize_codes(get_field(record, "neededDays"), Day),
        needed_shifts=_normalizer.normalize_codes(get_field(record, "neededShifts"), Shift),
        address=_normalizer.normalize_coordinates(get_field(record, "address")),
    )


def to_child_data(record: Any, now: Optional[datetime] = None) -> ChildData:
    """Build ChildData, deriving the age in whole months at ``now``.

    Unborn children and children without a usable birth date get
    ``age_in_months=None``.

    Args:
        record: Raw child record
        now: Evaluation time (defaults to the current UTC time)

    Returns:
        ChildData instance
    """
    unborn = bool(_normalizer.normalize_bool(get_field(record, "unborn")))

    age_in_months = None
    if not unborn:
        birth_date = _normalizer.normalize_date(get_field(record, "birthDate"))
        if birth_date is not None:
            age_in_months = _normalizer.months_between(birth_date, _as_date(now))

    description = get_field(record, "specialNeedsDescription")

    return ChildData(
        id=get_field(record, "id"),
        age_in_months=age_in_months,
        unborn=unborn,
        has_special_needs=bool(_normalizer.normalize_bool(get_field(record, "hasSpecialNeeds"))),
        special_needs_types=_normalizer.normalize_codes(
            get_field(record, "specialNeedsTypes"), SpecialNeed
        ),
        special_needs_description=str(description) if description else None,
    )


def to_nanny_profile(
    record: Any,
    review_stats: Union[ReviewStats, dict, None] = None,
) -> NannyProfile:
    """Build a NannyProfile from a nanny record.

    Review aggregates come from ``review_stats`` when given, otherwise from
    ``averageRating``/``reviewCount`` on the record itself.

    Args:
        record: Raw nanny record
        review_stats: Aggregate review stats computed by the caller

    Returns:
        NannyProfile instance
    """
    stats_source = review_stats if review_stats is not None else record
    average_rating = _normalizer.normalize_float(
        get_field(stats_source, "averageRating"), minimum=0.0, maximum=5.0
    )
    review_count = _normalizer.normalize_int(get_field(stats_source, "reviewCount"), minimum=0) or 0
    name = get_field(record, "name")

    return NannyProfile(
        id=get_field(record, "id"),
        name=str(name) if name is not None else "",
        gender=_normalizer.normalize_code(get_field(record, "gender"), Gender),
        birth_date=_normalizer.normalize_date(get_field(record, "birthDate")),
        is_smoker=_normalizer.normalize_bool(get_field(record, "isSmoker")),
        has_cnh=_normalizer.normalize_bool(get_field(record, "hasCnh")),
        experience_years=_normalizer.normalize_int(get_field(record, "experienceYears"), minimum=0),
        has_special_needs_experience=_normalizer.normalize_bool(
            get_field(record, "hasSpecialNeedsExperience")
        ),
        special_needs_specialties=_normalizer.normalize_codes(
            get_field(record, "specialNeedsSpecialties"), SpecialNeed
        ),
        certifications=_normalizer.normalize_codes(
            get_field(record, "certifications"), Certification
        ),
        age_ranges_experience=_normalizer.normalize_codes(
            get_field(record, "ageRangesExperience"), AgeRange
        ),
        max_travel_distance=_normalizer.normalize_code(
            get_field(record, "maxTravelDistance"), TravelDistance
        ),
        max_children_care=_normalizer.normalize_int(
            get_field(record, "maxChildrenCare"), minimum=0
        ),
        comfortable_with_pets=_normalizer.normalize_code(
            get_field(record, "comfortableWithPets"), PetComfort
        ),
        accepted_activities=_normalizer.normalize_codes(
            get_field(record, "acceptedActivities"), Activity
        ),
        nanny_types=_normalizer.normalize_codes(get_field(record, "nannyTypes"), NannyType),
        contract_regimes=_normalizer.normalize_codes(
            get_field(record, "contractRegimes"), ContractRegime
        ),
        hourly_rate_range=_normalizer.normalize_code(
            get_field(record, "hourlyRateRange"), HourlyRateRange
        ),
        document_validated=_normalizer.normalize_bool(get_field(record, "documentValidated")),
        document_expiration_date=_normalizer.normalize_date(
            get_field(record, "documentExpirationDate")
        ),
        personal_data_validated=_normalizer.normalize_bool(
            get_field(record, "personalDataValidated")
        ),
        criminal_background_validated=_normalizer.normalize_bool(
            get_field(record, "criminalBackgroundValidated")
        ),
        has_active_subscription=_subscription_active(record),
        last_active_at=_normalizer.normalize_datetime(get_field(record, "lastActiveAt")),
        address=_normalizer.normalize_coordinates(get_field(record, "address")),
        availability_slots=_nanny_availability(record),
        average_rating=average_rating,
        review_count=review_count,
    )


def _as_date(now: Optional[datetime]) -> date:
    if now is None:
        return datetime.now(timezone.utc).date()
    if isinstance(now, datetime):
        return now.date()
    return now


def _subscription_active(record: Any) -> Optional[bool]:
    """Whether the nanny holds an active paid subscription.

    Reads ``hasActiveSubscription`` directly, or falls back to a nested
    ``subscription`` record with ``status`` and ``plan``.
    """
    flag = _normalizer.normalize_bool(get_field(record, "hasActiveSubscription"))
    if flag is not None:
        return flag

    subscription = get_field(record, "subscription")
    if subscription is None:
        return None

    status = str(get_field(subscription, "status") or "").upper()
    plan = str(get_field(subscription, "plan") or "").upper()
    return status == "ACTIVE" and plan not in FREE_PLANS


def _nanny_availability(record: Any):
    """Resolve the nanny's declared schedule from the record."""
    slots = get_field(record, "availabilitySlots")
    if slots:
        return _normalizer.normalize_availability(slots)

    schedule = get_field(record, "availabilityJson")
    if schedule is None:
        availability = get_field(record, "availability")
        schedule = get_field(availability, "schedule", availability)

    return _normalizer.normalize_availability(schedule)
