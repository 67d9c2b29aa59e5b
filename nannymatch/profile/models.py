"""Pydantic models for the profiles the matching engine compares."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RequirementCode(str, Enum):
    """Hard requirements a job can declare."""

    NON_SMOKER = "NON_SMOKER"
    DRIVER_LICENSE = "DRIVER_LICENSE"
    PET_FRIENDLY = "PET_FRIENDLY"
    SPECIAL_NEEDS_EXPERIENCE = "SPECIAL_NEEDS_EXPERIENCE"
    FEMALE_ONLY = "FEMALE_ONLY"
    MALE_ONLY = "MALE_ONLY"
    WITHIN_TRAVEL_DISTANCE = "WITHIN_TRAVEL_DISTANCE"
    # Certification requirements share their value with the certification code
    FIRST_AID = "FIRST_AID"
    CPR = "CPR"
    CHILD_DEVELOPMENT = "CHILD_DEVELOPMENT"
    EARLY_EDUCATION = "EARLY_EDUCATION"
    NUTRITION = "NUTRITION"
    SPECIAL_NEEDS_CARE = "SPECIAL_NEEDS"
    MONTESSORI = "MONTESSORI"
    NURSING = "NURSING"


class Certification(str, Enum):
    """Certifications a nanny can hold."""

    FIRST_AID = "FIRST_AID"
    CPR = "CPR"
    CHILD_DEVELOPMENT = "CHILD_DEVELOPMENT"
    EARLY_EDUCATION = "EARLY_EDUCATION"
    NUTRITION = "NUTRITION"
    SPECIAL_NEEDS = "SPECIAL_NEEDS"
    MONTESSORI = "MONTESSORI"
    NURSING = "NURSING"


class AgeRange(str, Enum):
    """Child age buckets used for experience tagging."""

    NEWBORN = "NEWBORN"
    BABY = "BABY"
    TODDLER = "TODDLER"
    PRESCHOOL = "PRESCHOOL"
    SCHOOL_AGE = "SCHOOL_AGE"
    TEENAGER = "TEENAGER"


class Activity(str, Enum):
    """Child-care and domestic activities."""

    CHILD_CARE = "CHILD_CARE"
    BABY_CARE = "BABY_CARE"
    COOKING = "COOKING"
    ORGANIZE = "ORGANIZE"
    HOMEWORK = "HOMEWORK"
    TRANSPORT = "TRANSPORT"
    BATHING = "BATHING"
    SLEEPING = "SLEEPING"
    PLAYING = "PLAYING"
    READING = "READING"
    OUTDOOR = "OUTDOOR"
    CRAFTS = "CRAFTS"
    SPORTS = "SPORTS"
    LAUNDRY = "LAUNDRY"
    CLEANING = "CLEANING"
    SPECIAL_NEEDS_CARE = "SPECIAL_NEEDS_CARE"
    THERAPEUTIC_ACTIVITIES = "THERAPEUTIC_ACTIVITIES"


class Day(str, Enum):
    """Days of the week."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class Shift(str, Enum):
    """Periods of the day."""

    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    NIGHT = "NIGHT"
    OVERNIGHT = "OVERNIGHT"


class NannyType(str, Enum):
    """Kind of engagement."""

    FOLGUISTA = "FOLGUISTA"
    DIARISTA = "DIARISTA"
    MENSALISTA = "MENSALISTA"


class ContractRegime(str, Enum):
    """Hiring regime."""

    AUTONOMA = "AUTONOMA"
    PJ = "PJ"
    CLT = "CLT"


class HourlyRateRange(str, Enum):
    """Hourly rate bands, including legacy values still found in stored data."""

    UP_TO_25 = "UP_TO_25"
    FROM_26_TO_35 = "FROM_26_TO_35"
    FROM_36_TO_45 = "FROM_36_TO_45"
    FROM_46_TO_60 = "FROM_46_TO_60"
    FROM_61_TO_80 = "FROM_61_TO_80"
    OVER_80 = "OVER_80"
    # Legacy nanny values
    UP_TO_20 = "UP_TO_20"
    FROM_21_TO_30 = "FROM_21_TO_30"
    FROM_31_TO_40 = "FROM_31_TO_40"
    FROM_41_TO_50 = "FROM_41_TO_50"
    FROM_51_TO_70 = "FROM_51_TO_70"
    FROM_71_TO_100 = "FROM_71_TO_100"
    OVER_100 = "OVER_100"
    # Legacy family values
    LEGACY_20_TO_30 = "20_TO_30"
    LEGACY_30_TO_40 = "30_TO_40"
    LEGACY_40_TO_50 = "40_TO_50"
    ABOVE_50 = "ABOVE_50"


class TravelDistance(str, Enum):
    """Maximum distance a nanny is willing to travel."""

    UP_TO_5KM = "UP_TO_5KM"
    UP_TO_10KM = "UP_TO_10KM"
    UP_TO_15KM = "UP_TO_15KM"
    UP_TO_20KM = "UP_TO_20KM"
    UP_TO_30KM = "UP_TO_30KM"
    ENTIRE_CITY = "ENTIRE_CITY"


class PetComfort(str, Enum):
    """How comfortable a nanny is around pets."""

    YES_ANY = "YES_ANY"
    ONLY_SOME = "ONLY_SOME"
    NO = "NO"


class Gender(str, Enum):
    """Gender options."""

    FEMALE = "FEMALE"
    MALE = "MALE"
    OTHER = "OTHER"
    PREFER_NOT_TO_SAY = "PREFER_NOT_TO_SAY"


class SpecialNeed(str, Enum):
    """Special needs categories shared by children and nanny specialties."""

    AUTISM = "AUTISM"
    ADHD = "ADHD"
    DOWN_SYNDROME = "DOWN_SYNDROME"
    CEREBRAL_PALSY = "CEREBRAL_PALSY"
    PHYSICAL_DISABILITY = "PHYSICAL_DISABILITY"
    VISUAL_IMPAIRMENT = "VISUAL_IMPAIRMENT"
    HEARING_IMPAIRMENT = "HEARING_IMPAIRMENT"
    CHRONIC_ILLNESS = "CHRONIC_ILLNESS"
    FOOD_ALLERGIES = "FOOD_ALLERGIES"
    OTHER = "OTHER"


# (min, max) in BRL per hour; open-ended bands use a generous ceiling
HOURLY_RATE_BANDS: dict[HourlyRateRange, tuple[float, float]] = {
    HourlyRateRange.UP_TO_25: (0, 25),
    HourlyRateRange.FROM_26_TO_35: (26, 35),
    HourlyRateRange.FROM_36_TO_45: (36, 45),
    HourlyRateRange.FROM_46_TO_60: (46, 60),
    HourlyRateRange.FROM_61_TO_80: (61, 80),
    HourlyRateRange.OVER_80: (81, 200),
    HourlyRateRange.UP_TO_20: (0, 20),
    HourlyRateRange.FROM_21_TO_30: (21, 30),
    HourlyRateRange.FROM_31_TO_40: (31, 40),
    HourlyRateRange.FROM_41_TO_50: (41, 50),
    HourlyRateRange.FROM_51_TO_70: (51, 70),
    HourlyRateRange.FROM_71_TO_100: (71, 100),
    HourlyRateRange.OVER_100: (101, 200),
    HourlyRateRange.LEGACY_20_TO_30: (20, 30),
    HourlyRateRange.LEGACY_30_TO_40: (30, 40),
    HourlyRateRange.LEGACY_40_TO_50: (40, 50),
    HourlyRateRange.ABOVE_50: (51, 200),
}

TRAVEL_DISTANCE_KM: dict[TravelDistance, float] = {
    TravelDistance.UP_TO_5KM: 5,
    TravelDistance.UP_TO_10KM: 10,
    TravelDistance.UP_TO_15KM: 15,
    TravelDistance.UP_TO_20KM: 20,
    TravelDistance.UP_TO_30KM: 30,
    TravelDistance.ENTIRE_CITY: 50,
}
DEFAULT_TRAVEL_DISTANCE_KM = 10.0

# Upper bound (exclusive, in months) of each age bucket
AGE_RANGE_UPPER_MONTHS: list[tuple[AgeRange, int]] = [
    (AgeRange.NEWBORN, 3),
    (AgeRange.BABY, 12),
    (AgeRange.TODDLER, 36),
    (AgeRange.PRESCHOOL, 72),
    (AgeRange.SCHOOL_AGE, 156),
]


def age_range_for_months(age_in_months: Optional[int]) -> Optional[AgeRange]:
    """Return the age bucket for an age in whole months."""
    if age_in_months is None or age_in_months < 0:
        return None
    for age_range, upper in AGE_RANGE_UPPER_MONTHS:
        if age_in_months < upper:
            return age_range
    return AgeRange.TEENAGER


def travel_radius_km(distance: Optional[TravelDistance]) -> float:
    """Convert a travel distance bucket to kilometres (10 km when unset)."""
    if distance is None:
        return DEFAULT_TRAVEL_DISTANCE_KM
    return TRAVEL_DISTANCE_KM.get(distance, DEFAULT_TRAVEL_DISTANCE_KM)


class Coordinates(BaseModel):
    """Geographic coordinates in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class JobData(BaseModel):
    """Hard constraints of a job posting."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Job identifier")
    mandatory_requirements: tuple[RequirementCode, ...] = Field(
        default_factory=tuple, description="Requirements in declaration order"
    )
    children_ids: tuple[int, ...] = Field(default_factory=tuple)

    @field_validator("mandatory_requirements")
    @classmethod
    def unique_requirements(cls, v):
        """Drop repeated codes, keeping the first declaration."""
        return tuple(dict.fromkeys(v))


class FamilyData(BaseModel):
    """Structural needs of the household that owns the job."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Family identifier")
    has_pets: bool = False
    number_of_children: Optional[int] = Field(None, ge=0)
    nanny_type: Optional[NannyType] = None
    contract_regime: Optional[ContractRegime] = None
    hourly_rate_range: Optional[HourlyRateRange] = None
    domestic_help_expected: frozenset[Activity] = Field(default_factory=frozenset)
    needed_days: frozenset[Day] = Field(default_factory=frozenset)
    needed_shifts: frozenset[Shift] = Field(default_factory=frozenset)
    address: Optional[Coordinates] = None

    @property
    def availability_slots(self) -> frozenset[tuple[Day, Shift]]:
        """Grid of (day, shift) slots the family needs covered."""
        return frozenset(
            (day, shift) for day in self.needed_days for shift in self.needed_shifts
        )


class ChildData(BaseModel):
    """A child the job covers."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Child identifier")
    age_in_months: Optional[int] = Field(None, ge=0)
    unborn: bool = False
    has_special_needs: bool = False
    special_needs_types: frozenset[SpecialNeed] = Field(default_factory=frozenset)
    special_needs_description: Optional[str] = None

    @property
    def age_range(self) -> Optional[AgeRange]:
        if self.unborn:
            return None
        return age_range_for_months(self.age_in_months)


class ReviewStats(BaseModel):
    """Aggregate of a nanny's published reviews."""

    model_config = ConfigDict(frozen=True)

    average_rating: Optional[float] = Field(None, ge=0.0, le=5.0)
    review_count: int = Field(0, ge=0)


class NannyProfile(BaseModel):
    """Candidate nanny as seen by the matching engine."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Nanny identifier")
    name: str = ""
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    is_smoker: Optional[bool] = None
    has_cnh: Optional[bool] = Field(None, description="Holds a driver license (CNH)")
    experience_years: Optional[int] = None
    has_special_needs_experience: Optional[bool] = None
    special_needs_specialties: frozenset[SpecialNeed] = Field(default_factory=frozenset)
    certifications: frozenset[Certification] = Field(default_factory=frozenset)
    age_ranges_experience: frozenset[AgeRange] = Field(default_factory=frozenset)
    max_travel_distance: Optional[TravelDistance] = None
    max_children_care: Optional[int] = Field(None, ge=0)
    comfortable_with_pets: Optional[PetComfort] = None
    accepted_activities: frozenset[Activity] = Field(default_factory=frozenset)
    nanny_types: frozenset[NannyType] = Field(default_factory=frozenset)
    contract_regimes: frozenset[ContractRegime] = Field(default_factory=frozenset)
    hourly_rate_range: Optional[HourlyRateRange] = None

    # Verification state used for the seal tier
    document_validated: Optional[bool] = None
    document_expiration_date: Optional[date] = None
    personal_data_validated: Optional[bool] = None
    criminal_background_validated: Optional[bool] = None
    has_active_subscription: Optional[bool] = None

    last_active_at: Optional[datetime] = None
    address: Optional[Coordinates] = None
    availability_slots: Optional[frozenset[tuple[Day, Shift]]] = Field(
        None, description="Declared schedule; None when the nanny never filled it in"
    )

    average_rating: Optional[float] = Field(None, ge=0.0, le=5.0)
    review_count: int = Field(0, ge=0)
