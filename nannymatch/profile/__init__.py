"""Profile module with the value objects compared by the matching engine."""

from nannymatch.profile.models import (
    ChildData,
    Coordinates,
    FamilyData,
    JobData,
    NannyProfile,
    ReviewStats,
)

__all__ = [
    "ChildData",
    "Coordinates",
    "FamilyData",
    "JobData",
    "NannyProfile",
    "ReviewStats",
]
