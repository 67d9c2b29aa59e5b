"""Processing module for normalizing raw records into matching value objects."""

from nannymatch.processing.adapters import (
    to_child_data,
    to_family_data,
    to_job_data,
    to_nanny_profile,
)
from nannymatch.processing.normalizer import Normalizer, get_field

__all__ = [
    "Normalizer",
    "get_field",
    "to_child_data",
    "to_family_data",
    "to_job_data",
    "to_nanny_profile",
]
