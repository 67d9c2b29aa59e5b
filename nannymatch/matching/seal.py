"""Verification seal tiers for nanny profiles."""

from datetime import datetime
from enum import Enum

from nannymatch.profile.models import NannyProfile

# Reviews needed on top of a verified profile for the highest tier
MIN_REVIEWS_FOR_TRUSTED = 3


class Seal(str, Enum):
    """Verification tier, lowest to highest."""

    NONE = "NONE"
    IDENTIFICADA = "IDENTIFICADA"
    VERIFICADA = "VERIFICADA"
    CONFIAVEL = "CONFIAVEL"


def determine_seal(nanny: NannyProfile, now: datetime) -> Seal:
    """Derive the nanny's seal tier at ``now``.

    IDENTIFICADA needs a validated, non-expired document. VERIFICADA also
    needs personal data and criminal background validation plus an active
    paid subscription. CONFIAVEL also needs at least three reviews.
    """
    document_ok = nanny.document_validated is True and (
        nanny.document_expiration_date is None
        or nanny.document_expiration_date >= now.date()
    )
    if not document_ok:
        return Seal.NONE

    verified = (
        nanny.personal_data_validated is True
        and nanny.criminal_background_validated is True
        and nanny.has_active_subscription is True
    )
    if not verified:
        return Seal.IDENTIFICADA

    if nanny.review_count >= MIN_REVIEWS_FOR_TRUSTED:
        return Seal.CONFIAVEL
    return Seal.VERIFICADA


def has_verification_data(nanny: NannyProfile) -> bool:
    """Whether any verification flag is known for the nanny."""
    return any(
        flag is not None
        for flag in (
            nanny.document_validated,
            nanny.personal_data_validated,
            nanny.criminal_background_validated,
        )
    )
