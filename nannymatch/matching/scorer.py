"""Weighted compatibility scoring between a job and a nanny.

Each component produces a partial score in [0, max_score]. Components
whose inputs are missing are inapplicable: they are left out of the
breakdown and out of the normalization, never scored as zero. The final
percentage is the achieved share of the applicable weights:

    score = round_half_up(sum(weighted) / sum(weight) * 100)
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union

from nannymatch.matching.geo import distance_between
from nannymatch.matching.seal import Seal, determine_seal, has_verification_data
from nannymatch.profile.models import (
    HOURLY_RATE_BANDS,
    ChildData,
    ContractRegime,
    FamilyData,
    JobData,
    NannyProfile,
    travel_radius_km,
)

logger = logging.getLogger(__name__)


class ComponentKey(str, Enum):
    """Names of the scoring components, as exposed in the breakdown."""

    AGE_RANGE = "ageRange"
    NANNY_TYPE = "nannyType"
    ACTIVITIES = "activities"
    CONTRACT_REGIME = "contractRegime"
    AVAILABILITY = "availability"
    CHILDREN_COUNT = "childrenCount"
    SEAL = "seal"
    REVIEWS = "reviews"
    DISTANCE_BONUS = "distanceBonus"
    BUDGET_BONUS = "budgetBonus"


# Component groups used for subtotals and tie-breaking
FIT_COMPONENTS = (
    ComponentKey.AGE_RANGE,
    ComponentKey.NANNY_TYPE,
    ComponentKey.ACTIVITIES,
    ComponentKey.CONTRACT_REGIME,
    ComponentKey.AVAILABILITY,
    ComponentKey.CHILDREN_COUNT,
)
TRUST_COMPONENTS = (ComponentKey.SEAL, ComponentKey.REVIEWS)
BONUS_COMPONENTS = (ComponentKey.DISTANCE_BONUS, ComponentKey.BUDGET_BONUS)


@dataclass
class ScoreComponent:
    """One entry of the score breakdown."""
    score: float                   # Points achieved (0..max_score)
    max_score: float               # Points available
    weight: float                  # Relative weight of the component
    weighted: float                # score / max_score * weight
    details: Optional[str] = None  # Human-readable explanation

    @property
    def percentage(self) -> int:
        """Share of max_score achieved (0-100), for percentage bars."""
        if self.max_score <= 0:
            return 0
        return round_half_up(self.score / self.max_score * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": round(self.score, 3),
            "max_score": self.max_score,
            "weight": self.weight,
            "weighted": round(self.weighted, 3),
            "details": self.details,
        }


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


WeightsInput = Optional[Mapping[Union[str, ComponentKey], float]]


class FitScorer:
    """Calculates the weighted compatibility breakdown for a nanny."""

    # Points available per component
    MAX_POINTS: Dict[ComponentKey, float] = {
        ComponentKey.AGE_RANGE: 25,
        ComponentKey.NANNY_TYPE: 15,
        ComponentKey.ACTIVITIES: 15,
        ComponentKey.CONTRACT_REGIME: 10,
        ComponentKey.AVAILABILITY: 10,
        ComponentKey.CHILDREN_COUNT: 5,
        ComponentKey.SEAL: 8,
        ComponentKey.REVIEWS: 12,
        ComponentKey.DISTANCE_BONUS: 5,
        ComponentKey.BUDGET_BONUS: 5,
    }

    DEFAULT_WEIGHTS: Dict[ComponentKey, float] = dict(MAX_POINTS)

    # Contract regimes accepted with a caveat
    COMPATIBLE_REGIMES = {
        (ContractRegime.AUTONOMA, ContractRegime.PJ),
        (ContractRegime.PJ, ContractRegime.AUTONOMA),
    }
    COMPATIBLE_REGIME_CREDIT = 0.5

    SEAL_CREDIT = {
        Seal.NONE: 0.0,
        Seal.IDENTIFICADA: 3 / 8,
        Seal.VERIFICADA: 6 / 8,
        Seal.CONFIAVEL: 1.0,
    }

    # Review confidence rises linearly from MIN_REVIEW_CONFIDENCE at one
    # review to 1.0 at REVIEW_SATURATION reviews
    REVIEW_SATURATION = 10
    MIN_REVIEW_CONFIDENCE = 0.5
    MAX_RATING = 5.0

    # Distance bonus: full credit within this share of the radius, then
    # linear down to DISTANCE_EDGE_CREDIT at the radius
    DISTANCE_FULL_RATIO = 0.5
    DISTANCE_EDGE_CREDIT = 0.6

    # Budget bonus: partial credit when the nanny's band starts at most
    # this many BRL/h above the family's top
    BUDGET_NEAR_MARGIN = 10
    BUDGET_NEAR_CREDIT = 0.4

    def __init__(self, weights: WeightsInput = None):
        """Initialize the scorer.

        Args:
            weights: Optional per-component weights overriding the defaults.
                Keys are ComponentKey members or their string values.

        Raises:
            ValueError: On unknown component keys or negative weights
        """
        self.weights = self.resolve_weights(weights)

    @classmethod
    def resolve_weights(cls, weights: WeightsInput) -> Dict[ComponentKey, float]:
        """Merge caller weights over the defaults."""
        resolved = dict(cls.DEFAULT_WEIGHTS)
        if not weights:
            return resolved

        for raw_key, value in weights.items():
            try:
                key = ComponentKey(raw_key)
            except ValueError:
                raise ValueError(f"Unknown score component: {raw_key!r}") from None
            weight = float(value)
            if weight < 0 or math.isnan(weight):
                raise ValueError(f"Weight for {key.value} must be non-negative, got {value!r}")
            resolved[key] = weight
        return resolved

    def calculate(
        self,
        job: JobData,
        family: FamilyData,
        children: Sequence[ChildData],
        nanny: NannyProfile,
        now: datetime,
    ) -> Dict[ComponentKey, ScoreComponent]:
        """Calculate every applicable component.

        Args:
            job: Job being filled
            family: Family that owns the job
            children: Children the job covers
            nanny: Candidate nanny
            now: Evaluation time, used for document expiry

        Returns:
            Breakdown keyed by component, containing applicable components only
        """
        candidates = {
            ComponentKey.AGE_RANGE: self._calculate_age_range(children, nanny),
            ComponentKey.NANNY_TYPE: self._calculate_nanny_type(family, nanny),
            ComponentKey.ACTIVITIES: self._calculate_activities(family, nanny),
            ComponentKey.CONTRACT_REGIME: self._calculate_contract_regime(family, nanny),
            ComponentKey.AVAILABILITY: self._calculate_availability(family, nanny),
            ComponentKey.CHILDREN_COUNT: self._calculate_children_count(job, family, children, nanny),
            ComponentKey.SEAL: self._calculate_seal(nanny, now),
            ComponentKey.REVIEWS: self._calculate_reviews(nanny),
            ComponentKey.DISTANCE_BONUS: self._calculate_distance_bonus(family, nanny),
            ComponentKey.BUDGET_BONUS: self._calculate_budget_bonus(family, nanny),
        }

        breakdown: Dict[ComponentKey, ScoreComponent] = {}
        for key, outcome in candidates.items():
            if outcome is None:
                continue
            fraction, details = outcome
            breakdown[key] = self._component(key, fraction, details)
        return breakdown

    def _component(self, key: ComponentKey, fraction: float, details: str) -> ScoreComponent:
        fraction = min(1.0, max(0.0, fraction))
        max_score = self.MAX_POINTS[key]
        weight = self.weights[key]
        return ScoreComponent(
            score=fraction * max_score,
            max_score=max_score,
            weight=weight,
            weighted=fraction * weight,
            details=details,
        )

    @staticmethod
    def normalize(breakdown: Mapping[ComponentKey, ScoreComponent]) -> int:
        """Convert a breakdown into the 0-100 percentage (0 when empty)."""
        total_weight = sum(c.weight for c in breakdown.values())
        if total_weight <= 0:
            return 0
        achieved = sum(c.weighted for c in breakdown.values())
        return min(100, max(0, round_half_up(achieved / total_weight * 100)))

    @staticmethod
    def subtotal(
        breakdown: Mapping[ComponentKey, ScoreComponent],
        keys: Iterable[ComponentKey],
    ) -> float:
        """Sum of weighted values for the given components."""
        return sum(breakdown[k].weighted for k in keys if k in breakdown)

    # Each _calculate_* returns (fraction, details), or None when inapplicable

    def _calculate_age_range(self, children: Sequence[ChildData], nanny: NannyProfile):
        """Share of children whose age bucket the nanny has experience with.

        Unborn children and children without a known age are not counted.
        """
        ranges = [c.age_range for c in children if not c.unborn and c.age_range is not None]
        if not ranges:
            return None

        covered = sum(1 for r in ranges if r in nanny.age_ranges_experience)
        return covered / len(ranges), f"{covered}/{len(ranges)} children in experienced age ranges"

    def _calculate_nanny_type(self, family: FamilyData, nanny: NannyProfile):
        if family.nanny_type is None:
            return None
        if family.nanny_type in nanny.nanny_types:
            return 1.0, f"Works as {family.nanny_type.value}"
        return 0.0, f"Does not work as {family.nanny_type.value}"

    def _calculate_activities(self, family: FamilyData, nanny: NannyProfile):
        """Partial credit for the share of expected activities the nanny accepts."""
        expected = family.domestic_help_expected
        if not expected:
            return None

        common = len(expected & nanny.accepted_activities)
        return common / len(expected), f"{common}/{len(expected)} expected activities accepted"

    def _calculate_contract_regime(self, family: FamilyData, nanny: NannyProfile):
        regime = family.contract_regime
        if regime is None:
            return None
        if regime in nanny.contract_regimes:
            return 1.0, f"Accepts {regime.value}"
        if any((regime, offered) in self.COMPATIBLE_REGIMES for offered in nanny.contract_regimes):
            return self.COMPATIBLE_REGIME_CREDIT, f"Compatible regime for {regime.value}"
        return 0.0, f"Does not accept {regime.value}"

    def _calculate_availability(self, family: FamilyData, nanny: NannyProfile):
        """Share of the family's (day, shift) grid covered by the nanny's schedule."""
        needed = family.availability_slots
        if not needed or nanny.availability_slots is None:
            return None

        covered = len(needed & nanny.availability_slots)
        return covered / len(needed), f"{covered}/{len(needed)} needed slots covered"

    def _calculate_children_count(
        self,
        job: JobData,
        family: FamilyData,
        children: Sequence[ChildData],
        nanny: NannyProfile,
    ):
        """Full credit within the nanny's capacity, decreasing with the shortfall."""
        count = family.number_of_children or len(job.children_ids) or len(children)
        if count <= 0:
            return None

        capacity = nanny.max_children_care
        if capacity is None:
            return 1.0, f"{count} children, no declared limit"
        if capacity >= count:
            return 1.0, f"{count} children, limit {capacity}"

        shortfall = count - capacity
        return max(0.0, 1 - shortfall / count), f"{count} children exceed limit {capacity}"

    def _calculate_seal(self, nanny: NannyProfile, now: datetime):
        if not has_verification_data(nanny):
            return None
        seal = determine_seal(nanny, now)
        return self.SEAL_CREDIT[seal], f"Seal {seal.value}"

    def _calculate_reviews(self, nanny: NannyProfile):
        """Rating scaled by a confidence factor that grows with the review count.

        One 5-star review scores 0.5; ten reviews averaging 4.5 score 0.9.
        """
        count = nanny.review_count
        average = nanny.average_rating
        if count <= 0 or average is None:
            return None

        capped = min(count, self.REVIEW_SATURATION)
        confidence = self.MIN_REVIEW_CONFIDENCE + (1 - self.MIN_REVIEW_CONFIDENCE) * (
            (capped - 1) / (self.REVIEW_SATURATION - 1)
        )
        fraction = (average / self.MAX_RATING) * confidence
        return fraction, f"{average:.1f} average over {count} review(s)"

    def _calculate_distance_bonus(self, family: FamilyData, nanny: NannyProfile):
        """Closer is better; nothing beyond the nanny's travel radius."""
        distance = distance_between(nanny.address, family.address)
        if distance is None:
            return None

        radius = travel_radius_km(nanny.max_travel_distance)
        ratio = distance / radius
        if ratio <= self.DISTANCE_FULL_RATIO:
            fraction = 1.0
        elif ratio <= 1.0:
            slope = (1 - self.DISTANCE_EDGE_CREDIT) / (1 - self.DISTANCE_FULL_RATIO)
            fraction = 1.0 - slope * (ratio - self.DISTANCE_FULL_RATIO)
        else:
            fraction = 0.0
        return fraction, f"{distance:.1f} km away, radius {radius:g} km"

    def _calculate_budget_bonus(self, family: FamilyData, nanny: NannyProfile):
        """Compare the nanny's asking band with the family's budget band."""
        if family.hourly_rate_range is None or nanny.hourly_rate_range is None:
            return None

        family_band = HOURLY_RATE_BANDS.get(family.hourly_rate_range)
        nanny_band = HOURLY_RATE_BANDS.get(nanny.hourly_rate_range)
        if family_band is None or nanny_band is None:
            return None

        nanny_min = nanny_band[0]
        family_max = family_band[1]
        if nanny_min <= family_max:
            return 1.0, "Rate within budget"
        if nanny_min - family_max <= self.BUDGET_NEAR_MARGIN:
            return self.BUDGET_NEAR_CREDIT, "Rate slightly above budget"
        return 0.0, "Rate above budget"
