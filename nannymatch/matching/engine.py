"""Match evaluation and ranking.

``calculate_match_score`` runs the elimination phase and the weighted
scoring phase for one job/nanny pair. ``find_best_matches`` ranks many
candidates for one job, and ``score_candidates`` does the same starting
from raw records.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from nannymatch.matching.matcher import EligibilityMatcher
from nannymatch.matching.scorer import (
    BONUS_COMPONENTS,
    FIT_COMPONENTS,
    TRUST_COMPONENTS,
    ComponentKey,
    FitScorer,
    ScoreComponent,
    WeightsInput,
)
from nannymatch.processing.adapters import (
    to_child_data,
    to_family_data,
    to_job_data,
    to_nanny_profile,
)
from nannymatch.processing.normalizer import get_field
from nannymatch.profile.models import ChildData, FamilyData, JobData, NannyProfile

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


@dataclass(frozen=True)
class MatchResult:
    """Outcome of evaluating one nanny against one job."""
    score: int                                  # 0-100
    is_eligible: bool
    elimination_reasons: tuple[str, ...] = ()
    breakdown: Dict[ComponentKey, ScoreComponent] = field(default_factory=dict)
    fit_score: float = 0.0                      # Weighted fit subtotal
    trust_score: float = 0.0                    # Weighted seal + reviews subtotal
    bonus_score: float = 0.0                    # Weighted distance + budget subtotal

    def component_score(self, key: ComponentKey) -> float:
        """Score of a component, 0 when it is absent."""
        component = self.breakdown.get(key)
        return component.score if component else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "is_eligible": self.is_eligible,
            "elimination_reasons": list(self.elimination_reasons),
            "fit_score": round(self.fit_score, 3),
            "trust_score": round(self.trust_score, 3),
            "bonus_score": round(self.bonus_score, 3),
            "breakdown": {key.value: c.to_dict() for key, c in self.breakdown.items()},
        }


@dataclass(frozen=True)
class RankedMatch:
    """A candidate nanny with its match result and position in the ranking."""
    nanny: NannyProfile
    result: MatchResult
    rank: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "nanny": {"id": self.nanny.id, "name": self.nanny.name},
            "matchScore": self.result.score,
            **self.result.to_dict(),
        }


class MatchEngine:
    """Combines eligibility matching and fit scoring."""

    def __init__(self, weights: WeightsInput = None):
        """Initialize the engine.

        Args:
            weights: Optional per-component weight overrides

        Raises:
            ValueError: On unknown component keys or negative weights
        """
        self.matcher = EligibilityMatcher()
        self.scorer = FitScorer(weights)

    def evaluate(
        self,
        job: JobData,
        family: FamilyData,
        children: Sequence[ChildData],
        nanny: NannyProfile,
        now: Optional[datetime] = None,
    ) -> MatchResult:
        """Evaluate one nanny against one job.

        Args:
            job: Job being filled
            family: Family that owns the job
            children: Children the job covers
            nanny: Candidate nanny
            now: Evaluation time (defaults to the current UTC time)

        Returns:
            MatchResult with eligibility, score and breakdown
        """
        now = _resolve_now(now)

        eligibility = self.matcher.match(job, family, children, nanny)
        breakdown = self.scorer.calculate(job, family, children, nanny, now)

        return MatchResult(
            score=self.scorer.normalize(breakdown),
            is_eligible=eligibility.eligible,
            elimination_reasons=eligibility.elimination_reasons,
            breakdown=breakdown,
            fit_score=self.scorer.subtotal(breakdown, FIT_COMPONENTS),
            trust_score=self.scorer.subtotal(breakdown, TRUST_COMPONENTS),
            bonus_score=self.scorer.subtotal(breakdown, BONUS_COMPONENTS),
        )

    def rank(
        self,
        job: JobData,
        family: FamilyData,
        children: Sequence[ChildData],
        nannies: Iterable[NannyProfile],
        limit: int = DEFAULT_LIMIT,
        min_score: int = 0,
        now: Optional[datetime] = None,
    ) -> List[RankedMatch]:
        """Rank eligible nannies for a job.

        Candidates are ordered by score, then fit subtotal, reviews, seal and
        most recent activity.

        Args:
            job: Job being filled
            family: Family that owns the job
            children: Children the job covers
            nannies: Candidate nannies
            limit: Maximum number of matches returned
            min_score: Minimum score to be included
            now: Evaluation time shared by every candidate

        Returns:
            Ranked matches, best first, with 1-based ranks
        """
        now = _resolve_now(now)

        scored = []
        total = 0
        for nanny in nannies:
            total += 1
            result = self.evaluate(job, family, children, nanny, now)
            if result.is_eligible and result.score >= min_score:
                scored.append((nanny, result))

        scored.sort(key=_ranking_key, reverse=True)

        ranked = [
            RankedMatch(nanny=nanny, result=result, rank=i)
            for i, (nanny, result) in enumerate(scored[:max(limit, 0)], 1)
        ]
        logger.info(f"Ranked {len(ranked)} of {total} nannies for job {job.id}")
        return ranked

    def score_records(
        self,
        job_record: Any,
        family_record: Any,
        child_records: Iterable[Any],
        nanny_records: Iterable[Any],
        review_stats: Optional[Mapping[int, Any]] = None,
        limit: int = DEFAULT_LIMIT,
        min_score: int = 0,
        now: Optional[datetime] = None,
    ) -> List[RankedMatch]:
        """Adapt raw records and rank the nannies for the job.

        Job and family adapter errors propagate. Nanny records that fail
        validation are logged and skipped.

        Args:
            job_record: Raw job record
            family_record: Raw family record
            child_records: Raw child records of the family
            nanny_records: Raw candidate nanny records
            review_stats: Optional review aggregates keyed by nanny id
            limit: Maximum number of matches returned
            min_score: Minimum score to be included
            now: Evaluation time

        Returns:
            Ranked matches, best first
        """
        now = _resolve_now(now)
        review_stats = review_stats or {}

        job = to_job_data(job_record)
        family = to_family_data(family_record)
        children = [to_child_data(record, now) for record in child_records]
        if job.children_ids:
            wanted = set(job.children_ids)
            children = [c for c in children if c.id in wanted]

        nannies = []
        for record in nanny_records:
            try:
                nannies.append(to_nanny_profile(record, review_stats.get(get_field(record, "id"))))
            except ValidationError as e:
                logger.warning(f"Skipping invalid nanny record: {e.error_count()} error(s)")
                continue

        return self.rank(job, family, children, nannies, limit=limit, min_score=min_score, now=now)


def calculate_match_score(
    job: JobData,
    family: FamilyData,
    children: Sequence[ChildData],
    nanny: NannyProfile,
    now: Optional[datetime] = None,
    weights: WeightsInput = None,
) -> MatchResult:
    """Evaluate one nanny against one job with the given (or default) weights."""
    return MatchEngine(weights).evaluate(job, family, children, nanny, now)


def find_best_matches(
    job: JobData,
    family: FamilyData,
    children: Sequence[ChildData],
    nannies: Iterable[NannyProfile],
    limit: int = DEFAULT_LIMIT,
    min_score: int = 0,
    now: Optional[datetime] = None,
    weights: WeightsInput = None,
) -> List[RankedMatch]:
    """Rank eligible nannies for a job. See MatchEngine.rank."""
    return MatchEngine(weights).rank(job, family, children, nannies, limit, min_score, now)


def score_candidates(
    job_record: Any,
    family_record: Any,
    child_records: Iterable[Any],
    nanny_records: Iterable[Any],
    review_stats: Optional[Mapping[int, Any]] = None,
    limit: int = DEFAULT_LIMIT,
    min_score: int = 0,
    now: Optional[datetime] = None,
    weights: WeightsInput = None,
) -> List[RankedMatch]:
    """Rank raw nanny records for a raw job. See MatchEngine.score_records."""
    return MatchEngine(weights).score_records(
        job_record,
        family_record,
        child_records,
        nanny_records,
        review_stats=review_stats,
        limit=limit,
        min_score=min_score,
        now=now,
    )


def _resolve_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return now


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _ranking_key(item) -> tuple:
    nanny, result = item
    last_active = nanny.last_active_at or _EPOCH
    if last_active.tzinfo is None:
        last_active = last_active.replace(tzinfo=timezone.utc)
    return (
        result.score,
        result.fit_score,
        result.component_score(ComponentKey.REVIEWS),
        result.component_score(ComponentKey.SEAL),
        last_active.timestamp(),
    )
