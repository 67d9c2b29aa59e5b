"""Matching module for eligibility checks, fit scoring and ranking."""

from nannymatch.matching.engine import (
    MatchEngine,
    MatchResult,
    RankedMatch,
    calculate_match_score,
    find_best_matches,
    score_candidates,
)
from nannymatch.matching.matcher import EligibilityMatcher, EligibilityResult, MatchStatus, RequirementMatch
from nannymatch.matching.scorer import ComponentKey, FitScorer, ScoreComponent
from nannymatch.matching.seal import Seal, determine_seal

__all__ = [
    "ComponentKey",
    "EligibilityMatcher",
    "EligibilityResult",
    "FitScorer",
    "MatchEngine",
    "MatchResult",
    "MatchStatus",
    "RankedMatch",
    "RequirementMatch",
    "ScoreComponent",
    "Seal",
    "calculate_match_score",
    "determine_seal",
    "find_best_matches",
    "score_candidates",
]
