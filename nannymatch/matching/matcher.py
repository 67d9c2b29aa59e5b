"""Eligibility matching engine.

Checks a nanny profile against the mandatory requirements declared on a
job. Every failing requirement contributes one elimination reason, in the
order the requirements were declared.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from nannymatch.matching.geo import distance_between
from nannymatch.profile.models import (
    Certification,
    ChildData,
    FamilyData,
    Gender,
    JobData,
    NannyProfile,
    PetComfort,
    RequirementCode,
    SpecialNeed,
    travel_radius_km,
)

logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    """Status of a requirement match."""
    MATCHED = "matched"      # Nanny meets requirement
    UNMATCHED = "unmatched"  # Nanny fails requirement
    NOT_APPLICABLE = "n/a"   # Requirement has nothing to check for this job


@dataclass
class RequirementMatch:
    """Result of checking a single mandatory requirement."""
    requirement: RequirementCode
    status: MatchStatus
    reason: Optional[str] = None          # Elimination reason when unmatched
    nanny_value: Optional[str] = None     # Nanny's value for this field
    required_value: Optional[str] = None  # Required value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requirement": self.requirement.value,
            "status": self.status.value,
            "reason": self.reason,
            "nanny_value": self.nanny_value,
            "required_value": self.required_value,
        }


@dataclass
class EligibilityResult:
    """Outcome of the elimination phase for one nanny."""
    nanny_id: int
    details: List[RequirementMatch] = field(default_factory=list)

    @property
    def elimination_reasons(self) -> tuple[str, ...]:
        return tuple(
            d.reason for d in self.details
            if d.status == MatchStatus.UNMATCHED and d.reason
        )

    @property
    def eligible(self) -> bool:
        return not self.elimination_reasons

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nanny_id": self.nanny_id,
            "eligible": self.eligible,
            "elimination_reasons": list(self.elimination_reasons),
            "details": [d.to_dict() for d in self.details],
        }


class EligibilityMatcher:
    """Applies a job's mandatory requirements to nanny profiles."""

    # Stable reason wording per requirement code
    REASONS = {
        RequirementCode.NON_SMOKER: "Job requires a non-smoking nanny",
        RequirementCode.DRIVER_LICENSE: "Job requires a nanny with a driver license (CNH)",
        RequirementCode.PET_FRIENDLY: "Family has pets and the nanny is not comfortable with pets",
        RequirementCode.SPECIAL_NEEDS_EXPERIENCE: "Job requires experience with special needs",
        RequirementCode.FEMALE_ONLY: "Job requires a female nanny",
        RequirementCode.MALE_ONLY: "Job requires a male nanny",
    }

    REQUIRED_GENDER = {
        RequirementCode.FEMALE_ONLY: Gender.FEMALE,
        RequirementCode.MALE_ONLY: Gender.MALE,
    }

    def match(
        self,
        job: JobData,
        family: FamilyData,
        children: Sequence[ChildData],
        nanny: NannyProfile,
    ) -> EligibilityResult:
        """Check every mandatory requirement of the job.

        Args:
            job: Job with its mandatory requirements
            family: Family that owns the job
            children: Children the job covers
            nanny: Candidate nanny

        Returns:
            EligibilityResult with one detail per requirement
        """
        result = EligibilityResult(nanny_id=nanny.id)

        for code in job.mandatory_requirements:
            result.details.append(self._check(code, family, children, nanny))

        if not result.eligible:
            logger.debug(
                f"Nanny {nanny.id} eliminated for job {job.id}: "
                f"{len(result.elimination_reasons)} requirement(s) failed"
            )
        return result

    def _check(
        self,
        code: RequirementCode,
        family: FamilyData,
        children: Sequence[ChildData],
        nanny: NannyProfile,
    ) -> RequirementMatch:
        if code == RequirementCode.NON_SMOKER:
            return self._check_non_smoker(nanny)
        if code == RequirementCode.DRIVER_LICENSE:
            return self._check_driver_license(nanny)
        if code == RequirementCode.PET_FRIENDLY:
            return self._check_pets(family, nanny)
        if code == RequirementCode.SPECIAL_NEEDS_EXPERIENCE:
            return self._check_special_needs(children, nanny)
        if code in self.REQUIRED_GENDER:
            return self._check_gender(code, nanny)
        if code == RequirementCode.WITHIN_TRAVEL_DISTANCE:
            return self._check_travel_distance(family, nanny)
        return self._check_certification(code, nanny)

    def _check_non_smoker(self, nanny: NannyProfile) -> RequirementMatch:
        """Check non-smoker requirement."""
        failed = nanny.is_smoker is True
        return RequirementMatch(
            requirement=RequirementCode.NON_SMOKER,
            status=MatchStatus.UNMATCHED if failed else MatchStatus.MATCHED,
            reason=self.REASONS[RequirementCode.NON_SMOKER] if failed else None,
            nanny_value=_yes_no(nanny.is_smoker),
            required_value="No",
        )

    def _check_driver_license(self, nanny: NannyProfile) -> RequirementMatch:
        """Check driver license requirement (unknown counts as missing)."""
        failed = nanny.has_cnh is not True
        return RequirementMatch(
            requirement=RequirementCode.DRIVER_LICENSE,
            status=MatchStatus.UNMATCHED if failed else MatchStatus.MATCHED,
            reason=self.REASONS[RequirementCode.DRIVER_LICENSE] if failed else None,
            nanny_value=_yes_no(nanny.has_cnh),
            required_value="Yes",
        )

    def _check_pets(self, family: FamilyData, nanny: NannyProfile) -> RequirementMatch:
        """Check pet comfort, only relevant when the family has pets."""
        comfort = nanny.comfortable_with_pets
        if not family.has_pets:
            return RequirementMatch(
                requirement=RequirementCode.PET_FRIENDLY,
                status=MatchStatus.NOT_APPLICABLE,
                nanny_value=comfort.value if comfort else None,
            )

        failed = comfort is None or comfort == PetComfort.NO
        return RequirementMatch(
            requirement=RequirementCode.PET_FRIENDLY,
            status=MatchStatus.UNMATCHED if failed else MatchStatus.MATCHED,
            reason=self.REASONS[RequirementCode.PET_FRIENDLY] if failed else None,
            nanny_value=comfort.value if comfort else "Not specified",
            required_value="Comfortable with pets",
        )

    def _check_special_needs(
        self, children: Sequence[ChildData], nanny: NannyProfile
    ) -> RequirementMatch:
        """Check special needs experience against the children's needs.

        OTHER on either side matches any category.
        """
        code = RequirementCode.SPECIAL_NEEDS_EXPERIENCE
        needing = [c for c in children if c.has_special_needs]
        if not needing:
            return RequirementMatch(requirement=code, status=MatchStatus.NOT_APPLICABLE)

        if nanny.has_special_needs_experience is not True:
            return RequirementMatch(
                requirement=code,
                status=MatchStatus.UNMATCHED,
                reason=self.REASONS[code],
                nanny_value="No experience",
                required_value="Special needs experience",
            )

        required = set()
        for child in needing:
            required.update(child.special_needs_types)

        specialties = nanny.special_needs_specialties
        if SpecialNeed.OTHER in specialties:
            missing = []
        else:
            missing = sorted(
                need.value for need in required
                if need != SpecialNeed.OTHER and need not in specialties
            )

        if missing:
            return RequirementMatch(
                requirement=code,
                status=MatchStatus.UNMATCHED,
                reason=f"Nanny has no experience with: {', '.join(missing)}",
                nanny_value=", ".join(sorted(s.value for s in specialties)) or "None",
                required_value=", ".join(missing),
            )

        return RequirementMatch(
            requirement=code,
            status=MatchStatus.MATCHED,
            nanny_value=", ".join(sorted(s.value for s in specialties)) or "Experienced",
        )

    def _check_gender(self, code: RequirementCode, nanny: NannyProfile) -> RequirementMatch:
        required = self.REQUIRED_GENDER[code]
        failed = nanny.gender != required
        return RequirementMatch(
            requirement=code,
            status=MatchStatus.UNMATCHED if failed else MatchStatus.MATCHED,
            reason=self.REASONS[code] if failed else None,
            nanny_value=nanny.gender.value if nanny.gender else "Not specified",
            required_value=required.value,
        )

    def _check_certification(self, code: RequirementCode, nanny: NannyProfile) -> RequirementMatch:
        """Check that a required certification is held."""
        certification = Certification(code.value)
        failed = certification not in nanny.certifications
        return RequirementMatch(
            requirement=code,
            status=MatchStatus.UNMATCHED if failed else MatchStatus.MATCHED,
            reason=f"Job requires certification: {certification.value}" if failed else None,
            nanny_value=", ".join(sorted(c.value for c in nanny.certifications)) or "None",
            required_value=certification.value,
        )

    def _check_travel_distance(self, family: FamilyData, nanny: NannyProfile) -> RequirementMatch:
        """Check the family lies within the nanny's travel radius.

        Unknown coordinates cannot fail this requirement.
        """
        code = RequirementCode.WITHIN_TRAVEL_DISTANCE
        distance = distance_between(nanny.address, family.address)
        if distance is None:
            return RequirementMatch(requirement=code, status=MatchStatus.NOT_APPLICABLE)

        radius = travel_radius_km(nanny.max_travel_distance)
        failed = distance > radius
        return RequirementMatch(
            requirement=code,
            status=MatchStatus.UNMATCHED if failed else MatchStatus.MATCHED,
            reason=(
                f"Distance ({distance:.1f} km) exceeds the nanny's travel radius ({radius:g} km)"
                if failed else None
            ),
            nanny_value=f"{distance:.1f} km",
            required_value=f"<= {radius:g} km",
        )

    def match_batch(
        self,
        job: JobData,
        family: FamilyData,
        children: Sequence[ChildData],
        nannies: Sequence[NannyProfile],
    ) -> List[EligibilityResult]:
        """Check a job's requirements against multiple nannies.

        Args:
            job: Job with its mandatory requirements
            family: Family that owns the job
            children: Children the job covers
            nannies: Candidate nannies

        Returns:
            List of EligibilityResults (same order as nannies)
        """
        results = [self.match(job, family, children, nanny) for nanny in nannies]
        logger.info(f"Checked {len(results)} nannies, {sum(1 for r in results if r.eligible)} eligible")
        return results


def _yes_no(value: Optional[bool]) -> str:
    if value is None:
        return "Not specified"
    return "Yes" if value else "No"
