from nannymatch.matching.matcher import EligibilityMatcher, MatchStatus
from nannymatch.profile.models import (
    Certification,
    ChildData,
    Coordinates,
    FamilyData,
    Gender,
    JobData,
    NannyProfile,
    PetComfort,
    RequirementCode,
    SpecialNeed,
    TravelDistance,
)

FAMILY_ADDRESS = Coordinates(latitude=-23.5614, longitude=-46.6558)
FAR_ADDRESS = Coordinates(latitude=-24.0, longitude=-46.6558)


def _job(*codes: RequirementCode) -> JobData:
    return JobData(id=1, mandatory_requirements=codes)


def _reasons(job, nanny, family=None, children=()):
    family = family or FamilyData(id=10)
    return EligibilityMatcher().match(job, family, list(children), nanny).elimination_reasons


def test_smoker_eliminated_with_single_reason():
    reasons = _reasons(_job(RequirementCode.NON_SMOKER), NannyProfile(id=1, is_smoker=True))
    assert len(reasons) == 1
    assert "smok" in reasons[0].lower()


def test_unknown_smoking_status_passes_non_smoker():
    assert _reasons(_job(RequirementCode.NON_SMOKER), NannyProfile(id=1)) == ()


def test_driver_license_must_be_confirmed():
    job = _job(RequirementCode.DRIVER_LICENSE)
    assert _reasons(job, NannyProfile(id=1, has_cnh=True)) == ()
    assert len(_reasons(job, NannyProfile(id=1, has_cnh=False))) == 1
    assert len(_reasons(job, NannyProfile(id=1))) == 1


def test_pet_friendly_only_checked_when_family_has_pets():
    job = _job(RequirementCode.PET_FRIENDLY)
    no_pets = FamilyData(id=10, has_pets=False)
    pets = FamilyData(id=10, has_pets=True)

    result = EligibilityMatcher().match(job, no_pets, [], NannyProfile(id=1))
    assert result.eligible
    assert result.details[0].status == MatchStatus.NOT_APPLICABLE

    assert len(_reasons(job, NannyProfile(id=1), pets)) == 1
    assert len(_reasons(job, NannyProfile(id=1, comfortable_with_pets=PetComfort.NO), pets)) == 1
    assert _reasons(job, NannyProfile(id=1, comfortable_with_pets=PetComfort.ONLY_SOME), pets) == ()


def test_special_needs_requires_experience():
    job = _job(RequirementCode.SPECIAL_NEEDS_EXPERIENCE)
    child = ChildData(id=1, age_in_months=60, has_special_needs=True,
                      special_needs_types=frozenset({SpecialNeed.AUTISM}))

    reasons = _reasons(job, NannyProfile(id=1), children=[child])
    assert reasons == ("Job requires experience with special needs",)


def test_special_needs_checks_categories():
    job = _job(RequirementCode.SPECIAL_NEEDS_EXPERIENCE)
    child = ChildData(id=1, has_special_needs=True,
                      special_needs_types=frozenset({SpecialNeed.AUTISM, SpecialNeed.ADHD}))

    adhd_only = NannyProfile(id=1, has_special_needs_experience=True,
                             special_needs_specialties=frozenset({SpecialNeed.ADHD}))
    reasons = _reasons(job, adhd_only, children=[child])
    assert len(reasons) == 1
    assert "AUTISM" in reasons[0]
    assert "ADHD" not in reasons[0]

    both = NannyProfile(id=1, has_special_needs_experience=True,
                        special_needs_specialties=frozenset({SpecialNeed.ADHD, SpecialNeed.AUTISM}))
    assert _reasons(job, both, children=[child]) == ()


def test_special_needs_other_is_a_wildcard():
    job = _job(RequirementCode.SPECIAL_NEEDS_EXPERIENCE)
    autism = ChildData(id=1, has_special_needs=True,
                       special_needs_types=frozenset({SpecialNeed.AUTISM}))
    other = ChildData(id=2, has_special_needs=True,
                      special_needs_types=frozenset({SpecialNeed.OTHER}))

    generalist = NannyProfile(id=1, has_special_needs_experience=True,
                              special_needs_specialties=frozenset({SpecialNeed.OTHER}))
    assert _reasons(job, generalist, children=[autism]) == ()

    experienced = NannyProfile(id=1, has_special_needs_experience=True)
    assert _reasons(job, experienced, children=[other]) == ()


def test_special_needs_not_applicable_without_special_needs_children():
    job = _job(RequirementCode.SPECIAL_NEEDS_EXPERIENCE)
    assert _reasons(job, NannyProfile(id=1), children=[ChildData(id=1, age_in_months=20)]) == ()


def test_gender_requirements():
    female_only = _job(RequirementCode.FEMALE_ONLY)
    assert _reasons(female_only, NannyProfile(id=1, gender=Gender.FEMALE)) == ()
    assert _reasons(female_only, NannyProfile(id=1, gender=Gender.MALE)) == ("Job requires a female nanny",)
    assert len(_reasons(female_only, NannyProfile(id=1))) == 1

    male_only = _job(RequirementCode.MALE_ONLY)
    assert _reasons(male_only, NannyProfile(id=1, gender=Gender.MALE)) == ()


def test_certification_requirements():
    job = _job(RequirementCode.FIRST_AID, RequirementCode.SPECIAL_NEEDS_CARE)
    nanny = NannyProfile(id=1, certifications=frozenset({Certification.SPECIAL_NEEDS}))
    reasons = _reasons(job, nanny)
    assert reasons == ("Job requires certification: FIRST_AID",)


def test_reasons_follow_declaration_order():
    job = _job(RequirementCode.CPR, RequirementCode.NON_SMOKER, RequirementCode.DRIVER_LICENSE)
    nanny = NannyProfile(id=1, is_smoker=True, has_cnh=False)
    reasons = _reasons(job, nanny)
    assert len(reasons) == 3
    assert "CPR" in reasons[0]
    assert "smok" in reasons[1]
    assert "driver license" in reasons[2]


def test_travel_distance_requirement():
    job = _job(RequirementCode.WITHIN_TRAVEL_DISTANCE)
    family = FamilyData(id=10, address=FAMILY_ADDRESS)

    far = NannyProfile(id=1, address=FAR_ADDRESS, max_travel_distance=TravelDistance.UP_TO_10KM)
    reasons = _reasons(job, far, family)
    assert len(reasons) == 1
    assert "km" in reasons[0]

    willing = NannyProfile(id=1, address=FAR_ADDRESS, max_travel_distance=TravelDistance.ENTIRE_CITY)
    assert _reasons(job, willing, family) == ()

    # Unknown coordinates never fail the requirement
    assert _reasons(job, NannyProfile(id=1), family) == ()


def test_no_requirements_means_eligible():
    result = EligibilityMatcher().match(JobData(id=1), FamilyData(id=10), [], NannyProfile(id=1, is_smoker=True))
    assert result.eligible
    assert result.details == []


def test_match_batch_keeps_order():
    job = _job(RequirementCode.NON_SMOKER)
    nannies = [NannyProfile(id=1, is_smoker=True), NannyProfile(id=2, is_smoker=False)]
    results = EligibilityMatcher().match_batch(job, FamilyData(id=10), [], nannies)
    assert [r.nanny_id for r in results] == [1, 2]
    assert [r.eligible for r in results] == [False, True]


def test_result_to_dict():
    job = _job(RequirementCode.NON_SMOKER)
    data = EligibilityMatcher().match(job, FamilyData(id=10), [], NannyProfile(id=1, is_smoker=True)).to_dict()
    assert data["eligible"] is False
    assert data["details"][0]["requirement"] == "NON_SMOKER"
    assert data["details"][0]["status"] == "unmatched"
