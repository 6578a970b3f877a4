"""
Per-candidate scoring.

Combines the requirement matches for skills and responsibilities with the
job-title similarity and the experience comparison into one explainable
breakdown. Every number in the breakdown traces back to an explicit
comparison.
"""
from typing import List, Optional

from talent_match.models.match import CandidateBreakdown, NormalizedWeightVector, RequirementMatch
from talent_match.models.vectors import VectorSet
from talent_match.services.requirement_matcher import DEFAULT_TOP_ALTERNATIVES, match_requirements
from talent_match.services.similarity import similarity
from talent_match.utils.exceptions import DimensionMismatch
from talent_match.utils.logging_config import get_logger

logger = get_logger(__name__)


def mean_best_score(matches: List[RequirementMatch]) -> float:
    # a JD without items of this type contributes a neutral 0.0
    if not matches:
        return 0.0
    return sum(m.score for m in matches) / len(matches)


def title_score(jd: VectorSet, cv: VectorSet) -> float:
    if jd.title_vector is None or cv.title_vector is None:
        return 0.0
    return similarity(jd.title_vector, cv.title_vector)


def years_score(jd_years: Optional[float], cv_years: Optional[float]) -> float:
    """
    Closeness of the candidate's years to the requirement.

    1 - |jd - cv| / max(jd, 1), clamped to [0, 1]; 0.0 when either side is
    unknown.
    """
    if jd_years is None or cv_years is None:
        return 0.0
    score = 1.0 - abs(jd_years - cv_years) / max(jd_years, 1.0)
    return max(0.0, min(1.0, score))


def check_compatible(jd: VectorSet, cv: VectorSet) -> None:
    """Fail fast when the CV cannot be compared against the JD"""
    cv_dim = cv.check_dimension()
    cv.check_finite()
    jd_dim = jd.dimension
    if cv_dim is not None and jd_dim is not None and cv_dim != jd_dim:
        raise DimensionMismatch(
            f"Candidate {cv.document_id} has {cv_dim}-dimensional vectors, "
            f"job {jd.document_id} has {jd_dim}",
            expected=jd_dim,
            actual=cv_dim,
            document_id=cv.document_id,
        )


def score_candidate(
    jd: VectorSet,
    cv: VectorSet,
    weights: NormalizedWeightVector,
    top_alternatives: int = DEFAULT_TOP_ALTERNATIVES,
) -> CandidateBreakdown:
    check_compatible(jd, cv)

    skill_matches = match_requirements(jd.skill_vectors, cv.skill_vectors, top_alternatives)
    responsibility_matches = match_requirements(
        jd.responsibility_vectors, cv.responsibility_vectors, top_alternatives
    )

    skills = mean_best_score(skill_matches)
    responsibilities = mean_best_score(responsibility_matches)
    job_title = title_score(jd, cv)
    years = years_score(jd.experience_years, cv.experience_years)

    overall = (
        weights.skills * skills
        + weights.responsibilities * responsibilities
        + weights.job_title * job_title
        + weights.experience * years
    )
    # guard against rounding drift outside [0, 1]
    overall = max(0.0, min(1.0, overall))

    logger.debug(
        f"Scored {cv.document_id} against {jd.document_id}: skills={skills:.3f} "
        f"responsibilities={responsibilities:.3f} title={job_title:.3f} years={years:.3f} overall={overall:.3f}"
    )

    return CandidateBreakdown(
        candidate_id=cv.document_id,
        skills_score=skills,
        responsibilities_score=responsibilities,
        job_title_score=job_title,
        years_score=years,
        overall_score=overall,
        skill_matches=skill_matches,
        responsibility_matches=responsibility_matches,
    )
