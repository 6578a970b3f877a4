import pytest

from talent_match.models.match import NormalizedWeightVector
from talent_match.services.candidate_scorer import score_candidate, years_score
from talent_match.utils.exceptions import DimensionMismatch

from conftest import E1, E2, E3, E4, NEG_E1, make_vector_set


class TestYearsScore:
    """Test cases for the experience comparison"""

    def test_exact_match_scores_one(self):
        assert years_score(5, 5) == 1.0

    def test_zero_years_against_requirement_scores_zero(self):
        assert years_score(5, 0) == 0.0

    def test_partial_experience(self):
        assert years_score(4, 3) == pytest.approx(0.75)

    def test_small_requirement_uses_floor_of_one(self):
        assert years_score(0, 0.5) == pytest.approx(0.5)
        assert years_score(0.5, 1.0) == pytest.approx(0.5)

    def test_far_above_requirement_clamps_to_zero(self):
        assert years_score(2, 10) == 0.0

    def test_missing_values_score_zero(self):
        assert years_score(None, 5) == 0.0
        assert years_score(5, None) == 0.0
        assert years_score(None, None) == 0.0


class TestScoreCandidate:
    """Test cases for per-candidate breakdowns"""

    def test_skills_scenario(self, equal_weights):
        """python matches exactly, sql only meets orthogonal items"""
        jd = make_vector_set("jd-1", skills=[("python", E1), ("sql", E2)])
        cv = make_vector_set("cv-a", skills=[("python", E1), ("java", E3)])

        result = score_candidate(jd, cv, equal_weights)

        assert result.skills_score == pytest.approx(0.75)
        assert result.skill_matches[0].best_match.cv_item == "python"
        assert result.skill_matches[1].score == pytest.approx(0.5)

    def test_experience_scenario(self, equal_weights):
        jd = make_vector_set("jd-1", years=5)
        cv_a = make_vector_set("cv-a", years=5)
        cv_b = make_vector_set("cv-b", years=0)

        assert score_candidate(jd, cv_a, equal_weights).years_score == 1.0
        assert score_candidate(jd, cv_b, equal_weights).years_score == 0.0

    def test_overall_is_weighted_sum(self):
        weights = NormalizedWeightVector(skills=0.4, responsibilities=0.3, job_title=0.2, experience=0.1)
        jd = make_vector_set(
            "jd-1",
            skills=[("python", E1)],
            responsibilities=[("build apis", E2)],
            title=E3,
            years=4,
        )
        cv = make_vector_set(
            "cv-a",
            skills=[("python", E1)],
            responsibilities=[("write docs", E4)],
            title=NEG_E1,
            years=3,
        )

        result = score_candidate(jd, cv, weights)

        assert result.skills_score == pytest.approx(1.0)
        assert result.responsibilities_score == pytest.approx(0.5)
        assert result.job_title_score == pytest.approx(0.5)
        assert result.years_score == pytest.approx(0.75)
        expected = 0.4 * 1.0 + 0.3 * 0.5 + 0.2 * 0.5 + 0.1 * 0.75
        assert result.overall_score == pytest.approx(expected)

    def test_missing_categories_contribute_zero(self, equal_weights):
        jd = make_vector_set("jd-1", skills=[("python", E1)], responsibilities=[("ship", E2)], title=E3, years=3)
        cv = make_vector_set("cv-a")

        result = score_candidate(jd, cv, equal_weights)

        assert result.skills_score == 0.0
        assert result.responsibilities_score == 0.0
        assert result.job_title_score == 0.0
        assert result.years_score == 0.0
        assert result.overall_score == 0.0
        assert result.skill_matches[0].best_match is None
        assert result.responsibility_matches[0].alternatives == []

    def test_jd_without_skills_scores_neutral_zero(self, equal_weights):
        jd = make_vector_set("jd-1", responsibilities=[("ship", E1)])
        cv = make_vector_set("cv-a", skills=[("python", E1)], responsibilities=[("ship", E1)])

        result = score_candidate(jd, cv, equal_weights)

        assert result.skills_score == 0.0
        assert result.skill_matches == []
        assert result.responsibilities_score == pytest.approx(1.0)

    def test_title_needs_both_sides(self, equal_weights):
        jd = make_vector_set("jd-1", title=E1)
        cv = make_vector_set("cv-a", skills=[("python", E1)])

        assert score_candidate(jd, cv, equal_weights).job_title_score == 0.0

    def test_overall_within_unit_interval(self):
        weights = NormalizedWeightVector(skills=0.7, responsibilities=0.1, job_title=0.1, experience=0.1)
        jd = make_vector_set("jd-1", skills=[("a", E1), ("b", E2)], title=E1, years=1)
        cv = make_vector_set("cv-a", skills=[("a", E1), ("b", E2)], title=E1, years=1)

        result = score_candidate(jd, cv, weights)

        assert 0.0 <= result.overall_score <= 1.0
        assert result.overall_score == pytest.approx(0.9)

    def test_dimension_mismatch_against_jd(self, equal_weights):
        jd = make_vector_set("jd-1", skills=[("python", [1.0, 0.0, 0.0, 0.0, 0.0])])
        cv = make_vector_set("cv-a", skills=[("python", [1.0, 0.0, 0.0, 0.0, 0.0, 0.0])])

        with pytest.raises(DimensionMismatch) as exc_info:
            score_candidate(jd, cv, equal_weights)

        assert exc_info.value.details["document_id"] == "cv-a"

    def test_inconsistent_cv_vectors_rejected(self, equal_weights):
        jd = make_vector_set("jd-1", skills=[("python", E1)])
        cv = make_vector_set("cv-a", skills=[("python", E1)], title=[1.0, 0.0])

        with pytest.raises(DimensionMismatch):
            score_candidate(jd, cv, equal_weights)

    def test_breakdown_respects_top_alternatives(self, equal_weights):
        jd = make_vector_set("jd-1", skills=[("python", E1)])
        cv = make_vector_set("cv-a", skills=[("python", E1), ("go", E2), ("rust", E3), ("c", E4)])

        result = score_candidate(jd, cv, equal_weights, top_alternatives=1)

        assert len(result.skill_matches[0].alternatives) == 1
