import pytest

from talent_match.models.match import WeightVector
from talent_match.services.weights import normalize_weights
from talent_match.utils.exceptions import InvalidWeight


def _components(w):
    return [w.skills, w.responsibilities, w.job_title, w.experience]


class TestNormalizeWeights:
    """Test cases for weight validation and normalization"""

    def test_omitted_weights_fall_back_to_equal(self):
        result = normalize_weights(None)
        assert _components(result) == [0.25, 0.25, 0.25, 0.25]

    def test_all_zero_weights_fall_back_to_equal(self):
        result = normalize_weights(WeightVector(skills=0, responsibilities=0, job_title=0, experience=0))
        assert _components(result) == [0.25, 0.25, 0.25, 0.25]

    def test_empty_weight_vector_falls_back_to_equal(self):
        assert _components(normalize_weights(WeightVector())) == [0.25, 0.25, 0.25, 0.25]

    def test_partial_weights_treat_missing_as_zero(self):
        result = normalize_weights(WeightVector(skills=3, job_title=1))

        assert result.skills == pytest.approx(0.75)
        assert result.job_title == pytest.approx(0.25)
        assert result.responsibilities == 0.0
        assert result.experience == 0.0

    def test_weights_are_rescaled_to_sum_one(self):
        result = normalize_weights(WeightVector(skills=40, responsibilities=30, job_title=20, experience=10))

        assert _components(result) == pytest.approx([0.4, 0.3, 0.2, 0.1])
        assert abs(result.total() - 1.0) <= 1e-9

    @pytest.mark.parametrize("raw", [
        (1e-9, 0, 0, 0),
        (0.1, 0.2, 0.3, 0.4),
        (7, 13, 1e6, 0.333),
        (1, 1, 1, 1),
    ])
    def test_sum_is_one_within_tolerance(self, raw):
        s, r, t, e = raw
        result = normalize_weights(WeightVector(skills=s, responsibilities=r, job_title=t, experience=e))
        assert abs(result.total() - 1.0) <= 1e-9

    def test_negative_weight_rejected(self):
        with pytest.raises(InvalidWeight) as exc_info:
            normalize_weights(WeightVector(skills=0.5, experience=-0.1))

        assert exc_info.value.details["field"] == "experience"
        assert exc_info.value.error_code == "INVALID_WEIGHT"

    def test_non_finite_weight_rejected(self):
        with pytest.raises(InvalidWeight):
            normalize_weights(WeightVector(skills=float("inf")))

        with pytest.raises(InvalidWeight):
            normalize_weights(WeightVector(job_title=float("nan")))
