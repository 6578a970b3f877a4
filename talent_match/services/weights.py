import math
from typing import Optional

from talent_match.models.match import NormalizedWeightVector, WeightVector
from talent_match.utils.exceptions import InvalidWeight

DIMENSIONS = ("skills", "responsibilities", "job_title", "experience")

EQUAL_WEIGHTS = NormalizedWeightVector(
    skills=0.25,
    responsibilities=0.25,
    job_title=0.25,
    experience=0.25,
)


def normalize_weights(weights: Optional[WeightVector] = None) -> NormalizedWeightVector:
    """
    Validate caller weights and rescale them to sum to 1.0.

    Omitted dimensions count as 0. When nothing usable is supplied
    (all omitted or all zero) every dimension gets 0.25.

    Raises:
        InvalidWeight: a weight is negative, NaN or infinite
    """
    raw = {}
    for name in DIMENSIONS:
        value = getattr(weights, name, None) if weights is not None else None
        value = 0.0 if value is None else float(value)
        if not math.isfinite(value):
            raise InvalidWeight(f"Weight '{name}' must be a finite number", dimension=name, value=value)
        if value < 0:
            raise InvalidWeight(f"Weight '{name}' must be non-negative", dimension=name, value=value)
        raw[name] = value

    total = sum(raw.values())
    if total <= 0:
        return EQUAL_WEIGHTS

    return NormalizedWeightVector(**{name: value / total for name, value in raw.items()})
