from typing import Sequence, Union

import numpy as np

from talent_match.utils.exceptions import DimensionMismatch, InvalidVector

VectorLike = Union[Sequence[float], np.ndarray]


def as_vector(values: VectorLike) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity rescaled from [-1, 1] to [0, 1].

    Unrelated content lands at 0.5 instead of contributing a negative value
    to a weighted sum. A zero-magnitude vector on either side means there is
    no evidence of a match and scores 0.0. NaN or infinite components raise
    InvalidVector rather than producing a score.
    """
    va = as_vector(a)
    vb = as_vector(b)
    if va.shape != vb.shape:
        raise DimensionMismatch(
            f"Cannot compare vectors of length {va.size} and {vb.size}",
            expected=va.size,
            actual=vb.size,
        )
    if not (np.isfinite(va).all() and np.isfinite(vb).all()):
        raise InvalidVector("Cannot compare vectors with NaN or infinite components")

    na = float(np.linalg.norm(va))
    nb = float(np.linalg.norm(vb))
    if na == 0.0 or nb == 0.0:
        return 0.0

    cosine = float(np.dot(va / na, vb / nb))
    cosine = max(-1.0, min(1.0, cosine))
    return max(0.0, min(1.0, (cosine + 1.0) / 2.0))
