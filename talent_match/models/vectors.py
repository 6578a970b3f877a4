import math
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from talent_match.utils.exceptions import DimensionMismatch, InvalidVector


class LabeledVector(BaseModel):
    """One embedded item: the source text and its vector"""
    label: str
    vector: List[float]

    model_config = ConfigDict(frozen=True)


class VectorSet(BaseModel):
    """Embedding representation of one CV or JD.

    Skill and responsibility lists keep the order of the source document;
    items are referenced by their position in these lists.
    """
    document_id: str
    skill_vectors: List[LabeledVector] = Field(default_factory=list)
    responsibility_vectors: List[LabeledVector] = Field(default_factory=list)
    title_vector: Optional[List[float]] = None
    experience_years: Optional[float] = Field(default=None, ge=0.0)
    experience_vector: Optional[List[float]] = None

    model_config = ConfigDict(frozen=True)

    def _vectors(self) -> Iterator[List[float]]:
        for item in self.skill_vectors:
            yield item.vector
        for item in self.responsibility_vectors:
            yield item.vector
        if self.title_vector is not None:
            yield self.title_vector
        if self.experience_vector is not None:
            yield self.experience_vector

    @property
    def dimension(self) -> Optional[int]:
        """Length of the first vector in the set, None when the set is empty"""
        return next((len(v) for v in self._vectors()), None)

    @property
    def has_experience_vector(self) -> bool:
        return self.experience_vector is not None

    @property
    def vector_count(self) -> int:
        return sum(1 for _ in self._vectors())

    def check_dimension(self) -> Optional[int]:
        """Return the shared dimensionality, raising DimensionMismatch on inconsistency"""
        expected = None
        for vector in self._vectors():
            if expected is None:
                expected = len(vector)
            elif len(vector) != expected:
                raise DimensionMismatch(
                    f"Vectors of document {self.document_id} have inconsistent dimensions "
                    f"({expected} and {len(vector)})",
                    expected=expected,
                    actual=len(vector),
                    document_id=self.document_id,
                )
        return expected

    def check_finite(self) -> None:
        """Raise InvalidVector if any component is NaN or infinite"""
        for vector in self._vectors():
            if not all(math.isfinite(x) for x in vector):
                raise InvalidVector(
                    f"Document {self.document_id} has an embedding with non-finite values",
                    document_id=self.document_id,
                )
