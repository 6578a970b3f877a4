"""
Best-match selection for a single JD requirement.

Each JD item is matched independently: one CV item may be the best match for
several JD items, since a single strong CV skill often covers related
requirements.
"""
from typing import List, Sequence

from talent_match.models.match import ItemMatch, RequirementMatch
from talent_match.models.vectors import LabeledVector
from talent_match.services.similarity import VectorLike, similarity

DEFAULT_TOP_ALTERNATIVES = 3


def rank_cv_items(jd_vector: VectorLike, cv_items: Sequence[LabeledVector]) -> List[ItemMatch]:
    """Score every CV item against one JD vector, best first.

    Ties keep the CV's original item order.
    """
    scored = [
        ItemMatch(cv_index=i, cv_item=item.label, score=similarity(jd_vector, item.vector))
        for i, item in enumerate(cv_items)
    ]
    return sorted(scored, key=lambda m: (-m.score, m.cv_index))


def match_requirement(
    jd_index: int,
    jd_item: str,
    jd_vector: VectorLike,
    cv_items: Sequence[LabeledVector],
    top_alternatives: int = DEFAULT_TOP_ALTERNATIVES,
) -> RequirementMatch:
    if top_alternatives is None:
        top_alternatives = DEFAULT_TOP_ALTERNATIVES
    if top_alternatives < 0:
        raise ValueError("top_alternatives must be >= 0")

    if not cv_items:
        return RequirementMatch(jd_index=jd_index, jd_item=jd_item)

    ranked = rank_cv_items(jd_vector, cv_items)
    best = ranked[0]
    return RequirementMatch(
        jd_index=jd_index,
        jd_item=jd_item,
        best_match=best,
        score=best.score,
        alternatives=ranked[1:1 + top_alternatives],
    )


def match_requirements(
    jd_items: Sequence[LabeledVector],
    cv_items: Sequence[LabeledVector],
    top_alternatives: int = DEFAULT_TOP_ALTERNATIVES,
) -> List[RequirementMatch]:
    return [
        match_requirement(i, item.label, item.vector, cv_items, top_alternatives)
        for i, item in enumerate(jd_items)
    ]
