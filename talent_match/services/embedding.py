"""
Embedding Service - turns structured CV/JD fields into a VectorSet.

Each document gets a fixed vector budget: skills and responsibilities are
truncated to their slot counts, plus at most one title vector and one
experience vector. All texts of a document are embedded in a single batch
so every vector shares one dimensionality.
"""
from typing import Callable, List, Optional

import numpy as np

from talent_match.models.documents import StructuredDocument
from talent_match.models.settings import EmbeddingSettings, get_settings
from talent_match.models.vectors import LabeledVector, VectorSet
from talent_match.utils.exceptions import ExternalServiceError
from talent_match.utils.logging_config import get_logger, log_function_call
from talent_match.utils.utils import ollama_embed, parse_experience_years

logger = get_logger(__name__)

EmbedFn = Callable[[List[str], EmbeddingSettings], np.ndarray]


def _clean_items(items: List[str], limit: int) -> List[str]:
    cleaned = [s.strip() for s in items if isinstance(s, str) and s.strip()]
    return cleaned[:limit]


def experience_statement(structured: StructuredDocument, years: Optional[float]) -> Optional[str]:
    if years is None:
        return None
    if structured.experience_summary and structured.experience_summary.strip():
        return structured.experience_summary.strip()
    return f"{years:g} years of experience"


class EmbeddingService:
    def __init__(self, settings: Optional[EmbeddingSettings] = None, embed_fn: EmbedFn = ollama_embed):
        self.settings = settings or get_settings().embedding
        self.embed_fn = embed_fn

    @log_function_call
    def generate_document_embeddings(self, document_id: str, structured: StructuredDocument) -> VectorSet:
        skills = _clean_items(structured.skills, self.settings.max_skill_vectors)
        responsibilities = _clean_items(structured.responsibilities, self.settings.max_responsibility_vectors)
        if len(structured.skills) > len(skills) or len(structured.responsibilities) > len(responsibilities):
            logger.debug(f"Document {document_id}: items beyond the vector budget or blank were dropped")

        title = (structured.job_title or "").strip() or None
        years = parse_experience_years(structured.experience_years)
        experience = experience_statement(structured, years)

        texts = skills + responsibilities
        if title:
            texts.append(title)
        if experience:
            texts.append(experience)

        if not texts:
            logger.info(f"Document {document_id} has no embeddable fields")
            return VectorSet(document_id=document_id, experience_years=years)

        vectors = self.embed_fn(texts, self.settings)
        if len(vectors) != len(texts):
            raise ExternalServiceError(
                f"Expected {len(texts)} embeddings, got {len(vectors)}",
                service_name="embedding",
            )
        rows = [np.asarray(v, dtype=float).tolist() for v in vectors]
        if len({len(r) for r in rows}) > 1:
            raise ExternalServiceError("Embedding vectors differ in dimension", service_name="embedding")

        pos = 0
        skill_vectors = [LabeledVector(label=s, vector=rows[pos + i]) for i, s in enumerate(skills)]
        pos += len(skills)
        responsibility_vectors = [
            LabeledVector(label=r, vector=rows[pos + i]) for i, r in enumerate(responsibilities)
        ]
        pos += len(responsibilities)
        title_vector = None
        if title:
            title_vector = rows[pos]
            pos += 1
        experience_vector = rows[pos] if experience else None

        vector_set = VectorSet(
            document_id=document_id,
            skill_vectors=skill_vectors,
            responsibility_vectors=responsibility_vectors,
            title_vector=title_vector,
            experience_years=years,
            experience_vector=experience_vector,
        )
        logger.info(
            f"Generated {vector_set.vector_count} embeddings for {document_id} "
            f"(dimension={vector_set.dimension})"
        )
        return vector_set


_embedding_service: Optional[EmbeddingService] = None


def get_embedding_service() -> EmbeddingService:
    global _embedding_service
    if _embedding_service is None:
        _embedding_service = EmbeddingService()
    return _embedding_service
