"""
Test fixtures and helpers for matching tests
"""
import os

os.environ.setdefault("ENVIRONMENT", "testing")

from typing import Any, Dict, List, Optional, Sequence

import pytest

from talent_match.models.documents import DocumentRecord
from talent_match.models.match import NormalizedWeightVector
from talent_match.models.vectors import LabeledVector, VectorSet
from talent_match.services.db import DocumentStore, vector_set_to_points

# 4-dimensional unit vectors: identical -> 1.0, orthogonal -> 0.5, opposite -> 0.0
E1 = [1.0, 0.0, 0.0, 0.0]
E2 = [0.0, 1.0, 0.0, 0.0]
E3 = [0.0, 0.0, 1.0, 0.0]
E4 = [0.0, 0.0, 0.0, 1.0]
NEG_E1 = [-1.0, 0.0, 0.0, 0.0]


def labeled(*pairs) -> List[LabeledVector]:
    return [LabeledVector(label=label, vector=vector) for label, vector in pairs]


def make_vector_set(
    document_id: str,
    skills: Sequence = (),
    responsibilities: Sequence = (),
    title: Optional[List[float]] = None,
    years: Optional[float] = None,
    experience: Optional[List[float]] = None,
) -> VectorSet:
    return VectorSet(
        document_id=document_id,
        skill_vectors=labeled(*skills),
        responsibility_vectors=labeled(*responsibilities),
        title_vector=title,
        experience_years=years,
        experience_vector=experience,
    )


class InMemoryDocumentStore(DocumentStore):
    """DocumentStore backed by dicts instead of MongoDB"""

    def __init__(self):
        super().__init__(database=None)
        self.structured: Dict[tuple, Dict[str, Any]] = {}
        self.points: Dict[tuple, List[Dict[str, Any]]] = {}

    async def init_indexes(self):
        return None

    async def save_document(self, record: DocumentRecord, vector_set: VectorSet) -> None:
        key = (record.doc_type, record.document_id)
        self.structured[key] = record.model_dump()
        self.points[key] = vector_set_to_points(record.document_id, record.doc_type, vector_set)

    async def get_structured(self, doc_id, doc_type):
        return self.structured.get((doc_type, doc_id))

    async def list_structured(self, doc_type):
        rows = [row for (t, _), row in self.structured.items() if t == doc_type]
        return sorted(rows, key=lambda r: r["upload_date"], reverse=True)

    async def get_points(self, doc_id, doc_type):
        return list(self.points.get((doc_type, doc_id), []))

    async def delete_document(self, doc_id, doc_type):
        self.points.pop((doc_type, doc_id), None)
        return self.structured.pop((doc_type, doc_id), None) is not None

    def put(self, doc_type: str, vector_set: VectorSet, **structured_info):
        """Store a prebuilt vector set directly"""
        if vector_set.experience_years is not None:
            structured_info.setdefault("experience_years", vector_set.experience_years)
        record = DocumentRecord(
            document_id=vector_set.document_id,
            doc_type=doc_type,
            structured_info=structured_info,
        )
        key = (doc_type, vector_set.document_id)
        self.structured[key] = record.model_dump()
        self.points[key] = vector_set_to_points(vector_set.document_id, doc_type, vector_set)


class FakeEmbedder:
    """Deterministic embedding function keyed by text"""

    def __init__(self, table: Dict[str, List[float]], default: Optional[List[float]] = None):
        self.table = table
        self.default = default or E4
        self.calls: List[List[str]] = []

    def __call__(self, texts, settings):
        self.calls.append(list(texts))
        return [self.table.get(t, self.default) for t in texts]


@pytest.fixture
def equal_weights():
    return NormalizedWeightVector(skills=0.25, responsibilities=0.25, job_title=0.25, experience=0.25)


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()
