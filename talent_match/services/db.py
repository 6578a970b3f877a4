import motor.motor_asyncio
from pymongo import ASCENDING
from typing import Any, Dict, List, Optional, Sequence

from talent_match.models.documents import DocumentRecord
from talent_match.models.settings import get_settings
from talent_match.models.vectors import LabeledVector, VectorSet
from talent_match.utils.exceptions import ExceptionContext
from talent_match.utils.logging_config import get_logger
from talent_match.utils.utils import parse_experience_years

logger = get_logger(__name__)

DOC_TYPES = ("cv", "jd")

VECTOR_SKILL = "skill"
VECTOR_RESPONSIBILITY = "responsibility"
VECTOR_TITLE = "job_title"
VECTOR_EXPERIENCE = "experience"


def vector_set_to_points(doc_id: str, doc_type: str, vector_set: VectorSet) -> List[Dict[str, Any]]:
    """One embeddings record per vector; list positions kept in `index`"""
    points = []
    for i, item in enumerate(vector_set.skill_vectors):
        points.append({"document_id": doc_id, "doc_type": doc_type, "vector_type": VECTOR_SKILL,
                       "index": i, "label": item.label, "vector": list(item.vector)})
    for i, item in enumerate(vector_set.responsibility_vectors):
        points.append({"document_id": doc_id, "doc_type": doc_type, "vector_type": VECTOR_RESPONSIBILITY,
                       "index": i, "label": item.label, "vector": list(item.vector)})
    if vector_set.title_vector is not None:
        points.append({"document_id": doc_id, "doc_type": doc_type, "vector_type": VECTOR_TITLE,
                       "index": 0, "label": None, "vector": list(vector_set.title_vector)})
    if vector_set.experience_vector is not None:
        points.append({"document_id": doc_id, "doc_type": doc_type, "vector_type": VECTOR_EXPERIENCE,
                       "index": 0, "label": None, "vector": list(vector_set.experience_vector)})
    return points


def points_to_vector_set(doc_id: str, structured: Optional[Dict[str, Any]], points: Sequence[Dict[str, Any]]) -> VectorSet:
    ordered = sorted(points, key=lambda p: (p.get("vector_type", ""), p.get("index", 0)))
    skills = [LabeledVector(label=p.get("label") or "", vector=p["vector"])
              for p in ordered if p.get("vector_type") == VECTOR_SKILL]
    responsibilities = [LabeledVector(label=p.get("label") or "", vector=p["vector"])
                        for p in ordered if p.get("vector_type") == VECTOR_RESPONSIBILITY]
    title = next((p["vector"] for p in ordered if p.get("vector_type") == VECTOR_TITLE), None)
    experience = next((p["vector"] for p in ordered if p.get("vector_type") == VECTOR_EXPERIENCE), None)

    info = (structured or {}).get("structured_info", {}) or {}
    return VectorSet(
        document_id=doc_id,
        skill_vectors=skills,
        responsibility_vectors=responsibilities,
        title_vector=title,
        experience_years=parse_experience_years(info.get("experience_years")),
        experience_vector=experience,
    )


class DocumentStore:
    """Structured fields and embeddings for CVs and JDs, one collection pair per type"""

    def __init__(self, database):
        self.db = database

    def structured_coll(self, doc_type: str):
        return self.db[f"{doc_type}_structured"]

    def embeddings_coll(self, doc_type: str):
        return self.db[f"{doc_type}_embeddings"]

    async def init_indexes(self):
        """Index initialization for collections."""
        logger.info("Starting database index initialization")
        for doc_type in DOC_TYPES:
            try:
                await self.structured_coll(doc_type).create_index([("document_id", ASCENDING)], unique=True)
                await self.embeddings_coll(doc_type).create_index(
                    [("document_id", ASCENDING), ("vector_type", ASCENDING), ("index", ASCENDING)], unique=True
                )
                logger.debug(f"Created indexes for {doc_type} collections")
            except Exception as e:
                if "already exists" in str(e).lower():
                    logger.debug(f"Indexes for {doc_type} collections already exist")
                else:
                    logger.warning(f"Could not create indexes for {doc_type} collections: {e}")
        logger.info("Database index initialization completed")

    async def save_document(self, record: DocumentRecord, vector_set: VectorSet) -> None:
        doc_type = record.doc_type
        with ExceptionContext("save_document", logger, collection=f"{doc_type}_structured",
                              document_id=record.document_id):
            await self.structured_coll(doc_type).replace_one(
                {"document_id": record.document_id}, record.model_dump(), upsert=True
            )
            await self.embeddings_coll(doc_type).delete_many({"document_id": record.document_id})
            points = vector_set_to_points(record.document_id, doc_type, vector_set)
            if points:
                await self.embeddings_coll(doc_type).insert_many(points)

    async def get_structured(self, doc_id: str, doc_type: str) -> Optional[Dict[str, Any]]:
        with ExceptionContext("get_structured", logger, collection=f"{doc_type}_structured", document_id=doc_id):
            return await self.structured_coll(doc_type).find_one({"document_id": doc_id}, {"_id": 0})

    async def list_structured(self, doc_type: str) -> List[Dict[str, Any]]:
        with ExceptionContext("list_structured", logger, collection=f"{doc_type}_structured"):
            cursor = self.structured_coll(doc_type).find({}, {"_id": 0}).sort("upload_date", -1)
            return await cursor.to_list(length=None)

    async def get_points(self, doc_id: str, doc_type: str) -> List[Dict[str, Any]]:
        with ExceptionContext("get_points", logger, collection=f"{doc_type}_embeddings", document_id=doc_id):
            cursor = self.embeddings_coll(doc_type).find({"document_id": doc_id}, {"_id": 0})
            return await cursor.to_list(length=None)

    async def delete_document(self, doc_id: str, doc_type: str) -> bool:
        with ExceptionContext("delete_document", logger, collection=f"{doc_type}_structured", document_id=doc_id):
            await self.embeddings_coll(doc_type).delete_many({"document_id": doc_id})
            result = await self.structured_coll(doc_type).delete_one({"document_id": doc_id})
            return result.deleted_count > 0

    async def get_vector_set(self, doc_id: str, doc_type: str) -> Optional[VectorSet]:
        structured = await self.get_structured(doc_id, doc_type)
        if structured is None:
            return None
        points = await self.get_points(doc_id, doc_type)
        return points_to_vector_set(doc_id, structured, points)

    async def get_vector_sets(self, doc_ids: Sequence[str], doc_type: str) -> Dict[str, VectorSet]:
        """Vector sets for the ids that exist; missing ids are left out"""
        found = {}
        for doc_id in doc_ids:
            vector_set = await self.get_vector_set(doc_id, doc_type)
            if vector_set is not None:
                found[doc_id] = vector_set
        return found


_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """FastAPI dependency returning the process-wide store"""
    global _store
    if _store is None:
        settings = get_settings().database
        logger.info(f"Initializing MongoDB connection to database: {settings.db_name}")
        client = motor.motor_asyncio.AsyncIOMotorClient(settings.mongo_url)
        _store = DocumentStore(client[settings.db_name])
        logger.info("MongoDB client initialized successfully")
    return _store
