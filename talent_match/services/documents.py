"""
Document operations shared by the CV and JD routers
"""
import uuid
from typing import Any, Dict, List

from starlette.concurrency import run_in_threadpool

from talent_match.models.documents import (
    DocumentDetails,
    DocumentInput,
    DocumentRecord,
    DocumentSummary,
    EmbeddingsInfo,
    IngestResponse,
    ProcessingStats,
    StructuredDocument,
)
from talent_match.services.db import (
    DocumentStore,
    VECTOR_EXPERIENCE,
    VECTOR_RESPONSIBILITY,
    VECTOR_SKILL,
    VECTOR_TITLE,
)
from talent_match.services.embedding import EmbeddingService
from talent_match.utils.exceptions import DocumentNotFound
from talent_match.utils.logging_config import get_logger

logger = get_logger(__name__)


def _processing_stats(vector_set) -> ProcessingStats:
    return ProcessingStats(
        skills_count=len(vector_set.skill_vectors),
        responsibilities_count=len(vector_set.responsibility_vectors),
        embeddings_generated=vector_set.vector_count,
        embedding_dimension=vector_set.dimension or 0,
    )


async def ingest_document(
    doc_type: str, payload: DocumentInput, store: DocumentStore, embedder: EmbeddingService
) -> IngestResponse:
    document_id = payload.document_id or str(uuid.uuid4())
    filename = payload.filename or "text_input.txt"
    structured = payload.structured_info

    logger.info(f"---------- {doc_type.upper()} INGEST START: {document_id} ----------")
    vector_set = await run_in_threadpool(embedder.generate_document_embeddings, document_id, structured)

    record = DocumentRecord(
        document_id=document_id,
        doc_type=doc_type,
        filename=filename,
        structured_info=structured,
    )
    await store.save_document(record, vector_set)
    logger.info(f"{doc_type.upper()} processed and stored: {document_id}")

    return IngestResponse(
        message=f"{doc_type.upper()} '{filename}' processed successfully",
        document_id=document_id,
        filename=filename,
        processing_stats=_processing_stats(vector_set),
    )


async def reprocess_document(
    doc_type: str, document_id: str, store: DocumentStore, embedder: EmbeddingService
) -> IngestResponse:
    """Regenerate a stored document's embeddings from its structured fields and replace the old vectors"""
    row = await store.get_structured(document_id, doc_type)
    if row is None:
        raise DocumentNotFound(document_id, doc_type)

    record = DocumentRecord(**row)
    logger.info(f"Reprocessing {doc_type.upper()} {document_id} with model {embedder.settings.model_name}")
    vector_set = await run_in_threadpool(
        embedder.generate_document_embeddings, document_id, record.structured_info
    )
    # upload_date and filename are kept from the original record
    await store.save_document(record, vector_set)

    return IngestResponse(
        message=f"{doc_type.upper()} '{record.filename}' reprocessed successfully",
        document_id=document_id,
        filename=record.filename,
        processing_stats=_processing_stats(vector_set),
    )


def _summary_fields(row: Dict[str, Any]) -> Dict[str, Any]:
    info = StructuredDocument(**(row.get("structured_info") or {}))
    return {
        "id": row["document_id"],
        "filename": row.get("filename", "Unknown"),
        "upload_date": row["upload_date"],
        "job_title": info.job_title,
        "full_name": info.full_name or info.contact_info.get("name"),
        "years_of_experience": info.experience_years,
        "skills_count": len(info.skills),
        "responsibilities_count": len(info.responsibilities),
    }


async def list_documents(doc_type: str, store: DocumentStore) -> List[DocumentSummary]:
    rows = await store.list_structured(doc_type)
    return [DocumentSummary(**_summary_fields(row)) for row in rows]


def embeddings_info(document_id: str, points: List[Dict[str, Any]]) -> EmbeddingsInfo:
    info = EmbeddingsInfo(document_id=document_id, embeddings_found=bool(points))
    for p in points:
        vtype = p.get("vector_type")
        if vtype == VECTOR_SKILL:
            info.skills_count += 1
        elif vtype == VECTOR_RESPONSIBILITY:
            info.responsibilities_count += 1
        elif vtype == VECTOR_TITLE:
            info.title_embedding = True
        elif vtype == VECTOR_EXPERIENCE:
            info.experience_embedding = True
        if not info.embedding_dimension and isinstance(p.get("vector"), list):
            info.embedding_dimension = len(p["vector"])
    info.total_embeddings = (
        info.skills_count + info.responsibilities_count
        + int(info.title_embedding) + int(info.experience_embedding)
    )
    return info


async def get_embeddings_info(doc_type: str, document_id: str, store: DocumentStore) -> EmbeddingsInfo:
    if await store.get_structured(document_id, doc_type) is None:
        raise DocumentNotFound(document_id, doc_type)
    points = await store.get_points(document_id, doc_type)
    return embeddings_info(document_id, points)


async def get_document_details(doc_type: str, document_id: str, store: DocumentStore) -> DocumentDetails:
    row = await store.get_structured(document_id, doc_type)
    if row is None:
        raise DocumentNotFound(document_id, doc_type)
    points = await store.get_points(document_id, doc_type)
    info = StructuredDocument(**(row.get("structured_info") or {}))
    return DocumentDetails(
        **_summary_fields(row),
        skills=info.skills,
        responsibilities=info.responsibilities,
        contact_info=info.contact_info,
        embeddings_info=embeddings_info(document_id, points),
    )


async def delete_document(doc_type: str, document_id: str, store: DocumentStore) -> Dict[str, Any]:
    if not await store.delete_document(document_id, doc_type):
        raise DocumentNotFound(document_id, doc_type)
    logger.info(f"Deleted {doc_type.upper()} {document_id}")
    return {
        "status": "success",
        "message": f"{doc_type.upper()} '{document_id}' deleted successfully",
        "deleted_id": document_id,
    }
