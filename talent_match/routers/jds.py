from fastapi import APIRouter, Depends
from typing import List

from talent_match.models.documents import (
    DocumentDetails,
    DocumentInput,
    DocumentSummary,
    EmbeddingsInfo,
    IngestResponse,
)
from talent_match.services import documents
from talent_match.services.db import DocumentStore, get_document_store
from talent_match.services.embedding import EmbeddingService, get_embedding_service

router = APIRouter()

DOC_TYPE = "jd"


@router.post("/", response_model=IngestResponse)
async def upload_jd(
    payload: DocumentInput,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingService = Depends(get_embedding_service),
):
    """Embed and store a JD's structured fields"""
    return await documents.ingest_document(DOC_TYPE, payload, store, embedder)


@router.get("/", response_model=List[DocumentSummary])
async def list_jds(store: DocumentStore = Depends(get_document_store)):
    """List all processed JDs, newest first"""
    return await documents.list_documents(DOC_TYPE, store)


@router.get("/{jd_id}", response_model=DocumentDetails)
async def get_jd_details(jd_id: str, store: DocumentStore = Depends(get_document_store)):
    return await documents.get_document_details(DOC_TYPE, jd_id, store)


@router.get("/{jd_id}/embeddings", response_model=EmbeddingsInfo)
async def get_jd_embeddings_info(jd_id: str, store: DocumentStore = Depends(get_document_store)):
    return await documents.get_embeddings_info(DOC_TYPE, jd_id, store)


@router.delete("/{jd_id}")
async def delete_jd(jd_id: str, store: DocumentStore = Depends(get_document_store)):
    """Delete a JD together with its embeddings"""
    return await documents.delete_document(DOC_TYPE, jd_id, store)


@router.post("/{jd_id}/reprocess", response_model=IngestResponse)
async def reprocess_jd(
    jd_id: str,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingService = Depends(get_embedding_service),
):
    """Re-embed a stored JD, e.g. after the embedding model changes"""
    return await documents.reprocess_document(DOC_TYPE, jd_id, store, embedder)
