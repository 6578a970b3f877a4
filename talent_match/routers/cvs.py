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

DOC_TYPE = "cv"


@router.post("/", response_model=IngestResponse)
async def upload_cv(
    payload: DocumentInput,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingService = Depends(get_embedding_service),
):
    """Embed and store a CV's structured fields"""
    return await documents.ingest_document(DOC_TYPE, payload, store, embedder)


@router.get("/", response_model=List[DocumentSummary])
async def list_cvs(store: DocumentStore = Depends(get_document_store)):
    """List all processed CVs, newest first"""
    return await documents.list_documents(DOC_TYPE, store)


@router.get("/{cv_id}", response_model=DocumentDetails)
async def get_cv_details(cv_id: str, store: DocumentStore = Depends(get_document_store)):
    return await documents.get_document_details(DOC_TYPE, cv_id, store)


@router.get("/{cv_id}/embeddings", response_model=EmbeddingsInfo)
async def get_cv_embeddings_info(cv_id: str, store: DocumentStore = Depends(get_document_store)):
    return await documents.get_embeddings_info(DOC_TYPE, cv_id, store)


@router.delete("/{cv_id}")
async def delete_cv(cv_id: str, store: DocumentStore = Depends(get_document_store)):
    """Delete a CV together with its embeddings"""
    return await documents.delete_document(DOC_TYPE, cv_id, store)


@router.post("/{cv_id}/reprocess", response_model=IngestResponse)
async def reprocess_cv(
    cv_id: str,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingService = Depends(get_embedding_service),
):
    """Re-embed a stored CV, e.g. after the embedding model changes"""
    return await documents.reprocess_document(DOC_TYPE, cv_id, store, embedder)
