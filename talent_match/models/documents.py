from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, Union
from datetime import datetime, timezone

DocType = Literal["cv", "jd"]


# -------- Structured fields (output of the external extraction step) --------
class StructuredDocument(BaseModel):
    job_title: Optional[str] = None
    full_name: Optional[str] = None
    skills: List[str] = []
    responsibilities: List[str] = []
    experience_years: Optional[Union[float, str]] = None
    experience_summary: Optional[str] = None
    contact_info: Dict[str, Any] = {}


class DocumentInput(BaseModel):
    """CV or JD payload as provided by the extraction service"""
    document_id: Optional[str] = None  # generated when omitted
    filename: Optional[str] = None
    structured_info: StructuredDocument


# -------- Stored records --------
class DocumentRecord(BaseModel):
    document_id: str
    doc_type: DocType
    filename: str = "Unknown"
    structured_info: StructuredDocument
    upload_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EmbeddingsInfo(BaseModel):
    document_id: str
    embeddings_found: bool
    skills_count: int = 0
    responsibilities_count: int = 0
    title_embedding: bool = False
    experience_embedding: bool = False
    embedding_dimension: int = 0
    total_embeddings: int = 0


class DocumentSummary(BaseModel):
    id: str
    filename: str
    upload_date: datetime
    job_title: Optional[str] = None
    full_name: Optional[str] = None
    years_of_experience: Optional[Union[float, str]] = None
    skills_count: int = 0
    responsibilities_count: int = 0


class DocumentDetails(DocumentSummary):
    skills: List[str] = []
    responsibilities: List[str] = []
    contact_info: Dict[str, Any] = {}
    embeddings_info: EmbeddingsInfo


class ProcessingStats(BaseModel):
    skills_count: int
    responsibilities_count: int
    embeddings_generated: int
    embedding_dimension: int


class IngestResponse(BaseModel):
    status: str = "success"
    message: str
    document_id: str
    filename: str
    processing_stats: ProcessingStats
