"""
Runtime settings for the matching service, populated from environment variables
"""
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from talent_match.utils.exceptions import ConfigurationError


class EmbeddingSettings(BaseModel):
    """Embedding model configuration and the per-document vector budget"""
    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    model_name: str = Field(default="nomic-embed-text", description="Embedding model name")
    timeout: int = Field(default=30, ge=1, le=300, description="Request timeout in seconds")
    retry_attempts: int = Field(default=3, ge=1, le=10, description="Attempts per embedding request")
    retry_backoff: float = Field(default=1.0, ge=0.0, le=60.0, description="Backoff factor between attempts")

    max_vectors: int = Field(default=32, ge=2, description="Total vector slots per document")
    max_skill_vectors: int = Field(default=20, ge=0, description="Slots reserved for skills")
    max_responsibility_vectors: int = Field(default=10, ge=0, description="Slots reserved for responsibilities")

    @model_validator(mode="after")
    def validate_budget(self):
        # one slot each for the title and experience vectors
        total = self.max_skill_vectors + self.max_responsibility_vectors + 2
        if total > self.max_vectors:
            raise ValueError('Skill and responsibility slots exceed the per-document vector budget')
        return self


class MatchingSettings(BaseModel):
    """Matching engine defaults"""
    default_top_alternatives: int = Field(default=3, ge=0, description="Alternatives reported per requirement")
    max_workers: int = Field(default_factory=lambda: min(32, (os.cpu_count() or 1) + 4), ge=1,
                             description="Worker threads used to score candidates")
    slow_match_threshold_ms: float = Field(default=1000.0, ge=0.0, description="Warn when a batch takes longer")


class DatabaseSettings(BaseModel):
    """MongoDB connection settings"""
    mongo_url: str = Field(default="mongodb://localhost:27017", description="MongoDB connection string")
    db_name: str = Field(default="talent_match", description="Database name")


class AppSettings(BaseModel):
    """Complete service configuration"""
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


# env var -> (section, field)
ENV_MAPPING = {
    "OLLAMA_BASE_URL": ("embedding", "base_url"),
    "EMBED_MODEL": ("embedding", "model_name"),
    "EMBED_TIMEOUT": ("embedding", "timeout"),
    "EMBED_RETRY_ATTEMPTS": ("embedding", "retry_attempts"),
    "EMBED_MAX_VECTORS": ("embedding", "max_vectors"),
    "EMBED_MAX_SKILL_VECTORS": ("embedding", "max_skill_vectors"),
    "EMBED_MAX_RESPONSIBILITY_VECTORS": ("embedding", "max_responsibility_vectors"),
    "MATCH_TOP_ALTERNATIVES": ("matching", "default_top_alternatives"),
    "MATCH_MAX_WORKERS": ("matching", "max_workers"),
    "MATCH_SLOW_THRESHOLD_MS": ("matching", "slow_match_threshold_ms"),
    "MONGO_DETAILS": ("database", "mongo_url"),
    "DB_NAME": ("database", "db_name"),
}


def load_settings(environ: Optional[dict] = None) -> AppSettings:
    """Build settings from environment variables, falling back to defaults"""
    if environ is None:
        load_dotenv()
        environ = os.environ

    sections = {"embedding": {}, "matching": {}, "database": {}}
    for env_key, (section, field) in ENV_MAPPING.items():
        value = environ.get(env_key)
        if value not in (None, ""):
            sections[section][field] = value

    try:
        return AppSettings(
            embedding=EmbeddingSettings(**sections["embedding"]),
            matching=MatchingSettings(**sections["matching"]),
            database=DatabaseSettings(**sections["database"]),
        )
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e) from e


@lru_cache()
def get_settings() -> AppSettings:
    return load_settings()
