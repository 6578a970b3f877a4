import pytest
import requests
from unittest.mock import MagicMock, patch

from talent_match.models.documents import StructuredDocument
from talent_match.models.settings import EmbeddingSettings
from talent_match.services.embedding import EmbeddingService
from talent_match.utils.exceptions import ExternalServiceError
from talent_match.utils.utils import ollama_embed, parse_experience_years

from conftest import E1, E2, E3, E4, FakeEmbedder


@pytest.fixture
def settings():
    return EmbeddingSettings(retry_attempts=1, retry_backoff=0.0)


class TestParseExperienceYears:
    """Test cases for experience parsing"""

    @pytest.mark.parametrize("value,expected", [
        (5, 5.0),
        (3.5, 3.5),
        ("5+ years", 5.0),
        ("2-4 years", 2.0),
        ("about 7.5 yrs", 7.5),
        ("0", 0.0),
    ])
    def test_parses_numbers(self, value, expected):
        assert parse_experience_years(value) == expected

    @pytest.mark.parametrize("value", [None, "", "not specified", -2, True, float("nan")])
    def test_unparsable_is_none(self, value):
        assert parse_experience_years(value) is None


class TestEmbeddingService:
    """Test cases for VectorSet generation"""

    def test_generates_all_categories(self, settings):
        embedder = FakeEmbedder({"python": E1, "sql": E2, "Build APIs": E3, "Backend Engineer": E1})
        service = EmbeddingService(settings, embed_fn=embedder)
        structured = StructuredDocument(
            job_title="Backend Engineer",
            skills=["python", "sql"],
            responsibilities=["Build APIs"],
            experience_years="5+ years",
        )

        result = service.generate_document_embeddings("cv-1", structured)

        assert [s.label for s in result.skill_vectors] == ["python", "sql"]
        assert result.skill_vectors[1].vector == E2
        assert result.responsibility_vectors[0].vector == E3
        assert result.title_vector == E1
        assert result.experience_years == 5.0
        assert result.has_experience_vector
        assert result.experience_vector == E4
        assert result.dimension == 4
        assert embedder.calls == [["python", "sql", "Build APIs", "Backend Engineer", "5 years of experience"]]

    def test_empty_title_and_unknown_experience_are_absent(self, settings):
        service = EmbeddingService(settings, embed_fn=FakeEmbedder({}))
        structured = StructuredDocument(job_title="   ", skills=["python"], experience_years="unknown")

        result = service.generate_document_embeddings("cv-1", structured)

        assert result.title_vector is None
        assert result.experience_years is None
        assert not result.has_experience_vector
        assert len(result.skill_vectors) == 1

    def test_vector_budget_truncates_items(self):
        settings = EmbeddingSettings(max_vectors=6, max_skill_vectors=2, max_responsibility_vectors=2)
        service = EmbeddingService(settings, embed_fn=FakeEmbedder({}))
        structured = StructuredDocument(
            skills=["a", "", "b", "c", "d"],
            responsibilities=["r1", "r2", "r3"],
        )

        result = service.generate_document_embeddings("cv-1", structured)

        assert [s.label for s in result.skill_vectors] == ["a", "b"]
        assert [r.label for r in result.responsibility_vectors] == ["r1", "r2"]

    def test_no_fields_skips_embedding_call(self, settings):
        embedder = FakeEmbedder({})
        service = EmbeddingService(settings, embed_fn=embedder)

        result = service.generate_document_embeddings("cv-1", StructuredDocument())

        assert result.vector_count == 0
        assert embedder.calls == []

    def test_mixed_dimensions_rejected(self, settings):
        embedder = FakeEmbedder({"python": E1, "sql": [1.0, 0.0]})
        service = EmbeddingService(settings, embed_fn=embedder)

        with pytest.raises(ExternalServiceError):
            service.generate_document_embeddings("cv-1", StructuredDocument(skills=["python", "sql"]))


class TestOllamaEmbed:
    """Test cases for the Ollama HTTP client"""

    @patch("talent_match.utils.utils.requests.post")
    def test_batch_request(self, mock_post, settings):
        mock_post.return_value = MagicMock(status_code=200)
        mock_post.return_value.json.return_value = {"embeddings": [[0.1, 0.2], [0.3, 0.4]]}

        result = ollama_embed(["a", "b"], settings)

        assert result.shape == (2, 2)
        url = mock_post.call_args[0][0]
        assert url == "http://localhost:11434/api/embed"
        assert mock_post.call_args[1]["json"] == {"model": "nomic-embed-text", "input": ["a", "b"]}

    @patch("talent_match.utils.utils.requests.post")
    def test_single_text_returns_one_vector(self, mock_post, settings):
        mock_post.return_value = MagicMock(status_code=200)
        mock_post.return_value.json.return_value = {"embeddings": [[0.1, 0.2, 0.3]]}

        result = ollama_embed("a", settings)

        assert result.shape == (3,)

    @patch("talent_match.utils.utils.requests.post")
    def test_connection_error_becomes_external_service_error(self, mock_post, settings):
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ExternalServiceError):
            ollama_embed(["a"], settings)

    @patch("talent_match.utils.utils.requests.post")
    def test_retries_before_failing(self, mock_post):
        settings = EmbeddingSettings(retry_attempts=3, retry_backoff=0.0)
        mock_post.side_effect = requests.Timeout("slow")

        with pytest.raises(ExternalServiceError):
            ollama_embed(["a"], settings)

        assert mock_post.call_count == 3

    @patch("talent_match.utils.utils.requests.post")
    def test_client_error_not_retried(self, mock_post):
        settings = EmbeddingSettings(retry_attempts=3, retry_backoff=0.0)
        mock_post.return_value = MagicMock(status_code=404)
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError(
            "model not found", response=MagicMock(status_code=404)
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            ollama_embed(["a"], settings)

        assert exc_info.value.details["status_code"] == 404
        assert mock_post.call_count == 1

    @patch("talent_match.utils.utils.requests.post")
    def test_server_error_retried(self, mock_post):
        settings = EmbeddingSettings(retry_attempts=3, retry_backoff=0.0)
        mock_post.return_value = MagicMock(status_code=503)
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError(
            "unavailable", response=MagicMock(status_code=503)
        )

        with pytest.raises(ExternalServiceError):
            ollama_embed(["a"], settings)

        assert mock_post.call_count == 3

    @patch("talent_match.utils.utils.requests.post")
    def test_count_mismatch_rejected(self, mock_post, settings):
        mock_post.return_value = MagicMock(status_code=200)
        mock_post.return_value.json.return_value = {"embeddings": [[0.1, 0.2]]}

        with pytest.raises(ExternalServiceError):
            ollama_embed(["a", "b"], settings)
