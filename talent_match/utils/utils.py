import math
import re
from typing import List, Optional, Union

import numpy as np
import requests

from talent_match.models.settings import EmbeddingSettings
from talent_match.utils.exceptions import ExternalServiceError, retry_with_logging
from talent_match.utils.logging_config import get_logger

logger = get_logger(__name__)

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def _post_embed(url: str, payload: dict, timeout: int) -> dict:
    try:
        resp = requests.post(url, json=payload, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise ExternalServiceError(f"Embedding request failed: {e}", service_name="ollama",
                                   status_code=status, cause=e) from e
    except (requests.RequestException, ValueError) as e:
        raise ExternalServiceError(f"Embedding request failed: {e}", service_name="ollama", cause=e) from e


def is_transient(exc: ExternalServiceError) -> bool:
    """Connection failures, timeouts, 429 and 5xx are worth retrying; other 4xx are not"""
    status = exc.details.get("status_code")
    return status is None or status == 429 or status >= 500


def ollama_embed(texts: Union[str, List[str]], settings: EmbeddingSettings) -> np.ndarray:
    """Embed one text (1-D result) or a batch of texts (one row per text)"""
    single = isinstance(texts, str)
    inputs = [texts] if single else list(texts)
    if not inputs:
        return np.zeros((0, 0), dtype=np.float32)

    url = f"{settings.base_url.rstrip('/')}/api/embed"
    call = retry_with_logging(
        max_attempts=settings.retry_attempts,
        backoff_factor=settings.retry_backoff,
        exceptions=(ExternalServiceError,),
        logger=logger,
        retry_if=is_transient,
    )(_post_embed)
    data = call(url, {"model": settings.model_name, "input": inputs}, settings.timeout)

    embeddings = data.get("embeddings") if isinstance(data, dict) else None
    if not embeddings or len(embeddings) != len(inputs):
        raise ExternalServiceError(
            f"Embedding response returned {len(embeddings or [])} vectors for {len(inputs)} inputs",
            service_name="ollama",
        )

    try:
        arr = np.array(embeddings, dtype=np.float32)
    except ValueError as e:
        raise ExternalServiceError("Embedding response vectors differ in dimension",
                                   service_name="ollama", cause=e) from e
    if arr.ndim != 2:
        raise ExternalServiceError("Embedding response vectors differ in dimension", service_name="ollama")

    return arr[0] if single else arr


def parse_experience_years(value) -> Optional[float]:
    """
    Years of experience from a structured field.

    Numbers pass through; strings such as "5+ years" or "2-4 years" use the
    first number found. Negative, empty or unparsable values give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        years = float(value)
    else:
        match = _NUMBER.search(str(value))
        if not match:
            return None
        years = float(match.group())
    if years < 0 or not math.isfinite(years):
        return None
    return years
