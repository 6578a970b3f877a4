# routers/match.py
from fastapi import APIRouter, Depends, Response
from starlette.concurrency import run_in_threadpool

from talent_match.middleware.error_handlers import CANDIDATE_FAILURES_HEADER
from talent_match.models.match import MatchRequest, MatchResult
from talent_match.models.settings import AppSettings, get_settings
from talent_match.services.db import DocumentStore, get_document_store
from talent_match.services.orchestrator import MatchOrchestrator, ensure_unique, failure_from_error
from talent_match.utils.exceptions import DocumentNotFound
from talent_match.utils.logging_config import get_logger, log_api_call

router = APIRouter()
logger = get_logger(__name__)


@router.post("/", response_model=MatchResult)
@log_api_call("match")
async def match_candidates(
    request: MatchRequest,
    response: Response,
    store: DocumentStore = Depends(get_document_store),
    settings: AppSettings = Depends(get_settings),
):
    """Rank the requested CVs against one JD with a per-requirement breakdown"""
    # duplicates are rejected before any lookup or scoring
    ensure_unique(request.cv_ids)

    jd = await store.get_vector_set(request.jd_id, "jd")
    if jd is None:
        raise DocumentNotFound(request.jd_id, "jd")

    found = await store.get_vector_sets(request.cv_ids, "cv")
    candidates = [found[cv_id] for cv_id in request.cv_ids if cv_id in found]
    missing = [
        failure_from_error(cv_id, DocumentNotFound(cv_id, "cv"))
        for cv_id in request.cv_ids if cv_id not in found
    ]
    if missing:
        logger.warning(f"{len(missing)} requested CVs not found for JD {request.jd_id}")

    top_alternatives = request.top_alternatives
    if top_alternatives is None:
        top_alternatives = settings.matching.default_top_alternatives

    orchestrator = MatchOrchestrator(
        max_workers=settings.matching.max_workers,
        slow_threshold_ms=settings.matching.slow_match_threshold_ms,
    )
    result = await run_in_threadpool(
        orchestrator.run, jd, candidates, request.weights, top_alternatives, missing
    )
    response.headers[CANDIDATE_FAILURES_HEADER] = str(len(result.failures))
    return result
