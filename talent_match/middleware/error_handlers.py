"""
HTTP middleware: error envelopes and request logging.

Errors that stop a whole request (unknown JD, bad weights, duplicate
candidates, a store outage) become a JSON envelope with an HTTP error
status. Errors confined to one candidate never reach this layer: they are
reported inside the match result and counted in the X-Candidate-Failures
header, which the request log picks up.
"""
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import ValidationError

from talent_match.utils.exceptions import TalentMatchError, map_to_http_exception
from talent_match.utils.logging_config import get_logger

logger = get_logger(__name__)

CANDIDATE_FAILURES_HEADER = "X-Candidate-Failures"


def classify_error(exc: Exception) -> Tuple[int, Dict[str, Any]]:
    """Status code and envelope body for an exception that aborted a request"""
    if isinstance(exc, TalentMatchError):
        http_exc = map_to_http_exception(exc)
        return http_exc.status_code, http_exc.detail

    if isinstance(exc, ValidationError):
        # models built inside a handler, not request parsing (FastAPI answers that with 422)
        return 400, {
            "error": {
                "error_type": "ValidationError",
                "error_code": "VALIDATION_ERROR",
                "message": "Invalid data format or values",
                "details": {"validation_errors": exc.errors(include_url=False)},
            },
            "message": "Data validation failed",
        }

    if isinstance(exc, HTTPException):
        detail = exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
        return exc.status_code, detail

    # internals are not exposed
    return 500, {
        "error": {
            "error_type": "InternalError",
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": {},
        },
        "message": "Internal server error",
    }


def error_response(request_id: str, status_code: int, body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request_id,
            "status_code": status_code,
            **body,
        },
        headers={"X-Request-ID": request_id},
    )


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and turns request-level errors into error envelopes"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as exc:
            status_code, body = classify_error(exc)
            error = body.get("error")
            error_code = error.get("error_code") if isinstance(error, dict) else None
            log_extra = {"request_id": request_id, "status_code": status_code, "error_code": error_code}
            if isinstance(exc, TalentMatchError):
                log_extra["details"] = exc.details

            if status_code >= 500:
                logger.error(f"{request.method} {request.url.path} failed: {exc}", extra=log_extra,
                             exc_info=not isinstance(exc, TalentMatchError))
            else:
                logger.warning(f"{request.method} {request.url.path} rejected ({error_code}): {exc}",
                               extra=log_extra)
            return error_response(request_id, status_code, body)

        response.headers["X-Request-ID"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Times each request, sets X-Processing-Time and logs the outcome"""

    def __init__(self, app, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = getattr(request.state, "request_id", None)

        try:
            response = await call_next(request)
        except Exception:
            logger.info(f"{request.method} {request.url.path} aborted after {time.time() - start_time:.3f}s",
                        extra={"request_id": request_id})
            raise

        processing_time = time.time() - start_time
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"

        candidate_failures = int(response.headers.get(CANDIDATE_FAILURES_HEADER, 0))
        extra = {
            "request_id": request_id,
            "status_code": response.status_code,
            "processing_time": processing_time,
            "candidate_failures": candidate_failures,
        }
        message = f"{request.method} {request.url.path} - {response.status_code} in {processing_time:.3f}s"

        if processing_time > self.slow_request_threshold:
            logger.warning(f"Slow request: {message} (threshold {self.slow_request_threshold}s)", extra=extra)
        elif candidate_failures:
            logger.warning(f"{message}, {candidate_failures} candidates not scored", extra=extra)
        else:
            logger.info(message, extra=extra)

        return response
