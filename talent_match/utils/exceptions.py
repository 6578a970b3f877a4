"""
Custom Exception Classes for Talent Match API
"""
from typing import Any, Callable, Dict
from fastapi import HTTPException


class TalentMatchError(Exception):
    """Base exception for Talent Match API"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/response"""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(TalentMatchError):
    """Raised when request data validation fails"""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        if value is not None:
            details['invalid_value'] = str(value)
        kwargs.setdefault('error_code', "VALIDATION_ERROR")
        super().__init__(message, details=details, **kwargs)


class InvalidWeight(ValidationError):
    """Raised when a scoring weight is negative or not a finite number"""

    def __init__(self, message: str, dimension: str = None, value: Any = None, **kwargs):
        super().__init__(message, field=dimension, value=value, error_code="INVALID_WEIGHT", **kwargs)


class DuplicateCandidate(ValidationError):
    """Raised when the same candidate id appears more than once in a match request"""

    def __init__(self, candidate_id: str, **kwargs):
        super().__init__(
            f"Candidate '{candidate_id}' appears more than once in the request",
            field="cv_ids",
            value=candidate_id,
            error_code="DUPLICATE_CANDIDATE",
            **kwargs
        )
        self.candidate_id = candidate_id


class DimensionMismatch(TalentMatchError):
    """Raised when two vectors being compared differ in length"""

    def __init__(self, message: str, expected: int = None, actual: int = None, document_id: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if expected is not None:
            details['expected_dimension'] = expected
        if actual is not None:
            details['actual_dimension'] = actual
        if document_id:
            details['document_id'] = document_id
        super().__init__(message, error_code="DIMENSION_MISMATCH", details=details, **kwargs)


class InvalidVector(TalentMatchError):
    """Raised when an embedding holds NaN or infinite components"""

    def __init__(self, message: str, document_id: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if document_id:
            details['document_id'] = document_id
        super().__init__(message, error_code="INVALID_VECTOR", details=details, **kwargs)


class DocumentNotFound(TalentMatchError):
    """Raised when a CV or JD is not present in the store"""

    def __init__(self, document_id: str, document_type: str = None, **kwargs):
        details = kwargs.pop('details', {})
        details['document_id'] = document_id
        if document_type:
            details['document_type'] = document_type
        label = (document_type or "document").upper()
        super().__init__(f"{label} not found: {document_id}", error_code="DOCUMENT_NOT_FOUND", details=details, **kwargs)
        self.document_id = document_id


class DatabaseError(TalentMatchError):
    """Raised when database operations fail"""

    def __init__(self, message: str, operation: str = None, collection: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if operation:
            details['operation'] = operation
        if collection:
            details['collection'] = collection
        super().__init__(message, error_code="DATABASE_ERROR", details=details, **kwargs)


class ConfigurationError(TalentMatchError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, config_key: str = None, config_value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if config_key:
            details['config_key'] = config_key
        if config_value is not None:
            details['config_value'] = str(config_value)
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details, **kwargs)


class ExternalServiceError(TalentMatchError):
    """Raised when external service calls fail"""

    def __init__(self, message: str, service_name: str = None, status_code: int = None, **kwargs):
        details = kwargs.pop('details', {})
        if service_name:
            details['service_name'] = service_name
        if status_code:
            details['status_code'] = status_code
        super().__init__(message, error_code="EXTERNAL_SERVICE_ERROR", details=details, **kwargs)


# HTTP Exception Mapping
def map_to_http_exception(exc: TalentMatchError) -> HTTPException:
    """Map custom exceptions to HTTP exceptions"""

    status_code_mapping = {
        ValidationError: 400,
        InvalidWeight: 400,
        DuplicateCandidate: 400,
        DocumentNotFound: 404,
        DimensionMismatch: 422,
        InvalidVector: 422,
        ConfigurationError: 500,
        DatabaseError: 500,
        ExternalServiceError: 502,
    }

    status_code = status_code_mapping.get(type(exc), 500)

    detail = {
        "error": exc.to_dict(),
        "message": exc.message
    }

    return HTTPException(status_code=status_code, detail=detail)


# Exception context manager for better error handling
class ExceptionContext:
    """Context manager that wraps foreign exceptions raised by store operations"""

    def __init__(self, operation: str, logger=None, collection: str = None, **context):
        self.operation = operation
        self.logger = logger
        self.collection = collection
        self.context = context

    def __enter__(self):
        if self.logger:
            self.logger.debug(f"Starting operation: {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            if self.logger:
                self.logger.error(
                    f"Operation failed: {self.operation} - {exc_val}",
                    extra={**self.context, "exception_type": exc_type.__name__}
                )

            # Re-raise custom exceptions as-is
            if isinstance(exc_val, TalentMatchError) or not isinstance(exc_val, Exception):
                return False

            raise DatabaseError(
                f"Database error in {self.operation}: {str(exc_val)}",
                operation=self.operation,
                collection=self.collection,
                details=dict(self.context),
                cause=exc_val
            ) from exc_val
        else:
            if self.logger:
                self.logger.debug(f"Operation completed: {self.operation}", extra=self.context)

        return False


# Retry decorator with exponential backoff
def retry_with_logging(
    max_attempts: int = 3,
    backoff_factor: float = 1.0,
    exceptions: tuple = (Exception,),
    logger=None,
    retry_if: Callable[[Exception], bool] = None,
):
    """Decorator to retry operations with exponential backoff and logging.

    retry_if, when given, decides per exception whether another attempt is
    worth making; a False answer re-raises immediately.
    """
    import time
    import functools
    from random import uniform

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempts = max(1, max_attempts)
            for attempt in range(attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if retry_if is not None and not retry_if(e):
                        raise
                    if logger:
                        logger.warning(
                            f"Attempt {attempt + 1}/{attempts} failed for {func.__name__}: {str(e)}"
                        )

                    if attempt < attempts - 1:  # Don't sleep on the last attempt
                        sleep_time = backoff_factor * (2 ** attempt) + uniform(0, backoff_factor)
                        time.sleep(sleep_time)
                    else:
                        if logger:
                            logger.error(f"All {attempts} attempts failed for {func.__name__}")
                        raise

        return wrapper

    return decorator
