"""
Logging setup for the Talent Match service.

All loggers live under the ``talent_match`` namespace. Match-related records
carry the JD id and candidate/failure counts both in the message and as
``extra`` attributes so they can be filtered by structured handlers.
"""
import functools
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

ROOT_LOGGER = "talent_match"

FORMATS = {
    "simple": "%(levelname)s - %(name)s - %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)-40s | %(funcName)-24s:%(lineno)-4d | %(message)s",
}

# ENVIRONMENT -> setup_logging arguments; LOG_LEVEL overrides the level outside testing
ENVIRONMENT_PROFILES = {
    "production": {"level": "INFO", "enable_file": True, "format_style": "detailed"},
    "development": {"level": "DEBUG", "enable_file": True, "format_style": "detailed"},
    "testing": {"level": "WARNING", "enable_file": False, "format_style": "simple"},
}

MAX_LOG_BYTES = 10 * 1024 * 1024


def _file_handler(filename: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(filename),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": 5,
        "encoding": "utf8",
    }


def setup_logging(level: str = "INFO", enable_file: bool = True, format_style: str = "detailed") -> None:
    """
    Configure console logging and, optionally, rotating service and error logs.

    Files go to LOG_DIR (default ``logs``) as talent_match_<date>.log and
    talent_match_errors_<date>.log. Uvicorn's loggers share the console
    handler so access lines interleave with service records.
    """
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": format_style if format_style in FORMATS else "detailed",
            "stream": "ext://sys.stdout",
        }
    }

    if enable_file:
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d")
        handlers["file"] = _file_handler(log_dir / f"talent_match_{stamp}.log", level)
        handlers["error_file"] = _file_handler(log_dir / f"talent_match_errors_{stamp}.log", "ERROR")

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {name: {"format": fmt, "datefmt": "%Y-%m-%d %H:%M:%S"} for name, fmt in FORMATS.items()},
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
        "loggers": {
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    })

    get_logger("logging").info(f"Logging configured - level={level} file={enable_file}")


def configure_for_environment():
    """Configure logging from ENVIRONMENT and LOG_LEVEL"""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    profile = dict(ENVIRONMENT_PROFILES.get(environment, ENVIRONMENT_PROFILES["production"]))
    if environment != "testing" and os.getenv("LOG_LEVEL"):
        profile["level"] = os.environ["LOG_LEVEL"].upper()
    setup_logging(**profile)


def get_logger(name: str) -> logging.Logger:
    """Logger under the talent_match namespace; module __name__ values are used as-is"""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def match_context(result: Any) -> Dict[str, Any]:
    """jd_id and candidate/failure counts of a match result, empty for anything else"""
    if not all(hasattr(result, attr) for attr in ("jd_id", "candidates", "failures")):
        return {}
    return {
        "jd_id": result.jd_id,
        "candidates": len(result.candidates),
        "failures": len(result.failures),
    }


def _describe(context: Dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in context.items())


def log_function_call(func):
    """Debug-log entry and timing of a synchronous call"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.time()
        logger.debug(f"Entering {func.__qualname__}")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__qualname__} failed after {time.time() - start_time:.3f}s: {e}")
            raise
        logger.debug(f"{func.__qualname__} completed in {time.time() - start_time:.3f}s")
        return result

    return wrapper


def log_api_call(operation: str):
    """
    Log start and outcome of an async endpoint.

    When the endpoint returns a match result its jd_id, ranked candidate
    count and failure count are attached to the completion record.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            start_time = time.time()
            logger.info(f"API {operation} started")

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(f"API {operation} failed after {elapsed:.3f}s: {e}",
                             extra={"operation": operation, "execution_time": elapsed})
                raise

            elapsed = time.time() - start_time
            context = match_context(result)
            logger.info(f"API {operation} completed in {elapsed:.3f}s {_describe(context)}".rstrip(),
                        extra={"operation": operation, "execution_time": elapsed, **context})
            return result

        return wrapper
    return decorator


class PerformanceMonitor:
    """
    Times a block and logs it with its context.

    Context given at construction (e.g. jd_id, candidates) can be extended
    inside the block with ``add`` (e.g. failures) before the record is
    written on exit. Blocks slower than ``threshold_ms`` log a warning.
    """

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000,
                 **context):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.context: Dict[str, Any] = dict(context)
        self.start_time = None
        self.elapsed_ms = None

    def add(self, **context) -> None:
        self.context.update(context)

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.time() - self.start_time) * 1000
        extra = {**self.context, "elapsed_ms": self.elapsed_ms}
        summary = f"{self.operation_name} ({_describe(self.context)})" if self.context else self.operation_name

        if exc_type is not None:
            self.logger.error(f"{summary} failed after {self.elapsed_ms:.2f}ms: {exc_val}", extra=extra)
        elif self.elapsed_ms > self.threshold_ms:
            self.logger.warning(f"{summary} took {self.elapsed_ms:.2f}ms, over {self.threshold_ms}ms", extra=extra)
        else:
            self.logger.info(f"{summary} completed in {self.elapsed_ms:.2f}ms", extra=extra)
        return False
