from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from talent_match.routers import cvs, jds, match

from talent_match.utils.logging_config import configure_for_environment, get_logger
from talent_match.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    RequestLoggingMiddleware,
)

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info("Talent Match API starting up...")

    try:
        from talent_match.services.db import get_document_store
        await get_document_store().init_indexes()
    except Exception as e:
        logger.warning(f"Database index initialization had issues: {e}")
        logger.info("Application will continue - some operations may be slower without indexes")

    logger.info("Talent Match API startup completed")

    yield

    logger.info("Talent Match API shutting down...")


app = FastAPI(title="Talent Match API", version=VERSION, lifespan=lifespan)

# Middleware is LIFO: the exception handler is added last so it wraps request logging
app.add_middleware(RequestLoggingMiddleware, slow_request_threshold=2.0)
app.add_middleware(ExceptionHandlerMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
@app.head("/")
async def root():
    """Root endpoint - handles both GET and HEAD requests for health checks"""
    return {"message": "Welcome to the Talent Match API", "version": VERSION, "status": "ok"}


@app.get("/health")
@app.head("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(cvs.router, prefix="/api/cvs", tags=["cvs"])
app.include_router(jds.router, prefix="/api/jds", tags=["jds"])
app.include_router(match.router, prefix="/api/match", tags=["match"])

logger.info("Talent Match API initialized successfully")
