"""
pdfshelf API application.

Wires the library services to FastAPI routers. Services are created on
startup and torn down on shutdown; see routers/dependencies.py.
"""
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import documents, folders, imports, status
from .routers.dependencies import (
    get_gateway,
    get_library_tree,
    get_sync_reconciler,
    initialize_database,
    initialize_services,
    shutdown_services,
)
from .core import config
from .core.logging_config import setup_logging, get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="pdfshelf API",
    description="Personal PDF library: folder tree, content dedup, synchronized store and AI metadata",
    version="1.0.0"
)

cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(folders.router, tags=["Folders"])
app.include_router(documents.router, tags=["Documents"])
app.include_router(imports.router, tags=["Imports"])
app.include_router(status.router, tags=["Status"])


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    log_file = setup_logging()
    logger.info("=" * 60)
    logger.info("Starting pdfshelf...")
    logger.info("=" * 60)

    import fastapi
    logger.info("Framework & Server:")
    logger.info(f"  → FastAPI Version: {fastapi.__version__}")
    logger.info(f"  → Python Version: {sys.version.split()[0]}")
    logger.info(f"  → Environment: {os.getenv('ENVIRONMENT', 'development')}")
    if log_file:
        logger.info(f"  → Log File: {log_file}")

    logger.info("CORS Configuration:")
    logger.info(f"  → Allowed Origins: {', '.join(cors_origins)}")

    await initialize_database()
    await initialize_services()

    logger.info("External Service Integrations:")
    logger.info(f"  → Database Backend: {config.DATABASE_TYPE.upper()}")
    logger.info(f"  → Storage Backend: {config.STORAGE_TYPE.upper()}")
    if config.STORAGE_TYPE.lower() == "s3":
        if config.S3_BUCKET_NAME:
            logger.info(f"    → S3 Bucket: {config.S3_BUCKET_NAME}")
            logger.info(f"    → AWS Region: {config.AWS_REGION}")
        else:
            logger.warning("    → S3 Bucket: Not configured")
    logger.info(f"  → AI Provider: {config.AI_PROVIDER}")
    if config.ANTHROPIC_API_KEY:
        logger.info("  → AI API Key: Configured")
    else:
        logger.warning("  → AI API Key: Not configured (AI enrichment off)")

    if config.SYNC_POLL_INTERVAL > 0:
        get_sync_reconciler().start_watching(config.SYNC_POLL_INTERVAL)

    logger.info("=" * 60)
    logger.info("✅ pdfshelf started successfully")
    logger.info("=" * 60)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down pdfshelf...")
    await shutdown_services()


@app.get("/health")
async def health():
    """Liveness plus a small summary of the library."""
    tree = get_library_tree()
    gateway = get_gateway()
    return {
        "status": "healthy",
        "documents": await tree.count_documents(),
        "store": type(gateway).__name__ if gateway else None,
        "ai_enrichment": config.AI_EXTRACTION_ENABLED
    }
