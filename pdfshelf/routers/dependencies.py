"""
Shared dependencies for routers.
Provides database and service initialization.

This module manages service lifecycle and dependency injection.
Configuration is read from the config module when services start.
"""
from pathlib import Path
from typing import Optional

from ..core import config
from ..core.config import AIConfig
from ..services.database import DatabaseFactory, DatabaseInterface
from ..services.enrichment_queue import EnrichmentQueue
from ..services.import_pipeline import ImportPipeline
from ..services.library_tree import LibraryTree
from ..services.metadata_extractor import MetadataExtractor
from ..services.storage import CloudFileGateway, CloudGatewayFactory
from ..services.sync_reconciler import SyncReconciler

from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Global services (will be initialized on startup)
# These are shared across all request handlers
db_service: Optional[DatabaseInterface] = None
gateway: Optional[CloudFileGateway] = None
library_tree: Optional[LibraryTree] = None
metadata_extractor: Optional[MetadataExtractor] = None
enrichment_queue: Optional[EnrichmentQueue] = None
import_pipeline: Optional[ImportPipeline] = None
sync_reconciler: Optional[SyncReconciler] = None
working_model: Optional[str] = None  # Set by a successful AI connection test


async def initialize_database(db: Optional[DatabaseInterface] = None):
    """Initialize database adapter based on configuration."""
    global db_service

    if db is not None:
        db_service = db
        logger.info(f"  → Database Type: {type(db).__name__} (provided)")
        return

    database_type = config.DATABASE_TYPE.lower()
    logger.info(f"Initializing database: {database_type}")

    if database_type == "json":
        data_dir = Path(config.JSON_DB_PATH) if config.JSON_DB_PATH else None
        logger.info("  → Database Type: JSON (file-based)")
        logger.debug(f"  → Database Path: {data_dir}")
        db_service = await DatabaseFactory.create_and_initialize("json", data_dir=data_dir)
        logger.info("  ✅ JSON Database initialized")
    elif database_type == "memory":
        logger.info("  → Database Type: Memory (in-memory, non-persistent)")
        db_service = await DatabaseFactory.create_and_initialize("memory")
        logger.info("  ✅ Memory Database initialized")
    else:
        raise ValueError(f"Unsupported DATABASE_TYPE: {config.DATABASE_TYPE}. Supported types: 'json', 'memory'")


async def initialize_services(
    store: Optional[CloudFileGateway] = None,
    extractor: Optional[MetadataExtractor] = None
):
    """
    Initialize all services after database is ready.

    This function sets up:
    - Store gateway for the synchronized store
    - Library tree over the database
    - Metadata extractor and enrichment queue
    - Import pipeline
    - Sync reconciler (subscribed to store changes)
    """
    global gateway, library_tree, metadata_extractor, enrichment_queue, import_pipeline, sync_reconciler

    if db_service is None:
        await initialize_database()

    logger.info("Initializing services...")

    logger.info("  → Starting Store Gateway...")
    logger.info(f"    → Storage Type: {config.STORAGE_TYPE}")
    gateway = store if store is not None else CloudGatewayFactory.create(config.STORAGE_TYPE)
    if gateway is not None:
        await gateway.log_diagnostics()
        logger.info("  ✅ Store Gateway initialized")
    else:
        logger.warning("  ⚠️  No store gateway (documents keep their local reference)")

    logger.info("  → Starting Library Tree...")
    library_tree = LibraryTree(db_service, gateway)
    logger.info(f"  ✅ Library Tree initialized ({await library_tree.count_documents()} documents)")

    logger.info("  → Starting Metadata Extractor...")
    logger.info(f"    → Provider: {config.AI_PROVIDER}")
    metadata_extractor = extractor or MetadataExtractor()
    enrichment_queue = EnrichmentQueue(metadata_extractor, library_tree)
    if not get_ai_config().is_active:
        logger.warning("  ⚠️  AI enrichment inactive (disabled or no API key)")
    logger.info("  ✅ Metadata Extractor initialized")

    logger.info("  → Starting Import Pipeline...")
    import_pipeline = ImportPipeline(library_tree, metadata_extractor, gateway, enrichment_queue)
    logger.info("  ✅ Import Pipeline initialized")

    logger.info("  → Starting Sync Reconciler...")
    sync_reconciler = SyncReconciler(library_tree, db_service)
    sync_reconciler.start()
    await sync_reconciler.refresh()
    logger.info("  ✅ Sync Reconciler initialized")

    logger.info("✅ All services initialized successfully")


async def shutdown_services():
    """Stop background work and flush the database."""
    global db_service, gateway, library_tree, metadata_extractor, enrichment_queue, import_pipeline, sync_reconciler

    if sync_reconciler is not None:
        await sync_reconciler.stop()
    if enrichment_queue is not None:
        await enrichment_queue.drain(timeout=config.AI_REQUEST_TIMEOUT)
    if gateway is not None:
        await gateway.close()
    if db_service is not None:
        await db_service.close()

    db_service = gateway = library_tree = metadata_extractor = None
    enrichment_queue = import_pipeline = sync_reconciler = None
    logger.info("All services stopped")


def get_ai_config() -> AIConfig:
    """AI settings for one call site, using the model found by the last connection test."""
    return AIConfig.from_env(model=working_model)


def set_working_model(model: Optional[str]):
    global working_model
    working_model = model


def get_db_service() -> DatabaseInterface:
    """Get database service (dependency injection)."""
    if db_service is None:
        raise RuntimeError("Database service not initialized")
    return db_service


def get_gateway() -> Optional[CloudFileGateway]:
    """Get store gateway; None when no store is configured."""
    return gateway


def get_library_tree() -> LibraryTree:
    """Get library tree (dependency injection)."""
    if library_tree is None:
        raise RuntimeError("Library tree not initialized")
    return library_tree


def get_metadata_extractor() -> MetadataExtractor:
    """Get metadata extractor (dependency injection)."""
    if metadata_extractor is None:
        raise RuntimeError("Metadata extractor not initialized")
    return metadata_extractor


def get_enrichment_queue() -> EnrichmentQueue:
    """Get enrichment queue (dependency injection)."""
    if enrichment_queue is None:
        raise RuntimeError("Enrichment queue not initialized")
    return enrichment_queue


def get_import_pipeline() -> ImportPipeline:
    """Get import pipeline (dependency injection)."""
    if import_pipeline is None:
        raise RuntimeError("Import pipeline not initialized")
    return import_pipeline


def get_sync_reconciler() -> SyncReconciler:
    """Get sync reconciler (dependency injection)."""
    if sync_reconciler is None:
        raise RuntimeError("Sync reconciler not initialized")
    return sync_reconciler
