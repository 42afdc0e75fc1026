"""
Database factory: picks the library store backend by name.
"""
from pathlib import Path
from typing import Dict, List, Optional, Type

from .base import DatabaseInterface
from .memory_adapter import MemoryAdapter
from .json_adapter import JSONAdapter
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseFactory:
    """Builds library stores: 'json' (one synced file) or 'memory'."""

    ADAPTERS: Dict[str, Type[DatabaseInterface]] = {
        "json": JSONAdapter,
        "memory": MemoryAdapter,
    }

    @staticmethod
    def available_types() -> List[str]:
        return sorted(DatabaseFactory.ADAPTERS)

    @staticmethod
    def create(database_type: Optional[str] = None, data_dir: Optional[Path] = None) -> DatabaseInterface:
        """
        Create a store without loading it.

        Args:
            database_type: 'json' or 'memory' (DATABASE_TYPE when None)
            data_dir: Directory of the JSON store file; ignored for memory

        Raises:
            ValueError: Unknown database type
        """
        if database_type is None:
            from ...core import config
            database_type = config.DATABASE_TYPE

        adapter = DatabaseFactory.ADAPTERS.get(database_type.lower())
        if adapter is None:
            raise ValueError(
                f"Unsupported database type: {database_type}. "
                f"Supported types: {', '.join(DatabaseFactory.available_types())}"
            )
        if adapter is JSONAdapter:
            return JSONAdapter(data_dir=Path(data_dir) if data_dir is not None else None)
        return adapter()

    @staticmethod
    async def create_and_initialize(database_type: Optional[str] = None, data_dir: Optional[Path] = None) -> DatabaseInterface:
        """Create a store and load its contents."""
        db = DatabaseFactory.create(database_type, data_dir=data_dir)
        await db.initialize()
        logger.info(f"Library store ready: {type(db).__name__}")
        return db
