"""
JSON file-based adapter implementing DatabaseInterface.
Stores the whole library in one JSON file - no database setup needed.
Data persists between restarts; a commit replaces the file atomically.
"""
import asyncio
import json
import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from .base import ChangeEvent
from .memory_adapter import MemoryAdapter
from ...core.logging_config import get_logger

logger = get_logger(__name__)

STORE_FILENAME = "library.json"


class JSONAdapter(MemoryAdapter):
    """
    JSON file-based database adapter.

    Works on the in-memory structures of MemoryAdapter and writes them out
    on save(). The file may also be replaced by a sync client; such external
    writes are detected by check_for_external_changes().
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize JSON adapter.

        Args:
            data_dir: Directory holding library.json (defaults to data/library)
        """
        super().__init__()
        if data_dir is None:
            from ...core.config import JSON_DB_PATH
            data_dir = Path(JSON_DB_PATH)

        self.data_dir = Path(data_dir)
        self.store_file = self.data_dir / STORE_FILENAME
        self._file_signature: Optional[Tuple[int, int]] = None

    async def initialize(self):
        """Initialize database - load data from the JSON file."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._load_data()

    async def close(self):
        """Close database - flush uncommitted mutations."""
        if self._dirty:
            await self._save_data()

    def _signature(self) -> Optional[Tuple[int, int]]:
        try:
            stat = self.store_file.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def _load_data(self):
        """Load data from the JSON file into memory."""
        folders: Dict[str, Dict] = {}
        documents: Dict[str, Dict] = {}
        if self.store_file.exists():
            try:
                with open(self.store_file, "r", encoding="utf-8") as f:
                    payload = json.load(f)
                folders = payload.get("folders", {})
                documents = payload.get("documents", {})
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Could not load {self.store_file}: {e}")

        self._reset(folders, documents)
        self._file_signature = self._signature()
        logger.debug(f"Loaded {len(folders)} folders and {len(documents)} documents from {self.store_file}")

    def _write_file(self, content: str):
        tmp_path = self.store_file.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.store_file)

    async def _save_data(self):
        # Serialized on the loop thread; only the write runs in the executor
        content = json.dumps(
            {"folders": self._folders, "documents": self._documents},
            indent=2,
            ensure_ascii=False
        )
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._write_file, content)
        self._file_signature = self._signature()
        self._dirty = False

    async def save(self):
        """Write the library file atomically and notify subscribers."""
        await self._save_data()
        self._notify(ChangeEvent(source="local"))

    async def check_for_external_changes(self) -> bool:
        signature = self._signature()
        if signature == self._file_signature:
            return False
        if self._dirty:
            # Uncommitted local work; the next save wins
            logger.debug("External change detected with pending local mutations, deferring reload")
            return False

        logger.info(f"External change detected in {self.store_file}, reloading")
        self._load_data()
        self._notify(ChangeEvent(source="external"))
        return True
