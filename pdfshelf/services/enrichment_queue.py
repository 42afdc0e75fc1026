"""
Enrichment Queue - fire-and-forget AI metadata tasks keyed by document id.

Each task extracts remote metadata off the insertion path and merges it into
the stored document only if that document still exists. Failures are logged
and never retried.
"""
import asyncio
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Deque, Dict, List, Optional, Union

from ..core.config import AI_MAX_CONCURRENT, ENRICHMENT_HISTORY_LIMIT, AIConfig
from ..core.logging_config import get_logger
from ..domain.entities import RemoteMetadata
from ..domain.exceptions import MetadataExtractionError, ReadError
from ..utils.checksum import read_source
from .library_tree import LibraryTree
from .metadata_extractor import MetadataExtractor

logger = get_logger(__name__)


class EnrichmentStatus(Enum):
    """Enrichment task status."""
    PENDING = "pending"
    RUNNING = "running"
    MERGED = "merged"
    DISCARDED = "discarded"
    FAILED = "failed"


@dataclass
class EnrichmentTask:
    """One AI extraction for one document."""
    document_id: str
    file_name: str
    status: EnrichmentStatus = EnrichmentStatus.PENDING
    error: Optional[str] = None
    result: Optional[RemoteMetadata] = None
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def mark_running(self):
        self.status = EnrichmentStatus.RUNNING
        self.started_at = datetime.now()

    def mark_merged(self, result: RemoteMetadata):
        self.status = EnrichmentStatus.MERGED
        self.result = result
        self.completed_at = datetime.now()

    def mark_discarded(self):
        """The document was deleted before the result arrived."""
        self.status = EnrichmentStatus.DISCARDED
        self.completed_at = datetime.now()

    def mark_failed(self, error: str):
        self.status = EnrichmentStatus.FAILED
        self.error = error
        self.completed_at = datetime.now()


class EnrichmentQueue:
    """
    Runs AI enrichment as independent asyncio tasks.

    Completions may arrive in any order; merges are keyed by document id.
    A document with an unfinished task is not submitted twice. At most
    max_concurrent extractions hold file bytes at any time; finished tasks
    move to a bounded history.
    """

    def __init__(
        self,
        extractor: MetadataExtractor,
        tree: LibraryTree,
        max_concurrent: int = AI_MAX_CONCURRENT,
        history_limit: int = ENRICHMENT_HISTORY_LIMIT
    ):
        self.extractor = extractor
        self.tree = tree
        self.max_concurrent = max(1, max_concurrent)
        self.tasks: Dict[str, EnrichmentTask] = {}
        self.history: Deque[EnrichmentTask] = deque(maxlen=history_limit)
        self._running: Dict[str, asyncio.Task] = {}
        self._slots: Optional[asyncio.Semaphore] = None
        self.stats = {
            "submitted": 0,
            "merged": 0,
            "discarded": 0,
            "failed": 0
        }

    def submit(
        self,
        document_id: str,
        file_name: str,
        source: Union[str, Path],
        ai_config: AIConfig
    ) -> Optional[EnrichmentTask]:
        """
        Schedule enrichment for a document and return immediately.

        The file is read from source only when the task gets a slot.

        Returns:
            The new task, or None if one is already in flight for the document
        """
        if document_id in self.tasks:
            logger.debug(f"Enrichment already pending for {document_id}, skipping")
            return None

        task = EnrichmentTask(document_id=document_id, file_name=file_name)
        self.tasks[document_id] = task
        self.stats["submitted"] += 1
        handle = asyncio.create_task(self._run(task, Path(source), ai_config))
        self._running[document_id] = handle
        handle.add_done_callback(lambda _: self._finish(task))
        logger.debug(f"Enrichment queued for {file_name} ({document_id})")
        return task

    def _finish(self, task: EnrichmentTask):
        self._running.pop(task.document_id, None)
        if self.tasks.get(task.document_id) is task:
            del self.tasks[task.document_id]
        self.history.append(task)

    async def _run(self, task: EnrichmentTask, source: Path, ai_config: AIConfig):
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.max_concurrent)
        try:
            async with self._slots:
                task.mark_running()
                loop = asyncio.get_event_loop()
                file_bytes = await loop.run_in_executor(None, read_source, source)
                metadata = await self.extractor.extract_metadata(file_bytes, ai_config)
            if await self.tree.merge_remote_metadata(task.document_id, metadata):
                task.mark_merged(metadata)
                self.stats["merged"] += 1
                logger.info(f"AI metadata merged for {task.file_name}")
            else:
                task.mark_discarded()
                self.stats["discarded"] += 1
        except (MetadataExtractionError, ReadError) as e:
            task.mark_failed(str(e))
            self.stats["failed"] += 1
            logger.warning(f"AI extraction failed for {task.file_name}: {e}")
        except Exception as e:
            task.mark_failed(str(e))
            self.stats["failed"] += 1
            logger.error(f"Unexpected enrichment error for {task.file_name}: {e}", exc_info=True)

    def get_task(self, document_id: str) -> Optional[EnrichmentTask]:
        """Pending task for the document, else its most recent finished one."""
        if document_id in self.tasks:
            return self.tasks[document_id]
        for task in reversed(self.history):
            if task.document_id == document_id:
                return task
        return None

    def get_all_tasks(self) -> List[EnrichmentTask]:
        return list(self.history) + list(self.tasks.values())

    @property
    def pending_count(self) -> int:
        return len(self._running)

    async def drain(self, timeout: Optional[float] = None):
        """Wait for every in-flight task to finish."""
        while True:
            handles = [h for h in self._running.values() if not h.done()]
            if not handles:
                return
            _, pending = await asyncio.wait(handles, timeout=timeout)
            if pending:
                logger.warning(f"Enrichment drain timed out with {len(pending)} tasks still running")
                return
