"""
Import Pipeline - hash, dedup, copy, parse, insert, enqueue.

Each source file is handled independently; a failure on one file never
aborts the batch. The batch is committed once, after every file has been
handled, and AI enrichment is queued only after that commit.
"""
import asyncio
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple, Union

from ..core.config import AIConfig
from ..core.logging_config import get_logger
from ..domain.entities import Document, Folder, Locator, new_id
from ..domain.exceptions import CloudStorageError, CopyFailed, ReadError
from ..domain.value_objects import DocumentId
from ..utils.checksum import fingerprint, read_source
from ..utils.document_utils import format_file_size
from .enrichment_queue import EnrichmentQueue
from .library_tree import LibraryTree
from .metadata_extractor import MetadataExtractor
from .storage.base import CloudFileGateway

logger = get_logger(__name__)


class ImportStatus(Enum):
    """Outcome of importing one source file."""
    IMPORTED = "imported"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass
class ImportOutcome:
    source: str
    status: ImportStatus
    document_id: Optional[str] = None
    remote: bool = False
    error: Optional[str] = None


@dataclass
class ImportReport:
    """Per-file outcomes of one batch, in source-list order."""
    outcomes: List[ImportOutcome] = field(default_factory=list)
    enrichment_queued: int = 0

    def _count(self, status: ImportStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def imported(self) -> int:
        return self._count(ImportStatus.IMPORTED)

    @property
    def duplicates(self) -> int:
        return self._count(ImportStatus.DUPLICATE)

    @property
    def failed(self) -> int:
        return self._count(ImportStatus.FAILED)

    @property
    def remote_copies(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ImportStatus.IMPORTED and o.remote)

    @property
    def local_fallbacks(self) -> int:
        return self.imported - self.remote_copies

    @property
    def document_ids(self) -> List[str]:
        return [o.document_id for o in self.outcomes if o.status == ImportStatus.IMPORTED]


class ImportPipeline:
    """
    Orchestrates imports into the library tree.

    The fingerprint set is read once per batch; hashes accepted earlier in
    the same batch are added to it, so byte-identical files inside one batch
    also collapse to a single document.
    """

    def __init__(
        self,
        tree: LibraryTree,
        extractor: MetadataExtractor,
        gateway: Optional[CloudFileGateway] = None,
        enrichment_queue: Optional[EnrichmentQueue] = None
    ):
        """
        Initialize import pipeline.

        Args:
            tree: Library tree receiving new documents
            extractor: Local parser and AI extraction
            gateway: Synchronized store, or None to keep files where they are
            enrichment_queue: Queue for AI enrichment (built from tree and extractor if omitted)
        """
        self.tree = tree
        self.extractor = extractor
        self.gateway = gateway
        self.enrichment_queue = enrichment_queue or EnrichmentQueue(extractor, tree)

    async def import_files(
        self,
        sources: Iterable[Union[str, Path]],
        target_folder: Optional[Folder],
        ai_config: AIConfig
    ) -> ImportReport:
        """
        Import source files into target_folder.

        Documents are filed as unfiled when target_folder is None or the
        virtual aggregate. Returns once every document is inserted and the
        batch is committed; AI enrichment continues in the background.

        Args:
            sources: Paths of the PDFs to import, in insertion order
            target_folder: Destination folder
            ai_config: Enrichment settings for this batch

        Returns:
            ImportReport with per-file outcomes
        """
        sources = [Path(s) for s in sources]
        report = ImportReport()
        if not sources:
            return report

        folder_id = None
        if target_folder is not None and not target_folder.is_virtual:
            folder_id = target_folder.id

        known: Set[str] = await self.tree.fingerprints()
        use_store = await self._store_available()
        logger.info(
            f"Importing {len(sources)} files into "
            f"{target_folder.name if target_folder else 'unfiled'} "
            f"(store: {'on' if use_store else 'off'}, {len(known)} known fingerprints)"
        )

        staged: List[Tuple[int, Document, Path]] = []
        for source in sources:
            try:
                result = await self._stage_one(source, folder_id, known, use_store)
            except Exception as e:
                logger.error(f"Unexpected error importing {source}: {e}", exc_info=True)
                result = ImportOutcome(source=str(source), status=ImportStatus.FAILED, error=str(e))
            if isinstance(result, Document):
                staged.append((len(report.outcomes), result, source))
                report.outcomes.append(ImportOutcome(
                    source=str(source),
                    status=ImportStatus.IMPORTED,
                    document_id=result.id,
                    remote=result.is_remote
                ))
            else:
                report.outcomes.append(result)

        committed = await self._commit(staged, report)

        if ai_config.is_active:
            for document, source in committed:
                if self.enrichment_queue.submit(document.id, document.file_name, source, ai_config):
                    report.enrichment_queued += 1

        logger.info(
            f"Import finished: {report.imported} imported, {report.duplicates} duplicates, "
            f"{report.failed} failed, {report.remote_copies} in store, "
            f"{report.enrichment_queued} queued for AI"
        )
        return report

    async def _store_available(self) -> bool:
        if self.gateway is None:
            return False
        return await self.gateway.is_available()

    async def _stage_one(
        self,
        source: Path,
        folder_id: Optional[str],
        known: Set[str],
        use_store: bool
    ) -> Union[Document, ImportOutcome]:
        """Read, hash, dedup, copy and parse one file; nothing is inserted yet."""
        loop = asyncio.get_event_loop()

        try:
            file_bytes = await loop.run_in_executor(None, read_source, source)
        except ReadError as e:
            logger.warning(f"Skipping unreadable file {source.name}: {e}")
            return ImportOutcome(source=str(source), status=ImportStatus.FAILED, error=str(e))

        content_hash = await loop.run_in_executor(None, fingerprint, file_bytes)
        if content_hash in known:
            logger.debug(f"Skipping duplicate {source.name} ({content_hash[:12]})")
            return ImportOutcome(source=str(source), status=ImportStatus.DUPLICATE)

        locator = None
        if use_store:
            try:
                locator = await self.gateway.copy_in(source)
            except CopyFailed as e:
                logger.warning(f"Store copy failed for {source.name}, keeping local reference: {e}")
        if locator is None:
            locator = Locator.local(str(source.resolve()))

        metadata = self.extractor.parse_local(file_bytes)
        document = Document(
            id=DocumentId(new_id()),
            file_name=source.name,
            content_hash=content_hash,
            locator=locator,
            folder_id=folder_id,
            file_size=format_file_size(len(file_bytes)),
            last_modified=self._modified_at(source),
        )
        document.apply_local_metadata(metadata)

        known.add(content_hash)
        logger.debug(f"Staged {source.name} as {document.id} ({'remote' if locator.is_remote else 'local'})")
        return document

    async def _commit(
        self,
        staged: List[Tuple[int, Document, Path]],
        report: ImportReport
    ) -> List[Tuple[Document, Path]]:
        """
        Insert every staged document and commit once.

        A failed commit turns every staged file into a FAILED outcome and
        releases its store copy; the store keeps its previous state.

        Returns:
            (document, source) pairs that are now in the library
        """
        if not staged:
            return []

        try:
            inserted, rejected = await self.tree.commit_documents([document for _, document, _ in staged])
        except Exception as e:
            logger.error(f"Commit of {len(staged)} imported documents failed: {e}", exc_info=True)
            for index, document, source in staged:
                await self._release_copy(document)
                report.outcomes[index] = ImportOutcome(
                    source=str(source),
                    status=ImportStatus.FAILED,
                    error=f"Commit failed: {e}"
                )
            return []

        rejected_ids = {document.id for document in rejected}
        committed = []
        for index, document, source in staged:
            if document.id not in rejected_ids:
                committed.append((document, source))
                continue
            await self._release_copy(document)
            # Content may have landed in the store after the snapshot was taken
            if await self.tree.db.find_document_by_checksum(document.content_hash):
                logger.debug(f"Skipping {source.name}: content already stored")
                report.outcomes[index] = ImportOutcome(source=str(source), status=ImportStatus.DUPLICATE)
            else:
                logger.warning(f"Could not insert {source.name}: target folder is gone")
                report.outcomes[index] = ImportOutcome(
                    source=str(source),
                    status=ImportStatus.FAILED,
                    error="Target folder no longer exists"
                )
        return committed

    async def _release_copy(self, document: Document):
        if not document.is_remote or self.gateway is None:
            return
        try:
            await self.gateway.remove(document.locator)
        except CloudStorageError as e:
            logger.warning(f"Could not remove store copy of {document.file_name}: {e}")

    @staticmethod
    def _modified_at(source: Path) -> datetime:
        try:
            return datetime.fromtimestamp(os.path.getmtime(source))
        except OSError:
            return datetime.now()
