"""
Sync Reconciler - keeps the observable tree and the selection valid after
store changes, whether committed locally or written by a sync process.
"""
import asyncio
from typing import Callable, List, Optional

from ..core.config import SYNC_POLL_INTERVAL
from ..core.logging_config import get_logger
from ..domain.entities import Document, Folder
from .database.base import ChangeEvent, DatabaseInterface
from .library_tree import LibraryTree

logger = get_logger(__name__)

RefreshListener = Callable[[List[Folder]], None]


class SyncReconciler:
    """
    Single subscriber of the store's change channel.

    Notifications arriving while a refresh is running are coalesced into
    one more refresh, so a burst of commits costs at most two passes.
    """

    def __init__(self, tree: LibraryTree, db_service: Optional[DatabaseInterface] = None):
        self.tree = tree
        self.db = db_service or tree.db
        self.root_folders: List[Folder] = [tree.all_documents_folder]
        self.refresh_count = 0
        self._listeners: List[RefreshListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._refresh_requested = False
        self._watch_task: Optional[asyncio.Task] = None

    def start(self):
        """Subscribe to the store's change channel."""
        if self._unsubscribe is None:
            self._unsubscribe = self.db.subscribe(self._on_store_change)
            logger.debug("Sync reconciler subscribed to store changes")

    async def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None
        await self.wait_for_refresh()

    def add_listener(self, listener: RefreshListener):
        """Called with the refreshed root folders after every refresh."""
        self._listeners.append(listener)

    def _on_store_change(self, event: ChangeEvent):
        logger.debug(f"Store change ({event.source}) at {event.timestamp.isoformat()}")
        self._schedule_refresh()

    def notify_local_change(self):
        """Explicit hook for mutations that bypass the store's commit."""
        self._schedule_refresh()

    def _schedule_refresh(self):
        self._refresh_requested = True
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self._drain())

    async def _drain(self):
        while self._refresh_requested:
            self._refresh_requested = False
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Tree refresh failed: {e}", exc_info=True)

    async def wait_for_refresh(self):
        """Wait until scheduled refreshes have run."""
        while self._refresh_task is not None and not self._refresh_task.done():
            await self._refresh_task

    async def refresh(self) -> List[Folder]:
        """
        Re-fetch root folders and re-validate the selection.

        A selected folder that no longer exists falls back to the first root
        (the virtual aggregate) and clears the document selection. A selected
        document that no longer exists is cleared.
        """
        roots = await self.tree.root_folders()
        self.root_folders = roots
        selection = self.tree.selection

        if selection.folder is not None:
            folder = await self.tree.get_folder(selection.folder.id)
            if folder is None:
                logger.warning(f"Selected folder '{selection.folder.name}' no longer exists, falling back to {roots[0].name}")
                selection.folder = roots[0]
                selection.document = None
            else:
                selection.folder = folder

        if selection.document is not None:
            document = await self.tree.get_document(selection.document.id)
            if document is None:
                logger.warning(f"Selected document '{selection.document.file_name}' no longer exists, clearing selection")
            selection.document = document

        self.refresh_count += 1
        for listener in list(self._listeners):
            try:
                listener(roots)
            except Exception as e:
                logger.error(f"Refresh listener {listener!r} failed: {e}", exc_info=True)
        return roots

    async def select_folder(self, folder_id: Optional[str]) -> Optional[Folder]:
        """
        Select a folder by id (None clears the selection).

        The document selection is kept only if that document is shown in
        the new folder.

        Returns:
            The selected folder, or None if folder_id is unknown
        """
        selection = self.tree.selection
        if folder_id is None:
            selection.clear()
            return None

        folder = await self.tree.get_folder(folder_id)
        if folder is None:
            return None

        selection.folder = folder
        if selection.document is not None:
            shown = {d.id for d in await self.tree.documents_in(folder)}
            if selection.document.id not in shown:
                selection.document = None
        return folder

    async def select_document(self, doc_id: Optional[str]) -> Optional[Document]:
        """
        Select a document by id (None clears it).

        Returns:
            The selected document, or None if doc_id is unknown
        """
        selection = self.tree.selection
        if doc_id is None:
            selection.document = None
            return None

        document = await self.tree.get_document(doc_id)
        if document is not None:
            selection.document = document
        return document

    def start_watching(self, interval: float = SYNC_POLL_INTERVAL):
        """Poll the store for external writes in the background."""
        if self._watch_task is None or self._watch_task.done():
            self._watch_task = asyncio.ensure_future(self.watch(interval))

    async def watch(self, interval: float = SYNC_POLL_INTERVAL):
        """Poll the store for external writes until cancelled."""
        logger.info(f"Watching store for external changes every {interval}s")
        while True:
            await asyncio.sleep(interval)
            try:
                await self.db.check_for_external_changes()
            except (OSError, ValueError) as e:
                logger.warning(f"External change check failed: {e}")
