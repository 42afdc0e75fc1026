"""
Library Tree - authoritative shape of folders and documents.

All mutation entry points are serialized through one asyncio lock, so no
two mutations interleave. Queries read straight from the store.
"""
import asyncio
from typing import List, Optional, Set, Tuple

from ..core.logging_config import get_logger
from ..domain.entities import Document, Folder, RemoteMetadata, Selection
from ..domain.exceptions import CloudStorageError
from ..domain.value_objects import ALL_DOCUMENTS_ID
from ..repositories import DocumentRepository, FolderRepository
from .database.base import DatabaseInterface
from .storage.base import CloudFileGateway

logger = get_logger(__name__)


def _title_key(document: Document):
    return (document.display_title.casefold(), document.file_name.casefold())


class LibraryTree:
    """
    Folder/document model of the library.

    The synthetic "All Documents" folder is provided here and never
    reaches the store. Subfolders cascade on delete; documents in a deleted
    folder become unfiled.
    """

    def __init__(self, db_service: DatabaseInterface, gateway: Optional[CloudFileGateway] = None):
        """
        Initialize library tree.

        Args:
            db_service: Persistence collaborator (dependency injection)
            gateway: Synchronized store, or None when files stay local
        """
        self.db = db_service
        self.gateway = gateway
        self.folders = FolderRepository(db_service)
        self.documents = DocumentRepository(db_service)
        self.all_documents_folder = Folder.all_documents()
        self.selection = Selection()
        self._lock = asyncio.Lock()

    # Queries

    async def root_folders(self) -> List[Folder]:
        """The virtual aggregate first, then real root folders ordered by name."""
        return [self.all_documents_folder] + await self.folders.get_children(None)

    async def subfolders(self, folder: Folder) -> List[Folder]:
        if folder.is_virtual:
            return []
        return await self.folders.get_children(folder.id)

    async def documents_in(self, folder: Folder) -> List[Document]:
        """
        Documents shown for a folder.

        The virtual folder shows every document in the store; a real folder
        shows only what it directly contains.
        """
        if folder.is_virtual:
            documents = await self.documents.get_all()
        else:
            documents = await self.documents.get_by_folder(folder.id)
        return sorted(documents, key=_title_key)

    async def unfiled_documents(self) -> List[Document]:
        return sorted(await self.documents.get_by_folder(None), key=_title_key)

    async def get_folder(self, folder_id: str) -> Optional[Folder]:
        if folder_id == ALL_DOCUMENTS_ID:
            return self.all_documents_folder
        return await self.folders.get(folder_id)

    async def get_document(self, doc_id: str) -> Optional[Document]:
        return await self.documents.get(doc_id)

    async def fingerprints(self) -> Set[str]:
        """Snapshot of every stored content hash."""
        return await self.documents.get_all_checksums()

    async def count_documents(self) -> int:
        return await self.documents.count()

    # Mutations

    async def create_folder(self, name: str, parent: Optional[Folder] = None) -> Optional[Folder]:
        """
        Create a folder under parent (a root folder for None).

        Blank names are ignored and return None; callers that need feedback
        validate first. The virtual folder cannot be a parent.
        """
        name = (name or "").strip()
        if not name:
            logger.debug("Ignoring folder creation with blank name")
            return None
        if parent is not None and parent.is_virtual:
            logger.warning(f"Cannot create '{name}' inside the virtual folder")
            return None

        async with self._lock:
            folder = await self.folders.create(Folder.create(name, parent))
            await self.db.save()
        logger.info(f"Created folder '{folder.name}' ({folder.id})")
        return folder

    async def move_folder(self, folder: Folder, new_parent: Optional[Folder]) -> Folder:
        """
        Re-parent a folder (None moves it to the root).

        Raises:
            ValueError: Virtual folder involved, unknown folder, or the move
                would create a cycle
        """
        if folder.is_virtual or (new_parent is not None and new_parent.is_virtual):
            raise ValueError("The virtual folder cannot be moved or used as a parent")

        async with self._lock:
            current = await self.folders.get(folder.id)
            if current is None:
                raise ValueError(f"Folder {folder.id} does not exist")

            ancestor_id = new_parent.id if new_parent else None
            while ancestor_id is not None:
                if ancestor_id == folder.id:
                    raise ValueError("A folder cannot be moved into itself or its subfolders")
                ancestor = await self.folders.get(ancestor_id)
                if ancestor is None:
                    raise ValueError(f"Folder {ancestor_id} does not exist")
                ancestor_id = ancestor.parent_id

            current.parent_id = new_parent.id if new_parent else None
            moved = await self.folders.update(current)
            await self.db.save()
        return moved

    async def delete_folder(self, folder: Folder) -> int:
        """
        Delete a folder and its subfolders. Their documents become unfiled;
        their files are untouched.

        Returns:
            Number of folders deleted
        """
        if folder.is_virtual:
            logger.warning("Ignoring delete of the virtual folder")
            return 0

        async with self._lock:
            deleted = await self.folders.delete(folder.id)
            if deleted:
                await self.db.save()
        logger.info(f"Deleted folder {folder.id} ({deleted} folders removed)")
        return deleted

    async def add_document(self, document: Document) -> Document:
        """
        Insert and commit a single document.

        Raises:
            ValueError: If its content hash is already stored or its folder is gone
        """
        inserted, rejected = await self.commit_documents([document])
        if rejected:
            raise ValueError(f"Document {document.file_name} could not be inserted")
        return inserted[0]

    async def commit_documents(self, documents: List[Document]) -> Tuple[List[Document], List[Document]]:
        """
        Insert a batch of new documents and commit once, holding the lock
        for the whole batch so no other mutation commits part of it.

        A document the store refuses (content hash already stored, folder
        deleted) is returned as rejected and the rest still go in. If the
        commit itself fails, every record inserted here is removed again
        and the error propagates.

        Returns:
            (inserted, rejected) documents
        """
        inserted: List[Document] = []
        rejected: List[Document] = []
        async with self._lock:
            for document in documents:
                try:
                    inserted.append(await self.documents.create(document))
                except ValueError as e:
                    logger.debug(f"Rejected {document.file_name}: {e}")
                    rejected.append(document)
            if not inserted:
                return inserted, rejected
            try:
                await self.db.save()
            except Exception:
                for document in inserted:
                    await self.documents.delete(document.id)
                logger.warning(f"Commit failed, rolled back {len(inserted)} new documents")
                raise
        logger.info(f"Committed {len(inserted)} new documents")
        return inserted, rejected

    async def move_document(self, document: Document, folder: Optional[Folder]) -> Document:
        """File a document into folder; the virtual folder or None unfiles it."""
        async with self._lock:
            current = await self.documents.get(document.id)
            if current is None:
                raise ValueError(f"Document {document.id} does not exist")
            current.folder_id = None if folder is None or folder.is_virtual else folder.id
            moved = await self.documents.update(current)
            await self.db.save()
        return moved

    async def merge_remote_metadata(self, doc_id: str, metadata: RemoteMetadata) -> bool:
        """
        Merge AI fields into a stored document.

        The document is looked up first; one deleted in the meantime is
        skipped.

        Returns:
            True if merged, False if the document no longer exists
        """
        async with self._lock:
            current = await self.documents.get(doc_id)
            if current is None:
                logger.debug(f"Document {doc_id} is gone, discarding AI metadata")
                return False
            current.merge_remote_metadata(metadata)
            await self.documents.update(current)
            await self.db.save()
        return True

    async def _release_file(self, document: Document):
        if not document.is_remote:
            return
        if self.gateway is None:
            logger.warning(f"No store configured, cannot release remote file of {document.id}")
            return
        try:
            await self.gateway.remove(document.locator)
        except CloudStorageError as e:
            logger.warning(f"Could not release remote file of {document.id}: {e}")

    async def delete_document(self, document: Document) -> bool:
        """
        Delete a document. Its remote file is released first; the record is
        removed whatever the outcome of that release.
        """
        async with self._lock:
            await self._release_file(document)
            deleted = await self.documents.delete(document.id)
            if deleted:
                await self.db.save()
        if self.selection.document is not None and self.selection.document.id == document.id:
            self.selection.document = None
        return deleted

    async def delete_all(self) -> int:
        """
        Remove every folder and document, releasing remote files first.
        Clears the selection.
        """
        async with self._lock:
            for document in await self.documents.get_all():
                await self._release_file(document)
            removed = await self.db.delete_all()
            await self.db.save()
        self.selection.clear()
        logger.info(f"Library cleared ({removed} records removed)")
        return removed

    async def save(self):
        """Commit pending mutations."""
        async with self._lock:
            await self.db.save()
