"""
Abstract base class for database adapters.
All database implementations must inherit from this class.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set

from ...core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """Emitted after the store commits. `source` is 'local' or 'external'."""
    source: str = "local"
    timestamp: datetime = field(default_factory=datetime.now)


ChangeListener = Callable[[ChangeEvent], None]


class DatabaseInterface(ABC):
    """
    Abstract interface for library persistence.

    Records are plain dicts keyed by "id". Folder -> Folder ownership
    cascades on delete; Folder -> Document containment is detached
    (documents become unfiled). Mutations are held in the adapter until
    save() commits them; every commit is announced on the change channel.
    """

    def __init__(self):
        self._listeners: List[ChangeListener] = []

    @abstractmethod
    async def initialize(self):
        """Initialize database (load files, create structures, etc.)."""
        pass

    @abstractmethod
    async def close(self):
        """Close database (flush pending data, release resources)."""
        pass

    # Folder operations
    @abstractmethod
    async def create_folder(self, folder_data: Dict) -> Dict:
        """
        Create a folder record.

        Args:
            folder_data: Folder record with 'id', 'name' and optional 'parent_id'

        Returns:
            Created folder record

        Raises:
            ValueError: If the id is missing or the parent does not exist
        """
        pass

    @abstractmethod
    async def get_folder(self, folder_id: str) -> Optional[Dict]:
        """Get a folder by id, or None."""
        pass

    @abstractmethod
    async def get_all_folders(self) -> List[Dict]:
        """Get every folder record."""
        pass

    @abstractmethod
    async def get_subfolders(self, parent_id: Optional[str]) -> List[Dict]:
        """Get folders whose parent is parent_id (None for root folders)."""
        pass

    @abstractmethod
    async def update_folder(self, folder_id: str, updates: Dict) -> Optional[Dict]:
        """Update a folder. Returns the updated record, or None if not found."""
        pass

    @abstractmethod
    async def delete_folder(self, folder_id: str) -> int:
        """
        Delete a folder and its subfolders.
        Documents inside any deleted folder become unfiled.

        Returns:
            Number of folders deleted (0 if not found)
        """
        pass

    # Document operations
    @abstractmethod
    async def create_document(self, doc_data: Dict) -> Dict:
        """
        Create a document record.

        Raises:
            ValueError: If the id is missing or the checksum is already stored
        """
        pass

    @abstractmethod
    async def get_document(self, doc_id: str) -> Optional[Dict]:
        """Get a document by id, or None."""
        pass

    @abstractmethod
    async def get_all_documents(self) -> List[Dict]:
        """Get every document record."""
        pass

    @abstractmethod
    async def get_documents_by_folder(self, folder_id: Optional[str]) -> List[Dict]:
        """Get documents directly contained in folder_id (None for unfiled)."""
        pass

    @abstractmethod
    async def update_document(self, doc_id: str, updates: Dict) -> Optional[Dict]:
        """Update a document. Returns the updated record, or None if not found."""
        pass

    @abstractmethod
    async def delete_document(self, doc_id: str) -> bool:
        """Delete a document. Returns False if not found."""
        pass

    @abstractmethod
    async def find_document_by_checksum(self, checksum: str) -> Optional[Dict]:
        """Find a document by content checksum."""
        pass

    @abstractmethod
    async def get_all_checksums(self) -> Set[str]:
        """Get the set of every stored content checksum."""
        pass

    @abstractmethod
    async def count_documents(self) -> int:
        """Count stored documents."""
        pass

    @abstractmethod
    async def delete_all(self) -> int:
        """Delete every folder and document. Returns number of records removed."""
        pass

    @abstractmethod
    async def save(self):
        """Commit pending mutations and notify subscribers."""
        pass

    async def check_for_external_changes(self) -> bool:
        """
        Pick up writes made by another process (e.g. a sync client).

        Returns:
            True if the store was reloaded and subscribers were notified
        """
        return False

    # Change channel
    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register a listener for committed changes.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: ChangeEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Change listener {listener!r} failed: {e}", exc_info=True)
