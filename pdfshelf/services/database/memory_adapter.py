"""
In-memory adapter implementing DatabaseInterface.
Perfect for demos and testing - stores all data in memory using Python dicts.
Data is lost on restart.
"""
from typing import Dict, List, Optional, Set
from datetime import datetime
import copy

from .base import ChangeEvent, DatabaseInterface
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class MemoryAdapter(DatabaseInterface):
    """
    In-memory database adapter using Python dictionaries.
    Keeps a checksum index for dedup lookups and a folder index for containment.
    """

    def __init__(self):
        super().__init__()
        self._documents: Dict[str, Dict] = {}
        self._folders: Dict[str, Dict] = {}

        # Indexes for fast lookups
        self._checksum_index: Dict[str, str] = {}  # checksum -> doc_id
        self._folder_index: Dict[Optional[str], List[str]] = {}  # folder_id -> [doc_ids]

        self._dirty = False

    async def initialize(self):
        """Initialize database (clears any existing data)."""
        self._reset({}, {})

    async def close(self):
        """Close database connection (no-op for in-memory)."""
        pass

    def _reset(self, folders: Dict[str, Dict], documents: Dict[str, Dict]):
        self._folders = folders
        self._documents = documents
        self._checksum_index.clear()
        self._folder_index.clear()
        for doc_id, doc in self._documents.items():
            if doc.get("checksum"):
                self._checksum_index[doc["checksum"]] = doc_id
            self._folder_index.setdefault(doc.get("folder_id"), []).append(doc_id)
        self._dirty = False

    def _index_document_folder(self, doc_id: str, old_folder: Optional[str], new_folder: Optional[str]):
        if old_folder in self._folder_index and doc_id in self._folder_index[old_folder]:
            self._folder_index[old_folder].remove(doc_id)
        self._folder_index.setdefault(new_folder, [])
        if doc_id not in self._folder_index[new_folder]:
            self._folder_index[new_folder].append(doc_id)

    # Folder operations
    async def create_folder(self, folder_data: Dict) -> Dict:
        folder_id = folder_data.get("id")
        if not folder_id:
            raise ValueError("Folder must have an 'id' field")
        parent_id = folder_data.get("parent_id")
        if parent_id is not None and parent_id not in self._folders:
            raise ValueError(f"Parent folder '{parent_id}' does not exist")

        now = datetime.now().isoformat()
        folder_data.setdefault("created_date", now)
        folder_data.setdefault("updated_at", now)

        self._folders[folder_id] = copy.deepcopy(folder_data)
        self._dirty = True
        return copy.deepcopy(self._folders[folder_id])

    async def get_folder(self, folder_id: str) -> Optional[Dict]:
        folder = self._folders.get(folder_id)
        return copy.deepcopy(folder) if folder else None

    async def get_all_folders(self) -> List[Dict]:
        return [copy.deepcopy(folder) for folder in self._folders.values()]

    async def get_subfolders(self, parent_id: Optional[str]) -> List[Dict]:
        return [
            copy.deepcopy(folder)
            for folder in self._folders.values()
            if folder.get("parent_id") == parent_id
        ]

    async def update_folder(self, folder_id: str, updates: Dict) -> Optional[Dict]:
        if folder_id not in self._folders:
            return None
        parent_id = updates.get("parent_id")
        if "parent_id" in updates and parent_id is not None and parent_id not in self._folders:
            raise ValueError(f"Parent folder '{parent_id}' does not exist")

        folder = self._folders[folder_id]
        folder.update(copy.deepcopy(updates))
        folder["updated_at"] = datetime.now().isoformat()
        self._dirty = True
        return copy.deepcopy(folder)

    def _descendant_ids(self, folder_id: str) -> List[str]:
        """Folder ids of folder_id and everything beneath it, parents first."""
        ordered = [folder_id]
        index = 0
        while index < len(ordered):
            current = ordered[index]
            ordered.extend(
                fid for fid, folder in self._folders.items()
                if folder.get("parent_id") == current and fid not in ordered
            )
            index += 1
        return ordered

    async def delete_folder(self, folder_id: str) -> int:
        if folder_id not in self._folders:
            return 0

        doomed = self._descendant_ids(folder_id)
        for fid in doomed:
            # Detach, don't cascade: documents survive as unfiled
            for doc_id in list(self._folder_index.get(fid, [])):
                self._documents[doc_id]["folder_id"] = None
                self._index_document_folder(doc_id, fid, None)
            self._folder_index.pop(fid, None)
            del self._folders[fid]

        self._dirty = True
        logger.debug(f"Deleted folder {folder_id} with {len(doomed) - 1} subfolders")
        return len(doomed)

    # Document operations
    async def create_document(self, doc_data: Dict) -> Dict:
        doc_id = doc_data.get("id")
        if not doc_id:
            raise ValueError("Document must have an 'id' field")
        checksum = doc_data.get("checksum")
        if checksum and checksum in self._checksum_index:
            raise ValueError(f"Document with checksum {checksum} already exists")
        folder_id = doc_data.get("folder_id")
        if folder_id is not None and folder_id not in self._folders:
            raise ValueError(f"Folder '{folder_id}' does not exist")

        now = datetime.now().isoformat()
        doc_data.setdefault("created_at", now)
        doc_data.setdefault("updated_at", now)

        self._documents[doc_id] = copy.deepcopy(doc_data)
        if checksum:
            self._checksum_index[checksum] = doc_id
        self._index_document_folder(doc_id, None, folder_id)
        self._dirty = True
        return copy.deepcopy(self._documents[doc_id])

    async def get_document(self, doc_id: str) -> Optional[Dict]:
        doc = self._documents.get(doc_id)
        return copy.deepcopy(doc) if doc else None

    async def get_all_documents(self) -> List[Dict]:
        return [copy.deepcopy(doc) for doc in self._documents.values()]

    async def get_documents_by_folder(self, folder_id: Optional[str]) -> List[Dict]:
        doc_ids = self._folder_index.get(folder_id, [])
        return [copy.deepcopy(self._documents[doc_id]) for doc_id in doc_ids if doc_id in self._documents]

    async def update_document(self, doc_id: str, updates: Dict) -> Optional[Dict]:
        if doc_id not in self._documents:
            return None

        doc = self._documents[doc_id]
        old_checksum = doc.get("checksum")
        old_folder = doc.get("folder_id")

        new_checksum = updates.get("checksum", old_checksum)
        if new_checksum != old_checksum and new_checksum in self._checksum_index:
            raise ValueError(f"Document with checksum {new_checksum} already exists")
        new_folder = updates.get("folder_id", old_folder)
        if new_folder != old_folder and new_folder is not None and new_folder not in self._folders:
            raise ValueError(f"Folder '{new_folder}' does not exist")

        doc.update(copy.deepcopy(updates))
        doc["updated_at"] = datetime.now().isoformat()

        if new_checksum != old_checksum:
            self._checksum_index.pop(old_checksum, None)
            if new_checksum:
                self._checksum_index[new_checksum] = doc_id
        if new_folder != old_folder:
            self._index_document_folder(doc_id, old_folder, new_folder)

        self._dirty = True
        return copy.deepcopy(doc)

    async def delete_document(self, doc_id: str) -> bool:
        if doc_id not in self._documents:
            return False

        doc = self._documents.pop(doc_id)
        checksum = doc.get("checksum")
        if checksum and self._checksum_index.get(checksum) == doc_id:
            del self._checksum_index[checksum]
        folder_id = doc.get("folder_id")
        if doc_id in self._folder_index.get(folder_id, []):
            self._folder_index[folder_id].remove(doc_id)

        self._dirty = True
        return True

    async def find_document_by_checksum(self, checksum: str) -> Optional[Dict]:
        doc_id = self._checksum_index.get(checksum)
        if doc_id and doc_id in self._documents:
            return copy.deepcopy(self._documents[doc_id])
        return None

    async def get_all_checksums(self) -> Set[str]:
        return set(self._checksum_index)

    async def count_documents(self) -> int:
        return len(self._documents)

    async def delete_all(self) -> int:
        removed = len(self._folders) + len(self._documents)
        self._reset({}, {})
        self._dirty = True
        return removed

    async def save(self):
        """Commit (nothing to write for in-memory) and notify subscribers."""
        self._dirty = False
        self._notify(ChangeEvent(source="local"))
