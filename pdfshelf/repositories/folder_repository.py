"""
Folder Repository - Concrete implementation of folder data access.
"""
from datetime import datetime
from typing import List, Optional

from .interfaces import IFolderRepository
from ..domain.entities import Folder
from ..domain.value_objects import DEFAULT_FOLDER_ICON, FolderId
from ..services.database.base import DatabaseInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class FolderRepository(IFolderRepository):
    """
    Repository for folder data access.
    Maps domain entities to database records.
    """

    def __init__(self, db_service: DatabaseInterface):
        """
        Initialize repository with database service.

        Args:
            db_service: Database adapter (dependency injection)
        """
        self._db = db_service

    def _to_entity(self, data: dict) -> Folder:
        """Convert database record to domain entity."""
        return Folder(
            id=FolderId(data["id"]),
            name=data["name"],
            icon=data.get("icon") or DEFAULT_FOLDER_ICON,
            parent_id=data.get("parent_id"),
            created_date=datetime.fromisoformat(data["created_date"]) if data.get("created_date") else datetime.now()
        )

    def _to_dict(self, folder: Folder) -> dict:
        """Convert domain entity to database record."""
        return {
            "id": str(folder.id),
            "name": folder.name,
            "icon": folder.icon,
            "parent_id": str(folder.parent_id) if folder.parent_id else None,
            "created_date": folder.created_date.isoformat()
        }

    async def create(self, folder: Folder) -> Folder:
        if folder.is_virtual:
            raise ValueError("Virtual folders are never persisted")
        result = await self._db.create_folder(self._to_dict(folder))
        return self._to_entity(result)

    async def get(self, folder_id: str) -> Optional[Folder]:
        data = await self._db.get_folder(folder_id)
        return self._to_entity(data) if data else None

    async def get_children(self, parent_id: Optional[str]) -> List[Folder]:
        """Folders directly under parent_id (root folders for None), ordered by name."""
        records = await self._db.get_subfolders(parent_id)
        folders = [self._to_entity(data) for data in records]
        return sorted(folders, key=lambda f: (f.name.casefold(), f.name))

    async def get_all(self) -> List[Folder]:
        return [self._to_entity(data) for data in await self._db.get_all_folders()]

    async def update(self, folder: Folder) -> Optional[Folder]:
        data = self._to_dict(folder)
        data.pop("id")
        result = await self._db.update_folder(str(folder.id), data)
        return self._to_entity(result) if result else None

    async def delete(self, folder_id: str) -> int:
        return await self._db.delete_folder(folder_id)
