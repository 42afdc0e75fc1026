"""
Document Repository - Concrete implementation of document data access.
"""
import base64
from datetime import date, datetime
from typing import List, Optional, Set

from .interfaces import IDocumentRepository
from ..domain.entities import Document, Locator
from ..domain.value_objects import ContentHash, DocumentId
from ..services.database.base import DatabaseInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


class DocumentRepository(IDocumentRepository):
    """
    Repository for document data access.
    Maps domain entities to JSON-safe database records.
    """

    def __init__(self, db_service: DatabaseInterface):
        """
        Initialize repository with database service.

        Args:
            db_service: Database adapter (dependency injection)
        """
        self._db = db_service

    def _to_entity(self, data: dict) -> Document:
        """Convert database record to domain entity."""
        locator = data.get("locator")
        thumbnail = data.get("thumbnail")
        return Document(
            id=DocumentId(data["id"]),
            file_name=data.get("file_name", ""),
            content_hash=ContentHash(data.get("checksum") or ""),
            locator=Locator(path=locator["path"], is_remote=bool(locator.get("is_remote"))) if locator else None,
            folder_id=data.get("folder_id"),
            title=data.get("title"),
            author=data.get("author"),
            subject=data.get("subject"),
            creator=data.get("creator"),
            producer=data.get("producer"),
            keywords=list(data.get("keywords") or []),
            page_count=data.get("page_count") or 0,
            page_width=data.get("page_width"),
            page_height=data.get("page_height"),
            page_rotation=data.get("page_rotation"),
            is_encrypted=bool(data.get("is_encrypted")),
            file_size=data.get("file_size") or "0 KB",
            last_modified=_parse_datetime(data.get("last_modified")) or datetime.now(),
            pdf_creation_date=_parse_datetime(data.get("pdf_creation_date")),
            pdf_modification_date=_parse_datetime(data.get("pdf_modification_date")),
            thumbnail=base64.b64decode(thumbnail) if thumbnail else None,
            ai_title=data.get("ai_title"),
            ai_author=data.get("ai_author"),
            ai_creation_date=_parse_date(data.get("ai_creation_date")),
            ai_summary=data.get("ai_summary"),
            ai_keywords=list(data.get("ai_keywords") or []),
        )

    def _to_dict(self, document: Document) -> dict:
        """Convert domain entity to database record."""
        locator = document.locator
        return {
            "id": str(document.id),
            "file_name": document.file_name,
            "checksum": str(document.content_hash),
            "locator": {"path": locator.path, "is_remote": locator.is_remote} if locator else None,
            "folder_id": str(document.folder_id) if document.folder_id else None,
            "title": document.title,
            "author": document.author,
            "subject": document.subject,
            "creator": document.creator,
            "producer": document.producer,
            "keywords": list(document.keywords),
            "page_count": document.page_count,
            "page_width": document.page_width,
            "page_height": document.page_height,
            "page_rotation": document.page_rotation,
            "is_encrypted": document.is_encrypted,
            "file_size": document.file_size,
            "last_modified": _iso(document.last_modified),
            "pdf_creation_date": _iso(document.pdf_creation_date),
            "pdf_modification_date": _iso(document.pdf_modification_date),
            "thumbnail": base64.b64encode(document.thumbnail).decode("ascii") if document.thumbnail else None,
            "ai_title": document.ai_title,
            "ai_author": document.ai_author,
            "ai_creation_date": _iso(document.ai_creation_date),
            "ai_summary": document.ai_summary,
            "ai_keywords": list(document.ai_keywords),
        }

    async def create(self, document: Document) -> Document:
        result = await self._db.create_document(self._to_dict(document))
        return self._to_entity(result)

    async def get(self, doc_id: str) -> Optional[Document]:
        data = await self._db.get_document(doc_id)
        return self._to_entity(data) if data else None

    async def get_all(self) -> List[Document]:
        return [self._to_entity(data) for data in await self._db.get_all_documents()]

    async def get_by_folder(self, folder_id: Optional[str]) -> List[Document]:
        return [self._to_entity(data) for data in await self._db.get_documents_by_folder(folder_id)]

    async def update(self, document: Document) -> Optional[Document]:
        data = self._to_dict(document)
        data.pop("id")
        result = await self._db.update_document(str(document.id), data)
        return self._to_entity(result) if result else None

    async def delete(self, doc_id: str) -> bool:
        return await self._db.delete_document(doc_id)

    async def get_all_checksums(self) -> Set[str]:
        return await self._db.get_all_checksums()

    async def count(self) -> int:
        return await self._db.count_documents()
