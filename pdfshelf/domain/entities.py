"""
Domain entities - Core business objects.
These represent the library concepts, not database models.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional
import uuid

from .value_objects import (
    ALL_DOCUMENTS_ICON,
    ALL_DOCUMENTS_ID,
    ALL_DOCUMENTS_NAME,
    DEFAULT_FOLDER_ICON,
    ContentHash,
    DocumentId,
    FolderId,
)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Locator:
    """
    Stored reference to a document's file.

    A remote locator holds a path relative to the synchronized store
    directory; a local locator holds an absolute path.
    """
    path: str
    is_remote: bool = False

    @classmethod
    def remote(cls, relative_path: str) -> "Locator":
        return cls(path=relative_path, is_remote=True)

    @classmethod
    def local(cls, absolute_path: str) -> "Locator":
        return cls(path=absolute_path, is_remote=False)


@dataclass
class LocalMetadata:
    """Fields read from the PDF itself. Empty defaults mean 'not found'."""
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    page_count: int = 0
    page_width: Optional[float] = None
    page_height: Optional[float] = None
    page_rotation: Optional[int] = None
    is_encrypted: bool = False
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
    thumbnail: Optional[bytes] = None


@dataclass
class RemoteMetadata:
    """Fields returned by the AI provider."""
    title: Optional[str] = None
    author: Optional[str] = None
    creation_date: Optional[date] = None
    summary: Optional[str] = None
    keywords: List[str] = field(default_factory=list)


@dataclass
class Folder:
    """
    Folder entity - a node of the library tree.
    Subfolders are owned (cascade on delete); documents are not (unfiled on delete).
    """
    id: FolderId
    name: str
    icon: str = DEFAULT_FOLDER_ICON
    parent_id: Optional[FolderId] = None
    is_virtual: bool = False
    created_date: datetime = field(default_factory=datetime.now)

    def is_root(self) -> bool:
        """Check if folder sits at the top of the tree."""
        return self.parent_id is None

    @classmethod
    def create(cls, name: str, parent: Optional["Folder"] = None,
               icon: str = DEFAULT_FOLDER_ICON) -> "Folder":
        return cls(
            id=FolderId(new_id()),
            name=name,
            icon=icon,
            parent_id=parent.id if parent else None,
        )

    @classmethod
    def all_documents(cls) -> "Folder":
        """The synthetic aggregate folder. Never persisted."""
        return cls(
            id=ALL_DOCUMENTS_ID,
            name=ALL_DOCUMENTS_NAME,
            icon=ALL_DOCUMENTS_ICON,
            is_virtual=True,
            created_date=datetime.min,
        )


@dataclass
class Document:
    """
    Document entity - one imported PDF.
    The content hash is unique across the library.
    """
    id: DocumentId
    file_name: str
    content_hash: ContentHash = ContentHash("")
    locator: Optional[Locator] = None
    folder_id: Optional[FolderId] = None
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    page_count: int = 0
    page_width: Optional[float] = None
    page_height: Optional[float] = None
    page_rotation: Optional[int] = None
    is_encrypted: bool = False
    file_size: str = "0 KB"
    last_modified: datetime = field(default_factory=datetime.now)
    pdf_creation_date: Optional[datetime] = None
    pdf_modification_date: Optional[datetime] = None
    thumbnail: Optional[bytes] = None
    ai_title: Optional[str] = None
    ai_author: Optional[str] = None
    ai_creation_date: Optional[date] = None
    ai_summary: Optional[str] = None
    ai_keywords: List[str] = field(default_factory=list)

    @property
    def display_title(self) -> str:
        return self.title or self.ai_title or self.file_name

    @property
    def is_remote(self) -> bool:
        return self.locator is not None and self.locator.is_remote

    def is_unfiled(self) -> bool:
        return self.folder_id is None

    def apply_local_metadata(self, metadata: LocalMetadata):
        """Copy parsed PDF fields onto the document, keeping values already set."""
        for attr in ("title", "author", "subject", "creator", "producer"):
            value = getattr(metadata, attr)
            if value and not getattr(self, attr):
                setattr(self, attr, value)
        if metadata.keywords and not self.keywords:
            self.keywords = list(metadata.keywords)
        if metadata.page_count:
            self.page_count = metadata.page_count
        if metadata.page_width is not None:
            self.page_width = metadata.page_width
        if metadata.page_height is not None:
            self.page_height = metadata.page_height
        if metadata.page_rotation is not None:
            self.page_rotation = metadata.page_rotation
        self.is_encrypted = self.is_encrypted or metadata.is_encrypted
        if metadata.creation_date and not self.pdf_creation_date:
            self.pdf_creation_date = metadata.creation_date
        if metadata.modification_date and not self.pdf_modification_date:
            self.pdf_modification_date = metadata.modification_date
        if metadata.thumbnail and not self.thumbnail:
            self.thumbnail = metadata.thumbnail

    def merge_remote_metadata(self, metadata: RemoteMetadata):
        """
        Merge AI-extracted fields.

        AI fields are only ever set, never cleared. Title and author from the
        PDF itself win; the AI values fill them only when the PDF had none.
        """
        if metadata.title:
            self.ai_title = metadata.title
            if not self.title:
                self.title = metadata.title
        if metadata.author:
            self.ai_author = metadata.author
            if not self.author:
                self.author = metadata.author
        if metadata.creation_date:
            self.ai_creation_date = metadata.creation_date
        if metadata.summary:
            self.ai_summary = metadata.summary
        if metadata.keywords:
            self.ai_keywords = list(metadata.keywords)


@dataclass
class Selection:
    """Currently selected folder and document, as seen by the presentation layer."""
    folder: Optional[Folder] = None
    document: Optional[Document] = None

    def clear(self):
        self.folder = None
        self.document = None
