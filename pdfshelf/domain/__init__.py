"""
Domain layer - Contains library entities and domain logic.
This layer is independent of infrastructure and frameworks.
"""
from .entities import Document, Folder, Locator, LocalMetadata, RemoteMetadata, Selection
from .value_objects import ALL_DOCUMENTS_ID, ContentHash, DocumentId, FolderId

__all__ = [
    "Document",
    "Folder",
    "Locator",
    "LocalMetadata",
    "RemoteMetadata",
    "Selection",
    "ALL_DOCUMENTS_ID",
    "ContentHash",
    "DocumentId",
    "FolderId"
]
