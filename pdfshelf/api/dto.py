"""
Data Transfer Objects (DTOs) for API layer.
Separates API contracts from domain entities.
"""
from pydantic import BaseModel
from typing import List, Optional, Dict


class FolderDTO(BaseModel):
    """Folder DTO for API responses."""
    id: str
    name: str
    icon: str
    parent_id: Optional[str]
    is_virtual: bool = False
    created_date: str

    class Config:
        from_attributes = True


class DocumentDTO(BaseModel):
    """Document DTO for API responses."""
    id: str
    file_name: str
    display_title: str
    content_hash: str
    folder_id: Optional[str]
    locator_path: Optional[str]
    is_remote: bool
    title: Optional[str]
    author: Optional[str]
    subject: Optional[str]
    creator: Optional[str]
    producer: Optional[str]
    keywords: List[str] = []
    page_count: int = 0
    page_width: Optional[float]
    page_height: Optional[float]
    page_rotation: Optional[int]
    is_encrypted: bool = False
    file_size: str
    last_modified: str
    pdf_creation_date: Optional[str]
    pdf_modification_date: Optional[str]
    has_thumbnail: bool = False
    ai_title: Optional[str]
    ai_author: Optional[str]
    ai_creation_date: Optional[str]
    ai_summary: Optional[str]
    ai_keywords: List[str] = []

    class Config:
        from_attributes = True


class ImportRequest(BaseModel):
    """Request body for an import batch."""
    sources: List[str]
    folder_id: Optional[str] = None


class ImportReportDTO(BaseModel):
    """Response DTO for an import batch."""
    total_files: int
    imported: int
    duplicates: int
    failed: int
    remote_copies: int
    local_fallbacks: int
    enrichment_queued: int
    document_ids: List[str]
    errors: List[Dict[str, str]]


class SelectionRequest(BaseModel):
    """Request body for changing the selection."""
    folder_id: Optional[str] = None
    document_id: Optional[str] = None


class SelectionDTO(BaseModel):
    """Current selection."""
    folder: Optional[FolderDTO] = None
    document: Optional[DocumentDTO] = None


class StoreStatusDTO(BaseModel):
    """Synchronized store diagnosis."""
    storage_type: str
    status: str
    description: str
    is_ready: bool
    directory: Optional[str] = None


class ConnectionTestDTO(BaseModel):
    """Result of the AI connection test."""
    ok: bool
    model: Optional[str] = None
    error: Optional[str] = None


class ErrorResponseDTO(BaseModel):
    """Error response DTO."""
    error: str
    detail: Optional[str] = None
    code: Optional[str] = None
