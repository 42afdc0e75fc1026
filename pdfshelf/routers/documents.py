"""
Documents Router - Handles document operations.

Example Usage:
    GET /documents/{doc_id} - Get document
    GET /documents/{doc_id}/thumbnail - First-page thumbnail (PNG)
    PUT /documents/{doc_id}/move - File into a folder
    POST /documents/{doc_id}/ensure-local - Trigger download from the store
    DELETE /documents/{doc_id} - Delete document and its store file
    DELETE /documents - Delete everything
"""
from fastapi import APIRouter, Form, Response
from typing import Optional

from ..api.dto import DocumentDTO
from ..api.exceptions import DocumentNotFoundError, FolderNotFoundError, handle_business_exception
from ..api.mappers import DocumentMapper
from ..domain.entities import Document
from ..domain.exceptions import CloudStorageError, StoreUnavailable
from ..services.library_tree import LibraryTree
from .dependencies import get_gateway, get_library_tree
from .folders import resolve_folder
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def resolve_document(tree: LibraryTree, doc_id: str) -> Document:
    document = await tree.get_document(doc_id)
    if document is None:
        raise DocumentNotFoundError(f"Document {doc_id} not found")
    return document


@router.get("/documents/{doc_id}", response_model=DocumentDTO)
async def get_document(doc_id: str):
    tree = get_library_tree()
    try:
        return DocumentMapper.to_dto(await resolve_document(tree, doc_id))
    except DocumentNotFoundError as e:
        raise handle_business_exception(e)


@router.get("/documents/{doc_id}/thumbnail")
async def get_thumbnail(doc_id: str):
    tree = get_library_tree()
    try:
        document = await resolve_document(tree, doc_id)
        if not document.thumbnail:
            raise DocumentNotFoundError(f"Document {doc_id} has no thumbnail")
    except DocumentNotFoundError as e:
        raise handle_business_exception(e)
    return Response(content=document.thumbnail, media_type="image/png")


@router.put("/documents/{doc_id}/move", response_model=DocumentDTO)
async def move_document(doc_id: str, folder_id: Optional[str] = Form(None)):
    """File a document into a folder; no folder (or "All Documents") unfiles it."""
    tree = get_library_tree()
    try:
        document = await resolve_document(tree, doc_id)
        folder = await resolve_folder(tree, folder_id)
        return DocumentMapper.to_dto(await tree.move_document(document, folder))
    except (DocumentNotFoundError, FolderNotFoundError, ValueError) as e:
        raise handle_business_exception(e)


@router.post("/documents/{doc_id}/ensure-local")
async def ensure_local(doc_id: str):
    """
    Make sure the document's file is on this device.
    Returns once a download is requested, not when it completes.
    """
    tree = get_library_tree()
    gateway = get_gateway()
    try:
        document = await resolve_document(tree, doc_id)
        if not document.is_remote:
            return {"document_id": doc_id, "status": "local", "path": document.locator.path if document.locator else None}
        if gateway is None:
            raise StoreUnavailable("No synchronized store configured")
        await gateway.ensure_local(document.locator)
        path = gateway.resolve_path(document.locator)
        return {
            "document_id": doc_id,
            "status": "available" if path.exists() else "requested",
            "path": str(path)
        }
    except (DocumentNotFoundError, CloudStorageError) as e:
        raise handle_business_exception(e)


@router.delete("/documents/{doc_id}")
async def delete_document(doc_id: str):
    """Delete a document. Its store file is released first."""
    tree = get_library_tree()
    try:
        document = await resolve_document(tree, doc_id)
        await tree.delete_document(document)
        return {"message": "Document deleted successfully", "document_id": doc_id}
    except DocumentNotFoundError as e:
        raise handle_business_exception(e)


@router.delete("/documents")
async def delete_all_documents():
    """Delete every folder and document, releasing store files."""
    tree = get_library_tree()
    removed = await tree.delete_all()
    return {"message": "Library cleared", "records_removed": removed}
