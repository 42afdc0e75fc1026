"""
Folders Router - Handles folder tree operations.

Example Usage:
    GET /folders - Root folders, "All Documents" first
    GET /folders/{folder_id}/documents - Documents shown for a folder
    POST /folders - Create folder
    DELETE /folders/{folder_id} - Delete folder (documents become unfiled)
"""
from fastapi import APIRouter, HTTPException, Form
from typing import List, Optional

from ..api.dto import DocumentDTO, FolderDTO
from ..api.exceptions import FolderNotFoundError, InvalidFolderNameError, handle_business_exception
from ..api.mappers import DocumentMapper, FolderMapper
from ..domain.entities import Folder
from ..services.library_tree import LibraryTree
from .dependencies import get_library_tree
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def resolve_folder(tree: LibraryTree, folder_id: Optional[str]) -> Optional[Folder]:
    """Look up a folder by id; None stays None (root / unfiled)."""
    if not folder_id:
        return None
    folder = await tree.get_folder(folder_id)
    if folder is None:
        raise FolderNotFoundError(f"Folder {folder_id} not found")
    return folder


@router.get("/folders", response_model=List[FolderDTO])
async def get_root_folders():
    """Root folders ordered by name, prefixed with the virtual "All Documents" folder."""
    tree = get_library_tree()
    return FolderMapper.to_dto_list(await tree.root_folders())


@router.get("/folders/{folder_id}/subfolders", response_model=List[FolderDTO])
async def get_subfolders(folder_id: str):
    tree = get_library_tree()
    try:
        folder = await resolve_folder(tree, folder_id)
        return FolderMapper.to_dto_list(await tree.subfolders(folder))
    except FolderNotFoundError as e:
        raise handle_business_exception(e)


@router.get("/folders/{folder_id}/documents", response_model=List[DocumentDTO])
async def get_folder_documents(folder_id: str):
    """
    Documents shown for a folder.

    For the virtual folder this is every document in the library; for a
    real folder, only the documents it directly contains.
    """
    tree = get_library_tree()
    try:
        folder = await resolve_folder(tree, folder_id)
        return DocumentMapper.to_dto_list(await tree.documents_in(folder))
    except FolderNotFoundError as e:
        raise handle_business_exception(e)


@router.post("/folders", response_model=FolderDTO, status_code=201)
async def create_folder(
    name: str = Form(...),
    parent_id: Optional[str] = Form(None)
):
    """Create a folder; without parent_id it becomes a root folder."""
    tree = get_library_tree()
    try:
        if not name.strip():
            raise InvalidFolderNameError("Folder name cannot be empty")
        parent = await resolve_folder(tree, parent_id)
        if parent is not None and parent.is_virtual:
            raise InvalidFolderNameError(f"Cannot create folders inside '{parent.name}'")

        folder = await tree.create_folder(name, parent)
        return FolderMapper.to_dto(folder)
    except (FolderNotFoundError, InvalidFolderNameError, ValueError) as e:
        raise handle_business_exception(e)
    except Exception as e:
        logger.error(f"Folder creation failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Folder creation failed: {str(e)}")


@router.put("/folders/{folder_id}/move", response_model=FolderDTO)
async def move_folder(folder_id: str, parent_id: Optional[str] = Form(None)):
    """Re-parent a folder; without parent_id it moves to the root."""
    tree = get_library_tree()
    try:
        folder = await resolve_folder(tree, folder_id)
        new_parent = await resolve_folder(tree, parent_id)
        return FolderMapper.to_dto(await tree.move_folder(folder, new_parent))
    except (FolderNotFoundError, ValueError) as e:
        raise handle_business_exception(e)


@router.delete("/folders/{folder_id}")
async def delete_folder(folder_id: str):
    """
    Delete a folder and its subfolders.
    Contained documents become unfiled; their files are untouched.
    """
    tree = get_library_tree()
    try:
        folder = await resolve_folder(tree, folder_id)
        if folder.is_virtual:
            raise InvalidFolderNameError(f"'{folder.name}' cannot be deleted")
        deleted = await tree.delete_folder(folder)
        return {
            "message": "Folder deleted successfully",
            "folder_id": folder_id,
            "folders_deleted": deleted
        }
    except (FolderNotFoundError, InvalidFolderNameError) as e:
        raise handle_business_exception(e)
