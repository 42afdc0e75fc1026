"""
Imports Router - Handles import batches and selection state.
"""
from fastapi import APIRouter

from ..api.dto import ImportReportDTO, ImportRequest, SelectionDTO, SelectionRequest
from ..api.exceptions import DocumentNotFoundError, FolderNotFoundError, handle_business_exception
from ..api.mappers import ImportReportMapper, SelectionMapper
from .dependencies import get_ai_config, get_import_pipeline, get_library_tree, get_sync_reconciler
from .folders import resolve_folder
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/imports", response_model=ImportReportDTO)
async def import_documents(request: ImportRequest):
    """
    Import PDFs by path into a folder.

    Files already in the library (same content) are skipped. AI enrichment
    continues after the response is sent.
    """
    tree = get_library_tree()
    pipeline = get_import_pipeline()
    try:
        folder = await resolve_folder(tree, request.folder_id)
    except FolderNotFoundError as e:
        raise handle_business_exception(e)

    logger.info(f"Import requested: {len(request.sources)} files")
    report = await pipeline.import_files(request.sources, folder, get_ai_config())
    return ImportReportMapper.to_dto(report)


@router.get("/selection", response_model=SelectionDTO)
async def get_selection():
    """Current selection, re-validated by any pending tree refresh."""
    await get_sync_reconciler().wait_for_refresh()
    return SelectionMapper.to_dto(get_library_tree().selection)


@router.put("/selection", response_model=SelectionDTO)
async def update_selection(request: SelectionRequest):
    """Select a folder and/or document; unknown ids are rejected."""
    tree = get_library_tree()
    reconciler = get_sync_reconciler()
    try:
        if request.folder_id is not None or request.document_id is None:
            folder = await reconciler.select_folder(request.folder_id)
            if request.folder_id is not None and folder is None:
                raise FolderNotFoundError(f"Folder {request.folder_id} not found")
        if request.document_id is not None:
            document = await reconciler.select_document(request.document_id)
            if document is None:
                raise DocumentNotFoundError(f"Document {request.document_id} not found")
    except (FolderNotFoundError, DocumentNotFoundError) as e:
        raise handle_business_exception(e)
    return SelectionMapper.to_dto(tree.selection)
