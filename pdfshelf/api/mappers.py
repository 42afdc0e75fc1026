"""
Mappers between domain entities and DTOs.
Separates domain layer from API layer.
"""
from typing import List, Optional
from ..domain.entities import Document, Folder, Selection
from ..services.import_pipeline import ImportReport, ImportStatus
from ..services.storage.base import StoreDiagnosis
from .dto import DocumentDTO, FolderDTO, ImportReportDTO, SelectionDTO, StoreStatusDTO


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


class FolderMapper:
    """Maps between Folder entity and FolderDTO."""

    @staticmethod
    def to_dto(folder: Folder) -> FolderDTO:
        """Convert domain entity to DTO."""
        return FolderDTO(
            id=str(folder.id),
            name=folder.name,
            icon=folder.icon,
            parent_id=str(folder.parent_id) if folder.parent_id else None,
            is_virtual=folder.is_virtual,
            created_date=folder.created_date.isoformat()
        )

    @staticmethod
    def to_dto_list(folders: List[Folder]) -> List[FolderDTO]:
        return [FolderMapper.to_dto(folder) for folder in folders]


class DocumentMapper:
    """Maps between Document entity and DocumentDTO."""

    @staticmethod
    def to_dto(document: Document) -> DocumentDTO:
        """Convert domain entity to DTO."""
        return DocumentDTO(
            id=str(document.id),
            file_name=document.file_name,
            display_title=document.display_title,
            content_hash=str(document.content_hash),
            folder_id=str(document.folder_id) if document.folder_id else None,
            locator_path=document.locator.path if document.locator else None,
            is_remote=document.is_remote,
            title=document.title,
            author=document.author,
            subject=document.subject,
            creator=document.creator,
            producer=document.producer,
            keywords=list(document.keywords),
            page_count=document.page_count,
            page_width=document.page_width,
            page_height=document.page_height,
            page_rotation=document.page_rotation,
            is_encrypted=document.is_encrypted,
            file_size=document.file_size,
            last_modified=document.last_modified.isoformat(),
            pdf_creation_date=_iso(document.pdf_creation_date),
            pdf_modification_date=_iso(document.pdf_modification_date),
            has_thumbnail=document.thumbnail is not None,
            ai_title=document.ai_title,
            ai_author=document.ai_author,
            ai_creation_date=_iso(document.ai_creation_date),
            ai_summary=document.ai_summary,
            ai_keywords=list(document.ai_keywords)
        )

    @staticmethod
    def to_dto_list(documents: List[Document]) -> List[DocumentDTO]:
        """Convert list of entities to DTOs."""
        return [DocumentMapper.to_dto(doc) for doc in documents]


class SelectionMapper:

    @staticmethod
    def to_dto(selection: Selection) -> SelectionDTO:
        return SelectionDTO(
            folder=FolderMapper.to_dto(selection.folder) if selection.folder else None,
            document=DocumentMapper.to_dto(selection.document) if selection.document else None
        )


class ImportReportMapper:

    @staticmethod
    def to_dto(report: ImportReport) -> ImportReportDTO:
        errors = [
            {"source": o.source, "error": o.error or "unknown error"}
            for o in report.outcomes
            if o.status == ImportStatus.FAILED
        ]
        return ImportReportDTO(
            total_files=len(report.outcomes),
            imported=report.imported,
            duplicates=report.duplicates,
            failed=report.failed,
            remote_copies=report.remote_copies,
            local_fallbacks=report.local_fallbacks,
            enrichment_queued=report.enrichment_queued,
            document_ids=report.document_ids,
            errors=errors
        )


class StoreStatusMapper:

    @staticmethod
    def to_dto(storage_type: str, diagnosis: Optional[StoreDiagnosis]) -> StoreStatusDTO:
        if diagnosis is None:
            return StoreStatusDTO(
                storage_type=storage_type,
                status="disabled",
                description="No synchronized store configured",
                is_ready=False
            )
        return StoreStatusDTO(
            storage_type=storage_type,
            status=diagnosis.status.value,
            description=diagnosis.description,
            is_ready=diagnosis.is_ready,
            directory=str(diagnosis.directory) if diagnosis.directory else None
        )
