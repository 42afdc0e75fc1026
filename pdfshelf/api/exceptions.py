"""
Custom exceptions for API layer.
Separates business exceptions from HTTP exceptions.
"""
from fastapi import HTTPException, status

from ..domain.exceptions import (
    ContainerNotFound,
    CopyFailed,
    DownloadFailed,
    MetadataExtractionError,
    ReadError,
    StoreUnavailable,
)


class DocumentNotFoundError(Exception):
    """Raised when document is not found."""
    pass


class FolderNotFoundError(Exception):
    """Raised when folder is not found."""
    pass


class InvalidFolderNameError(Exception):
    """Raised when folder name is invalid."""
    pass


def handle_business_exception(e: Exception) -> HTTPException:
    """
    Convert business exceptions to HTTP exceptions.
    This keeps business logic clean of HTTP concerns.
    """
    if isinstance(e, (DocumentNotFoundError, FolderNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, (InvalidFolderNameError, ReadError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, (StoreUnavailable, ContainerNotFound)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    elif isinstance(e, (CopyFailed, DownloadFailed, MetadataExtractionError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    elif isinstance(e, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    else:
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
