"""
Library exceptions.
Raised by services and collaborators; the API layer maps them to HTTP errors.
"""
from typing import Optional


class LibraryError(Exception):
    """Base class for library errors."""
    pass


class ReadError(LibraryError):
    """Raised when a source file's bytes cannot be obtained."""
    pass


# Synchronized store

class CloudStorageError(LibraryError):
    """Base class for synchronized store failures."""
    pass


class StoreUnavailable(CloudStorageError):
    """Raised when the synchronized store is not reachable or not configured."""
    pass


class ContainerNotFound(CloudStorageError):
    """Raised when the store's container has not been provisioned."""
    pass


class CopyFailed(CloudStorageError):
    """Raised when copying a file into the store fails."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Copy into store failed: {cause}")


class DownloadFailed(CloudStorageError):
    """Raised when the provider rejects a download request."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Download request failed: {cause}")


# Metadata extraction

class MetadataExtractionError(LibraryError):
    """Base class for AI metadata extraction failures."""
    pass


class NoTextExtracted(MetadataExtractionError):
    """Raised when the document yields no text to send to the provider."""
    pass


class ProviderError(MetadataExtractionError):
    """Raised when the AI provider answers with a non-success status."""

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        super().__init__(f"Provider error ({status}): {message}")


class EmptyResponse(MetadataExtractionError):
    """Raised when the provider response carries no text content."""
    pass


class MalformedJSON(MetadataExtractionError):
    """Raised when the provider response does not contain the expected JSON object."""
    pass
