"""
Base Text Extractor Interface.

Text extractors produce the bounded text sample that is sent to the AI
provider. All extractors must inherit from this base class.
"""
from abc import ABC, abstractmethod

from ...domain.exceptions import NoTextExtracted


class BaseTextExtractor(ABC):
    """
    Abstract base class for text extractors.

    Each file format has its own extractor class that implements
    extract_sample().
    """

    def __init__(self, format_name: str):
        """
        Args:
            format_name: Human-readable format name used in error messages
        """
        self.format_name = format_name

    @abstractmethod
    def extract_sample(self, file_bytes: bytes, max_pages: int, max_chars: int) -> str:
        """
        Extract text from the first pages of a file.

        Args:
            file_bytes: Raw file content as bytes
            max_pages: Number of leading pages to read
            max_chars: Maximum length of the returned sample

        Returns:
            Extracted text, at most max_chars long

        Raises:
            NoTextExtracted: If the file yields no text
        """
        pass

    def validate_content(self, text_content: str) -> None:
        """
        Validate that extracted content is not empty.

        Raises:
            NoTextExtracted: If content is empty
        """
        if not text_content or not text_content.strip():
            raise NoTextExtracted(
                f"{self.format_name} file appears to be empty or contains no extractable text"
            )
