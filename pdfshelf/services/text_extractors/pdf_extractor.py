"""
PDF Text Extractor.

Extracts text from the leading pages of PDF files using pypdf library.
"""
import io

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .base import BaseTextExtractor
from ...core.logging_config import get_logger
from ...domain.exceptions import NoTextExtracted

logger = get_logger(__name__)


class PDFExtractor(BaseTextExtractor):
    """Extractor for PDF files."""

    def __init__(self):
        super().__init__("PDF")

    def extract_sample(self, file_bytes: bytes, max_pages: int, max_chars: int) -> str:
        """
        Extract text from the first max_pages pages of a PDF.

        Args:
            file_bytes: PDF file content as bytes
            max_pages: Number of leading pages to read
            max_chars: Maximum length of the returned sample

        Returns:
            Extracted text content

        Raises:
            NoTextExtracted: If the PDF is unreadable or has no text layer
        """
        try:
            reader = PdfReader(io.BytesIO(file_bytes))
            if reader.is_encrypted:
                reader.decrypt("")

            parts = []
            length = 0
            for page in reader.pages[:max_pages]:
                page_text = page.extract_text()
                if page_text:
                    parts.append(page_text)
                    length += len(page_text) + 1
                if length >= max_chars:
                    break
        except (PyPdfError, ValueError, OSError) as e:
            logger.warning(f"Error extracting text from PDF: {e}")
            raise NoTextExtracted(f"Error extracting text from PDF: {e}") from e

        text_content = "\n".join(parts).strip()[:max_chars]
        self.validate_content(text_content)
        return text_content
