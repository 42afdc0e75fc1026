"""
Local PDF parser.

Reads the attribute dictionary, page geometry and a thumbnail from a PDF
with PyMuPDF. The document is opened exactly once per parse.
"""
from typing import Tuple

import fitz  # PyMuPDF

from ..core.logging_config import get_logger
from ..domain.entities import LocalMetadata
from ..utils.document_utils import clean_text, normalize_keywords, parse_pdf_date

logger = get_logger(__name__)

# 2x the 90x120 list thumbnail
THUMBNAIL_SIZE: Tuple[int, int] = (180, 240)


class PDFParser:
    """
    Single-pass reader for PDF attributes.

    Parsing is best effort: anything unreadable yields an empty
    LocalMetadata instead of an error.
    """

    def __init__(self, thumbnail_size: Tuple[int, int] = THUMBNAIL_SIZE):
        self.thumbnail_size = thumbnail_size

    def parse_local(self, file_bytes: bytes) -> LocalMetadata:
        """
        Parse PDF bytes.

        Args:
            file_bytes: Raw PDF content

        Returns:
            LocalMetadata (all defaults if the file cannot be parsed)
        """
        try:
            doc = fitz.open(stream=file_bytes, filetype="pdf")
        except Exception as e:
            logger.warning(f"Could not open PDF for parsing: {e}")
            return LocalMetadata()

        try:
            return self._read(doc)
        except Exception as e:
            logger.warning(f"Could not parse PDF attributes: {e}")
            return LocalMetadata()
        finally:
            doc.close()

    def _read(self, doc) -> LocalMetadata:
        page_count = doc.page_count
        if doc.needs_pass and not doc.authenticate(""):
            # Locked by a user password: only the page count is known
            return LocalMetadata(page_count=page_count, is_encrypted=True)

        attributes = doc.metadata or {}
        metadata = LocalMetadata(
            title=clean_text(attributes.get("title")),
            author=clean_text(attributes.get("author")),
            subject=clean_text(attributes.get("subject")),
            creator=clean_text(attributes.get("creator")),
            producer=clean_text(attributes.get("producer")),
            keywords=normalize_keywords(attributes.get("keywords")),
            page_count=page_count,
            is_encrypted=bool(doc.is_encrypted or attributes.get("encryption")),
            creation_date=parse_pdf_date(attributes.get("creationDate")),
            modification_date=parse_pdf_date(attributes.get("modDate")),
        )

        if page_count:
            page = doc[0]
            bounds = page.mediabox
            metadata.page_width = float(bounds.width)
            metadata.page_height = float(bounds.height)
            metadata.page_rotation = int(page.rotation)
            metadata.thumbnail = self.render_thumbnail(page)

        return metadata

    def render_thumbnail(self, page) -> bytes:
        """Rasterize a page to PNG, scaled to fit the thumbnail size."""
        width, height = self.thumbnail_size
        rect = page.rect
        zoom = min(width / rect.width, height / rect.height)
        pixmap = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        return pixmap.tobytes("png")
