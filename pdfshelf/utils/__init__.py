"""
Utility layer - Pure helper functions.
"""
from .checksum import fingerprint, read_source
from .document_utils import format_file_size, normalize_keywords, parse_iso_day, parse_pdf_date

__all__ = [
    "fingerprint",
    "read_source",
    "format_file_size",
    "normalize_keywords",
    "parse_iso_day",
    "parse_pdf_date"
]
