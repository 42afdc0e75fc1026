"""
Text extractors for building AI request samples.
"""
from .base import BaseTextExtractor
from .pdf_extractor import PDFExtractor

__all__ = [
    "BaseTextExtractor",
    "PDFExtractor"
]
