"""pdfshelf - personal PDF library."""

__version__ = "1.0.0"
