"""
Shared fixtures: PDFs built with PyMuPDF, an in-memory library and a
recording store gateway.
"""
from pathlib import Path
from typing import List, Optional, Union

import fitz
import pytest

from pdfshelf.domain.entities import Locator
from pdfshelf.domain.exceptions import CopyFailed
from pdfshelf.services.database import MemoryAdapter
from pdfshelf.services.library_tree import LibraryTree
from pdfshelf.services.storage.base import CloudFileGateway, StoreDiagnosis, StoreStatus


def build_pdf(text: str = "Hello PDF", pages: int = 1, **metadata) -> bytes:
    """Build a small PDF; metadata keys are PyMuPDF's (title, author, keywords, ...)."""
    doc = fitz.open()
    for number in range(pages):
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), f"{text} (page {number + 1})", fontsize=12)
    if metadata:
        doc.set_metadata(metadata)
    data = doc.tobytes(no_new_id=True)
    doc.close()
    return data


class RecordingGateway(CloudFileGateway):
    """Store gateway over a temp directory that records every call."""

    def __init__(self, root: Path, available: bool = True, fail_copy: bool = False):
        super().__init__("iCloud.test.container", "Documents/PDFs")
        self.root = root
        self.available = available
        self.fail_copy = fail_copy
        self.copied: List[str] = []
        self.removed: List[Locator] = []
        self.ensured: List[Locator] = []

    @property
    def store_directory(self) -> Path:
        return self.root / self.container_identifier / self.subpath

    async def is_available(self) -> bool:
        return self.available

    async def resolve_directory(self) -> Path:
        self.store_directory.mkdir(parents=True, exist_ok=True)
        return self.store_directory

    async def copy_in(self, source_path: Union[str, Path]) -> Locator:
        source = Path(source_path)
        if self.fail_copy:
            raise CopyFailed(OSError("disk full"))
        directory = await self.resolve_directory()
        name = self.unique_name(directory, source.name)
        (directory / name).write_bytes(source.read_bytes())
        self.copied.append(name)
        return Locator.remote(name)

    async def remove(self, locator: Locator) -> None:
        self.removed.append(locator)
        self.resolve_path(locator).unlink(missing_ok=True)

    async def ensure_local(self, locator: Locator) -> None:
        self.ensured.append(locator)

    async def diagnose(self) -> StoreDiagnosis:
        return StoreDiagnosis(StoreStatus.READY, self.store_directory)


@pytest.fixture
def make_pdf(tmp_path):
    """Write a PDF into tmp_path and return its path."""
    def _make(name: str, text: str = "Hello PDF", directory: Optional[Path] = None, **kwargs) -> Path:
        target = (directory or tmp_path / "sources")
        target.mkdir(parents=True, exist_ok=True)
        path = target / name
        path.write_bytes(build_pdf(text, **kwargs))
        return path
    return _make


@pytest.fixture
def db():
    return MemoryAdapter()


@pytest.fixture
def gateway(tmp_path):
    return RecordingGateway(tmp_path / "cloud")


@pytest.fixture
def tree(db, gateway):
    return LibraryTree(db, gateway)
