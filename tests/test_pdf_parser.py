from conftest import build_pdf

from pdfshelf.domain.entities import LocalMetadata
from pdfshelf.services.pdf_parser import THUMBNAIL_SIZE, PDFParser

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_parse_local_reads_attributes_and_geometry():
    data = build_pdf(
        "Quantum optics notes",
        pages=3,
        title="Quantum Optics",
        author="A. Physicist",
        subject="Lecture notes",
        keywords="optics, quantum; lasers",
        creationDate="D:20230102030405Z",
    )

    metadata = PDFParser().parse_local(data)

    assert metadata.title == "Quantum Optics"
    assert metadata.author == "A. Physicist"
    assert metadata.subject == "Lecture notes"
    assert metadata.keywords == ["optics", "quantum", "lasers"]
    assert metadata.page_count == 3
    assert metadata.page_width == 595
    assert metadata.page_height == 842
    assert metadata.page_rotation == 0
    assert metadata.is_encrypted is False
    assert metadata.creation_date.year == 2023
    assert metadata.thumbnail.startswith(PNG_SIGNATURE)


def test_thumbnail_fits_target_size():
    import fitz

    thumbnail = PDFParser().parse_local(build_pdf()).thumbnail
    pixmap = fitz.Pixmap(thumbnail)
    width, height = THUMBNAIL_SIZE
    assert pixmap.width <= width + 1
    assert pixmap.height <= height + 1


def test_unparseable_bytes_yield_empty_metadata():
    assert PDFParser().parse_local(b"this is not a pdf") == LocalMetadata()
    assert PDFParser().parse_local(b"") == LocalMetadata()
