from datetime import date, datetime, timedelta, timezone

from pdfshelf.utils.document_utils import (
    clean_text,
    format_file_size,
    normalize_keywords,
    parse_iso_day,
    parse_pdf_date,
)


def test_format_file_size():
    assert format_file_size(0) == "0 KB"
    assert format_file_size(532) == "532 bytes"
    assert format_file_size(1400) == "1 KB"
    assert format_file_size(2_500_000) == "2.5 MB"
    assert format_file_size(3_210_000_000) == "3.21 GB"


def test_parse_pdf_date_with_offset():
    parsed = parse_pdf_date("D:20240131120500+01'00'")
    assert parsed == datetime(2024, 1, 31, 12, 5, 0, tzinfo=timezone(timedelta(hours=1)))


def test_parse_pdf_date_partial_and_invalid():
    assert parse_pdf_date("D:2021") == datetime(2021, 1, 1)
    assert parse_pdf_date("D:20241399") is None
    assert parse_pdf_date("garbage") is None
    assert parse_pdf_date(None) is None


def test_parse_iso_day():
    assert parse_iso_day("2023-05-01") == date(2023, 5, 1)
    assert parse_iso_day("null") is None
    assert parse_iso_day("") is None
    assert parse_iso_day("May 2023") is None


def test_normalize_keywords():
    assert normalize_keywords("physics, Optics; physics") == ["physics", "Optics"]
    assert normalize_keywords(["a", " b ", "A"]) == ["a", "b"]
    assert normalize_keywords(None) == []


def test_clean_text():
    assert clean_text("  Title ") == "Title"
    assert clean_text("   ") is None
