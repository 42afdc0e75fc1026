import logging

from pdfshelf.core.logging_config import parse_component_levels, setup_logging


def test_parse_component_levels():
    levels = parse_component_levels(
        "pdfshelf.services.sync_reconciler=debug, pdfshelf.services.import_pipeline=WARNING,broken,x=NOPE"
    )
    assert levels == {
        "pdfshelf.services.sync_reconciler": logging.DEBUG,
        "pdfshelf.services.import_pipeline": logging.WARNING,
    }


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        path = setup_logging("INFO", tmp_path / "logs" / "app.log")
        logging.getLogger("pdfshelf.test").debug("import step")
        for handler in root.handlers:
            handler.flush()
        assert path.exists()
        assert "import step" in path.read_text(encoding="utf-8")
        assert logging.getLogger("botocore").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_setup_logging_without_file():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        assert setup_logging("WARNING", enable_file_logging=False) is None
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
