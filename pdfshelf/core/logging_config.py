"""
Logging setup for pdfshelf.

Console output stays short; the log file carries source locations so an
import batch or a sync refresh can be traced afterwards. Individual
components can be made louder with LOG_LEVELS, e.g.
``LOG_LEVELS=pdfshelf.services.sync_reconciler=DEBUG,pdfshelf.services.import_pipeline=DEBUG``.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Union

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_LEVELS = os.getenv("LOG_LEVELS", "")

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

# Client libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "anthropic", "botocore", "boto3", "s3transfer", "urllib3")


def parse_component_levels(value: str) -> Dict[str, int]:
    """Parse "logger=LEVEL,logger=LEVEL" into a logger name -> level map."""
    levels: Dict[str, int] = {}
    for item in value.split(","):
        name, sep, level = item.partition("=")
        if not sep or not name.strip():
            continue
        number = logging.getLevelName(level.strip().upper())
        if isinstance(number, int):
            levels[name.strip()] = number
    return levels


def setup_logging(
    log_level: str = LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    enable_file_logging: bool = True
) -> Optional[Path]:
    """
    Configure the root logger.

    Args:
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Log file path (defaults to LOG_DIR/app.log)
        enable_file_logging: Also write everything from DEBUG up to the log file

    Returns:
        Path of the log file, or None when file logging is off
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    root_logger.addHandler(console_handler)

    path = None
    if enable_file_logging:
        path = Path(log_file) if log_file is not None else LOG_DIR / "app.log"
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name, component_level in parse_component_levels(LOG_LEVELS).items():
        logging.getLogger(name).setLevel(component_level)

    return path


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with __name__."""
    return logging.getLogger(name)
