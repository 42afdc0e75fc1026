"""
Checksum utilities - Pure functions for content fingerprints.
"""
import hashlib
from pathlib import Path
from typing import Union

from ..domain.exceptions import ReadError
from ..domain.value_objects import ContentHash


def fingerprint(data: bytes) -> ContentHash:
    """
    Calculate the SHA-256 fingerprint of a file's bytes.

    Args:
        data: Full file contents

    Returns:
        SHA-256 digest as hex string
    """
    return ContentHash(hashlib.sha256(data).hexdigest())


def read_source(file_path: Union[str, Path]) -> bytes:
    """
    Read a source file completely.

    Raises:
        ReadError: If the file is missing or access was revoked
    """
    try:
        return Path(file_path).read_bytes()
    except OSError as e:
        raise ReadError(f"Error reading file {file_path}: {e}") from e
