"""
Database abstraction layer.
Supports multiple database backends through a common interface.
"""
from .base import ChangeEvent, DatabaseInterface
from .factory import DatabaseFactory
from .json_adapter import JSONAdapter
from .memory_adapter import MemoryAdapter

__all__ = [
    "ChangeEvent",
    "DatabaseInterface",
    "DatabaseFactory",
    "JSONAdapter",
    "MemoryAdapter"
]
