"""
Storage Services Package

Provides the abstract sheet storage interface and its implementations:
JSON documents on local disk, and an in-memory store for tests.
"""

from sheet_tracker.services.storage.interface import (
    DocumentParseError,
    NotFoundError,
    SheetStorageInterface,
    StorageError,
    document_name,
)
from sheet_tracker.services.storage.json_files import JsonFileSheetStorage
from sheet_tracker.services.storage.memory import InMemorySheetStorage

__all__ = [
    # Interface
    "SheetStorageInterface",
    "document_name",
    # Exceptions
    "DocumentParseError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemorySheetStorage",
    "JsonFileSheetStorage",
]
