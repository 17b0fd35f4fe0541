"""Services package."""

from sheet_tracker.services.files import atomic_write_text
from sheet_tracker.services.storage import (
    DocumentParseError,
    InMemorySheetStorage,
    JsonFileSheetStorage,
    NotFoundError,
    SheetStorageInterface,
    StorageError,
)

__all__ = [
    "atomic_write_text",
    # Storage services
    "DocumentParseError",
    "InMemorySheetStorage",
    "JsonFileSheetStorage",
    "NotFoundError",
    "SheetStorageInterface",
    "StorageError",
]
