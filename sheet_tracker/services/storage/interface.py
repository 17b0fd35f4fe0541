"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for sheet persistence.
This allows us to:
1. Keep sheets on local disk today (one JSON document per sheet)
2. Use in-memory storage for testing
3. Swap in another backend without touching the flows

The interface is intentionally small: a sheet is always loaded
and saved whole.
"""

from abc import ABC, abstractmethod
from typing import Optional

from sheet_tracker.models.sheet import Sheet


class SheetStorageInterface(ABC):
    """
    Abstract interface for sheet storage operations.

    Implementations must serialize writes per sheet id and must never
    let a reader observe a partially written document.
    """

    @abstractmethod
    async def load_all(self) -> list[Sheet]:
        """
        Load every stored sheet.

        Documents that fail to parse are skipped (and logged),
        never aborting the whole load.

        Returns:
            List of sheets in a deterministic order
        """
        pass

    @abstractmethod
    async def save(self, sheet: Sheet) -> None:
        """
        Save a sheet, overwriting any document with the same id.

        Saving the same sheet twice leaves exactly one document.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get(self, sheet_id: str) -> Optional[Sheet]:
        """
        Load one sheet by id.

        Returns:
            The sheet if found, None otherwise

        Raises:
            DocumentParseError: If the stored document is corrupt
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DocumentParseError(StorageError):
    """A stored document could not be decoded into a Sheet."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Cannot parse sheet document {source}: {reason}")
        self.source = source
        self.reason = reason


def document_name(sheet_id: str) -> str:
    """File name (or key) of a sheet's document."""
    return f"sheet_{sheet_id}.json"


def check_sheet_id(sheet_id: str) -> str:
    """Reject ids that cannot be embedded in a single file name."""
    if not sheet_id or any(ch in sheet_id for ch in ("/", "\\", "\0")):
        raise StorageError(f"Sheet id cannot be used as a document key: {sheet_id!r}")
    return sheet_id
