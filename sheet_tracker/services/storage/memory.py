"""
In-Memory Storage Implementation

Keeps serialized documents in a dict keyed by document name, so every
load decodes a fresh Sheet exactly as the disk backend would. Used in
tests and when disk storage is disabled.
"""

import asyncio
from typing import Optional

from pydantic import ValidationError

from sheet_tracker.log import get_logger
from sheet_tracker.models.sheet import Sheet
from sheet_tracker.services.storage.interface import (
    DocumentParseError,
    SheetStorageInterface,
    check_sheet_id,
    document_name,
)


class InMemorySheetStorage(SheetStorageInterface):
    """Dict-backed sheet storage."""

    def __init__(self, documents: Optional[dict[str, str]] = None):
        self.documents: dict[str, str] = dict(documents or {})
        self._lock = asyncio.Lock()
        self._logger = get_logger(__name__)

    def _decode(self, key: str) -> Sheet:
        try:
            return Sheet.from_document(self.documents[key])
        except ValidationError as e:
            raise DocumentParseError(key, f"{e.error_count()} validation error(s)")

    async def load_all(self) -> list[Sheet]:
        sheets = []
        for key in sorted(self.documents):
            try:
                sheets.append(self._decode(key))
            except DocumentParseError as e:
                self._logger.warning("sheet_document_skipped", path=key, error=str(e))
        return sheets

    async def save(self, sheet: Sheet) -> None:
        key = document_name(check_sheet_id(sheet.id))
        async with self._lock:
            self.documents[key] = sheet.to_document()
        self._logger.info("sheet_saved", sheet_id=sheet.id, path=key)

    async def get(self, sheet_id: str) -> Optional[Sheet]:
        key = document_name(check_sheet_id(sheet_id))
        if key not in self.documents:
            return None
        return self._decode(key)
