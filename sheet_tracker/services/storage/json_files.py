"""
JSON File Storage Implementation

One pretty-printed JSON document per sheet, named sheet_<id>.json,
in a single directory on local disk.

GUARANTEES:
- Documents are published atomically (temp file + os.replace)
- At most one write per sheet id is in flight (per-id asyncio.Lock)
- A corrupt document never prevents the other sheets from loading

Blocking file I/O runs in a worker thread so the event loop driving
the UI stays responsive.
"""

import asyncio
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from sheet_tracker.log import get_logger
from sheet_tracker.models.sheet import Sheet
from sheet_tracker.services.files import atomic_write_text
from sheet_tracker.services.storage.interface import (
    DocumentParseError,
    SheetStorageInterface,
    StorageError,
    check_sheet_id,
    document_name,
)


DOCUMENT_GLOB = "sheet_*.json"


class JsonFileSheetStorage(SheetStorageInterface):
    """
    Local disk implementation of sheet storage.

    The directory is created on first write.
    """

    def __init__(self, directory: Path):
        self._directory = Path(directory)
        self._locks: dict[str, asyncio.Lock] = {}
        self._logger = get_logger(__name__)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, sheet_id: str) -> Path:
        """Location of a sheet's document."""
        return self._directory / document_name(check_sheet_id(sheet_id))

    def _lock_for(self, sheet_id: str) -> asyncio.Lock:
        lock = self._locks.get(sheet_id)
        if lock is None:
            lock = self._locks[sheet_id] = asyncio.Lock()
        return lock

    def _read_document(self, path: Path) -> Sheet:
        """Decode one file. Raises DocumentParseError for unreadable content."""
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DocumentParseError(str(path), f"not UTF-8 text ({e})")
        try:
            return Sheet.from_document(text)
        except ValidationError as e:
            raise DocumentParseError(str(path), f"{e.error_count()} validation error(s)")

    def _load_all_sync(self) -> list[Sheet]:
        if not self._directory.is_dir():
            return []

        sheets = []
        for path in sorted(self._directory.glob(DOCUMENT_GLOB)):
            try:
                sheets.append(self._read_document(path))
            except (DocumentParseError, OSError) as e:
                self._logger.warning(
                    "sheet_document_skipped",
                    path=str(path),
                    error=str(e),
                )
        return sheets

    async def load_all(self) -> list[Sheet]:
        sheets = await asyncio.to_thread(self._load_all_sync)
        self._logger.info(
            "sheets_loaded",
            directory=str(self._directory),
            count=len(sheets),
        )
        return sheets

    async def save(self, sheet: Sheet) -> None:
        path = self.path_for(sheet.id)
        document = sheet.to_document()

        async with self._lock_for(sheet.id):
            try:
                await asyncio.to_thread(atomic_write_text, path, document)
            except OSError as e:
                raise StorageError(f"Failed to save sheet {sheet.id} to {path}: {e}") from e

        self._logger.info(
            "sheet_saved",
            sheet_id=sheet.id,
            path=str(path),
            transactions=len(sheet.transactions),
        )

    async def get(self, sheet_id: str) -> Optional[Sheet]:
        path = self.path_for(sheet_id)
        try:
            return await asyncio.to_thread(self._read_document, path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read sheet {sheet_id} from {path}: {e}") from e
