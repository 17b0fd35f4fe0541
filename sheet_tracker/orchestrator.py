"""
Main Orchestrator for Sheet Tracker

This module ties together the model, the storage gateway, the
aggregation engine and the CSV export. A UI drives it:

1. Startup → load every stored sheet
2. Mutate → command function returns a new sheet → persist it
3. Report → derived on demand from the current transaction list
4. Export → CSV file per sheet

DESIGN DECISION: I/O failures never escape as exceptions from the
mutation and export flows. They are logged and reported through a
result object, and the updated in-memory sheet is returned anyway
so the user can keep working (and retry the save later).

Invalid user input (blank sheet name, unparsable amount) is raised
as a ValueError subclass BEFORE anything changes.
"""

import asyncio
from datetime import tzinfo
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from sheet_tracker.config import Settings, get_settings
from sheet_tracker.export import ExportError, write_export
from sheet_tracker.log import configure_logging, get_logger
from sheet_tracker.models.sheet import (
    Sheet,
    add_category,
    add_transaction,
    normalize_sheet_name,
    rename_sheet,
)
from sheet_tracker.reports import SheetReport, build_report, render_sheet_report
from sheet_tracker.services.storage import (
    InMemorySheetStorage,
    JsonFileSheetStorage,
    NotFoundError,
    SheetStorageInterface,
    StorageError,
)


class SheetUpdate(BaseModel):
    """Outcome of a mutation: the new sheet, and whether it was persisted."""

    model_config = ConfigDict(frozen=True)

    sheet: Sheet
    saved: bool
    error_message: Optional[str] = None


class ExportResult(BaseModel):
    """Outcome of a CSV export."""

    model_config = ConfigDict(frozen=True)

    success: bool
    path: Optional[Path] = None
    error_message: Optional[str] = None


class SheetsFlow:
    """
    Orchestrates sheet lifecycle: load, create, mutate + save, report, export.

    Every mutation persists the new sheet immediately.
    """

    def __init__(
        self,
        storage: SheetStorageInterface,
        export_dir: Path,
        tz: tzinfo,
        currency_symbol: str = "€",
    ):
        self._storage = storage
        self._export_dir = Path(export_dir)
        self._tz = tz
        self._currency = currency_symbol
        self._logger = get_logger(__name__)

    @property
    def tz(self) -> tzinfo:
        return self._tz

    async def load_sheets(self) -> list[Sheet]:
        """Load all stored sheets. Corrupt documents are skipped by the storage."""
        return await self._storage.load_all()

    async def get_sheet(self, sheet_id: str) -> Sheet:
        """
        Load one sheet.

        Raises:
            NotFoundError: If no document exists for the id
        """
        sheet = await self._storage.get(sheet_id)
        if sheet is None:
            raise NotFoundError(f"Sheet not found: {sheet_id}")
        return sheet

    async def _persist(self, sheet: Sheet, action: str) -> SheetUpdate:
        try:
            await self._storage.save(sheet)
        except StorageError as e:
            self._logger.error(
                "sheet_save_failed",
                action=action,
                sheet_id=sheet.id,
                error=str(e),
            )
            return SheetUpdate(sheet=sheet, saved=False, error_message=str(e))
        return SheetUpdate(sheet=sheet, saved=True)

    async def create_sheet(self, name: str) -> SheetUpdate:
        """
        Create an empty sheet and persist it.

        Raises:
            SheetNameError: If the name is blank (nothing is created)
        """
        sheet = Sheet(name=normalize_sheet_name(name))
        self._logger.info("sheet_created", sheet_id=sheet.id, name=sheet.name)
        return await self._persist(sheet, "create_sheet")

    async def rename_sheet(self, sheet: Sheet, name: str) -> SheetUpdate:
        """
        Raises:
            SheetNameError: If the new name is blank
        """
        return await self._persist(rename_sheet(sheet, name), "rename_sheet")

    async def add_category(self, sheet: Sheet, name: str) -> SheetUpdate:
        updated, category = add_category(sheet, name)
        self._logger.info(
            "category_added",
            sheet_id=sheet.id,
            category_id=category.id,
        )
        return await self._persist(updated, "add_category")

    async def add_transaction(
        self,
        sheet: Sheet,
        description: str,
        amount: Union[str, int, float, Decimal],
        is_income: bool,
        category_id: Optional[str] = None,
        date_millis: Optional[int] = None,
    ) -> SheetUpdate:
        """
        Append a transaction and persist the sheet.

        Raises:
            AmountValidationError: If the amount is not a finite number
                                   (no transaction is created)
        """
        updated, txn = add_transaction(
            sheet,
            description=description,
            amount=amount,
            is_income=is_income,
            category_id=category_id,
            date_millis=date_millis,
        )
        self._logger.info(
            "transaction_added",
            sheet_id=sheet.id,
            txn_id=txn.id,
            is_income=txn.is_income,
        )
        return await self._persist(updated, "add_transaction")

    def build_report(self, sheet: Sheet) -> SheetReport:
        """Net total plus monthly, yearly and per-category buckets."""
        return build_report(sheet, self._tz)

    def render_report(self, sheet: Sheet) -> str:
        return render_sheet_report(self.build_report(sheet), self._currency)

    async def export_sheet(self, sheet: Sheet) -> ExportResult:
        """Write <sheet name>_export.csv into the export directory."""
        try:
            path = await asyncio.to_thread(write_export, sheet, self._export_dir, self._tz)
        except ExportError as e:
            self._logger.error(
                "sheet_export_failed",
                sheet_id=sheet.id,
                error=str(e),
            )
            return ExportResult(success=False, error_message=str(e))

        self._logger.info(
            "sheet_exported",
            sheet_id=sheet.id,
            path=str(path),
            rows=len(sheet.transactions),
        )
        return ExportResult(success=True, path=path)


def create_app_components(
    settings: Optional[Settings] = None,
    use_disk: bool = True,
) -> SheetsFlow:
    """
    Factory function to create the application flow.

    Args:
        settings: Settings to use (defaults to get_settings())
        use_disk: Whether to keep sheets on local disk.
                  Set to False for an in-memory store.

    Returns:
        A ready SheetsFlow
    """
    settings = settings or get_settings()
    app_settings = settings.app
    storage_settings = settings.storage
    report_settings = settings.reports

    configure_logging(app_settings.log_level, app_settings.log_json)

    if use_disk:
        storage: SheetStorageInterface = JsonFileSheetStorage(storage_settings.data_dir)
    else:
        storage = InMemorySheetStorage()

    return SheetsFlow(
        storage=storage,
        export_dir=storage_settings.export_dir,
        tz=report_settings.tzinfo,
        currency_symbol=report_settings.currency_symbol,
    )
