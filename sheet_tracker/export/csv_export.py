"""
CSV Export

Projects a sheet into Date,Description,Amount,Type rows, one per
transaction in stored order.

Fields containing commas, quotes or line breaks are quoted
(csv.QUOTE_MINIMAL), so free-text descriptions can never break
the column layout.
"""

import csv
import io
import re
from datetime import timezone, tzinfo
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from sheet_tracker.models.sheet import Sheet
from sheet_tracker.reports.aggregation import to_calendar_date
from sheet_tracker.services.files import atomic_write_text


CSV_HEADER = ["Date", "Description", "Amount", "Type"]
INCOME_LABEL = "Income"
EXPENSE_LABEL = "Expense"


class ExportError(Exception):
    """The export file could not be written."""
    pass


class ExportRow(BaseModel):
    """One exported transaction."""

    model_config = ConfigDict(frozen=True)

    date: str
    description: str
    amount: str
    type: str

    def as_list(self) -> list[str]:
        return [self.date, self.description, self.amount, self.type]


def plain_amount(value: Decimal) -> str:
    """Decimal as written by a person: 100, 12.5, -3.25 (no exponent)."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def export_rows(sheet: Sheet, tz: tzinfo = timezone.utc) -> list[ExportRow]:
    """One row per transaction, in the sheet's stored order."""
    return [
        ExportRow(
            date=to_calendar_date(txn.date_millis, tz).isoformat(),
            description=txn.description,
            amount=plain_amount(txn.amount),
            type=INCOME_LABEL if txn.is_income else EXPENSE_LABEL,
        )
        for txn in sheet.transactions
    ]


def render_csv(sheet: Sheet, tz: tzinfo = timezone.utc) -> str:
    """Header plus quoted rows, newline terminated."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in export_rows(sheet, tz):
        writer.writerow(row.as_list())
    return buffer.getvalue()


def export_filename(sheet: Sheet) -> str:
    """<sheet name>_export.csv, with characters unsafe in file names replaced."""
    stem = re.sub(r"[^\w.\- ]+", "_", sheet.name).strip(" ._")
    return f"{stem or sheet.id}_export.csv"


def write_export(
    sheet: Sheet,
    directory: Path,
    tz: tzinfo = timezone.utc,
) -> Path:
    """
    Write the sheet's CSV into ``directory``, replacing any earlier export.

    Returns:
        Path of the written file

    Raises:
        ExportError: If the file cannot be written
    """
    path = Path(directory) / export_filename(sheet)
    try:
        atomic_write_text(path, render_csv(sheet, tz))
    except OSError as e:
        raise ExportError(f"Failed to export sheet {sheet.name!r} to {path}: {e}") from e
    return path
