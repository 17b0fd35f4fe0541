"""Turn report values into display strings. Two fraction digits, only here."""

from datetime import timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Mapping, Optional

from sheet_tracker.models.sheet import Sheet, Txn, category_label
from sheet_tracker.reports.aggregation import (
    UNCATEGORIZED_BUCKET,
    PeriodTotals,
    SheetReport,
    to_calendar_date,
)


_CENTS = Decimal("0.01")

# English abbreviations, independent of the process locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def format_amount(value: Decimal) -> str:
    """Render with exactly two fraction digits, half-up."""
    return f"{value.quantize(_CENTS, rounding=ROUND_HALF_UP):.2f}"


def _year_text(year: int) -> str:
    sign = "-" if year < 0 else ""
    return f"{sign}{abs(year):04d}"


def month_label(key: tuple[int, int]) -> str:
    year, month = key
    return f"{_year_text(year)}-{month:02d}"


def year_label(key: int) -> str:
    return _year_text(key)


def category_bucket_label(key: Optional[str]) -> str:
    return UNCATEGORIZED_BUCKET if key is None else key


def format_totals_line(label: str, totals: PeriodTotals, currency: str = "€") -> str:
    return (
        f"{label}: Income {currency}{format_amount(totals.income)}"
        f" | Expense {currency}{format_amount(totals.expense)}"
        f" | Net {currency}{format_amount(totals.net)}"
    )


def render_period_lines(
    buckets: Mapping,
    label: Callable[..., str],
    currency: str = "€",
) -> list[str]:
    """One line per bucket, in the mapping's (ascending) order."""
    return [
        format_totals_line(label(key), totals, currency)
        for key, totals in buckets.items()
    ]


def render_sheet_report(report: SheetReport, currency: str = "€") -> str:
    """Net headline followed by the monthly and yearly sections."""
    lines = [
        report.sheet_name,
        f"Net: {currency}{format_amount(report.net_total)}",
        "",
        "Monthly Report",
        *render_period_lines(report.monthly, month_label, currency),
        "",
        "Yearly Report",
        *render_period_lines(report.yearly, year_label, currency),
    ]
    if report.by_category:
        lines.append("")
        lines.append("By Category")
        lines.extend(render_period_lines(report.by_category, category_bucket_label, currency))
    return "\n".join(lines)


def format_txn_line(
    sheet: Sheet,
    txn: Txn,
    tz: tzinfo = timezone.utc,
    currency: str = "€",
) -> str:
    """
    Display line for one transaction:
    description | category (or "-") | 15 Jan 2024 | +€100.00
    """
    date = to_calendar_date(txn.date_millis, tz)
    sign = "+" if txn.is_income else "-"
    return " | ".join([
        txn.description,
        category_label(sheet, txn),
        f"{date.day:02d} {MONTH_ABBREVIATIONS[date.month - 1]} {_year_text(date.year)}",
        f"{sign}{currency}{format_amount(txn.amount)}",
    ])
