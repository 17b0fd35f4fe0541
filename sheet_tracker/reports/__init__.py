"""Reporting package: aggregation engine and display formatting."""

from sheet_tracker.reports.aggregation import (
    UNCATEGORIZED_BUCKET,
    CalendarDate,
    PeriodTotals,
    SheetReport,
    build_report,
    group_by_category,
    group_by_month,
    group_by_year,
    net_total,
    summarize,
    to_calendar_date,
)
from sheet_tracker.reports.formatting import (
    format_amount,
    format_txn_line,
    month_label,
    render_sheet_report,
    year_label,
)

__all__ = [
    "UNCATEGORIZED_BUCKET",
    "CalendarDate",
    "PeriodTotals",
    "SheetReport",
    "build_report",
    "group_by_category",
    "group_by_month",
    "group_by_year",
    "net_total",
    "summarize",
    "to_calendar_date",
    "format_amount",
    "format_txn_line",
    "month_label",
    "render_sheet_report",
    "year_label",
]
