"""
Aggregation Engine

DESIGN DECISION: Reports are DERIVED, never stored.
Every function here is pure: it reads a transaction list and
returns new values without touching the sheet.

Bucketing uses ONE fixed time zone per call (UTC unless the caller
passes another). Resolving the zone per transaction, or from the
process-local zone, would let the same ledger produce different
reports on different machines.

Timestamps are not range-checked. Calendar dates are derived from
the day count with proleptic Gregorian arithmetic, so years outside
1..9999 still land in a bucket instead of overflowing datetime.

All sums are Decimal. Rounding to two places happens only when a
value is rendered for display (see reports.formatting).
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from sheet_tracker.models.sheet import Sheet, Txn, find_category


UNCATEGORIZED_BUCKET = "Uncategorized"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ZERO = Decimal("0")
_MILLIS_PER_DAY = 86_400_000
_MILLIS = timedelta(milliseconds=1)

# One day of margin on each side so astimezone() never leaves datetime's range.
_MIN_OFFSET_MILLIS = (datetime(1, 1, 2, tzinfo=timezone.utc) - _EPOCH) // _MILLIS
_MAX_OFFSET_MILLIS = (datetime(9999, 12, 30, tzinfo=timezone.utc) - _EPOCH) // _MILLIS


class CalendarDate(NamedTuple):
    """A proleptic Gregorian date; year may be 0, negative or above 9999."""

    year: int
    month: int
    day: int

    def isoformat(self) -> str:
        """YYYY-MM-DD, with a leading minus sign for years before year 0."""
        sign = "-" if self.year < 0 else ""
        return f"{sign}{abs(self.year):04d}-{self.month:02d}-{self.day:02d}"


class PeriodTotals(BaseModel):
    """Income, expense and net for one bucket."""

    model_config = ConfigDict(frozen=True)

    income: Decimal = Field(default=_ZERO)
    expense: Decimal = Field(default=_ZERO)
    count: int = Field(
        default=0,
        ge=0,
        description="Number of transactions that contributed"
    )

    @computed_field
    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class SheetReport(BaseModel):
    """Everything the sheet screen shows, computed in one pass per grouping."""

    model_config = ConfigDict(frozen=True)

    sheet_id: str
    sheet_name: str
    net_total: Decimal
    totals: PeriodTotals
    monthly: dict[tuple[int, int], PeriodTotals]
    yearly: dict[int, PeriodTotals]
    by_category: dict[Optional[str], PeriodTotals]


def _civil_from_days(days: int) -> CalendarDate:
    """Days since 1970-01-01 to a proleptic Gregorian date (400-year eras)."""
    shifted = days + 719_468
    era = shifted // 146_097
    day_of_era = shifted - era * 146_097
    year_of_era = (
        day_of_era - day_of_era // 1_460 + day_of_era // 36_524 - day_of_era // 146_096
    ) // 365
    day_of_year = day_of_era - (365 * year_of_era + year_of_era // 4 - year_of_era // 100)
    march_month = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * march_month + 2) // 5 + 1
    month = march_month + 3 if march_month < 10 else march_month - 9
    year = year_of_era + era * 400 + (1 if month <= 2 else 0)
    return CalendarDate(year, month, day)


def utc_offset_millis(date_millis: int, tz: tzinfo = timezone.utc) -> int:
    """
    Offset of ``tz`` from UTC at the given instant, in milliseconds.

    Instants outside datetime's range use the offset at the nearest
    representable instant.
    """
    clamped = min(max(date_millis, _MIN_OFFSET_MILLIS), _MAX_OFFSET_MILLIS)
    offset = (_EPOCH + timedelta(milliseconds=clamped)).astimezone(tz).utcoffset()
    return (offset or timedelta(0)) // _MILLIS


def to_calendar_date(date_millis: int, tz: tzinfo = timezone.utc) -> CalendarDate:
    """Calendar date of an epoch-millisecond timestamp in ``tz``. Never raises."""
    local_millis = date_millis + utc_offset_millis(date_millis, tz)
    return _civil_from_days(local_millis // _MILLIS_PER_DAY)


def net_total(transactions: Iterable[Txn]) -> Decimal:
    """Sum of amounts, income positive and expense negative."""
    return sum((t.signed_amount for t in transactions), _ZERO)


def _accumulate(transactions: Iterable[Txn], key_fn) -> dict:
    buckets: dict = defaultdict(lambda: {"income": _ZERO, "expense": _ZERO, "count": 0})
    for txn in transactions:
        bucket = buckets[key_fn(txn)]
        if txn.is_income:
            bucket["income"] += txn.amount
        else:
            bucket["expense"] += txn.amount
        bucket["count"] += 1
    return buckets


def _to_totals(buckets: dict, sort_key=lambda key: key) -> dict:
    return {
        key: PeriodTotals(**values)
        for key, values in sorted(buckets.items(), key=lambda item: sort_key(item[0]))
    }


def summarize(transactions: Iterable[Txn]) -> PeriodTotals:
    """Totals over the whole transaction list."""
    buckets = _accumulate(transactions, lambda txn: None)
    if not buckets:
        return PeriodTotals()
    return PeriodTotals(**buckets[None])


def group_by_month(
    transactions: Iterable[Txn],
    tz: tzinfo = timezone.utc,
) -> dict[tuple[int, int], PeriodTotals]:
    """
    Partition transactions by calendar (year, month) in ``tz``.

    Keys are ascending. Every transaction lands in exactly one bucket;
    identical timestamps are never merged.
    """
    def month_key(txn: Txn) -> tuple[int, int]:
        date = to_calendar_date(txn.date_millis, tz)
        return date.year, date.month

    return _to_totals(_accumulate(transactions, month_key))


def group_by_year(
    transactions: Iterable[Txn],
    tz: tzinfo = timezone.utc,
) -> dict[int, PeriodTotals]:
    """Partition transactions by calendar year in ``tz``. Keys are ascending."""
    return _to_totals(
        _accumulate(transactions, lambda txn: to_calendar_date(txn.date_millis, tz).year)
    )


def group_by_category(sheet: Sheet) -> dict[Optional[str], PeriodTotals]:
    """
    Partition a sheet's transactions by category name.

    Missing or dangling category references are keyed by None (shown
    as "Uncategorized"), so a real category with that name stays
    separate. Two categories with the same name share a bucket.
    Named buckets come first, alphabetically; None is last.
    """
    def category_key(txn: Txn) -> Optional[str]:
        category = find_category(sheet, txn.category_id)
        return category.name if category is not None else None

    return _to_totals(
        _accumulate(sheet.transactions, category_key),
        sort_key=lambda key: (key is None, key or ""),
    )


def build_report(sheet: Sheet, tz: tzinfo = timezone.utc) -> SheetReport:
    """Compute every report view for a sheet."""
    return SheetReport(
        sheet_id=sheet.id,
        sheet_name=sheet.name,
        net_total=net_total(sheet.transactions),
        totals=summarize(sheet.transactions),
        monthly=group_by_month(sheet.transactions, tz),
        yearly=group_by_year(sheet.transactions, tz),
        by_category=group_by_category(sheet),
    )
