"""
Tests for the aggregation engine

Test strategy:
1. Net totals against independently computed sums
2. Month and year buckets: ordering, zones, partition of the input
3. Calendar dates for timestamps outside datetime's range
4. Category buckets and whole-sheet reports
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from sheet_tracker.models import Category, Sheet, Txn
from sheet_tracker.reports import (
    CalendarDate,
    PeriodTotals,
    build_report,
    group_by_category,
    group_by_month,
    group_by_year,
    net_total,
    summarize,
    to_calendar_date,
)

from tests.helpers import YEAR_10000_MILLIS, YEAR_ZERO_MILLIS, utc_millis


def make_txn(amount, is_income, when=None, **kwargs):
    return Txn(
        amount=Decimal(str(amount)),
        is_income=is_income,
        date_millis=when if when is not None else utc_millis(2024, 3, 1),
        **kwargs,
    )


class TestNetTotal:
    """Tests for net_total."""

    def test_reference_scenario(self, reference_sheet):
        """100 income minus 40 and 10 expenses is 50."""
        assert net_total(reference_sheet.transactions) == Decimal("50")

    def test_empty(self):
        """No transactions sum to zero."""
        assert net_total([]) == 0

    def test_matches_independent_sums(self):
        """Net equals income sum minus expense sum."""
        txns = [
            make_txn("10.10", True),
            make_txn("0.20", False),
            make_txn("3.05", False),
            make_txn("7", True),
        ]
        income = sum(t.amount for t in txns if t.is_income)
        expense = sum(t.amount for t in txns if not t.is_income)
        assert net_total(txns) == income - expense == Decimal("13.85")

    def test_no_float_drift(self):
        """Ten 0.10 expenses make exactly 1.00."""
        txns = [make_txn("0.10", False) for _ in range(10)]
        assert net_total(txns) == Decimal("-1.00")

    def test_negative_and_zero_amounts_taken_literally(self):
        """A negative income lowers the net; a negative expense raises it."""
        txns = [make_txn("-5", True), make_txn("-2", False), make_txn("0", True)]
        assert net_total(txns) == Decimal("-3")

    def test_accepts_generators(self, reference_sheet):
        """Any iterable of transactions works, not only tuples."""
        assert net_total(t for t in reference_sheet.transactions) == Decimal("50")


class TestGroupByMonth:
    """Tests for group_by_month."""

    def test_reference_scenario(self, reference_sheet):
        """January nets 60, February nets -10."""
        months = group_by_month(reference_sheet.transactions)
        assert list(months) == [(2024, 1), (2024, 2)]
        january, february = months[(2024, 1)], months[(2024, 2)]
        assert (january.income, january.expense, january.net) == (100, 40, 60)
        assert (february.income, february.expense, february.net) == (0, 10, -10)

    def test_empty(self):
        """No transactions, no buckets."""
        assert group_by_month([]) == {}

    def test_keys_sorted_ascending(self):
        """Buckets come out in calendar order whatever the input order."""
        txns = [
            make_txn(1, True, utc_millis(2025, 1, 5)),
            make_txn(1, True, utc_millis(2023, 12, 5)),
            make_txn(1, True, utc_millis(2024, 6, 5)),
        ]
        assert list(group_by_month(txns)) == [(2023, 12), (2024, 6), (2025, 1)]

    def test_identical_timestamps_not_merged(self):
        """Two transactions at the same instant both count."""
        when = utc_millis(2024, 5, 5)
        txns = [make_txn(3, False, when), make_txn(3, False, when)]
        bucket = group_by_month(txns)[(2024, 5)]
        assert bucket.expense == Decimal("6")
        assert bucket.count == 2

    def test_uses_given_zone(self):
        """23:30 UTC on Jan 31 is already February at UTC+9."""
        when = int(datetime(2024, 1, 31, 23, 30, tzinfo=timezone.utc).timestamp() * 1000)
        txns = [make_txn(1, True, when)]
        assert list(group_by_month(txns)) == [(2024, 1)]
        assert list(group_by_month(txns, timezone(timedelta(hours=9)))) == [(2024, 2)]

    def test_timestamps_before_epoch(self):
        """One millisecond before the epoch is December 1969."""
        txns = [make_txn(1, True, -1)]
        assert list(group_by_month(txns)) == [(1969, 12)]

    def test_beyond_year_9999(self):
        """Timestamps past datetime's range still get a bucket."""
        txns = [make_txn(4, True, YEAR_10000_MILLIS), make_txn(1, False, utc_millis(2024, 1, 1))]
        months = group_by_month(txns)
        assert list(months) == [(2024, 1), (10000, 1)]
        assert months[(10000, 1)].income == Decimal("4")

    def test_before_year_one(self):
        """Timestamps before year 1 land in year 0 and earlier."""
        txns = [
            make_txn(2, False, YEAR_ZERO_MILLIS),
            make_txn(3, False, YEAR_ZERO_MILLIS - 400 * 366 * 86_400_000),
        ]
        months = group_by_month(txns)
        assert list(months)[-1] == (0, 12)
        assert list(months)[0][0] < 0
        assert sum(b.count for b in months.values()) == 2

    def test_does_not_mutate_input(self, reference_sheet):
        """Grouping leaves the sheet as it was."""
        before = reference_sheet.model_copy(deep=True)
        group_by_month(reference_sheet.transactions)
        assert reference_sheet == before


class TestGroupByYear:
    """Tests for group_by_year."""

    def test_reference_scenario(self, reference_sheet):
        """All three reference transactions fall in 2024."""
        years = group_by_year(reference_sheet.transactions)
        assert list(years) == [2024]
        assert (years[2024].income, years[2024].expense, years[2024].net) == (100, 50, 50)

    def test_empty(self):
        """No transactions, no buckets."""
        assert group_by_year([]) == {}

    def test_year_boundary(self):
        """23:00 on Dec 31 and 00:00 on Jan 1 land in different years."""
        txns = [
            make_txn(5, True, utc_millis(2023, 12, 31, 23)),
            make_txn(7, False, utc_millis(2024, 1, 1, 0)),
        ]
        years = group_by_year(txns)
        assert years[2023].net == Decimal("5")
        assert years[2024].net == Decimal("-7")

    def test_out_of_range_years(self):
        """Years 0 and 10000 are ordinary keys."""
        txns = [make_txn(1, True, YEAR_10000_MILLIS), make_txn(1, True, YEAR_ZERO_MILLIS)]
        assert list(group_by_year(txns)) == [0, 10000]


class TestPartition:
    """Every transaction lands in exactly one month bucket and one year bucket."""

    @pytest.fixture
    def spread(self):
        stamps = [
            utc_millis(2022, 11, 30, 23),
            utc_millis(2022, 12, 1, 0),
            utc_millis(2023, 2, 28),
            utc_millis(2023, 2, 28),
            utc_millis(2024, 2, 29),
            utc_millis(2024, 3, 1, 0),
            utc_millis(2024, 12, 31, 23),
            utc_millis(2025, 1, 1, 0),
            -1,
            YEAR_10000_MILLIS,
        ]
        return [make_txn(i + 1, i % 3 == 0, when) for i, when in enumerate(stamps)]

    @pytest.mark.parametrize("offset_hours", [0, 9, -5])
    def test_months(self, spread, offset_hours):
        """Each txn id maps to one bucket, and each bucket holds exactly its ids."""
        tz = timezone(timedelta(hours=offset_hours))
        assigned = {}
        for txn in spread:
            alone = group_by_month([txn], tz)
            assert len(alone) == 1
            assigned[txn.id] = next(iter(alone))
            if txn.date_millis < YEAR_10000_MILLIS:
                local = datetime.fromtimestamp(txn.date_millis / 1000, tz)
                assert assigned[txn.id] == (local.year, local.month)

        months = group_by_month(spread, tz)
        assert set(months) == set(assigned.values())
        assert {key: b.count for key, b in months.items()} == dict(Counter(assigned.values()))
        for key, bucket in months.items():
            members = [t for t in spread if assigned[t.id] == key]
            assert bucket.net == net_total(members)
        assert sum(b.count for b in months.values()) == len(spread)

    def test_years(self, spread):
        """Year buckets are the month buckets folded by year."""
        months = group_by_month(spread)
        years = group_by_year(spread)
        folded = Counter()
        for (year, _), bucket in months.items():
            folded[year] += bucket.count
        assert {year: b.count for year, b in years.items()} == dict(folded)
        assert sum(years[y].net for y in years) == net_total(spread)


class TestCalendarDate:
    """Tests for to_calendar_date."""

    def test_ordinary_instant(self):
        """Noon UTC on Jan 15 2024."""
        assert to_calendar_date(utc_millis(2024, 1, 15)) == CalendarDate(2024, 1, 15)

    def test_matches_datetime_inside_its_range(self):
        """Agrees with datetime for leap days and century boundaries."""
        for moment in (
            datetime(1, 1, 1, tzinfo=timezone.utc),
            datetime(1900, 2, 28, 23, tzinfo=timezone.utc),
            datetime(2000, 2, 29, 12, tzinfo=timezone.utc),
            datetime(9999, 12, 31, 23, 59, tzinfo=timezone.utc),
        ):
            millis = int(moment.timestamp() * 1000)
            assert to_calendar_date(millis) == (moment.year, moment.month, moment.day)

    def test_beyond_year_9999(self):
        """One millisecond past datetime.max is 10000-01-01."""
        date = to_calendar_date(YEAR_10000_MILLIS)
        assert date == CalendarDate(10000, 1, 1)
        assert date.isoformat() == "10000-01-01"

    def test_zone_offset_applies_beyond_range(self):
        """The last millisecond of 9999 UTC is already year 10000 at UTC+9."""
        date = to_calendar_date(YEAR_10000_MILLIS - 1, timezone(timedelta(hours=9)))
        assert date == CalendarDate(10000, 1, 1)

    def test_before_year_one(self):
        """The day before 0001-01-01 is 0000-12-31."""
        date = to_calendar_date(YEAR_ZERO_MILLIS)
        assert date == CalendarDate(0, 12, 31)
        assert date.isoformat() == "0000-12-31"

    def test_negative_year_text(self):
        """Years before 0 carry a minus sign."""
        assert CalendarDate(-44, 3, 15).isoformat() == "-0044-03-15"


class TestCategoryAndSummary:
    """Tests for group_by_category, summarize and build_report."""

    def test_dangling_category_is_uncategorized(self, reference_sheet):
        """Absent and dangling references share the None bucket."""
        buckets = group_by_category(reference_sheet)
        assert list(buckets) == ["Groceries", None]
        assert buckets["Groceries"].expense == Decimal("40")
        assert buckets[None].income == Decimal("100")
        assert buckets[None].expense == Decimal("10")

    def test_category_named_uncategorized_stays_separate(self):
        """A real category called "Uncategorized" is not merged with missing ones."""
        named = Category(name="Uncategorized")
        sheet = Sheet(
            name="s",
            categories=(named,),
            transactions=(
                make_txn(5, False, category_id=named.id),
                make_txn(7, False),
                make_txn(9, False, category_id="gone"),
            ),
        )
        buckets = group_by_category(sheet)
        assert list(buckets) == ["Uncategorized", None]
        assert buckets["Uncategorized"].expense == Decimal("5")
        assert buckets[None].expense == Decimal("16")

    def test_summarize(self, reference_sheet):
        """Overall totals cover all three transactions."""
        totals = summarize(reference_sheet.transactions)
        assert totals == PeriodTotals(income=Decimal("100"), expense=Decimal("50"), count=3)
        assert totals.net == Decimal("50")

    def test_summarize_empty(self):
        """Summarizing nothing gives zero totals."""
        assert summarize([]).net == 0

    def test_build_report(self, reference_sheet):
        """A report carries the sheet identity and every grouping."""
        report = build_report(reference_sheet)
        assert report.sheet_id == reference_sheet.id
        assert report.net_total == Decimal("50")
        assert list(report.monthly) == [(2024, 1), (2024, 2)]
        assert list(report.yearly) == [2024]

    def test_build_report_empty_sheet(self):
        """An empty sheet reports zero and no buckets."""
        report = build_report(Sheet(name="Empty"))
        assert report.net_total == 0
        assert report.monthly == {}
        assert report.yearly == {}
        assert report.by_category == {}
