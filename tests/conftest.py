"""Shared fixtures: the reference three-transaction sheet."""

import pytest

from sheet_tracker.models import Category, Sheet, Txn
from tests.helpers import utc_millis


@pytest.fixture
def groceries() -> Category:
    return Category(name="Groceries")


@pytest.fixture
def reference_sheet(groceries: Category) -> Sheet:
    """Salary 100 in January, expenses 40 (January) and 10 (February)."""
    return Sheet(
        name="Household",
        categories=(groceries,),
        transactions=(
            Txn(description="Salary", amount="100", is_income=True,
                date_millis=utc_millis(2024, 1, 15)),
            Txn(description="Market", amount="40", is_income=False,
                category_id=groceries.id, date_millis=utc_millis(2024, 1, 20)),
            Txn(description="Bus pass", amount="10", is_income=False,
                category_id="deleted-category", date_millis=utc_millis(2024, 2, 1)),
        ),
    )
