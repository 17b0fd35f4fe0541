"""
Data Models Package

Sheets, categories and transactions, plus the command functions
that produce updated sheets. All amounts are Decimal.
"""

from sheet_tracker.models.sheet import (
    UNCATEGORIZED_LABEL,
    AmountValidationError,
    Category,
    Sheet,
    SheetNameError,
    Txn,
    add_category,
    add_transaction,
    category_label,
    find_category,
    new_id,
    normalize_sheet_name,
    now_millis,
    parse_amount,
    rename_sheet,
)

__all__ = [
    "UNCATEGORIZED_LABEL",
    "AmountValidationError",
    "Category",
    "Sheet",
    "SheetNameError",
    "Txn",
    "add_category",
    "add_transaction",
    "category_label",
    "find_category",
    "new_id",
    "normalize_sheet_name",
    "now_millis",
    "parse_amount",
    "rename_sheet",
]
