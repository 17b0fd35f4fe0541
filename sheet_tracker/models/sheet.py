"""
Core Data Models for Sheet Tracker

A Sheet is a named ledger holding categories and transactions.
It is also the unit of persistence: one document per sheet.

DESIGN DECISION: Models are frozen Pydantic v2 models and every
mutation is a command function that returns a NEW sheet.
Storage and reporting can therefore never observe a sheet halfway
through an update, and nothing aliases a shared mutable list.

Documents use camelCase keys (categoryId, isIncome, dateMillis) on
the wire. Snake_case keys are accepted too.
"""

import time
from decimal import Decimal, InvalidOperation
from typing import Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


UNCATEGORIZED_LABEL = "-"


class AmountValidationError(ValueError):
    """User-entered amount is not a finite decimal number."""
    pass


class SheetNameError(ValueError):
    """Sheet name is blank."""
    pass


def new_id() -> str:
    """Generate a globally unique identifier for a sheet, category or transaction."""
    return str(uuid4())


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


# =============================================================================
# ENTITIES
# =============================================================================

class _Entity(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Category(_Entity):
    """A user-defined label that transactions may reference."""

    id: str = Field(
        default_factory=new_id,
        description="Unique category ID within a sheet"
    )
    name: str = Field(
        ...,
        description="Display name (duplicates allowed)"
    )


class Txn(_Entity):
    """
    A single income or expense ledger entry.

    The stored amount carries no sign. Whether the entry is a credit
    or a debit is decided by is_income alone, and zero or negative
    amounts are kept exactly as entered.
    """

    id: str = Field(
        default_factory=new_id,
        description="Unique transaction ID within a sheet"
    )
    category_id: Optional[str] = Field(
        default=None,
        description="Weak reference to Category.id (may dangle)"
    )
    description: str = Field(
        default="",
        description="Free text description"
    )
    amount: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="Amount; the sign of the cash effect comes from is_income"
    )
    is_income: bool = Field(
        ...,
        description="True = credit, False = debit"
    )
    date_millis: int = Field(
        default_factory=now_millis,
        description="Epoch milliseconds, used only for report bucketing"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the cash-effect sign applied."""
        return self.amount if self.is_income else -self.amount


class Sheet(_Entity):
    """
    A named ledger.

    Transactions keep entry order. Category order carries no meaning.
    """

    id: str = Field(
        default_factory=new_id,
        description="Unique sheet ID, never reassigned"
    )
    name: str = Field(
        ...,
        description="Display name"
    )
    categories: tuple[Category, ...] = Field(default_factory=tuple)
    transactions: tuple[Txn, ...] = Field(default_factory=tuple)

    def to_document(self) -> str:
        """Serialize to the pretty-printed JSON document stored on disk."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_document(cls, text: Union[str, bytes]) -> "Sheet":
        """Parse a stored JSON document. Raises pydantic.ValidationError."""
        return cls.model_validate_json(text)


# =============================================================================
# INPUT PARSING
# =============================================================================

def parse_amount(value: Union[str, int, float, Decimal]) -> Decimal:
    """
    Parse user input into a finite Decimal.

    Floats go through str() so 0.1 stays 0.1 rather than its binary
    expansion.

    Raises:
        AmountValidationError: empty, non-numeric, NaN or infinite input
    """
    if isinstance(value, bool):
        raise AmountValidationError(f"Not an amount: {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            raise AmountValidationError("Amount is required")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise AmountValidationError(f"Not a valid number: {text!r}")

    if not amount.is_finite():
        raise AmountValidationError(f"Amount must be finite, got {value!r}")
    return amount


def normalize_sheet_name(name: str) -> str:
    """Trim a sheet name, rejecting blank names."""
    cleaned = name.strip()
    if not cleaned:
        raise SheetNameError("Sheet name cannot be blank")
    return cleaned


# =============================================================================
# COMMANDS - each returns a new Sheet
# =============================================================================

def add_category(sheet: Sheet, name: str) -> tuple[Sheet, Category]:
    """Append a category. Returns (updated_sheet, new_category)."""
    category = Category(name=name)
    updated = sheet.model_copy(
        update={"categories": sheet.categories + (category,)}
    )
    return updated, category


def add_transaction(
    sheet: Sheet,
    description: str,
    amount: Union[str, int, float, Decimal],
    is_income: bool,
    category_id: Optional[str] = None,
    date_millis: Optional[int] = None,
) -> tuple[Sheet, Txn]:
    """
    Append a transaction. Returns (updated_sheet, new_txn).

    Raises:
        AmountValidationError: if amount does not parse; the sheet is untouched
    """
    txn = Txn(
        category_id=category_id,
        description=description,
        amount=parse_amount(amount),
        is_income=is_income,
        date_millis=now_millis() if date_millis is None else date_millis,
    )
    updated = sheet.model_copy(
        update={"transactions": sheet.transactions + (txn,)}
    )
    return updated, txn


def rename_sheet(sheet: Sheet, name: str) -> Sheet:
    """Return a copy of the sheet with a new (trimmed, non-blank) name."""
    return sheet.model_copy(update={"name": normalize_sheet_name(name)})


# =============================================================================
# LOOKUPS
# =============================================================================

def find_category(sheet: Sheet, category_id: Optional[str]) -> Optional[Category]:
    """Resolve a weak category reference. None when absent or dangling."""
    if category_id is None:
        return None
    for category in sheet.categories:
        if category.id == category_id:
            return category
    return None


def category_label(sheet: Sheet, txn: Txn, default: str = UNCATEGORIZED_LABEL) -> str:
    """Category name for display, or ``default`` for uncategorized entries."""
    category = find_category(sheet, txn.category_id)
    return category.name if category is not None else default
