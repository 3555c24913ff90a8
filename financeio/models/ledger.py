"""
Core Ledger Models for FinanceIO

These models define the durable data of the ledger:
1. ExpenseRecord - money spent, labelled with a category name
2. Category      - display metadata for expense categories
3. Person        - someone the user lends to / borrows from
4. LendingRecord - one signed lending movement owned by a Person

DESIGN DECISION: Money is Decimal, never float.
Amounts must be finite; NaN and Infinity are rejected at the model boundary.
At most MAX_AMOUNT_DIGITS significant digits, AMOUNT_DECIMAL_PLACES after
the point.

DESIGN DECISION: ExpenseRecord.category is a plain name, not a foreign key.
A category may be deleted while expenses still carry its name; display code
falls back to a default icon/color in that case.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


DEFAULT_ICON = "tag.fill"
DEFAULT_COLOR_HEX = "#8E8E93"
USER_CATEGORY_SORT_ORDER = 999

# Amounts stay well inside the 28-digit default Decimal context, so sums
# and balances are exact.
MAX_AMOUNT_DIGITS = 20
AMOUNT_DECIMAL_PLACES = 4


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# =============================================================================
# ENUMS
# =============================================================================

class LendingDirection(str, Enum):
    """
    Direction chosen by the user when recording a lending movement.

    LENT     -> amount = +magnitude (they owe you more)
    RECEIVED -> amount = -magnitude (they paid back, or you borrowed)
    """
    LENT = "lent"
    RECEIVED = "received"

    def apply(self, magnitude: Decimal) -> Decimal:
        """Turn a positive magnitude into a signed amount."""
        return magnitude if self is LendingDirection.LENT else -magnitude


# =============================================================================
# ENTITIES
# =============================================================================

class ExpenseRecord(BaseModel):
    """A single expense (food, transport, utilities...)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        max_digits=MAX_AMOUNT_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        description="Positive, currency-agnostic amount",
    )
    date: dt.date = Field(
        default_factory=dt.date.today,
        description="Calendar date the expense occurred",
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name (loose reference to Category.name)",
    )
    note: Optional[str] = Field(default=None, max_length=1000)
    payment_method: Optional[str] = Field(
        default=None,
        max_length=100,
        description="e.g. Cash, eSewa, Khalti",
    )

    @field_validator("note", "payment_method", mode="before")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v) if isinstance(v, str) else v


class Category(BaseModel):
    """
    An expense category with icon and color.

    Built-in defaults (is_default=True) can be edited but never deleted.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(default=DEFAULT_ICON, min_length=1)
    color_hex: str = Field(
        default=DEFAULT_COLOR_HEX,
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex triplet, e.g. #FF9500",
    )
    sort_order: int = Field(
        default=USER_CATEGORY_SORT_ORDER,
        description="Ascending = displayed first",
    )
    is_default: bool = False


class Person(BaseModel):
    """
    Someone in the lending panel.

    net_balance is a cached value: it always equals the sum of the amounts
    of the person's lending records. Only LedgerService writes it.
    Positive = they owe the user, negative = the user owes them.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=200)
    net_balance: Decimal = Field(default=Decimal("0"), allow_inf_nan=False)
    created_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc)
    )


class LendingRecord(BaseModel):
    """
    One lending/borrowing movement.

    Positive amount = the user lent money.
    Negative amount = money received back, or borrowed.
    The owner is fixed at creation.
    """
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    person_id: UUID = Field(..., frozen=True, description="Owning Person")
    amount: Decimal = Field(
        ...,
        allow_inf_nan=False,
        max_digits=MAX_AMOUNT_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
    )
    date: dt.date = Field(default_factory=dt.date.today)
    note: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("note", mode="before")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v) if isinstance(v, str) else v

    @property
    def direction(self) -> LendingDirection:
        return LendingDirection.LENT if self.amount >= 0 else LendingDirection.RECEIVED


class PersonLedger(BaseModel):
    """A person together with the lending records they own."""

    person: Person
    records: list[LendingRecord] = Field(default_factory=list)

    @property
    def computed_balance(self) -> Decimal:
        return sum((r.amount for r in self.records), Decimal("0"))


# =============================================================================
# BUILT-IN CATEGORIES
# =============================================================================

# (name, icon, color, sort order) seeded on first launch.
BUILT_IN_CATEGORIES: tuple[tuple[str, str, str, int], ...] = (
    ("Food",          "fork.knife",           "#FF9500", 0),
    ("Transport",     "car.fill",             "#007AFF", 1),
    ("Rent",          "house.fill",           "#AF52DE", 2),
    ("Shopping",      "bag.fill",             "#FF2D55", 3),
    ("Utilities",     "bolt.fill",            "#FFCC00", 4),
    ("Entertainment", "tv.fill",              "#5856D6", 5),
    ("Health",        "heart.fill",           "#FF3B30", 6),
    ("Education",     "book.fill",            "#5AC8FA", 7),
    ("Other",         "ellipsis.circle.fill", "#8E8E93", 8),
)


def default_categories() -> list[Category]:
    """Build fresh Category objects for the nine built-ins."""
    return [
        Category(
            name=name,
            icon=icon,
            color_hex=color,
            sort_order=order,
            is_default=True,
        )
        for name, icon, color, order in BUILT_IN_CATEGORIES
    ]
