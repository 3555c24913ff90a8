"""
Aggregation Queries

Pure functions over the current entity set. No storage access here;
DashboardQueries (executor.py) feeds them from a store.

Ordering rules:
- category_totals: descending by total; equal totals keep the order in
  which the category was first seen.
- recent_activity: newest date first. On equal dates, expenses come before
  lending records, and within one kind the most recently inserted record
  comes first.

Icon fallbacks differ by surface. resolve_category_style (detail views)
falls back to the built-in icon for a default category name, else
ellipsis.circle. The activity feed shows an expense with an unresolved
category as "cart".
"""

import datetime as dt
from decimal import Decimal
from typing import Iterable, Optional, Sequence
from uuid import UUID

from financeio.models.ledger import (
    BUILT_IN_CATEGORIES,
    DEFAULT_COLOR_HEX,
    Category,
    ExpenseRecord,
    LendingRecord,
    Person,
)
from financeio.models.views import (
    ActivityItem,
    ActivityKind,
    CategoryStyle,
    CategoryTotal,
)


RECENT_ACTIVITY_LIMIT = 5
LENDING_ICON = "person.2"
FALLBACK_ICON = "ellipsis.circle"
ACTIVITY_FALLBACK_ICON = "cart"
UNKNOWN_PERSON = "Unknown"

# Icons for built-in names whose Category row is gone
_FALLBACK_ICONS = {
    name: icon for name, icon, _color, _order in BUILT_IN_CATEGORIES if name != "Other"
}


def _month_bounds(today: dt.date) -> tuple[dt.date, dt.date]:
    start = today.replace(day=1)
    next_start = (start + dt.timedelta(days=32)).replace(day=1)
    return start, next_start


def monthly_total(
    expenses: Iterable[ExpenseRecord],
    today: Optional[dt.date] = None,
) -> Decimal:
    """Sum of expenses dated within the calendar month containing today."""
    start, next_start = _month_bounds(today or dt.date.today())
    return sum(
        (e.amount for e in expenses if start <= e.date < next_start),
        Decimal("0"),
    )


def category_totals(expenses: Iterable[ExpenseRecord]) -> list[CategoryTotal]:
    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, Decimal("0")) + expense.amount
        counts[expense.category] = counts.get(expense.category, 0) + 1

    return sorted(
        (
            CategoryTotal(category=name, total=total, count=counts[name])
            for name, total in totals.items()
        ),
        key=lambda t: t.total,
        reverse=True,
    )


def net_lending_total(people: Iterable[Person]) -> Decimal:
    """Sum of cached balances. Positive = people owe the user overall."""
    return sum((p.net_balance for p in people), Decimal("0"))


def resolve_category_style(
    name: str,
    categories: Iterable[Category],
) -> CategoryStyle:
    """
    Icon and color for a category name.

    Expenses reference categories by name only, so the name may no longer
    match any stored category. Then a built-in icon for that name (or a
    generic one) and gray are used.
    """
    for category in categories:
        if category.name == name:
            return CategoryStyle(
                icon=category.icon,
                color_hex=category.color_hex,
                resolved=True,
            )
    return CategoryStyle(
        icon=_FALLBACK_ICONS.get(name, FALLBACK_ICON),
        color_hex=DEFAULT_COLOR_HEX,
        resolved=False,
    )


def _latest(records: Sequence, limit: int) -> list:
    # Reverse first so that, among equal dates, later insertions win.
    # sorted() stays stable with reverse=True.
    return sorted(reversed(records), key=lambda r: r.date, reverse=True)[:limit]


def _activity_icon(name: str, categories: Iterable[Category]) -> str:
    style = resolve_category_style(name, categories)
    return style.icon if style.resolved else ACTIVITY_FALLBACK_ICON


def recent_activity(
    expenses: Sequence[ExpenseRecord],
    lending_records: Sequence[LendingRecord],
    people: Iterable[Person] = (),
    categories: Iterable[Category] = (),
    limit: int = RECENT_ACTIVITY_LIMIT,
) -> list[ActivityItem]:
    """
    Unified feed of the latest expenses and lending records.

    Takes the `limit` newest of each kind, merges, sorts newest first and
    truncates to `limit`. Expense amounts are negated (outflows).
    """
    names: dict[UUID, str] = {p.id: p.name for p in people}
    categories = list(categories)

    expense_items = [
        ActivityItem(
            title=e.category,
            subtitle=e.payment_method,
            amount=-e.amount,
            date=e.date,
            kind=ActivityKind.EXPENSE,
            icon=_activity_icon(e.category, categories),
            source_id=e.id,
        )
        for e in _latest(list(expenses), limit)
    ]
    lending_items = [
        ActivityItem(
            title=names.get(r.person_id, UNKNOWN_PERSON),
            subtitle=r.note,
            amount=r.amount,
            date=r.date,
            kind=ActivityKind.LENDING,
            icon=LENDING_ICON,
            source_id=r.id,
        )
        for r in _latest(list(lending_records), limit)
    ]

    merged = sorted(expense_items + lending_items, key=lambda i: i.date, reverse=True)
    return merged[:limit]
