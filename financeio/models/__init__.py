"""
Data Models Package

All Pydantic models used by FinanceIO. Entities live in ledger.py,
derived read-side shapes in views.py.
"""

from financeio.models.ledger import (
    BUILT_IN_CATEGORIES,
    DEFAULT_COLOR_HEX,
    DEFAULT_ICON,
    Category,
    ExpenseRecord,
    LendingDirection,
    LendingRecord,
    Person,
    PersonLedger,
    default_categories,
)
from financeio.models.views import (
    ActivityItem,
    ActivityKind,
    CategoryStyle,
    CategoryTotal,
    DashboardSummary,
)

__all__ = [
    # Ledger entities
    "BUILT_IN_CATEGORIES",
    "DEFAULT_COLOR_HEX",
    "DEFAULT_ICON",
    "Category",
    "ExpenseRecord",
    "LendingDirection",
    "LendingRecord",
    "Person",
    "PersonLedger",
    "default_categories",
    # Read-side models
    "ActivityItem",
    "ActivityKind",
    "CategoryStyle",
    "CategoryTotal",
    "DashboardSummary",
]
