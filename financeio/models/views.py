"""
Read-side models

Derived, read-only shapes produced by the aggregation queries.
Nothing here is persisted.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ActivityKind(str, Enum):
    """Where an activity feed entry came from."""
    EXPENSE = "expense"
    LENDING = "lending"


class ActivityItem(BaseModel):
    """
    One entry of the unified recent-activity feed.

    Expenses carry a negated amount (they are outflows);
    lending entries keep their signed amount.
    """

    title: str
    subtitle: Optional[str] = None
    amount: Decimal
    date: dt.date
    kind: ActivityKind
    icon: str
    source_id: UUID = Field(..., description="Id of the underlying record")


class CategoryTotal(BaseModel):
    """Sum of expense amounts for one category name."""

    category: str
    total: Decimal
    count: int = Field(ge=0)


class CategoryStyle(BaseModel):
    """Icon and color used to display a category name."""

    icon: str
    color_hex: str
    resolved: bool = Field(
        ...,
        description="False when the name matched no stored category",
    )


class DashboardSummary(BaseModel):
    """Everything the dashboard shows, computed in one pass."""

    as_of: dt.date
    monthly_total: Decimal
    category_totals: list[CategoryTotal] = Field(default_factory=list)
    net_lending_total: Decimal
    recent_activity: list[ActivityItem] = Field(default_factory=list)
