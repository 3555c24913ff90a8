"""Aggregation query package."""

from financeio.queries.aggregations import (
    category_totals,
    monthly_total,
    net_lending_total,
    recent_activity,
    resolve_category_style,
)
from financeio.queries.executor import DashboardQueries

__all__ = [
    "DashboardQueries",
    "category_totals",
    "monthly_total",
    "net_lending_total",
    "recent_activity",
    "resolve_category_style",
]
