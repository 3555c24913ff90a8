"""
Dashboard Query Executor

Reads the current entity set from storage and runs the aggregation
functions over it. Read-only: nothing here writes to storage.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from financeio.log import get_logger
from financeio.models.views import (
    ActivityItem,
    CategoryStyle,
    CategoryTotal,
    DashboardSummary,
)
from financeio.queries import aggregations
from financeio.services.storage import LedgerStorageInterface


logger = get_logger(__name__)


class DashboardQueries:
    """
    Executes dashboard queries against ledger storage.

    GUARANTEES:
    - Only returns values derived from stored data
    - Every call sees the store as it is at call time
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        recent_limit: int = aggregations.RECENT_ACTIVITY_LIMIT,
    ):
        self._storage = storage
        self._recent_limit = recent_limit

    def monthly_total(self, today: Optional[dt.date] = None) -> Decimal:
        return aggregations.monthly_total(self._storage.list_expenses(), today)

    def category_totals(self) -> list[CategoryTotal]:
        return aggregations.category_totals(self._storage.list_expenses())

    def net_lending_total(self) -> Decimal:
        return aggregations.net_lending_total(self._storage.list_people())

    def recent_activity(self) -> list[ActivityItem]:
        return aggregations.recent_activity(
            self._storage.list_expenses(),
            self._storage.list_lending_records(),
            people=self._storage.list_people(),
            categories=self._storage.list_categories(),
            limit=self._recent_limit,
        )

    def category_style(self, name: str) -> CategoryStyle:
        return aggregations.resolve_category_style(name, self._storage.list_categories())

    def summary(self, today: Optional[dt.date] = None) -> DashboardSummary:
        """Everything the dashboard shows, read from one view of the store."""
        today = today or dt.date.today()
        expenses = self._storage.list_expenses()
        people = self._storage.list_people()

        summary = DashboardSummary(
            as_of=today,
            monthly_total=aggregations.monthly_total(expenses, today),
            category_totals=aggregations.category_totals(expenses),
            net_lending_total=aggregations.net_lending_total(people),
            recent_activity=aggregations.recent_activity(
                expenses,
                self._storage.list_lending_records(),
                people=people,
                categories=self._storage.list_categories(),
                limit=self._recent_limit,
            ),
        )
        logger.debug(
            "dashboard_summary_built",
            as_of=today.isoformat(),
            expenses=len(expenses),
            people=len(people),
        )
        return summary
