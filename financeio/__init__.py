"""
FinanceIO - Source Package

A single-user personal finance ledger: expenses, money lent to and
borrowed from people, dashboard aggregates, and CSV export.

DESIGN PRINCIPLES:
1. One write path: every mutation goes through LedgerService
2. A person's cached balance never drifts from their records
3. Bad input is rejected before anything is written
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinanceIO Team"
