"""Ledger package: the balance engine and deletion policy."""

from financeio.ledger.service import (
    LedgerService,
    ValidationError,
    parse_amount,
)

__all__ = ["LedgerService", "ValidationError", "parse_amount"]
