"""Configuration package."""

from financeio.config.settings import FinanceIOSettings, get_settings

__all__ = [
    "FinanceIOSettings",
    "get_settings",
]
