"""
Application wiring for FinanceIO

Builds the components a front end needs:
- storage (JSON file or in-memory, from settings)
- LedgerService for every write
- DashboardQueries for the read side
- CSVExporter for on-demand exports

First run seeds the nine built-in categories.
"""

from dataclasses import dataclass
from typing import Optional

from financeio.config import FinanceIOSettings, get_settings
from financeio.export import CSVExporter
from financeio.ledger import LedgerService
from financeio.log import configure_logging, get_logger
from financeio.queries import DashboardQueries
from financeio.services.storage import (
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
)


logger = get_logger(__name__)


@dataclass
class AppComponents:
    storage: LedgerStorageInterface
    ledger: LedgerService
    queries: DashboardQueries
    exporter: CSVExporter


def create_storage(settings: FinanceIOSettings) -> LedgerStorageInterface:
    if settings.uses_file_storage:
        return JsonFileLedgerStorage(settings.data_file)
    return InMemoryLedgerStorage()


def create_app_components(
    settings: Optional[FinanceIOSettings] = None,
    storage: Optional[LedgerStorageInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to get_settings()
        storage: Use this store instead of the one settings describe

    Raises:
        StorageError: If the configured data file cannot be read
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    storage = storage or create_storage(settings)
    ledger = LedgerService(storage)
    seeded = ledger.seed_default_categories()

    logger.info(
        "app_components_created",
        storage=type(storage).__name__,
        data_file=str(settings.data_file) if settings.data_file else None,
        categories_seeded=seeded,
    )

    return AppComponents(
        storage=storage,
        ledger=ledger,
        queries=DashboardQueries(storage, recent_limit=settings.recent_activity_limit),
        exporter=CSVExporter(settings.export_dir),
    )
