"""
Tests for settings and application wiring.
"""

import pytest
from datetime import date
from decimal import Decimal

from financeio.config import FinanceIOSettings, get_settings
from financeio.orchestrator import create_app_components, create_storage
from financeio.services.storage import InMemoryLedgerStorage, JsonFileLedgerStorage


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for FinanceIOSettings."""

    def test_defaults(self, monkeypatch, fresh_settings):
        monkeypatch.delenv("FINANCEIO_DATA_FILE", raising=False)
        settings = FinanceIOSettings()
        assert settings.data_file is None
        assert settings.uses_file_storage is False
        assert settings.log_level == "INFO"
        assert settings.recent_activity_limit == 5

    def test_reads_environment(self, monkeypatch, tmp_path, fresh_settings):
        monkeypatch.setenv("FINANCEIO_DATA_FILE", str(tmp_path / "ledger.json"))
        monkeypatch.setenv("FINANCEIO_RECENT_ACTIVITY_LIMIT", "3")
        monkeypatch.setenv("FINANCEIO_LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.data_file == tmp_path / "ledger.json"
        assert settings.uses_file_storage is True
        assert settings.recent_activity_limit == 3
        assert settings.log_level == "DEBUG"

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError):
            FinanceIOSettings(log_level="LOUD")
        with pytest.raises(ValueError):
            FinanceIOSettings(recent_activity_limit=0)


class TestCreateAppComponents:
    """Tests for create_app_components."""

    def test_in_memory_seeds_defaults(self, tmp_path):
        components = create_app_components(FinanceIOSettings(export_dir=tmp_path))

        assert isinstance(components.storage, InMemoryLedgerStorage)
        assert len(components.storage.list_categories()) == 9
        assert components.ledger.storage is components.storage
        assert components.exporter.export_dir == tmp_path

    def test_create_storage_picks_backend(self, tmp_path):
        assert isinstance(create_storage(FinanceIOSettings()), InMemoryLedgerStorage)
        file_store = create_storage(FinanceIOSettings(data_file=tmp_path / "l.json"))
        assert isinstance(file_store, JsonFileLedgerStorage)

    def test_file_backend_survives_restart(self, tmp_path):
        settings = FinanceIOSettings(data_file=tmp_path / "ledger.json", export_dir=tmp_path)

        first = create_app_components(settings)
        alice = first.ledger.add_person("Alice")
        first.ledger.add_lending_transaction(alice.id, "500", "lent")

        second = create_app_components(settings)
        assert len(second.storage.list_categories()) == 9
        assert second.queries.net_lending_total() == Decimal("500")

    def test_explicit_storage_is_used(self, storage):
        components = create_app_components(FinanceIOSettings(), storage=storage)
        assert components.storage is storage
        assert len(storage.list_categories()) == 9

    def test_end_to_end_export(self, tmp_path):
        components = create_app_components(FinanceIOSettings(export_dir=tmp_path))
        ledger = components.ledger
        ledger.add_expense("100", "Food", date=date(2026, 1, 5))
        alice = ledger.add_person("Alice")
        ledger.add_lending_transaction(alice.id, "500", "lent", date=date(2026, 1, 6), note="lunch")
        ledger.add_lending_transaction(alice.id, "200", "received", date=date(2026, 1, 7))

        path = components.exporter.export_storage(components.storage, today=date(2026, 1, 7))

        assert path.name == "FinanceIO_Export_2026-01-07.csv"
        assert path.read_text(encoding="utf-8").splitlines() == [
            "Date,Type,Description,Amount,Note,Method",
            '2026-01-05,Expense,"Food",100,"",""',
            '2026-01-06,Lent,"Alice",500,"lunch",',
            '2026-01-07,Received,"Alice",-200,"",',
        ]
        assert components.queries.summary(today=date(2026, 1, 7)).net_lending_total == Decimal("300")
