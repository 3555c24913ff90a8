"""
Tests for CSV export: field encoding, row layout and file output.
"""

import pytest
from datetime import date
from decimal import Decimal

from financeio.export import (
    HEADER,
    CSVExporter,
    ExportWriteError,
    FormatError,
    build_csv,
    export_filename,
    format_amount,
    quote_text,
)
from financeio.models.ledger import ExpenseRecord, LendingRecord, Person, PersonLedger


EXPECTED_SCENARIO = (
    "Date,Type,Description,Amount,Note,Method\n"
    '2026-01-05,Expense,"Food",100,"",""\n'
    '2026-01-06,Lent,"Alice",500,"lunch",\n'
    '2026-01-07,Received,"Alice",-200,"",\n'
)


@pytest.fixture
def scenario(ledger, alice_with_records):
    """Food 100 on Jan 5 plus Alice's two records."""
    ledger.add_expense("100", "Food", date=date(2026, 1, 5))
    return ledger


class TestFieldEncoding:
    """Tests for quote_text and format_amount."""

    def test_quote_plain(self):
        assert quote_text("Food") == '"Food"'

    def test_quote_none_and_empty(self):
        assert quote_text(None) == '""'
        assert quote_text("") == '""'

    def test_quote_doubles_inner_quotes(self):
        assert quote_text('the "big" one') == '"the ""big"" one"'

    def test_quote_keeps_commas_and_newlines(self):
        assert quote_text("a,b\nc") == '"a,b\nc"'

    @pytest.mark.parametrize("amount, expected", [
        (Decimal("100"), "100"),
        (Decimal("100.00"), "100"),
        (Decimal("-200"), "-200"),
        (Decimal("12.50"), "12.5"),
        (Decimal("0.05"), "0.05"),
        (Decimal("0"), "0"),
        (Decimal("-0.00"), "0"),
        (Decimal("1E+3"), "1000"),
    ])
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected

    @pytest.mark.parametrize("amount", [Decimal("NaN"), Decimal("Infinity"), "100", None])
    def test_format_amount_rejects(self, amount):
        with pytest.raises(FormatError):
            format_amount(amount)

    def test_format_amount_keeps_every_digit(self):
        """Nothing is rounded to the Decimal context precision."""
        raw = "1234567890123456789012345678.9"
        assert format_amount(Decimal(raw)) == raw
        assert format_amount(Decimal("-" + raw)) == "-" + raw
        assert format_amount(Decimal("9999999999999999.9999")) == "9999999999999999.9999"

    def test_largest_lending_amount_exports_exactly(self, ledger, alice):
        record = ledger.add_lending_transaction(alice.id, "9999999999999999.9999", "received")
        document = build_csv([], ledger.ledgers())
        assert document.splitlines()[1].split(",")[3] == "-9999999999999999.9999"
        assert format_amount(record.amount) == "-9999999999999999.9999"

    def test_export_filename(self):
        assert export_filename(date(2026, 1, 7)) == "FinanceIO_Export_2026-01-07.csv"


class TestBuildCsv:
    """Tests for the document layout."""

    def test_empty_export_is_header_only(self):
        assert build_csv([], []) == HEADER + "\n"

    def test_scenario_document(self, scenario, storage):
        """Expense rows first, then lending rows; lending Method is bare."""
        ledgers = scenario.ledgers()
        assert build_csv(storage.list_expenses(), ledgers) == EXPECTED_SCENARIO

    def test_row_count(self, scenario, storage):
        """1 header + expenses + all records of all people."""
        bob = scenario.add_person("Bob")
        scenario.add_lending_transaction(bob.id, "1", "lent")
        scenario.add_expense("3", "Transport")

        lines = build_csv(storage.list_expenses(), scenario.ledgers()).splitlines()
        assert len(lines) == 1 + 2 + 3

    def test_expense_row_fields(self):
        expense = ExpenseRecord(
            amount=Decimal("42.10"),
            date=date(2026, 2, 3),
            category="Shopping",
            note='gift for "Sam", later',
            payment_method="eSewa",
        )
        document = build_csv([expense], [])
        assert document.splitlines()[1] == (
            '2026-02-03,Expense,"Shopping",42.1,"gift for ""Sam"", later","eSewa"'
        )

    def test_zero_amount_record_exports_as_lent(self):
        person = Person(name="Alice")
        ledger = PersonLedger(
            person=person,
            records=[LendingRecord(person_id=person.id, amount=Decimal("0"), date=date(2026, 1, 1))],
        )
        assert build_csv([], [ledger]).splitlines()[1] == '2026-01-01,Lent,"Alice",0,"",'

    def test_person_without_records_adds_no_rows(self):
        ledger = PersonLedger(person=Person(name="Alice"))
        assert build_csv([], [ledger]) == HEADER + "\n"

    def test_unrenderable_amount_fails_whole_document(self):
        bad = ExpenseRecord.model_construct(
            amount=Decimal("NaN"),
            date=date(2026, 1, 1),
            category="Food",
            note=None,
            payment_method=None,
        )
        with pytest.raises(FormatError):
            build_csv([bad], [])


class TestCSVExporter:
    """Tests for file output."""

    def test_export_writes_file(self, scenario, storage, tmp_path):
        exporter = CSVExporter(tmp_path)
        path = exporter.export_storage(storage, today=date(2026, 1, 7))

        assert path == tmp_path / "FinanceIO_Export_2026-01-07.csv"
        assert path.read_bytes().decode("utf-8") == EXPECTED_SCENARIO

    def test_export_creates_directory(self, tmp_path):
        exporter = CSVExporter(tmp_path / "exports")
        path = exporter.export([], [], today=date(2026, 1, 7))
        assert path.parent == tmp_path / "exports"
        assert path.read_text(encoding="utf-8") == HEADER + "\n"

    def test_export_overwrites_same_day(self, scenario, storage, tmp_path):
        exporter = CSVExporter(tmp_path)
        exporter.export([], [], today=date(2026, 1, 7))
        path = exporter.export_storage(storage, today=date(2026, 1, 7))
        assert path.read_text(encoding="utf-8") == EXPECTED_SCENARIO
        assert len(list(tmp_path.iterdir())) == 1

    def test_format_error_writes_nothing(self, tmp_path):
        bad = ExpenseRecord.model_construct(
            amount=Decimal("Infinity"),
            date=date(2026, 1, 1),
            category="Food",
            note=None,
            payment_method=None,
        )
        exporter = CSVExporter(tmp_path)
        with pytest.raises(FormatError):
            exporter.export([bad], [], today=date(2026, 1, 7))
        assert list(tmp_path.iterdir()) == []

    def test_unwritable_directory(self, tmp_path, storage):
        """A file where the export directory should be is a write error."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        exporter = CSVExporter(blocker)

        with pytest.raises(ExportWriteError):
            exporter.export_storage(storage, today=date(2026, 1, 7))

    def test_export_does_not_touch_ledger(self, scenario, storage, tmp_path):
        before = (storage.list_expenses(), storage.list_people(), storage.list_lending_records())
        CSVExporter(tmp_path).export_storage(storage)
        after = (storage.list_expenses(), storage.list_people(), storage.list_lending_records())
        assert before == after
