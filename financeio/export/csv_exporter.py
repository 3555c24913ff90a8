"""
CSV Export

Builds one CSV document out of two different record kinds:

    Date,Type,Description,Amount,Note,Method

- Expense rows:  Type "Expense", Description = category name,
                 Method = payment method (or "")
- Lending rows:  Type "Lent" (amount >= 0) or "Received", Description =
                 person name, Amount keeps its sign, Method column empty

Expense rows come first, in input order, then lending rows grouped by
person (input order) and each person's record order. Nothing is sorted.

Text fields (Description, Note, Method) are always double-quoted with
inner quotes doubled. Date and Amount are written bare. The lending rows'
Method column is empty and unquoted.

The stdlib csv writer quotes per-dialect, not per-column, which cannot
produce this mixed layout, so rows are assembled by hand.
"""

import contextlib
import datetime as dt
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional, Union

from financeio.log import get_logger
from financeio.models.ledger import ExpenseRecord, PersonLedger
from financeio.services.storage import LedgerStorageInterface


logger = get_logger(__name__)

HEADER = "Date,Type,Description,Amount,Note,Method"
LINE_TERMINATOR = "\n"
FILENAME_PREFIX = "FinanceIO_Export_"


class ExportError(Exception):
    """Base exception for export errors."""
    pass


class FormatError(ExportError):
    """A value cannot be rendered into the CSV document."""
    pass


class ExportWriteError(ExportError):
    """The export file could not be written. Ledger data is unaffected."""
    pass


# =============================================================================
# FIELD ENCODING
# =============================================================================

def quote_text(value: Optional[str]) -> str:
    """Wrap in double quotes, doubling inner quotes. None becomes ""."""
    value = value or ""
    return '"' + value.replace('"', '""') + '"'


def format_amount(amount: Decimal) -> str:
    """
    Render an amount without exponent or trailing zeros.

    100 -> "100", Decimal("-200.00") -> "-200", Decimal("12.50") -> "12.5"
    Every stored digit is kept; nothing is rounded.

    Raises:
        FormatError: NaN, infinite, or not a number at all
    """
    if isinstance(amount, bool) or not isinstance(amount, (Decimal, int, float)):
        raise FormatError(f"Amount is not a number: {amount!r}")
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    if not amount.is_finite():
        raise FormatError(f"Amount is not finite: {amount}")
    if amount == 0:
        return "0"
    # format() without a precision is exact; normalize() would round
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_date(value: dt.date) -> str:
    if not isinstance(value, dt.date):
        raise FormatError(f"Not a date: {value!r}")
    return value.strftime("%Y-%m-%d")


def export_filename(on: dt.date) -> str:
    """FinanceIO_Export_<YYYY-MM-DD>.csv"""
    return f"{FILENAME_PREFIX}{format_date(on)}.csv"


# =============================================================================
# DOCUMENT
# =============================================================================

def _expense_row(expense: ExpenseRecord) -> str:
    return ",".join([
        format_date(expense.date),
        "Expense",
        quote_text(expense.category),
        format_amount(expense.amount),
        quote_text(expense.note),
        quote_text(expense.payment_method),
    ])


def _lending_rows(ledger: PersonLedger) -> Iterable[str]:
    name = quote_text(ledger.person.name)
    for record in ledger.records:
        direction = "Lent" if record.amount >= 0 else "Received"
        yield ",".join([
            format_date(record.date),
            direction,
            name,
            format_amount(record.amount),
            quote_text(record.note),
            "",
        ])


def build_csv(
    expenses: Iterable[ExpenseRecord],
    ledgers: Iterable[PersonLedger],
) -> str:
    """
    Build the complete export document in memory.

    Every row is rendered before anything is returned, so a FormatError
    means no document at all.

    Raises:
        FormatError: If any amount or date cannot be rendered
    """
    lines = [HEADER]
    lines.extend(_expense_row(expense) for expense in expenses)
    for ledger in ledgers:
        lines.extend(_lending_rows(ledger))
    return LINE_TERMINATOR.join(lines) + LINE_TERMINATOR


# =============================================================================
# FILE OUTPUT
# =============================================================================

class CSVExporter:
    """
    Writes export documents to a directory.

    Handing the file to a share sheet or file picker is up to the caller.
    """

    def __init__(self, export_dir: Union[str, Path]):
        self._export_dir = Path(export_dir)

    @property
    def export_dir(self) -> Path:
        return self._export_dir

    def export(
        self,
        expenses: Iterable[ExpenseRecord],
        ledgers: Iterable[PersonLedger],
        today: Optional[dt.date] = None,
    ) -> Path:
        """
        Build the document and write it as FinanceIO_Export_<date>.csv.

        Returns:
            Path of the written file

        Raises:
            FormatError: Unrenderable value; no file is written
            ExportWriteError: File system failure; no partial file is left
        """
        expenses = list(expenses)
        ledgers = list(ledgers)
        try:
            content = build_csv(expenses, ledgers)
        except FormatError as e:
            logger.error("export_format_failed", error=str(e))
            raise

        target = self._export_dir / export_filename(today or dt.date.today())
        self._write(target, content)

        logger.info(
            "export_written",
            path=str(target),
            expense_rows=len(expenses),
            lending_rows=sum(len(ledger.records) for ledger in ledgers),
        )
        return target

    def export_storage(
        self,
        storage: LedgerStorageInterface,
        today: Optional[dt.date] = None,
    ) -> Path:
        """Export everything in a store, in storage order."""
        ledgers = [
            PersonLedger(person=person, records=storage.list_lending_records(person.id))
            for person in storage.list_people()
        ]
        return self.export(storage.list_expenses(), ledgers, today=today)

    def _write(self, target: Path, content: str) -> None:
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.",
                suffix=".tmp",
                dir=target.parent,
            )
            # newline="" keeps "\n" line endings on every platform
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            logger.error("export_write_failed", path=str(target), error=str(e))
            raise ExportWriteError(f"Failed to write {target}: {e}") from e
