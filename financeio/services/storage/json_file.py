"""
JSON File Storage Implementation

DESIGN DECISION: A single local JSON file is the persistent backend because:
1. The ledger is single-user and small
2. No database setup required
3. The user can open and back up the file directly

The store keeps everything in memory (see InMemoryLedgerStorage) and
rewrites the file whenever the outermost atomic block succeeds.
The write goes to a sibling temp file first and is then moved over the
old file, so a crash mid-write never leaves a truncated ledger.
A failed write rolls the in-memory state back as well.
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from financeio.log import get_logger
from financeio.models.ledger import (
    Category,
    ExpenseRecord,
    LendingRecord,
    Person,
)
from financeio.services.storage.interface import StorageError
from financeio.services.storage.memory import InMemoryLedgerStorage


logger = get_logger(__name__)

FORMAT_VERSION = 1


class JsonFileLedgerStorage(InMemoryLedgerStorage):
    """Ledger store persisted to one UTF-8 JSON document."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self._path = Path(path)
        if self._path.exists():
            self._load()

    @property
    def path(self) -> Path:
        return self._path

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def _to_document(self) -> dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "categories": [c.model_dump(mode="json") for c in self._categories.values()],
            "expenses": [e.model_dump(mode="json") for e in self._expenses.values()],
            "people": [p.model_dump(mode="json") for p in self._people.values()],
            "lending_records": [r.model_dump(mode="json") for r in self._records.values()],
        }

    def _load(self) -> None:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read ledger file {self._path}: {e}") from e

        if not isinstance(document, dict):
            raise StorageError(f"Ledger file {self._path} is not a JSON object")
        version = document.get("version")
        if version != FORMAT_VERSION:
            raise StorageError(f"Unsupported ledger file version: {version!r}")

        try:
            for raw in document.get("categories", []):
                category = Category.model_validate(raw)
                self._check_unique(self._categories, category.id, "category")
                self._categories[category.id] = category
            for raw in document.get("expenses", []):
                expense = ExpenseRecord.model_validate(raw)
                self._check_unique(self._expenses, expense.id, "expense")
                self._expenses[expense.id] = expense
            for raw in document.get("people", []):
                person = Person.model_validate(raw)
                self._check_unique(self._people, person.id, "person")
                self._people[person.id] = person
                self._owned[person.id] = []
            for raw in document.get("lending_records", []):
                record = LendingRecord.model_validate(raw)
                self._check_unique(self._records, record.id, "lending record")
                if record.person_id not in self._people:
                    raise StorageError(
                        f"Lending record {record.id} references missing person "
                        f"{record.person_id}"
                    )
                self._records[record.id] = record
                self._owned[record.person_id].append(record.id)
        except PydanticValidationError as e:
            raise StorageError(f"Corrupt ledger file {self._path}: {e}") from e

        logger.info(
            "ledger_loaded",
            path=str(self._path),
            expenses=len(self._expenses),
            people=len(self._people),
            lending_records=len(self._records),
            categories=len(self._categories),
        )

    def _check_unique(self, arena: dict, entity_id: UUID, kind: str) -> None:
        if entity_id in arena:
            raise StorageError(
                f"Corrupt ledger file {self._path}: duplicate {kind} id {entity_id}"
            )

    def _commit(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
        except OSError as e:
            logger.error("ledger_save_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write ledger file {self._path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._to_document(), handle, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            logger.error("ledger_save_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write ledger file {self._path}: {e}") from e
