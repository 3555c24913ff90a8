"""
In-Memory Storage Implementation

Entities live in dict arenas keyed by id; dicts keep insertion order,
which is the order list_* methods return.

Ownership of lending records is an explicit index: owner id -> record ids.
Deleting a person walks that index, so no record can outlive its owner.

atomic() snapshots the arenas on entry and restores them if the block
raises. Stored models are never mutated in place (updates replace them),
so a shallow snapshot is enough.
"""

from contextlib import contextmanager
from typing import Iterator, Optional
from uuid import UUID

from financeio.log import get_logger
from financeio.models.ledger import (
    Category,
    ExpenseRecord,
    LendingRecord,
    Person,
)
from financeio.services.storage.interface import (
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


logger = get_logger(__name__)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Arena-of-records store. Also the base of the JSON file store."""

    def __init__(self):
        self._expenses: dict[UUID, ExpenseRecord] = {}
        self._categories: dict[UUID, Category] = {}
        self._people: dict[UUID, Person] = {}
        self._records: dict[UUID, LendingRecord] = {}
        self._owned: dict[UUID, list[UUID]] = {}
        self._depth = 0

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def _snapshot(self) -> tuple:
        return (
            dict(self._expenses),
            dict(self._categories),
            dict(self._people),
            dict(self._records),
            {owner: list(ids) for owner, ids in self._owned.items()},
        )

    def _restore(self, snapshot: tuple) -> None:
        (
            self._expenses,
            self._categories,
            self._people,
            self._records,
            self._owned,
        ) = snapshot

    def _commit(self) -> None:
        """Called when the outermost atomic block succeeds."""

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = self._snapshot()
        self._depth += 1
        try:
            yield
            if self._depth == 1:
                self._commit()
        except BaseException:
            self._restore(snapshot)
            raise
        finally:
            self._depth -= 1

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        with self.atomic():
            if expense.id in self._expenses:
                raise DuplicateError(f"Expense already exists: {expense.id}")
            self._expenses[expense.id] = expense.model_copy()
        return expense.model_copy()

    def get_expense(self, expense_id: UUID) -> Optional[ExpenseRecord]:
        expense = self._expenses.get(expense_id)
        return expense.model_copy() if expense else None

    def update_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        with self.atomic():
            if expense.id not in self._expenses:
                raise NotFoundError(f"Expense not found: {expense.id}")
            self._expenses[expense.id] = expense.model_copy()
        return expense.model_copy()

    def delete_expense(self, expense_id: UUID) -> bool:
        if expense_id not in self._expenses:
            return False
        with self.atomic():
            del self._expenses[expense_id]
        return True

    def list_expenses(self) -> list[ExpenseRecord]:
        return [e.model_copy() for e in self._expenses.values()]

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_category(self, category: Category) -> Category:
        with self.atomic():
            if category.id in self._categories:
                raise DuplicateError(f"Category already exists: {category.id}")
            self._categories[category.id] = category.model_copy()
        return category.model_copy()

    def get_category(self, category_id: UUID) -> Optional[Category]:
        category = self._categories.get(category_id)
        return category.model_copy() if category else None

    def update_category(self, category: Category) -> Category:
        with self.atomic():
            if category.id not in self._categories:
                raise NotFoundError(f"Category not found: {category.id}")
            self._categories[category.id] = category.model_copy()
        return category.model_copy()

    def delete_category(self, category_id: UUID) -> bool:
        if category_id not in self._categories:
            return False
        with self.atomic():
            del self._categories[category_id]
        return True

    def list_categories(self) -> list[Category]:
        # sorted() is stable, so equal sort_order keeps insertion order
        return [
            c.model_copy()
            for c in sorted(self._categories.values(), key=lambda c: c.sort_order)
        ]

    # -------------------------------------------------------------------------
    # People and lending records
    # -------------------------------------------------------------------------

    def add_person(self, person: Person) -> Person:
        with self.atomic():
            if person.id in self._people:
                raise DuplicateError(f"Person already exists: {person.id}")
            self._people[person.id] = person.model_copy()
            self._owned[person.id] = []
        return person.model_copy()

    def get_person(self, person_id: UUID) -> Optional[Person]:
        person = self._people.get(person_id)
        return person.model_copy() if person else None

    def update_person(self, person: Person) -> Person:
        with self.atomic():
            if person.id not in self._people:
                raise NotFoundError(f"Person not found: {person.id}")
            self._people[person.id] = person.model_copy()
        return person.model_copy()

    def delete_person(self, person_id: UUID) -> bool:
        if person_id not in self._people:
            return False
        with self.atomic():
            owned = self._owned.pop(person_id, [])
            for record_id in owned:
                del self._records[record_id]
            del self._people[person_id]
        logger.debug(
            "person_cascade_deleted",
            person_id=str(person_id),
            records_deleted=len(owned),
        )
        return True

    def list_people(self) -> list[Person]:
        return [p.model_copy() for p in self._people.values()]

    def add_lending_record(self, record: LendingRecord) -> LendingRecord:
        with self.atomic():
            if record.person_id not in self._people:
                raise NotFoundError(f"Owner not found: {record.person_id}")
            if record.id in self._records:
                raise DuplicateError(f"Lending record already exists: {record.id}")
            self._records[record.id] = record.model_copy()
            self._owned[record.person_id].append(record.id)
        return record.model_copy()

    def get_lending_record(self, record_id: UUID) -> Optional[LendingRecord]:
        record = self._records.get(record_id)
        return record.model_copy() if record else None

    def delete_lending_record(self, record_id: UUID) -> bool:
        record = self._records.get(record_id)
        if record is None:
            return False
        with self.atomic():
            self._owned[record.person_id].remove(record_id)
            del self._records[record_id]
        return True

    def list_lending_records(
        self,
        owner_id: Optional[UUID] = None,
    ) -> list[LendingRecord]:
        if owner_id is None:
            return [r.model_copy() for r in self._records.values()]
        return [
            self._records[record_id].model_copy()
            for record_id in self._owned.get(owner_id, [])
        ]

    def clear_transactions(self) -> None:
        with self.atomic():
            self._records = {}
            self._owned = {}
            self._people = {}
            self._expenses = {}
