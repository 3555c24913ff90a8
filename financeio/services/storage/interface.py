"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run on a plain in-memory arena for tests
2. Persist to a local JSON file for the application
3. Keep ledger logic decoupled from storage mechanics

The interface is intentionally simple - we're not building a full ORM.
Person -> LendingRecord ownership is an explicit owner-id index,
and delete_person() removes the owner together with every owned record.

Stores hand out copies. Mutating a returned model never changes stored
state; only the update_* methods do.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from uuid import UUID

from financeio.models.ledger import (
    Category,
    ExpenseRecord,
    LendingRecord,
    Person,
)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation must implement these methods.
    Reads of missing ids return None, deletes of missing ids return False,
    updates of missing ids raise NotFoundError.
    """

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """
        Group several mutations into one all-or-nothing unit.

        Blocks may nest; only the outermost block commits. If the block
        raises, every mutation made inside it is rolled back.
        """
        pass

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    @abstractmethod
    def add_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        """
        Insert a new expense.

        Raises:
            DuplicateError: If an expense with the same id exists
        """
        pass

    @abstractmethod
    def get_expense(self, expense_id: UUID) -> Optional[ExpenseRecord]:
        pass

    @abstractmethod
    def update_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        """
        Replace a stored expense.

        Raises:
            NotFoundError: If the expense doesn't exist
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: UUID) -> bool:
        pass

    @abstractmethod
    def list_expenses(self) -> list[ExpenseRecord]:
        """All expenses in insertion order."""
        pass

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    @abstractmethod
    def add_category(self, category: Category) -> Category:
        pass

    @abstractmethod
    def get_category(self, category_id: UUID) -> Optional[Category]:
        pass

    @abstractmethod
    def update_category(self, category: Category) -> Category:
        pass

    @abstractmethod
    def delete_category(self, category_id: UUID) -> bool:
        """
        Remove a category row.

        The store does not guard defaults; that policy lives in LedgerService.
        """
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """All categories ordered by sort_order, then insertion order."""
        pass

    # -------------------------------------------------------------------------
    # People and lending records
    # -------------------------------------------------------------------------

    @abstractmethod
    def add_person(self, person: Person) -> Person:
        pass

    @abstractmethod
    def get_person(self, person_id: UUID) -> Optional[Person]:
        pass

    @abstractmethod
    def update_person(self, person: Person) -> Person:
        pass

    @abstractmethod
    def delete_person(self, person_id: UUID) -> bool:
        """
        Delete a person and every lending record they own, atomically.

        Returns:
            True if the person existed
        """
        pass

    @abstractmethod
    def list_people(self) -> list[Person]:
        """All people in insertion order."""
        pass

    @abstractmethod
    def add_lending_record(self, record: LendingRecord) -> LendingRecord:
        """
        Insert a lending record under its owner.

        Raises:
            NotFoundError: If record.person_id names no stored person
        """
        pass

    @abstractmethod
    def get_lending_record(self, record_id: UUID) -> Optional[LendingRecord]:
        pass

    @abstractmethod
    def delete_lending_record(self, record_id: UUID) -> bool:
        pass

    @abstractmethod
    def list_lending_records(
        self,
        owner_id: Optional[UUID] = None,
    ) -> list[LendingRecord]:
        """
        List lending records.

        Args:
            owner_id: Only records owned by this person. A person that
                      doesn't exist (or no longer exists) owns nothing.

        Returns:
            Records in insertion order
        """
        pass

    @abstractmethod
    def clear_transactions(self) -> None:
        """Delete every expense, person and lending record. Categories stay."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
