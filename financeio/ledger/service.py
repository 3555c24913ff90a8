"""
Ledger Service

The single mutation entry point for the ledger. The presentation layer
calls these methods on user actions; nothing else writes Person balances
or lending records.

BALANCE STRATEGY: Person.net_balance is a cache, maintained incrementally.
- add transaction:    record inserted, then balance += amount
- delete transaction: balance -= stored amount, then record removed
- delete person:      person and all owned records removed together,
                      no per-record reversal
Each step pair runs inside one storage.atomic() block, so the cache and
the record set change together or not at all. find_balance_drift()
recomputes balances from records to check the cache.

VALIDATION: Every input is validated before anything is written.
Bad input raises ValidationError and leaves storage untouched.

DELETES: Deleting something that no longer exists is a no-op that
returns False. Deleting a default category is ignored the same way.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from financeio.log import get_logger
from financeio.models.ledger import (
    AMOUNT_DECIMAL_PLACES,
    DEFAULT_COLOR_HEX,
    DEFAULT_ICON,
    MAX_AMOUNT_DIGITS,
    Category,
    ExpenseRecord,
    LendingDirection,
    LendingRecord,
    Person,
    PersonLedger,
    default_categories,
)
from financeio.services.storage import LedgerStorageInterface, NotFoundError


logger = get_logger(__name__)

AmountInput = Union[str, int, float, Decimal]

EDITABLE_EXPENSE_FIELDS = frozenset(
    {"amount", "date", "category", "note", "payment_method"}
)


class ValidationError(ValueError):
    """Input rejected before any mutation."""
    pass


# =============================================================================
# INPUT PARSING
# =============================================================================

def parse_amount(value: AmountInput, field: str = "amount") -> Decimal:
    """
    Parse a user-entered positive quantity.

    Accepts strings ("12.50"), ints, floats and Decimals.

    Raises:
        ValidationError: Not a number, not finite, not > 0, or more precise
            than MAX_AMOUNT_DIGITS / AMOUNT_DECIMAL_PLACES allow
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # str() first so 0.1 stays 0.1 instead of its binary expansion
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError(f"{field} is required")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"{field} is not a number: {value!r}")
    else:
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")

    whole, decimals = _digit_counts(amount)
    if decimals > AMOUNT_DECIMAL_PLACES:
        raise ValidationError(
            f"{field} has more than {AMOUNT_DECIMAL_PLACES} decimal places"
        )
    if whole + decimals > MAX_AMOUNT_DIGITS:
        raise ValidationError(f"{field} has more than {MAX_AMOUNT_DIGITS} digits")
    return amount


def _digit_counts(amount: Decimal) -> tuple[int, int]:
    """Digits before and after the point, ignoring trailing fractional zeros."""
    _sign, digits, exponent = amount.as_tuple()
    digits = list(digits)
    # as_tuple() is exact; normalize() would round to the context precision
    while exponent < 0 and len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    decimals = max(0, -exponent)
    whole = max(0, len(digits) + exponent)
    return whole, decimals


def _require_text(value: Optional[str], field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def _build(model: type[BaseModel], **data: Any) -> Any:
    """Construct a model, turning pydantic errors into ValidationError."""
    try:
        return model(**data)
    except PydanticValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid {model.__name__}: {messages}") from e


# =============================================================================
# SERVICE
# =============================================================================

class LedgerService:
    """
    Owns every write to the ledger.

    GUARANTEES (for every surviving person, after any sequence of calls):
    - person.net_balance == sum of the person's lending record amounts
    - no lending record exists without its owner
    - default categories are never deleted
    """

    def __init__(self, storage: LedgerStorageInterface):
        self._storage = storage

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def seed_default_categories(self) -> int:
        """
        Insert the nine built-in categories on first run.

        Returns:
            Number of categories inserted (0 when already seeded)
        """
        if any(c.is_default for c in self._storage.list_categories()):
            return 0

        defaults = default_categories()
        with self._storage.atomic():
            for category in defaults:
                self._storage.add_category(category)

        logger.info("default_categories_seeded", count=len(defaults))
        return len(defaults)

    def add_category(
        self,
        name: str,
        icon: str = DEFAULT_ICON,
        color_hex: str = DEFAULT_COLOR_HEX,
    ) -> Category:
        category = _build(
            Category,
            name=_require_text(name, "name"),
            icon=icon,
            color_hex=color_hex,
        )
        self._storage.add_category(category)
        logger.info("category_added", category_id=str(category.id), name=category.name)
        return category

    def update_category(
        self,
        category_id: UUID,
        name: Optional[str] = None,
        icon: Optional[str] = None,
        color_hex: Optional[str] = None,
    ) -> Category:
        """
        Edit a category's name, icon or color.

        Defaults may be edited. Renaming does not touch expenses that
        carry the old name.

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If the new values are invalid
        """
        current = self._storage.get_category(category_id)
        if current is None:
            raise NotFoundError(f"Category not found: {category_id}")

        updated = _build(
            Category,
            id=current.id,
            name=_require_text(name, "name") if name is not None else current.name,
            icon=icon if icon is not None else current.icon,
            color_hex=color_hex if color_hex is not None else current.color_hex,
            sort_order=current.sort_order,
            is_default=current.is_default,
        )
        self._storage.update_category(updated)
        logger.info("category_updated", category_id=str(category_id), name=updated.name)
        return updated

    def delete_category(self, category_id: UUID) -> bool:
        """
        Delete a user-created category.

        Default categories and missing ids are ignored (returns False).
        Expenses that carry the category name are left alone.
        """
        category = self._storage.get_category(category_id)
        if category is None:
            logger.warning("category_not_found", category_id=str(category_id))
            return False
        if category.is_default:
            logger.info(
                "default_category_delete_ignored",
                category_id=str(category_id),
                name=category.name,
            )
            return False

        deleted = self._storage.delete_category(category_id)
        logger.info("category_deleted", category_id=str(category_id), name=category.name)
        return deleted

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        amount: AmountInput,
        category: str,
        date: Optional[dt.date] = None,
        note: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> ExpenseRecord:
        expense = _build(
            ExpenseRecord,
            amount=parse_amount(amount),
            category=_require_text(category, "category"),
            date=date or dt.date.today(),
            note=note,
            payment_method=payment_method,
        )
        self._storage.add_expense(expense)
        logger.info(
            "expense_added",
            expense_id=str(expense.id),
            amount=str(expense.amount),
            category=expense.category,
        )
        return expense

    def update_expense(self, expense_id: UUID, **changes: Any) -> ExpenseRecord:
        """
        Edit an expense.

        Args:
            expense_id: Expense to edit
            **changes: Any of amount, date, category, note, payment_method

        Raises:
            NotFoundError: If the expense doesn't exist
            ValidationError: Unknown field or invalid value
        """
        unknown = set(changes) - EDITABLE_EXPENSE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit expense fields: {sorted(unknown)}")

        current = self._storage.get_expense(expense_id)
        if current is None:
            raise NotFoundError(f"Expense not found: {expense_id}")

        if "amount" in changes:
            changes["amount"] = parse_amount(changes["amount"])
        if "category" in changes:
            changes["category"] = _require_text(changes["category"], "category")

        data = current.model_dump()
        data.update(changes)
        updated = _build(ExpenseRecord, **data)
        self._storage.update_expense(updated)
        logger.info(
            "expense_updated",
            expense_id=str(expense_id),
            fields=sorted(changes),
        )
        return updated

    def delete_expense(self, expense_id: UUID) -> bool:
        deleted = self._storage.delete_expense(expense_id)
        if deleted:
            logger.info("expense_deleted", expense_id=str(expense_id))
        else:
            logger.warning("expense_not_found", expense_id=str(expense_id))
        return deleted

    # -------------------------------------------------------------------------
    # People and lending
    # -------------------------------------------------------------------------

    def add_person(self, name: str) -> Person:
        """Create a person with a zero balance and no records."""
        person = _build(Person, name=_require_text(name, "name"))
        self._storage.add_person(person)
        logger.info("person_added", person_id=str(person.id), name=person.name)
        return person

    def add_lending_transaction(
        self,
        person_id: UUID,
        magnitude: AmountInput,
        direction: Union[LendingDirection, str],
        date: Optional[dt.date] = None,
        note: Optional[str] = None,
    ) -> LendingRecord:
        """
        Record money lent to, or received from, a person.

        Args:
            person_id: Owner of the new record
            magnitude: Positive quantity entered by the user
            direction: LENT -> +magnitude, RECEIVED -> -magnitude
            date: Defaults to today
            note: Optional free text

        Raises:
            ValidationError: Bad magnitude or direction (nothing written)
            NotFoundError: If the person doesn't exist
        """
        amount = parse_amount(magnitude, "magnitude")
        if isinstance(direction, str):
            direction = direction.strip().lower()
        try:
            direction = LendingDirection(direction)
        except ValueError:
            raise ValidationError(f"Unknown lending direction: {direction!r}")
        signed = direction.apply(amount)

        person = self._storage.get_person(person_id)
        if person is None:
            raise NotFoundError(f"Person not found: {person_id}")

        record = _build(
            LendingRecord,
            person_id=person.id,
            amount=signed,
            date=date or dt.date.today(),
            note=note,
        )

        with self._storage.atomic():
            self._storage.add_lending_record(record)
            person.net_balance = person.net_balance + signed
            self._storage.update_person(person)

        logger.info(
            "lending_transaction_added",
            record_id=str(record.id),
            person_id=str(person.id),
            direction=direction.value,
            amount=str(signed),
            net_balance=str(person.net_balance),
        )
        return record

    def delete_lending_transaction(self, record_id: UUID) -> bool:
        """
        Delete a lending record and reverse its effect on the balance.

        The stored amount is read before the record is removed.
        """
        record = self._storage.get_lending_record(record_id)
        if record is None:
            logger.warning("lending_record_not_found", record_id=str(record_id))
            return False

        with self._storage.atomic():
            person = self._storage.get_person(record.person_id)
            if person is None:
                raise NotFoundError(f"Owner not found: {record.person_id}")
            person.net_balance = person.net_balance - record.amount
            self._storage.update_person(person)
            self._storage.delete_lending_record(record.id)

        logger.info(
            "lending_transaction_deleted",
            record_id=str(record_id),
            person_id=str(person.id),
            amount=str(record.amount),
            net_balance=str(person.net_balance),
        )
        return True

    def delete_person(self, person_id: UUID) -> bool:
        """Delete a person together with every lending record they own."""
        record_count = len(self._storage.list_lending_records(person_id))
        deleted = self._storage.delete_person(person_id)
        if deleted:
            logger.info(
                "person_deleted",
                person_id=str(person_id),
                records_deleted=record_count,
            )
        else:
            logger.warning("person_not_found", person_id=str(person_id))
        return deleted

    def person_ledger(self, person_id: UUID) -> Optional[PersonLedger]:
        """A person with their records, newest first."""
        person = self._storage.get_person(person_id)
        if person is None:
            return None
        records = sorted(
            self._storage.list_lending_records(person_id),
            key=lambda r: r.date,
            reverse=True,
        )
        return PersonLedger(person=person, records=records)

    def ledgers(self) -> list[PersonLedger]:
        """Every person with their records, both in storage order."""
        return [
            PersonLedger(
                person=person,
                records=self._storage.list_lending_records(person.id),
            )
            for person in self._storage.list_people()
        ]

    def find_balance_drift(self) -> list[PersonLedger]:
        """People whose cached balance differs from the sum of their records."""
        drifted = [
            ledger
            for ledger in self.ledgers()
            if ledger.person.net_balance != ledger.computed_balance
        ]
        for ledger in drifted:
            logger.error(
                "balance_drift_detected",
                person_id=str(ledger.person.id),
                cached=str(ledger.person.net_balance),
                computed=str(ledger.computed_balance),
            )
        return drifted

    # -------------------------------------------------------------------------
    # Data management
    # -------------------------------------------------------------------------

    def clear_all_data(self) -> None:
        """Delete every expense, person and lending record. Categories stay."""
        self._storage.clear_transactions()
        logger.info("ledger_cleared")
