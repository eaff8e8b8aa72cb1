"""Expense record store backed by a single JSON blob."""

import json
import logging
from datetime import datetime

from .database import DatabaseManager, delete_value, get_value, set_value
from .models import Expense, ExpenseInput, ExpenseUpdate, generate_expense_id

logger = logging.getLogger(__name__)


class ExpenseStore:
    """Read and mutate the full, unordered expense list.

    Every mutation rewrites the whole blob; callers that hold an expense list
    must re-read it after a mutation.
    """

    def __init__(self, db_manager: DatabaseManager, storage_key: str | None = None):
        self.db_manager = db_manager
        self.storage_key = storage_key or db_manager.config.storage.storage_key

    def get_expenses(self) -> list[Expense]:
        """Load all stored expenses.

        An unreadable blob is logged and treated as empty. Records that do not
        fit the data model (e.g. an unknown category) raise ``ValidationError``.
        """
        with self.db_manager.get_session() as session:
            raw = get_value(session, self.storage_key)

        if not raw:
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Error reading stored expenses under %r: %s", self.storage_key, e)
            return []

        if not isinstance(records, list):
            logger.error("Stored expenses under %r are not a list", self.storage_key)
            return []

        return [Expense.model_validate(record) for record in records]

    def save_expenses(self, expenses: list[Expense]) -> None:
        """Replace the stored expense list."""
        payload = json.dumps([expense.model_dump(mode="json") for expense in expenses])
        with self.db_manager.get_session() as session:
            set_value(session, self.storage_key, payload)
        logger.debug("Saved %d expenses", len(expenses))

    def add_expense(self, expense_input: ExpenseInput) -> Expense:
        """Create a new expense with a fresh ID and timestamps."""
        now = datetime.now()
        expense = Expense(
            id=generate_expense_id(),
            date=expense_input.date,
            amount=expense_input.amount,
            category=expense_input.category,
            description=expense_input.description,
            created_at=now,
            updated_at=now,
        )
        expenses = self.get_expenses()
        expenses.append(expense)
        self.save_expenses(expenses)
        logger.info("Added expense %s (%s %.2f)", expense.id, expense.category.value, expense.amount)
        return expense

    def get_expense(self, expense_id: str) -> Expense | None:
        """Get a single expense by ID."""
        return next((e for e in self.get_expenses() if e.id == expense_id), None)

    def update_expense(self, expense_id: str, update: ExpenseUpdate) -> Expense | None:
        """Merge changed fields into an expense. Returns None for unknown IDs."""
        expenses = self.get_expenses()
        for index, existing in enumerate(expenses):
            if existing.id == expense_id:
                changes = update.model_dump(exclude_unset=True, exclude_none=True)
                changes["updated_at"] = datetime.now()
                updated = existing.model_copy(update=changes)
                expenses[index] = updated
                self.save_expenses(expenses)
                return updated

        logger.warning("Update skipped, expense %s not found", expense_id)
        return None

    def delete_expense(self, expense_id: str) -> bool:
        """Delete an expense. Returns False for unknown IDs."""
        expenses = self.get_expenses()
        remaining = [e for e in expenses if e.id != expense_id]
        if len(remaining) == len(expenses):
            return False
        self.save_expenses(remaining)
        return True

    def clear_all_expenses(self) -> None:
        """Remove the stored expense list entirely."""
        with self.db_manager.get_session() as session:
            delete_value(session, self.storage_key)
