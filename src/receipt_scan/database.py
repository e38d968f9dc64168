"""
Expense persistence for the receipt scanning application.
Handles SQLite database initialization and CRUD operations keyed by opaque ids.
"""

import sqlite3
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from .models import Expense, ExpenseDraft, ExpenseUpdate

logger = logging.getLogger(__name__)

class ExpenseStore:
    """Stores and retrieves expense records."""

    def __init__(self, db_path: str = "expenses.db"):
        """Initialize the expense store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self.logger = logger

    @contextmanager
    def get_connection(self):
        """Context manager for database connections with automatic cleanup."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            yield conn
        except Exception as e:
            if conn:
                conn.rollback()
            self.logger.error(f"Database error: {str(e)}")
            raise
        finally:
            if conn:
                conn.close()

    def initialize_database(self) -> None:
        """Create the expenses table and its indexes."""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS expenses (
                        id TEXT PRIMARY KEY,
                        date TEXT NOT NULL,
                        merchant TEXT NOT NULL,
                        amount TEXT NOT NULL,
                        category TEXT NOT NULL DEFAULT 'Other',
                        description TEXT NOT NULL DEFAULT '',
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                cursor.execute("CREATE INDEX IF NOT EXISTS idx_expense_date ON expenses(date)")
                cursor.execute("CREATE INDEX IF NOT EXISTS idx_expense_category ON expenses(category)")

                cursor.execute("""
                    CREATE TRIGGER IF NOT EXISTS update_expenses_updated_at
                    AFTER UPDATE ON expenses
                    BEGIN
                        UPDATE expenses SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
                    END
                """)

                conn.commit()
                self.logger.info("Database initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize database: {str(e)}")
            raise

    def create_expense(self, draft: ExpenseDraft) -> Expense:
        """Store an extracted draft under a new identifier.

        Args:
            draft: Expense draft to store

        Returns:
            The stored Expense, including its new id
        """
        expense = Expense.from_draft(draft, uuid.uuid4().hex)

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO expenses (id, date, merchant, amount, category, description)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    expense.id,
                    expense.date,
                    expense.merchant,
                    expense.amount,
                    expense.category,
                    expense.description
                ))
                conn.commit()

            self.logger.info(f"Added expense with ID: {expense.id}")
            return self.get_expense(expense.id)

        except Exception as e:
            self.logger.error(f"Failed to add expense: {str(e)}")
            raise

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        """Get an expense by ID.

        Returns:
            Expense if found, None otherwise
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT * FROM expenses WHERE id = ?", (expense_id,))
                row = cursor.fetchone()

                if row:
                    return self._row_to_expense(row)
                return None

        except Exception as e:
            self.logger.error(f"Failed to get expense {expense_id}: {str(e)}")
            raise

    def list_expenses(self) -> List[Expense]:
        """Get all expenses, newest first."""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT * FROM expenses ORDER BY created_at DESC, rowid DESC")
                return [self._row_to_expense(row) for row in cursor.fetchall()]

        except Exception as e:
            self.logger.error(f"Failed to list expenses: {str(e)}")
            raise

    def update_expense(self, expense_id: str, updates: ExpenseUpdate) -> Optional[Expense]:
        """Update an existing expense.

        Args:
            expense_id: ID of the expense to update
            updates: Fields to update

        Returns:
            The updated Expense, or None if no such expense exists
        """
        update_dict = updates.model_dump(exclude_unset=True, exclude_none=True)
        if not update_dict:
            return self.get_expense(expense_id)

        update_fields = [f"{field} = ?" for field in update_dict]
        update_values = list(update_dict.values()) + [expense_id]

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"UPDATE expenses SET {', '.join(update_fields)} WHERE id = ?",
                    update_values
                )
                rows_affected = cursor.rowcount
                conn.commit()

        except Exception as e:
            self.logger.error(f"Failed to update expense {expense_id}: {str(e)}")
            raise

        if rows_affected == 0:
            self.logger.warning(f"Expense {expense_id} not found for update")
            return None

        self.logger.info(f"Updated expense {expense_id}")
        return self.get_expense(expense_id)

    def delete_expense(self, expense_id: str) -> bool:
        """Delete an expense by ID.

        Returns:
            True if deletion was successful, False if expense not found
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
                rows_affected = cursor.rowcount
                conn.commit()

                if rows_affected > 0:
                    self.logger.info(f"Deleted expense {expense_id}")
                    return True
                else:
                    self.logger.warning(f"Expense {expense_id} not found for deletion")
                    return False

        except Exception as e:
            self.logger.error(f"Failed to delete expense {expense_id}: {str(e)}")
            raise

    def _row_to_expense(self, row: sqlite3.Row) -> Expense:
        """Convert database row to Expense object."""
        return Expense(
            id=row["id"],
            date=row["date"],
            merchant=row["merchant"],
            amount=row["amount"],
            category=row["category"],
            description=row["description"],
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
            updated_at=datetime.fromisoformat(row["updated_at"]) if row["updated_at"] else None
        )
