"""
In-Memory Store Implementation

Dict-backed store with the same contract as the REST API: 404 semantics on
update/delete, upsert keyed by category, and fresh model copies on every
read so callers never share objects with the store.
"""

from typing import Iterable, Optional

from expense_analytics.models.expense import Budget, Expense
from expense_analytics.services.storage.interface import (
    ExpenseStoreInterface,
    NotFoundError,
    ValidationFailedError,
)


class InMemoryExpenseStore(ExpenseStoreInterface):
    """Store that lives in the process. Insertion order is preserved."""

    def __init__(
        self,
        expenses: Optional[Iterable[Expense]] = None,
        budgets: Optional[Iterable[Budget]] = None,
    ):
        self._expenses: dict[str, Expense] = {e.id: e for e in expenses or ()}
        self._budgets: dict[str, Budget] = {b.category: b for b in budgets or ()}

    async def list_expenses(self) -> list[Expense]:
        return [e.model_copy() for e in self._expenses.values()]

    async def create_expense(self, expense: Expense) -> Expense:
        if expense.id in self._expenses:
            raise ValidationFailedError(f"Duplicate expense id: {expense.id}")
        self._expenses[expense.id] = expense
        return expense.model_copy()

    async def update_expense(self, expense: Expense) -> Expense:
        if expense.id not in self._expenses:
            raise NotFoundError(f"Expense not found: {expense.id}")

        self._expenses[expense.id] = expense.model_copy()
        return expense.model_copy()

    async def delete_expense(self, expense_id: str) -> None:
        if self._expenses.pop(expense_id, None) is None:
            raise NotFoundError(f"Expense not found: {expense_id}")

    async def list_budgets(self) -> list[Budget]:
        return [b.model_copy() for b in self._budgets.values()]

    async def upsert_budget(self, budget: Budget) -> Budget:
        self._budgets[budget.category] = budget
        return budget.model_copy()
