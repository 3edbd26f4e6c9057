"""
Sync Controller

Reconciles the snapshot cache with the remote store.

DESIGN DECISION: Re-fetch after write.
Every successful mutation is followed by a full re-read of the affected
collection, and only that re-read touches the cache. The cache therefore
always holds what the store would return, never a locally patched guess.

Flow for a mutation:
1. Write → remote store
2. Re-fetch → full collection from the store
3. Replace → cache swaps the collection and notifies subscribers
4. Return → caller gets the store's record

Step 3 has completed (or failed) before step 4, so a caller that sees the
mutation return can read the cache and find the change there.

Failure policy:
- bootstrap(): a collection that cannot be loaded becomes empty and is
  reported. Never raises for store failures.
- mutations: the store error is reported and re-raised. The cache is left
  untouched.
- a write the store accepted but could not echo back (UnconfirmedWriteError)
  is treated as committed: the collection is re-fetched, then the error is
  re-raised.
- re-fetch after a successful write: reported, cache keeps its previous
  snapshot, the mutation still returns the written record.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union
from uuid import uuid4

import structlog
from pydantic import ValidationError

from expense_analytics.cache import SnapshotCache
from expense_analytics.models.expense import (
    Budget,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseUpdate,
)
from expense_analytics.queries import find_expense
from expense_analytics.reporting import ErrorReporter, LoggingErrorReporter, safe_report
from expense_analytics.services.storage import (
    ExpenseStoreInterface,
    NotFoundError,
    StorageError,
    UnconfirmedWriteError,
    ValidationFailedError,
)


class SyncController:
    """
    Single entry point for every change to expenses and budgets.

    Readers go straight to the cache; writers go through here.
    """

    def __init__(
        self,
        store: ExpenseStoreInterface,
        cache: SnapshotCache,
        reporter: Optional[ErrorReporter] = None,
    ):
        self._store = store
        self._cache = cache
        self._reporter = reporter or LoggingErrorReporter()
        self._logger = structlog.get_logger(__name__)

    @property
    def cache(self) -> SnapshotCache:
        return self._cache

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    async def bootstrap(self) -> dict[str, bool]:
        """
        Load both collections once.

        Returns:
            {"expenses": loaded, "budgets": loaded}
        """
        results = {}

        try:
            expenses = await self._store.list_expenses()
        except StorageError as e:
            self._fail("bootstrap.expenses", e)
            expenses = []
            results["expenses"] = False
        else:
            results["expenses"] = True
        self._cache.replace_expenses(expenses)

        try:
            budgets = await self._store.list_budgets()
        except StorageError as e:
            self._fail("bootstrap.budgets", e)
            budgets = []
            results["budgets"] = False
        else:
            results["budgets"] = True
        self._cache.replace_budgets(budgets)

        self._logger.info(
            "bootstrap_completed",
            expenses=len(expenses),
            budgets=len(budgets),
            **{f"{name}_loaded": ok for name, ok in results.items()},
        )
        return results

    # -------------------------------------------------------------------------
    # Explicit refresh
    # -------------------------------------------------------------------------

    async def refresh_expenses(self) -> tuple[Expense, ...]:
        """Re-read expenses into the cache. Store errors propagate."""
        expenses = await self._store.list_expenses()
        self._cache.replace_expenses(expenses)
        self._logger.debug("expenses_refreshed", count=len(expenses))
        return self._cache.current_expenses()

    async def refresh_budgets(self) -> tuple[Budget, ...]:
        """Re-read budgets into the cache. Store errors propagate."""
        budgets = await self._store.list_budgets()
        self._cache.replace_budgets(budgets)
        self._logger.debug("budgets_refreshed", count=len(budgets))
        return self._cache.current_budgets()

    # -------------------------------------------------------------------------
    # Expense mutations
    # -------------------------------------------------------------------------

    async def add_expense(self, draft: Union[ExpenseDraft, dict]) -> Expense:
        """
        Create an expense with a fresh id.

        Raises:
            ValidationFailedError: If the draft is malformed
            StorageError: If the store rejects or cannot be reached
        """
        draft = self._coerce(ExpenseDraft, draft, "add_expense")
        expense = Expense(id=self._new_expense_id(), **draft.model_dump())

        created = await self._write(
            "add_expense",
            self._store.create_expense(expense),
            self.refresh_expenses,
        )
        self._logger.info("expense_added", expense_id=created.id, amount=str(created.amount))
        return created

    async def update_expense(
        self,
        expense_id: str,
        changes: Union[ExpenseUpdate, dict],
    ) -> Expense:
        """
        Apply a partial update.

        The changes are merged over the cached record and the complete
        record is written, since the store overwrites every field.

        Raises:
            NotFoundError: If no cached expense has this id, or the store
                no longer has it
            ValidationFailedError: If the changes are malformed
        """
        update = self._coerce(ExpenseUpdate, changes, "update_expense")
        current = find_expense(self._cache.current_expenses(), expense_id)
        if current is None:
            error = NotFoundError(f"Expense not found: {expense_id}")
            self._fail("update_expense", error, expense_id=expense_id)
            raise error

        updated = await self._write(
            "update_expense",
            self._store.update_expense(current.model_copy(update=update.changes())),
            self.refresh_expenses,
            expense_id=expense_id,
        )
        self._logger.info("expense_updated", expense_id=expense_id, fields=sorted(update.changes()))
        return updated

    async def delete_expense(self, expense_id: str) -> None:
        """
        Delete an expense.

        Raises:
            NotFoundError: If the store has no expense with this id
        """
        await self._write(
            "delete_expense",
            self._store.delete_expense(expense_id),
            self.refresh_expenses,
            expense_id=expense_id,
        )
        self._logger.info("expense_deleted", expense_id=expense_id)

    # -------------------------------------------------------------------------
    # Budget mutations
    # -------------------------------------------------------------------------

    async def set_budget(
        self,
        category: Union[str, ExpenseCategory],
        limit: Union[Decimal, int, float, str],
    ) -> Budget:
        """
        Create or replace the budget for a category.

        Raises:
            ValidationFailedError: If the limit is negative or not a number
        """
        try:
            budget = Budget(category=category, limit=self._to_decimal(limit))
        except (ValidationError, InvalidOperation, TypeError) as e:
            error = ValidationFailedError(f"Invalid budget for {category}: {e}")
            self._fail("set_budget", error)
            raise error from e

        saved = await self._write(
            "set_budget",
            self._store.upsert_budget(budget),
            self.refresh_budgets,
            category=budget.category,
        )
        self._logger.info("budget_set", category=saved.category, limit=str(saved.limit))
        return saved

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _new_expense_id(self) -> str:
        taken = {e.id for e in self._cache.current_expenses()}
        while True:
            candidate = uuid4().hex
            if candidate not in taken:
                return candidate

    def _coerce(self, model, value, operation: str):
        if isinstance(value, model):
            return value
        try:
            return model.model_validate(value)
        except ValidationError as e:
            error = ValidationFailedError(f"Invalid input for {operation}: {e}")
            self._fail(operation, error)
            raise error from e

    @staticmethod
    def _to_decimal(value) -> Decimal:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)

    async def _write(self, operation: str, call, refresh, **context):
        """
        Await a store write, then re-fetch the affected collection.

        A failed write leaves the cache alone. An unconfirmed write was
        committed, so the cache is refreshed before the error propagates.
        """
        try:
            result = await call
        except UnconfirmedWriteError as e:
            self._fail(operation, e, **context)
            await self._refresh_after_write(operation, refresh)
            raise
        except StorageError as e:
            self._fail(operation, e, **context)
            raise

        await self._refresh_after_write(operation, refresh)
        return result

    async def _refresh_after_write(self, operation: str, refresh) -> None:
        try:
            await refresh()
        except StorageError as e:
            self._fail(f"{operation}.refresh", e)

    def _fail(self, operation: str, error: Exception, **context) -> None:
        self._logger.warning(
            "sync_operation_failed",
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
            **context,
        )
        safe_report(self._reporter, operation, str(error))
