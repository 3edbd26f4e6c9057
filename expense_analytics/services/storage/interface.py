"""
Abstract Remote Store Interface

DESIGN DECISION: The analytics core never talks to a concrete backend.
It depends on this interface, which lets us:
1. Talk to the REST expense API in production
2. Use in-memory storage for tests and offline sessions
3. Keep the sync policy decoupled from transport details

The remote store is the system of record. Every method returns what the
store itself holds after the call, never an echo of the input.
"""

from abc import ABC, abstractmethod

from expense_analytics.models.expense import Budget, Expense


class ExpenseStoreInterface(ABC):
    """
    Abstract interface for the expense/budget store.

    Any store implementation (REST API, in-memory, ...) must implement
    these methods.
    """

    @abstractmethod
    async def list_expenses(self) -> list[Expense]:
        """
        Fetch every stored expense.

        Returns:
            All expenses, in whatever order the store keeps them

        Raises:
            NetworkError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def create_expense(self, expense: Expense) -> Expense:
        """
        Create an expense.

        Args:
            expense: The expense to store, id already assigned

        Returns:
            The expense as created by the store

        Raises:
            ValidationFailedError: If the store rejects the payload
            NetworkError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def update_expense(self, expense: Expense) -> Expense:
        """
        Overwrite every field of a stored expense.

        The store sets all columns from the record it is given, so callers
        send the complete merged record, never just the changed fields.

        Args:
            expense: Full record; its id selects the target

        Returns:
            The updated expense

        Raises:
            NotFoundError: If no expense has this id
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: str) -> None:
        """
        Delete an expense.

        Raises:
            NotFoundError: If no expense has this id
        """
        pass

    @abstractmethod
    async def list_budgets(self) -> list[Budget]:
        """Fetch every stored budget."""
        pass

    @abstractmethod
    async def upsert_budget(self, budget: Budget) -> Budget:
        """
        Create the budget for a category, or replace the existing one.

        The previous budget for the category is replaced wholesale, never
        merged.
        """
        pass

    async def close(self) -> None:
        """Release transport resources. No-op by default."""
        return None


class StorageError(Exception):
    """Base exception for remote store operations."""
    pass


class NetworkError(StorageError):
    """Store unreachable, or it answered with an unexpected status."""
    pass


class NotFoundError(StorageError):
    """Mutation targeted a record the store does not have."""
    pass


class ValidationFailedError(StorageError):
    """Input rejected, either locally or by the store."""
    pass


class UnconfirmedWriteError(StorageError):
    """
    The store accepted a write (2xx) but its response could not be read.

    The write must be assumed committed.
    """
    pass
