"""Services package."""

from expense_analytics.services.storage import (
    ExpenseStoreInterface,
    InMemoryExpenseStore,
    NetworkError,
    NotFoundError,
    RestExpenseStore,
    StorageError,
    ValidationFailedError,
)

__all__ = [
    "ExpenseStoreInterface",
    "InMemoryExpenseStore",
    "NetworkError",
    "NotFoundError",
    "RestExpenseStore",
    "StorageError",
    "ValidationFailedError",
]
