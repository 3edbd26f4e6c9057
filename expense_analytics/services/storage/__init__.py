"""
Storage Services Package

Provides the abstract remote store interface and its implementations.
The REST API is the production backend; the in-memory store serves tests
and offline sessions.
"""

from expense_analytics.services.storage.interface import (
    ExpenseStoreInterface,
    NetworkError,
    NotFoundError,
    StorageError,
    UnconfirmedWriteError,
    ValidationFailedError,
)
from expense_analytics.services.storage.memory import InMemoryExpenseStore
from expense_analytics.services.storage.rest_api import RestExpenseStore

__all__ = [
    # Interfaces
    "ExpenseStoreInterface",
    # Exceptions
    "NetworkError",
    "NotFoundError",
    "StorageError",
    "UnconfirmedWriteError",
    "ValidationFailedError",
    # Implementations
    "InMemoryExpenseStore",
    "RestExpenseStore",
]
