"""
Data Models Package

This package contains all Pydantic models used by the analytics core.
Records coming from the remote store and every derived figure conform to
these schemas.
"""

from expense_analytics.models.expense import (
    DEFAULT_CATEGORIES,
    Budget,
    BudgetLevel,
    BudgetStatus,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseUpdate,
    ForecastPoint,
    TimeSeriesPoint,
)

__all__ = [
    # Stored records
    "Budget",
    "Expense",
    "ExpenseDraft",
    "ExpenseUpdate",
    # Categories
    "DEFAULT_CATEGORIES",
    "ExpenseCategory",
    # Derived figures
    "BudgetLevel",
    "BudgetStatus",
    "ForecastPoint",
    "TimeSeriesPoint",
]
