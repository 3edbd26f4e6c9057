"""Snapshot query package."""

from expense_analytics.queries.filters import (
    filter_expenses,
    find_expense,
    monthly_total,
    recent_expenses,
)

__all__ = ["filter_expenses", "find_expense", "monthly_total", "recent_expenses"]
