"""
Snapshot Queries

Read-only lookups the list and dashboard views run against a cache
snapshot. Like the aggregation engine these are pure: they only see what
the snapshot holds and never touch the store.
"""

import datetime as dt
from decimal import Decimal
from typing import Iterable, Optional

from expense_analytics.models.expense import Expense


def filter_expenses(
    expenses: Iterable[Expense],
    search_term: str = "",
    category: Optional[str] = None,
) -> list[Expense]:
    """
    Expenses matching a free-text search and an optional category.

    The search is a case-insensitive substring match against description
    or category. An empty term matches everything; a falsy category
    disables the category filter.
    """
    term = search_term.strip().lower()
    matches = []
    for expense in expenses:
        if term and term not in expense.description.lower() and term not in expense.category.lower():
            continue
        if category and expense.category != category:
            continue
        matches.append(expense)
    return matches


def monthly_total(expenses: Iterable[Expense], today: Optional[dt.date] = None) -> Decimal:
    """Sum of expenses in the calendar month containing `today`."""
    today = today or dt.date.today()
    return sum(
        (
            e.amount
            for e in expenses
            if e.date.year == today.year and e.date.month == today.month
        ),
        Decimal("0"),
    )


def recent_expenses(expenses: Iterable[Expense], limit: int = 5) -> list[Expense]:
    """Newest `limit` expenses by date. Ties keep snapshot order."""
    return sorted(expenses, key=lambda e: e.date, reverse=True)[:limit]


def find_expense(expenses: Iterable[Expense], expense_id: str) -> Optional[Expense]:
    for expense in expenses:
        if expense.id == expense_id:
            return expense
    return None
