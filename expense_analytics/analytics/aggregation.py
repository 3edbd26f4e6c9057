"""
Aggregation Engine

Pure functions over a cache snapshot. No side effects, no I/O, and the
same input always yields the same output.

None of these functions assume the input is sorted.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from expense_analytics.models.expense import (
    Budget,
    BudgetLevel,
    BudgetStatus,
    Expense,
    TimeSeriesPoint,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")


def total(expenses: Iterable[Expense]) -> Decimal:
    """Sum of all amounts. 0 for an empty input."""
    return sum((e.amount for e in expenses), ZERO)


def by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Total per category.

    Only categories that actually occur become keys. Unknown categories
    are kept as their own bucket.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        totals[expense.category] += expense.amount
    return dict(totals)


def over_time(expenses: Iterable[Expense]) -> list[TimeSeriesPoint]:
    """Total per calendar day, ascending by date."""
    totals: dict = defaultdict(lambda: ZERO)
    for expense in expenses:
        totals[expense.date] += expense.amount
    return [
        TimeSeriesPoint(date=day, amount=amount)
        for day, amount in sorted(totals.items())
    ]


def budget_for_category(budgets: Iterable[Budget], category: str) -> Optional[Budget]:
    for budget in budgets:
        if budget.category == category:
            return budget
    return None


def utilization(spent: Decimal, limit: Decimal) -> Decimal:
    """Percent of the limit spent. A zero limit reports 0, not infinity."""
    if limit > 0:
        return spent / limit * HUNDRED
    return ZERO


def budget_level(percentage: Decimal, warning_threshold: float = 80.0) -> BudgetLevel:
    if percentage >= HUNDRED:
        return BudgetLevel.OVER_BUDGET
    if percentage >= Decimal(str(warning_threshold)):
        return BudgetLevel.WARNING
    return BudgetLevel.GOOD


def budget_status(
    expenses: Iterable[Expense],
    budgets: Iterable[Budget],
    categories: Sequence[str],
    warning_threshold: float = 80.0,
) -> list[BudgetStatus]:
    """
    Spend against limit for every category in `categories`, in that order.

    Categories with no expenses or no budget are zero-filled. Categories
    present in the data but not listed are not reported.

    over_budget is a strict `spent > limit`, so any spend in a category
    without a budget counts as over budget.
    """
    spent_by_category = by_category(expenses)
    budgets = list(budgets)

    statuses = []
    for category in categories:
        spent = spent_by_category.get(category, ZERO)
        budget = budget_for_category(budgets, category)
        limit = budget.limit if budget else ZERO
        percentage = utilization(spent, limit)
        statuses.append(
            BudgetStatus(
                category=category,
                spent=spent,
                limit=limit,
                percentage=percentage,
                over_budget=spent > limit,
                level=budget_level(percentage, warning_threshold),
            )
        )
    return statuses
