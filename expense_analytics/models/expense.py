"""
Core Data Models for Expense Analytics

These models define the records exchanged with the remote store and the
figures derived from them.

DESIGN DECISION: Expense and Budget are frozen. The cache hands the same
objects to every reader, so nobody can patch a snapshot in place.

Category is stored as a plain string on the records. The enumeration below
is the fixed reporting set; legacy or unknown labels still load and are
aggregated as their own bucket.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """Categories the dashboard reports on, in display order."""
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    OTHER = "Other"


DEFAULT_CATEGORIES: tuple[str, ...] = tuple(c.value for c in ExpenseCategory)


class BudgetLevel(str, Enum):
    """Traffic-light state of a category budget."""
    GOOD = "good"
    WARNING = "warning"
    OVER_BUDGET = "over_budget"


def _category_label(v: object) -> object:
    if isinstance(v, ExpenseCategory):
        return v.value
    return v


# =============================================================================
# STORED RECORDS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    An expense the user wants to record.

    Has no id yet; the sync controller assigns one on submission.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category label"
    )
    date: dt.date = Field(
        ...,
        description="Calendar day of the expense"
    )
    description: str = Field(
        default="",
        description="Free text note"
    )

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        return _category_label(v)

    @field_validator('description', mode='before')
    @classmethod
    def blank_description(cls, v):
        return "" if v is None else v


class Expense(ExpenseDraft):
    """An expense as held by the remote store and the cache."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique identifier"
    )


class ExpenseUpdate(BaseModel):
    """
    Partial update of an expense.

    Only fields explicitly set are sent to the store.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Decimal] = Field(default=None, gt=0)
    category: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None
    description: Optional[str] = None

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        return _category_label(v)

    def changes(self) -> dict:
        """Fields the caller actually set."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class Budget(BaseModel):
    """Spending limit for one category. At most one per category."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    category: str = Field(
        ...,
        min_length=1,
        description="Category label (unique key)"
    )
    limit: Decimal = Field(
        ...,
        ge=0,
        description="Maximum intended spend"
    )

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        return _category_label(v)


# =============================================================================
# DERIVED FIGURES
# =============================================================================

class TimeSeriesPoint(BaseModel):
    """Total spent on one calendar day."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    amount: Decimal


class ForecastPoint(BaseModel):
    """Predicted spend `index` steps past the end of the series."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    amount: Decimal


class BudgetStatus(BaseModel):
    """Spend against limit for one category."""

    category: str
    spent: Decimal
    limit: Decimal
    percentage: Decimal
    over_budget: bool
    level: BudgetLevel = BudgetLevel.GOOD
