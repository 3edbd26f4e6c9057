"""
Dashboard Summary

Every figure the summary screen shows, computed from one snapshot so the
numbers always agree with each other.

LiveDashboard keeps a summary current by listening to the cache: any
expense or budget replacement triggers a full recomputation.
"""

import datetime as dt
from decimal import Decimal
from typing import Callable, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from expense_analytics.analytics.aggregation import budget_status, by_category, over_time, total
from expense_analytics.analytics.forecast import forecast_points
from expense_analytics.cache import CacheTopic, SnapshotCache
from expense_analytics.config import AnalyticsSettings, get_settings
from expense_analytics.models.expense import (
    Budget,
    BudgetStatus,
    Expense,
    ForecastPoint,
    TimeSeriesPoint,
)
from expense_analytics.queries import monthly_total, recent_expenses


logger = structlog.get_logger(__name__)


class DashboardSummary(BaseModel):
    """Derived view of one snapshot."""

    generated_on: dt.date
    expense_count: int = Field(ge=0)
    total: Decimal
    monthly_total: Decimal
    by_category: dict[str, Decimal] = Field(default_factory=dict)
    recent: list[Expense] = Field(default_factory=list)
    budget_status: list[BudgetStatus] = Field(default_factory=list)
    over_time: list[TimeSeriesPoint] = Field(default_factory=list)
    forecast: list[ForecastPoint] = Field(default_factory=list)

    @property
    def over_budget_categories(self) -> list[str]:
        return [s.category for s in self.budget_status if s.over_budget]


def summarize(
    expenses: Sequence[Expense],
    budgets: Sequence[Budget],
    settings: Optional[AnalyticsSettings] = None,
    today: Optional[dt.date] = None,
) -> DashboardSummary:
    """Compute the dashboard for a snapshot."""
    settings = settings or get_settings().analytics
    today = today or dt.date.today()
    series = over_time(expenses)

    return DashboardSummary(
        generated_on=today,
        expense_count=len(expenses),
        total=total(expenses),
        monthly_total=monthly_total(expenses, today),
        by_category=by_category(expenses),
        recent=recent_expenses(expenses, settings.recent_count),
        budget_status=budget_status(
            expenses,
            budgets,
            settings.categories_list,
            settings.warning_threshold_percent,
        ),
        over_time=series,
        forecast=forecast_points(series, settings.forecast_horizon),
    )


class LiveDashboard:
    """
    Summary that follows the cache.

    Subscribes to both topics on construction and recomputes on every
    change. Optional listeners are told about each new summary.
    """

    def __init__(
        self,
        cache: SnapshotCache,
        settings: Optional[AnalyticsSettings] = None,
        clock: Callable[[], dt.date] = dt.date.today,
    ):
        self._cache = cache
        self._settings = settings or get_settings().analytics
        self._clock = clock
        self._listeners: list[Callable[[DashboardSummary], None]] = []
        self.summary: DashboardSummary = self._compute()
        self._unsubscribers = [
            cache.on_change(CacheTopic.EXPENSES, self._on_change, replay=False),
            cache.on_change(CacheTopic.BUDGETS, self._on_change, replay=False),
        ]

    def add_listener(self, listener: Callable[[DashboardSummary], None]) -> None:
        self._listeners.append(listener)

    def detach(self) -> None:
        """Stop following the cache. The last summary stays available."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _compute(self) -> DashboardSummary:
        return summarize(
            self._cache.current_expenses(),
            self._cache.current_budgets(),
            self._settings,
            self._clock(),
        )

    def _on_change(self, _snapshot) -> None:
        self.summary = self._compute()
        logger.debug(
            "dashboard_recomputed",
            expense_count=self.summary.expense_count,
            total=str(self.summary.total),
        )
        for listener in list(self._listeners):
            listener(self.summary)
