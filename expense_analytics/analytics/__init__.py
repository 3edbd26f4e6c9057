"""Aggregation, forecast and dashboard package."""

from expense_analytics.analytics.aggregation import (
    budget_for_category,
    budget_level,
    budget_status,
    by_category,
    over_time,
    total,
    utilization,
)
from expense_analytics.analytics.dashboard import DashboardSummary, LiveDashboard, summarize
from expense_analytics.analytics.forecast import fit_trend, forecast_points, predict

__all__ = [
    # Aggregation
    "budget_for_category",
    "budget_level",
    "budget_status",
    "by_category",
    "over_time",
    "total",
    "utilization",
    # Forecast
    "fit_trend",
    "forecast_points",
    "predict",
    # Dashboard
    "DashboardSummary",
    "LiveDashboard",
    "summarize",
]
