"""Shared fixtures for the test suite."""

from datetime import date
from decimal import Decimal

import pytest

from expense_analytics.config import AnalyticsSettings, RemoteStoreSettings
from expense_analytics.models.expense import Budget, Expense
from expense_analytics.reporting import ErrorReporter


def make_expense(
    expense_id: str,
    amount,
    category: str = "Food",
    day: str = "2023-01-01",
    description: str = "",
) -> Expense:
    return Expense(
        id=expense_id,
        amount=Decimal(str(amount)),
        category=category,
        date=date.fromisoformat(day),
        description=description,
    )


def make_budget(category: str, limit) -> Budget:
    return Budget(category=category, limit=Decimal(str(limit)))


class RecordingReporter(ErrorReporter):
    """Collects reported failures for assertions."""

    def __init__(self):
        self.reports: list[tuple[str, str]] = []

    def report(self, operation: str, reason: str) -> None:
        self.reports.append((operation, reason))

    @property
    def operations(self) -> list[str]:
        return [op for op, _ in self.reports]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings(
        categories="Food,Transportation,Entertainment,Utilities,Healthcare,Other",
        forecast_horizon=5,
        recent_count=5,
        warning_threshold_percent=80.0,
    )


@pytest.fixture
def store_settings() -> RemoteStoreSettings:
    return RemoteStoreSettings(
        base_url="http://store.test/",
        timeout_seconds=2.0,
        retry_attempts=2,
        retry_wait_seconds=0,
    )
