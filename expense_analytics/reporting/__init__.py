"""Failure reporting and logging package."""

from expense_analytics.reporting.logger import (
    ErrorReporter,
    LoggingErrorReporter,
    safe_report,
)

__all__ = ["ErrorReporter", "LoggingErrorReporter", "safe_report"]
