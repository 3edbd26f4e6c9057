"""
Failure Reporting

Failures the user should hear about (a collection that could not be
loaded, a mutation the store refused) are handed to an ErrorReporter as
(operation, reason) pairs. What the reporter does with them is up to the
front end: toast, console, log sink.

The reporter:
- Must never break the caller (report() exceptions are contained by
  safe_report)
- Always has a structured local log as the default sink
"""

from abc import ABC, abstractmethod

import structlog


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ErrorReporter(ABC):
    """Receives user-facing failures from the sync controller."""

    @abstractmethod
    def report(self, operation: str, reason: str) -> None:
        """
        Report a failure.

        Args:
            operation: What was attempted (e.g. 'bootstrap.expenses')
            reason: Human-readable cause
        """
        pass


class LoggingErrorReporter(ErrorReporter):
    """Default reporter: writes each failure to the structured log."""

    def __init__(self):
        self._logger = structlog.get_logger("expense_analytics.errors")

    def report(self, operation: str, reason: str) -> None:
        self._logger.error("operation_failed", operation=operation, reason=reason)


def safe_report(reporter: ErrorReporter, operation: str, reason: str) -> None:
    """Call a reporter without letting its own failure escape."""
    try:
        reporter.report(operation, reason)
    except Exception as e:
        # Log failure but don't raise
        structlog.get_logger(__name__).error(
            "error_reporter_failed",
            operation=operation,
            error=str(e),
        )
