"""
Main Orchestrator for Expense Analytics

This module ties the components together:
    settings → store → cache → sync controller → live dashboard

DESIGN DECISION: Nothing here is a module-level singleton. A session owns
exactly one cache, created when the session starts and closed when it
ends. Front ends receive the session (or its parts) explicitly.

Typical use:

    async with ExpenseSession() as session:
        await session.controller.add_expense(draft)
        print(session.dashboard.summary.total)
"""

from typing import Optional

import structlog

from expense_analytics.analytics import LiveDashboard
from expense_analytics.cache import SnapshotCache
from expense_analytics.config import Settings, get_settings
from expense_analytics.export import render_expenses_csv, write_expenses_csv
from expense_analytics.reporting import ErrorReporter, LoggingErrorReporter
from expense_analytics.services.storage import (
    ExpenseStoreInterface,
    InMemoryExpenseStore,
    RestExpenseStore,
)
from expense_analytics.sync import SyncController


logger = structlog.get_logger(__name__)


def create_app_components(
    use_remote_store: bool = True,
    store: Optional[ExpenseStoreInterface] = None,
    reporter: Optional[ErrorReporter] = None,
    settings: Optional[Settings] = None,
) -> tuple[SyncController, LiveDashboard, ExpenseStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        use_remote_store: Talk to the configured REST API. Set to False
                          for an in-memory store (tests, offline use).
        store: Explicit store, overrides use_remote_store.
        reporter: Failure sink, defaults to the structured log.
        settings: Settings to use instead of get_settings().

    Returns:
        (sync_controller, live_dashboard, store)
    """
    settings = settings or get_settings()

    if store is None:
        if use_remote_store:
            store = RestExpenseStore(settings.remote_store)
        else:
            store = InMemoryExpenseStore()

    cache = SnapshotCache()
    controller = SyncController(
        store=store,
        cache=cache,
        reporter=reporter or LoggingErrorReporter(),
    )
    dashboard = LiveDashboard(cache, settings.analytics)

    return controller, dashboard, store


class ExpenseSession:
    """
    Lifecycle of one user session.

    start() builds the components and bootstraps the cache; close() tears
    them down. Also usable as an async context manager.
    """

    def __init__(
        self,
        use_remote_store: bool = True,
        store: Optional[ExpenseStoreInterface] = None,
        reporter: Optional[ErrorReporter] = None,
        settings: Optional[Settings] = None,
    ):
        self._use_remote_store = use_remote_store
        self._store_override = store
        self._reporter = reporter
        self._settings = settings
        self._controller: Optional[SyncController] = None
        self._dashboard: Optional[LiveDashboard] = None
        self._store: Optional[ExpenseStoreInterface] = None

    @property
    def started(self) -> bool:
        return self._controller is not None

    @property
    def controller(self) -> SyncController:
        self._ensure_started()
        return self._controller

    @property
    def cache(self) -> SnapshotCache:
        return self.controller.cache

    @property
    def dashboard(self) -> LiveDashboard:
        self._ensure_started()
        return self._dashboard

    async def start(self) -> dict[str, bool]:
        """Create components and load the initial snapshot."""
        if self.started:
            raise RuntimeError("Session already started")

        self._controller, self._dashboard, self._store = create_app_components(
            use_remote_store=self._use_remote_store,
            store=self._store_override,
            reporter=self._reporter,
            settings=self._settings,
        )
        loaded = await self._controller.bootstrap()
        logger.info("session_started", **loaded)
        return loaded

    async def close(self) -> None:
        if not self.started:
            return
        self._dashboard.detach()
        self._controller.cache.close()
        await self._store.close()
        self._controller = None
        self._dashboard = None
        self._store = None
        logger.info("session_closed")

    def export_csv(self, path=None):
        """
        Export the current expense snapshot.

        Returns the CSV text, or the written path when `path` is given.

        Raises:
            NothingToExportError: If the snapshot is empty
        """
        expenses = self.cache.current_expenses()
        if path is None:
            return render_expenses_csv(expenses)
        return write_expenses_csv(expenses, path)

    def _ensure_started(self) -> None:
        if not self.started:
            raise RuntimeError("Session not started")

    async def __aenter__(self) -> "ExpenseSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
