"""Cache/store synchronization package."""

from expense_analytics.sync.controller import SyncController

__all__ = ["SyncController"]
