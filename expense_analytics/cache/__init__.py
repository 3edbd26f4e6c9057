"""Snapshot cache package."""

from expense_analytics.cache.snapshot import CacheTopic, SnapshotCache

__all__ = ["CacheTopic", "SnapshotCache"]
