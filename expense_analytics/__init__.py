"""
Expense Analytics - Source Package

Client-side analytics and state cache for a personal expense tracker.

DESIGN PRINCIPLES:
1. The remote store is the system of record
2. The cache mirrors the store, refreshed after every write
3. Every figure is derived on demand from one snapshot
4. Failures are reported, never fatal
5. Storage layer is swappable
"""

from expense_analytics import reporting  # noqa: F401  (configures structlog)

__version__ = "1.0.0"
__author__ = "Expense Analytics Team"
