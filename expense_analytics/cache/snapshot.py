"""
Snapshot Cache

Holds the last-known-good view of expenses and budgets.

GUARANTEES:
- Each collection is an immutable tuple, swapped whole on replace
- Readers never see a half-applied update
- Before the first sync both collections are empty tuples, never None
- Subscribers get the full new tuple on every change, never a diff

Ordering of entries is whatever the sync controller supplied.
"""

from enum import Enum
from typing import Callable, Dict, Iterable, List, Sequence

import structlog

from expense_analytics.models.expense import Budget, Expense


logger = structlog.get_logger(__name__)


class CacheTopic(str, Enum):
    """Collections a subscriber can listen to."""
    EXPENSES = "expenses"
    BUDGETS = "budgets"


Subscriber = Callable[[Sequence], None]


class SnapshotCache:
    """
    In-memory snapshot with a synchronous callback registry.

    Created once per session and passed to whoever needs it. close() ends
    its lifecycle: subscribers are dropped and further replacements raise.
    """

    def __init__(self):
        self._expenses: tuple[Expense, ...] = ()
        self._budgets: tuple[Budget, ...] = ()
        self._subscribers: Dict[CacheTopic, List[Subscriber]] = {
            topic: [] for topic in CacheTopic
        }
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def current_expenses(self) -> tuple[Expense, ...]:
        return self._expenses

    def current_budgets(self) -> tuple[Budget, ...]:
        return self._budgets

    def current(self, topic: CacheTopic) -> tuple:
        """Snapshot for a topic. Raises ValueError for an unknown topic."""
        if CacheTopic(topic) == CacheTopic.EXPENSES:
            return self._expenses
        return self._budgets

    def replace_expenses(self, expenses: Iterable[Expense]) -> None:
        self._ensure_open()
        self._expenses = tuple(expenses)
        logger.debug("cache_replaced", topic=CacheTopic.EXPENSES.value, count=len(self._expenses))
        self._publish(CacheTopic.EXPENSES, self._expenses)

    def replace_budgets(self, budgets: Iterable[Budget]) -> None:
        self._ensure_open()
        self._budgets = tuple(budgets)
        logger.debug("cache_replaced", topic=CacheTopic.BUDGETS.value, count=len(self._budgets))
        self._publish(CacheTopic.BUDGETS, self._budgets)

    def on_change(
        self,
        topic: CacheTopic,
        callback: Subscriber,
        replay: bool = True,
    ) -> Callable[[], None]:
        """
        Subscribe to a collection.

        Args:
            topic: Which collection to watch
            callback: Called with the full new tuple on every replace
            replay: Deliver the current snapshot immediately

        Returns:
            A function that removes the subscription
        """
        self._ensure_open()
        topic = CacheTopic(topic)
        self._subscribers[topic].append(callback)

        if replay:
            self._deliver(topic, callback, self.current(topic))

        def unsubscribe() -> None:
            if callback in self._subscribers[topic]:
                self._subscribers[topic].remove(callback)

        return unsubscribe

    def subscriber_count(self, topic: CacheTopic) -> int:
        return len(self._subscribers[CacheTopic(topic)])

    def close(self) -> None:
        """Drop all subscribers. The last snapshot stays readable."""
        for callbacks in self._subscribers.values():
            callbacks.clear()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("SnapshotCache is closed")

    def _publish(self, topic: CacheTopic, snapshot: tuple) -> None:
        # Copy: a callback may unsubscribe itself.
        for callback in list(self._subscribers[topic]):
            self._deliver(topic, callback, snapshot)

    @staticmethod
    def _deliver(topic: CacheTopic, callback: Subscriber, snapshot: tuple) -> None:
        try:
            callback(snapshot)
        except Exception:
            logger.exception(
                "cache_subscriber_failed",
                topic=topic.value,
                subscriber=getattr(callback, "__qualname__", repr(callback)),
            )
