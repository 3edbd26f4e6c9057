"""
Tests for the sync controller.

The in-memory store stands in for the REST API; FlakyStore wraps it to
inject failures at chosen calls.
"""

import asyncio
import json
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import requests

from expense_analytics.cache import CacheTopic, SnapshotCache
from expense_analytics.models.expense import ExpenseCategory, ExpenseDraft, ExpenseUpdate
from expense_analytics.services.storage import (
    InMemoryExpenseStore,
    NetworkError,
    NotFoundError,
    RestExpenseStore,
    UnconfirmedWriteError,
    ValidationFailedError,
)
from expense_analytics.sync import SyncController

from conftest import make_budget, make_expense


class FlakyStore(InMemoryExpenseStore):
    """In-memory store whose listed methods raise NetworkError."""

    def __init__(self, *args, failing=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.failing = set(failing)
        self.calls: list[str] = []

    def _check(self, name):
        self.calls.append(name)
        if name in self.failing:
            raise NetworkError(f"{name} unreachable")

    async def list_expenses(self):
        self._check("list_expenses")
        return await super().list_expenses()

    async def list_budgets(self):
        self._check("list_budgets")
        return await super().list_budgets()

    async def create_expense(self, expense):
        self._check("create_expense")
        return await super().create_expense(expense)

    async def update_expense(self, expense):
        self._check("update_expense")
        self.written = expense
        return await super().update_expense(expense)

    async def upsert_budget(self, budget):
        self._check("upsert_budget")
        return await super().upsert_budget(budget)


class UnconfirmingStore(FlakyStore):
    """Commits updates, then fails to echo the record back."""

    async def update_expense(self, expense):
        await super().update_expense(expense)
        raise UnconfirmedWriteError("unreadable response")


class ColumnOverwritingBackend:
    """
    Session double for a backend that sets every column from the PUT body
    and echoes back only the fields it was sent.
    """

    def __init__(self, rows):
        self.rows = {row["id"]: dict(row) for row in rows}
        self.headers = {}
        self.methods = []
        self.bodies = []

    def request(self, method, url, **kwargs):
        body = kwargs.get("json")
        self.methods.append(method)
        self.bodies.append(body)
        if url.endswith("/api/budgets"):
            return self._response(200, [])
        if method == "GET":
            return self._response(200, list(self.rows.values()))
        expense_id = url.rsplit("/", 1)[-1]
        fields = ("amount", "category", "date", "description")
        self.rows[expense_id] = {"id": expense_id, **{k: body.get(k) for k in fields}}
        return self._response(200, {"id": expense_id, **body})

    def close(self):
        pass

    @staticmethod
    def _response(status_code, body):
        response = MagicMock(spec=requests.Response)
        response.status_code = status_code
        text = json.dumps(body)
        response.text = text
        response.json.side_effect = lambda **kwargs: json.loads(text, **kwargs)
        return response


def draft(amount="25", category="Transportation", day=date(2023, 1, 2), description="Bus ticket"):
    return ExpenseDraft(amount=Decimal(amount), category=category, date=day, description=description)


def controller_for(store, reporter):
    return SyncController(store=store, cache=SnapshotCache(), reporter=reporter)


class TestBootstrap:
    """Tests for the initial load."""

    def test_loads_both_collections(self, reporter):
        store = InMemoryExpenseStore(
            expenses=[make_expense("1", 50)],
            budgets=[make_budget("Food", 100)],
        )
        controller = controller_for(store, reporter)

        result = asyncio.run(controller.bootstrap())

        assert result == {"expenses": True, "budgets": True}
        assert [e.id for e in controller.cache.current_expenses()] == ["1"]
        assert controller.cache.current_budgets()[0].category == "Food"
        assert reporter.reports == []

    def test_expense_failure_falls_back_to_empty(self, reporter):
        store = FlakyStore(
            expenses=[make_expense("1", 50)],
            budgets=[make_budget("Food", 100)],
            failing={"list_expenses"},
        )
        controller = controller_for(store, reporter)

        result = asyncio.run(controller.bootstrap())

        assert result == {"expenses": False, "budgets": True}
        assert controller.cache.current_expenses() == ()
        assert len(controller.cache.current_budgets()) == 1
        assert reporter.operations == ["bootstrap.expenses"]

    def test_both_failing_is_not_fatal(self, reporter):
        store = FlakyStore(failing={"list_expenses", "list_budgets"})
        controller = controller_for(store, reporter)

        asyncio.run(controller.bootstrap())

        assert controller.cache.current_expenses() == ()
        assert controller.cache.current_budgets() == ()
        assert reporter.operations == ["bootstrap.expenses", "bootstrap.budgets"]

    def test_broken_reporter_is_contained(self):
        class BrokenReporter:
            def report(self, operation, reason):
                raise RuntimeError("toast failed")

        store = FlakyStore(failing={"list_expenses"})
        controller = SyncController(store=store, cache=SnapshotCache(), reporter=BrokenReporter())

        result = asyncio.run(controller.bootstrap())
        assert result["expenses"] is False


class TestAddExpense:
    """Tests for add_expense()."""

    def test_cache_reflects_new_expense_on_return(self, reporter):
        store = InMemoryExpenseStore()
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        created = asyncio.run(controller.add_expense(draft()))

        assert created.amount == Decimal("25")
        assert created.category == "Transportation"
        assert [e.id for e in controller.cache.current_expenses()] == [created.id]

    def test_assigns_unique_ids(self, reporter):
        controller = controller_for(InMemoryExpenseStore(), reporter)

        async def add_many():
            return [await controller.add_expense(draft()) for _ in range(20)]

        created = asyncio.run(add_many())
        assert len({e.id for e in created}) == 20

    def test_accepts_plain_dict(self, reporter):
        controller = controller_for(InMemoryExpenseStore(), reporter)
        created = asyncio.run(controller.add_expense({
            "amount": "12.40",
            "category": ExpenseCategory.FOOD,
            "date": "2023-02-01",
            "description": "Sandwich",
        }))
        assert created.category == "Food"
        assert created.date == date(2023, 2, 1)

    def test_invalid_draft_raises_validation_failure(self, reporter):
        controller = controller_for(InMemoryExpenseStore(), reporter)
        with pytest.raises(ValidationFailedError):
            asyncio.run(controller.add_expense({"amount": "-5", "category": "Food", "date": "2023-01-01"}))
        assert controller.cache.current_expenses() == ()
        assert reporter.operations == ["add_expense"]

    def test_store_failure_leaves_cache_unchanged(self, reporter):
        store = FlakyStore(expenses=[make_expense("1", 50)], failing={"create_expense"})
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())
        before = controller.cache.current_expenses()

        with pytest.raises(NetworkError):
            asyncio.run(controller.add_expense(draft()))

        assert controller.cache.current_expenses() is before
        assert reporter.operations == ["add_expense"]

    def test_refetches_after_write(self, reporter):
        store = FlakyStore()
        controller = controller_for(store, reporter)

        asyncio.run(controller.add_expense(draft()))

        assert store.calls == ["create_expense", "list_expenses"]

    def test_refresh_failure_after_write_is_reported(self, reporter):
        store = FlakyStore(failing={"list_expenses"})
        controller = controller_for(store, reporter)

        created = asyncio.run(controller.add_expense(draft()))

        assert created.id
        assert controller.cache.current_expenses() == ()
        assert reporter.operations == ["add_expense.refresh"]

    def test_subscribers_notified_with_full_list(self, reporter):
        store = InMemoryExpenseStore(expenses=[make_expense("1", 50)])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())
        received = []
        controller.cache.on_change(CacheTopic.EXPENSES, received.append, replay=False)

        asyncio.run(controller.add_expense(draft()))

        assert len(received) == 1
        assert len(received[0]) == 2


class TestUpdateAndDelete:
    """Tests for update_expense() and delete_expense()."""

    def test_partial_update(self, reporter):
        store = InMemoryExpenseStore(expenses=[make_expense("1", 50, "Food", description="Lunch")])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        updated = asyncio.run(controller.update_expense("1", ExpenseUpdate(amount=Decimal("60"))))

        assert updated.amount == Decimal("60")
        assert updated.description == "Lunch"
        assert controller.cache.current_expenses()[0].amount == Decimal("60")

    def test_update_missing_raises_not_found(self, reporter):
        store = InMemoryExpenseStore(expenses=[make_expense("1", 50)])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())
        before = controller.cache.current_expenses()

        with pytest.raises(NotFoundError):
            asyncio.run(controller.update_expense("nope", {"amount": "1"}))

        assert controller.cache.current_expenses() is before
        assert reporter.operations == ["update_expense"]

    def test_update_writes_full_merged_record(self, reporter):
        store = FlakyStore(expenses=[make_expense("1", 50, "Food", "2023-01-01", "Lunch")])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        asyncio.run(controller.update_expense("1", {"amount": "60"}))

        assert store.written == make_expense("1", 60, "Food", "2023-01-01", "Lunch")
        assert store.calls[-2:] == ["update_expense", "list_expenses"]

    def test_update_keeps_untouched_fields_on_column_overwriting_backend(self, reporter, store_settings):
        backend = ColumnOverwritingBackend([
            {"id": "1", "amount": 50, "category": "Food", "date": "2023-01-01", "description": "Lunch"},
        ])
        store = RestExpenseStore(settings=store_settings, session=backend)
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())
        backend.methods.clear()

        updated = asyncio.run(controller.update_expense("1", {"amount": "60"}))

        assert backend.methods == ["PUT", "GET"]
        assert backend.bodies[0] == {
            "amount": 60.0, "category": "Food", "date": "2023-01-01", "description": "Lunch",
        }
        assert updated.category == "Food"
        cached = controller.cache.current_expenses()
        assert [(e.amount, e.category, e.description) for e in cached] == [
            (Decimal("60"), "Food", "Lunch"),
        ]
        assert reporter.reports == []

    def test_unconfirmed_update_refreshes_before_raising(self, reporter):
        store = UnconfirmingStore(expenses=[make_expense("1", 50, "Food", description="Lunch")])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        with pytest.raises(UnconfirmedWriteError):
            asyncio.run(controller.update_expense("1", {"description": "Dinner"}))

        assert store.calls[-2:] == ["update_expense", "list_expenses"]
        assert controller.cache.current_expenses()[0].description == "Dinner"
        assert reporter.operations == ["update_expense"]

    def test_invalid_update_is_not_sent(self, reporter):
        store = FlakyStore(expenses=[make_expense("1", 50)])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        with pytest.raises(ValidationFailedError):
            asyncio.run(controller.update_expense("1", {"category": ""}))

        assert "update_expense" not in store.calls
        assert reporter.operations == ["update_expense"]

    def test_delete(self, reporter):
        store = InMemoryExpenseStore(expenses=[make_expense("1", 50), make_expense("2", 5)])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        asyncio.run(controller.delete_expense("1"))

        assert [e.id for e in controller.cache.current_expenses()] == ["2"]

    def test_delete_missing_raises_not_found_and_keeps_cache(self, reporter):
        store = InMemoryExpenseStore(expenses=[make_expense("1", 50)])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())
        before = controller.cache.current_expenses()

        with pytest.raises(NotFoundError):
            asyncio.run(controller.delete_expense("missing"))

        assert controller.cache.current_expenses() is before
        assert reporter.operations == ["delete_expense"]


class TestSetBudget:
    """Tests for set_budget()."""

    def test_creates_budget(self, reporter):
        controller = controller_for(InMemoryExpenseStore(), reporter)

        saved = asyncio.run(controller.set_budget("Food", Decimal("100")))

        assert saved.limit == Decimal("100")
        assert controller.cache.current_budgets() == (saved,)

    def test_replaces_existing_budget(self, reporter):
        store = InMemoryExpenseStore(budgets=[make_budget("Food", 100), make_budget("Other", 10)])
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        asyncio.run(controller.set_budget(ExpenseCategory.FOOD, 250))

        food = [b for b in controller.cache.current_budgets() if b.category == "Food"]
        assert len(food) == 1
        assert food[0].limit == Decimal("250")
        assert len(controller.cache.current_budgets()) == 2

    def test_float_limit_is_exact(self, reporter):
        controller = controller_for(InMemoryExpenseStore(), reporter)
        saved = asyncio.run(controller.set_budget("Food", 0.1))
        assert saved.limit == Decimal("0.1")

    @pytest.mark.parametrize("limit", [-1, "abc", None])
    def test_invalid_limit(self, reporter, limit):
        controller = controller_for(InMemoryExpenseStore(), reporter)
        with pytest.raises(ValidationFailedError):
            asyncio.run(controller.set_budget("Food", limit))
        assert controller.cache.current_budgets() == ()

    def test_store_failure_leaves_cache_unchanged(self, reporter):
        store = FlakyStore(budgets=[make_budget("Food", 100)], failing={"upsert_budget"})
        controller = controller_for(store, reporter)
        asyncio.run(controller.bootstrap())

        with pytest.raises(NetworkError):
            asyncio.run(controller.set_budget("Food", 500))

        assert controller.cache.current_budgets()[0].limit == Decimal("100")
