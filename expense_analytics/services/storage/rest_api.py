"""
REST Store Implementation

Talks to the expense API over HTTP:

    GET    /api/expenses          list expenses
    POST   /api/expenses          create expense (201)
    PUT    /api/expenses/{id}     overwrite all fields (404 if absent)
    DELETE /api/expenses/{id}     delete (204, 404 if absent)
    GET    /api/budgets           list budgets
    POST   /api/budgets           upsert budget by category (201)

TRADEOFFS:
- requests is blocking, so every call runs in a worker thread via
  asyncio.to_thread. The event loop keeps serving cache reads meanwhile.
- Only reads are retried. A retried POST could create a second record.
- Amounts are parsed as Decimal straight from the JSON text, but sent as
  JSON numbers (float). The backend keeps amounts in REAL columns, so a
  decimal string on the wire would buy no exactness and would be stored as
  text by a lenient backend.
- The PUT body always carries every field. The backend overwrites each
  column from the body, so an omitted field would be nulled.
- A 2xx write whose body cannot be parsed raises UnconfirmedWriteError:
  the write is committed even though no record came back.
"""

import asyncio
import datetime as dt
from decimal import Decimal
from typing import Any, Optional

import requests
import structlog
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_analytics.config import RemoteStoreSettings, get_settings
from expense_analytics.models.expense import Budget, Expense
from expense_analytics.services.storage.interface import (
    ExpenseStoreInterface,
    NetworkError,
    NotFoundError,
    UnconfirmedWriteError,
    ValidationFailedError,
)


EXPENSES_PATH = "/api/expenses"
BUDGETS_PATH = "/api/budgets"

logger = structlog.get_logger(__name__)


def to_json_payload(data: dict) -> dict:
    """Convert model_dump() output into JSON-native values."""
    payload = {}
    for key, value in data.items():
        if isinstance(value, Decimal):
            payload[key] = float(value)
        elif isinstance(value, dt.date):
            payload[key] = value.isoformat()
        else:
            payload[key] = value
    return payload


class RestExpenseStore(ExpenseStoreInterface):
    """
    HTTP implementation of the expense store.

    One requests.Session is shared for connection pooling. Call close()
    (or let ExpenseSession do it) when done.
    """

    def __init__(
        self,
        settings: Optional[RemoteStoreSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().remote_store
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")

    def _url(self, path: str) -> str:
        return f"{self._settings.base_url}{path}"

    def _send(self, method: str, path: str, payload: Optional[dict] = None) -> requests.Response:
        """Blocking HTTP call with status mapping. Runs in a worker thread."""
        try:
            response = self._session.request(
                method,
                self._url(path),
                json=payload,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found")
        if response.status_code in (400, 422):
            raise ValidationFailedError(
                f"{method} {path} rejected: {response.text[:200]}"
            )
        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"{method} {path} returned HTTP {response.status_code}"
            )
        return response

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> requests.Response:
        return await asyncio.to_thread(self._send, method, path, payload)

    async def _read(self, path: str) -> Any:
        """GET with retry on transport failures."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=wait_exponential(
                multiplier=self._settings.retry_wait_seconds,
                max=10,
            ),
            retry=retry_if_exception_type(NetworkError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._request("GET", path)
        return self._decode(response)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json(parse_float=Decimal)
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from store: {e}") from e

    @staticmethod
    def _rows(data: Any, model: type, path: str) -> list:
        """Parse a JSON array into models, skipping malformed rows."""
        if not isinstance(data, list):
            raise NetworkError(f"Expected a JSON array from {path}")

        items = []
        for row in data:
            try:
                items.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "malformed_row_skipped",
                    path=path,
                    row=row,
                    error=str(e),
                )
        return items

    @staticmethod
    def _confirmed(response: requests.Response, model: type, path: str):
        """Parse the record echoed back by a successful write."""
        try:
            return model.model_validate(response.json(parse_float=Decimal))
        except (ValueError, ValidationError) as e:
            logger.warning("write_response_unreadable", path=path, error=str(e))
            raise UnconfirmedWriteError(
                f"Write to {path} succeeded but returned an unreadable record: {e}"
            ) from e

    async def list_expenses(self) -> list[Expense]:
        data = await self._read(EXPENSES_PATH)
        return self._rows(data, Expense, EXPENSES_PATH)

    async def create_expense(self, expense: Expense) -> Expense:
        response = await self._request(
            "POST", EXPENSES_PATH, to_json_payload(expense.model_dump())
        )
        return self._confirmed(response, Expense, EXPENSES_PATH)

    async def update_expense(self, expense: Expense) -> Expense:
        path = f"{EXPENSES_PATH}/{expense.id}"
        response = await self._request(
            "PUT", path, to_json_payload(expense.model_dump(exclude={"id"}))
        )
        return self._confirmed(response, Expense, path)

    async def delete_expense(self, expense_id: str) -> None:
        await self._request("DELETE", f"{EXPENSES_PATH}/{expense_id}")

    async def list_budgets(self) -> list[Budget]:
        data = await self._read(BUDGETS_PATH)
        return self._rows(data, Budget, BUDGETS_PATH)

    async def upsert_budget(self, budget: Budget) -> Budget:
        response = await self._request(
            "POST", BUDGETS_PATH, to_json_payload(budget.model_dump())
        )
        return self._confirmed(response, Budget, BUDGETS_PATH)

    async def close(self) -> None:
        self._session.close()
