'''
CSV Export

Renders an expense snapshot as CSV with the header

    ID,Amount,Category,Date,Description

followed by one row per expense. Every field in a row is quoted and
embedded quotes are doubled, so a description like  Lunch "special"
is written as  "Lunch ""special""" . The header is written bare.

An empty snapshot is an error, not an empty file.
'''

import csv
import io
from pathlib import Path
from typing import Iterable, Union

import structlog

from expense_analytics.models.expense import Expense


CSV_HEADER = "ID,Amount,Category,Date,Description"

logger = structlog.get_logger(__name__)


class NothingToExportError(Exception):
    """The snapshot has no expenses."""
    pass


def expense_row(expense: Expense) -> list[str]:
    return [
        expense.id,
        str(expense.amount),
        expense.category,
        expense.date.isoformat(),
        expense.description,
    ]


def render_expenses_csv(expenses: Iterable[Expense]) -> str:
    """
    Render expenses as CSV text.

    Raises:
        NothingToExportError: If there are no expenses
    """
    rows = [expense_row(e) for e in expenses]
    if not rows:
        raise NothingToExportError("No expenses to export")

    buffer = io.StringIO()
    buffer.write(CSV_HEADER + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def write_expenses_csv(expenses: Iterable[Expense], path: Union[str, Path]) -> Path:
    """Write the CSV to `path` and return it."""
    expenses = list(expenses)
    content = render_expenses_csv(expenses)
    path = Path(path)
    path.write_text(content, encoding="utf-8")
    logger.info("expenses_exported", path=str(path), rows=len(expenses))
    return path
