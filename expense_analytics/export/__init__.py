"""Export package."""

from expense_analytics.export.csv_export import (
    CSV_HEADER,
    NothingToExportError,
    render_expenses_csv,
    write_expenses_csv,
)

__all__ = [
    "CSV_HEADER",
    "NothingToExportError",
    "render_expenses_csv",
    "write_expenses_csv",
]
