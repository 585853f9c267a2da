"""CSV import/export package."""

from expenseflow.services.exchange.csv_codec import (
    CSV_HEADERS,
    export_filename,
    export_to_csv,
    parse_csv,
)

__all__ = [
    "CSV_HEADERS",
    "export_filename",
    "export_to_csv",
    "parse_csv",
]
