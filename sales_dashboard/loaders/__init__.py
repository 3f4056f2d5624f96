"""Data ingestion loaders for sales workbooks."""

from .sales_workbook import load_sales_workbook, normalise_records, read_sheet_rows
from .utils import to_number

__all__ = [
    "load_sales_workbook",
    "normalise_records",
    "read_sheet_rows",
    "to_number",
]
