"""
Loader for the per-transaction sales workbook.

Only the first sheet is read. Row 1 carries the headers; every following
row is one sales record. Header spelling varies between exports
("Salesman Code", "SALEMANCO", "Show Room", ...), so each canonical field
is resolved through the alias lists in config.COLUMN_ALIASES.
"""

import logging
from typing import Any, BinaryIO, Iterable

import openpyxl
import pandas as pd

from ..config import COLUMN_ALIASES, COLUMN_DEFAULTS, RECORD_COLUMNS, RECORD_KEYS
from .utils import normalise_code, normalise_key, normalise_month, normalise_text

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("salesman_name", "showroom", "counter", "training_status")
# source headers identical to a persisted record key are folded into the canonical column
_STORED_KEYS = set(RECORD_KEYS.values())


def read_sheet_rows(source: str | BinaryIO) -> list[dict[str, Any]]:
    """Read the first worksheet into a list of {header: value} dicts.

    Empty cells are left out of each dict and fully empty rows are
    skipped. Columns without a header are ignored; repeated headers get a
    numeric suffix ("Sales", "Sales_1").
    """
    try:
        wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
    except Exception:
        logger.exception("Failed to open sales workbook: %s", getattr(source, "name", source))
        raise

    try:
        ws = wb.worksheets[0]
        row_iter = ws.iter_rows(values_only=True)
        header_row = next(row_iter, None)
        if header_row is None:
            logger.warning("Sheet '%s' is empty", ws.title)
            return []

        headers: list[str | None] = []
        seen: dict[str, int] = {}
        for cell in header_row:
            if cell is None or not str(cell).strip():
                headers.append(None)
                continue
            name = str(cell).strip()
            if name in seen:
                seen[name] += 1
                name = f"{name}_{seen[name]}"
            else:
                seen[name] = 0
            headers.append(name)

        rows = []
        for values in row_iter:
            record = {
                header: value
                for header, value in zip(headers, values)
                if header is not None and value is not None and value != ""
            }
            if record:
                rows.append(record)
    finally:
        wb.close()

    return rows


def _lookup(row: dict[str, Any], aliases: list[str]) -> Any:
    """Find a field value by exact alias, then by case/space-insensitive alias."""
    for alias in aliases:
        if alias in row:
            return row[alias]

    keyed = [(normalise_key(k), k) for k in row]
    for alias in aliases:
        target = normalise_key(alias)
        for normalised, original in keyed:
            if normalised == target:
                return row[original]
    return None


def normalise_record(row: dict[str, Any]) -> dict[str, Any]:
    """Map one raw spreadsheet row onto the canonical record columns.

    Falsy values (0, "", None) fall back to the column default. Every
    original column is carried along so product-category columns survive.
    """
    record: dict[str, Any] = {}
    for column in RECORD_COLUMNS:
        value = _lookup(row, COLUMN_ALIASES[column])
        if not value:
            value = COLUMN_DEFAULTS[column]
        record[column] = value

    record["salesman_code"] = normalise_code(record["salesman_code"]) or "0"
    record["bill_month"] = normalise_month(record["bill_month"])
    for column in _TEXT_FIELDS:
        record[column] = normalise_text(record[column]) or COLUMN_DEFAULTS[column]

    for key, value in row.items():
        if key not in record and key not in _STORED_KEYS:
            record[key] = value
    return record


def normalise_records(rows: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """Build the raw sales DataFrame from spreadsheet rows.

    Returns
    -------
    DataFrame with the canonical columns
        salesman_code, salesman_name, showroom, bill_month, counter,
        total_sales, cross_sales, training_status
    followed by any extra source columns in first-seen order.
    """
    records = [normalise_record(row) for row in rows]
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)

    df = pd.DataFrame.from_records(records)
    extras = [c for c in df.columns if c not in RECORD_COLUMNS]
    return df[RECORD_COLUMNS + extras]


def load_sales_workbook(source: str | BinaryIO) -> pd.DataFrame:
    """Load and normalise a sales workbook (.xlsx path or binary file object).

    Assumptions
    -----------
    - Data lives on the first sheet.
    - Row 1 is the header row.
    - Amount columns may contain text; those cells count as zero later on.

    Returns
    -------
    Raw sales DataFrame (see normalise_records).
    """
    rows = read_sheet_rows(source)
    if not rows:
        logger.warning("No sales rows found in %s", getattr(source, "name", source))

    df = normalise_records(rows)
    logger.info("Loaded %d sales rows from %s", len(df), getattr(source, "name", source))
    return df
