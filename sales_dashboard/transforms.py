"""
Data transforms: staff identity, filtering and per-staff aggregation of
raw sales rows, plus training-status edits on the raw table.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import pandas as pd

from .config import (
    ALL_COUNTERS,
    ALL_MONTHS,
    ALL_SHOWROOMS,
    INVALID_CODES,
    MISSING_DISPLAY_CODE,
    STATUS_NOT_AVAILABLE,
    TRAINING_STATUS_OPTIONS,
    UNKNOWN_PART,
)
from .loaders.utils import normalise_code, normalise_text, to_number

logger = logging.getLogger(__name__)

STAFF_SUMMARY_COLUMNS = [
    "id",
    "display_code",
    "name",
    "counter",
    "showroom",
    "total_sales",
    "cross_sales",
    "training_status",
]


@dataclass
class FilterState:
    """Current filter selection; each field may hold its "All ..." sentinel."""

    showroom: str = ALL_SHOWROOMS
    bill_month: str = ALL_MONTHS
    counter: str = ALL_COUNTERS


def _is_valid_code(code: str) -> bool:
    return code.lower() not in INVALID_CODES


def get_staff_id(record: Mapping[str, Any]) -> str:
    """Return the identity used to group a sales row by staff member.

    The salesman code when it is present and valid, otherwise the
    composite "name-showroom-counter" with "Unknown" for empty parts.
    """
    code = normalise_code(record.get("salesman_code"))
    if _is_valid_code(code):
        return code

    name = normalise_text(record.get("salesman_name")) or UNKNOWN_PART
    room = normalise_text(record.get("showroom")) or UNKNOWN_PART
    counter = normalise_text(record.get("counter")) or UNKNOWN_PART
    return f"{name}-{room}-{counter}"


def get_display_code(record: Mapping[str, Any]) -> str:
    """Code shown in the rankings table; "N/A" when no valid code exists."""
    code = normalise_code(record.get("salesman_code"))
    return code if _is_valid_code(code) else MISSING_DISPLAY_CODE


def staff_ids(df: pd.DataFrame) -> pd.Series:
    """Staff identity for every raw row, aligned to df.index."""
    if df.empty:
        return pd.Series([], index=df.index, dtype=object)
    return df.apply(get_staff_id, axis=1)


def apply_filters(df: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    """Keep rows matching every filter that is not set to its "All" sentinel."""
    mask = pd.Series(True, index=df.index)
    if filters.showroom != ALL_SHOWROOMS:
        mask &= df["showroom"] == filters.showroom
    if filters.bill_month != ALL_MONTHS:
        mask &= df["bill_month"] == filters.bill_month
    if filters.counter != ALL_COUNTERS:
        mask &= df["counter"] == filters.counter

    filtered = df[mask]
    logger.debug("Filters %s kept %d of %d rows", filters, len(filtered), len(df))
    return filtered


def _resolve_status(statuses: pd.Series) -> str:
    """First row's status, overridden by the last informative one."""
    cleaned = [normalise_text(s) for s in statuses]
    resolved = cleaned[0] or STATUS_NOT_AVAILABLE
    for status in cleaned[1:]:
        if status and status != STATUS_NOT_AVAILABLE:
            resolved = status
    return resolved


def build_staff_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate raw sales rows to one row per staff member.

    Rules
    -----
    - Staff order follows first appearance in df.
    - name, counter, showroom, display_code: taken from the first row.
    - total_sales, cross_sales: sum of leniently coerced amounts.
    - training_status: see _resolve_status.

    Returns
    -------
    DataFrame with columns:
        id, display_code, name, counter, showroom, total_sales,
        cross_sales, training_status
    """
    if df.empty:
        return pd.DataFrame(columns=STAFF_SUMMARY_COLUMNS)

    work = pd.DataFrame({
        "id": staff_ids(df),
        "display_code": df.apply(get_display_code, axis=1),
        "name": df["salesman_name"].map(normalise_text),
        "counter": df["counter"].map(normalise_text),
        "showroom": df["showroom"].map(normalise_text),
        "total_sales": df["total_sales"].map(to_number),
        "cross_sales": df["cross_sales"].map(to_number),
        "training_status": df["training_status"],
    })

    summary = work.groupby("id", sort=False).agg(
        display_code=("display_code", "first"),
        name=("name", "first"),
        counter=("counter", "first"),
        showroom=("showroom", "first"),
        total_sales=("total_sales", "sum"),
        cross_sales=("cross_sales", "sum"),
        training_status=("training_status", _resolve_status),
    ).reset_index()

    logger.info("Aggregated %d rows into %d staff summaries", len(df), len(summary))
    return summary[STAFF_SUMMARY_COLUMNS]


def _check_status(status: str) -> None:
    if status not in TRAINING_STATUS_OPTIONS:
        raise ValueError(
            f"Unknown training status {status!r}; expected one of {TRAINING_STATUS_OPTIONS}"
        )


def update_training_status(df: pd.DataFrame, staff_id: str, status: str) -> pd.DataFrame:
    """Return a copy of the raw table with every row of staff_id set to status.

    Updating the raw rows keeps the status consistent under any later
    filter combination.
    """
    _check_status(status)
    updated = df.copy()
    mask = staff_ids(updated) == staff_id
    if not mask.any():
        logger.warning("No sales rows found for staff id '%s'", staff_id)
    updated.loc[mask, "training_status"] = status
    logger.info("Set training status '%s' on %d rows for %s", status, int(mask.sum()), staff_id)
    return updated


def apply_status_overrides(df: pd.DataFrame, overrides: Mapping[str, str]) -> pd.DataFrame:
    """Apply saved {staff_id: status} edits to a (freshly uploaded) raw table."""
    if df.empty or not overrides:
        return df

    updated = df.copy()
    ids = staff_ids(updated)
    applied = 0
    for staff_id, status in overrides.items():
        if status not in TRAINING_STATUS_OPTIONS:
            logger.warning("Skipping override for %s: unknown status '%s'", staff_id, status)
            continue
        mask = ids == staff_id
        if mask.any():
            updated.loc[mask, "training_status"] = status
            applied += 1

    logger.info("Re-applied %d of %d training status overrides", applied, len(overrides))
    return updated
