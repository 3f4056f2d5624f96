"""
Cross-sale and ranking calculations over staff summaries.

Provides cross-sale percentages, sale / cross-sale ranking, product
category totals and the headline dashboard metrics.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from .config import PRODUCT_CATEGORIES, RECORD_COLUMNS, TOP_PRODUCTS_LIMIT
from .loaders.utils import is_missing, to_number

logger = logging.getLogger(__name__)


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to `digits` decimals with ties going away from zero.

    Python's round() sends exact ties to the even neighbour (12.25 -> 12.2);
    the dashboard shows 12.3.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def calc_cross_sale_pct(cross_sales: float, total_sales: float) -> float:
    """Return cross sales as a percentage of total sales, to one decimal.

    0.0 when total_sales is zero or negative.
    """
    if total_sales > 0:
        return round_half_up(cross_sales / total_sales * 100, 1)
    return 0.0


def add_cross_sale_pct(staff: pd.DataFrame) -> pd.DataFrame:
    """Add the cross_sale_pct column to a staff summary."""
    staff = staff.copy()
    staff["cross_sale_pct"] = [
        calc_cross_sale_pct(cross, total)
        for cross, total in zip(staff["cross_sales"], staff["total_sales"])
    ]
    return staff


def assign_ranks(staff: pd.DataFrame) -> pd.DataFrame:
    """Add sale_rank and cross_sale_rank (1 = highest).

    Ranks are positions after a stable descending sort, so tied staff keep
    their first-appearance order and no two staff share a rank.
    """
    staff = staff.copy()
    n = len(staff)
    for value_col, rank_col in (("total_sales", "sale_rank"), ("cross_sales", "cross_sale_rank")):
        order = staff.sort_values(value_col, ascending=False, kind="stable").index
        ranks = pd.Series(range(1, n + 1), index=order, dtype="int64")
        staff[rank_col] = ranks.reindex(staff.index).astype("int64")
    return staff


def _category_values(df: pd.DataFrame, category: str) -> pd.Series:
    """Numeric per-row values for one product category.

    Uses the column named exactly like the category; rows where that is
    missing or non-numeric fall back to the first column, among those the
    row has a value in, whose name contains the category
    (case-insensitive), else 0.
    """
    if category in df.columns:
        exact = pd.to_numeric(df[category], errors="coerce")
    else:
        exact = pd.Series(float("nan"), index=df.index)

    needle = category.lower()
    candidates = [c for c in df.columns if c not in RECORD_COLUMNS and needle in str(c).lower()]
    if not candidates:
        return exact.fillna(0.0)

    # first present cell per row, so empty cells never hide a later match
    first_present = df[candidates].apply(
        lambda row: next((v for v in row if not is_missing(v)), None), axis=1
    )
    fallback = pd.to_numeric(first_present, errors="coerce").fillna(0.0)
    return exact.fillna(fallback)


def summarise_top_products(
    df: pd.DataFrame,
    categories: list[str] | None = None,
    limit: int = TOP_PRODUCTS_LIMIT,
) -> list[dict]:
    """Total sales per product category, highest first.

    Returns
    -------
    List of {"name": category, "value": total} dicts, at most `limit` long.
    Categories with equal totals keep their configured order.
    """
    categories = PRODUCT_CATEGORIES if categories is None else categories

    totals = []
    for category in categories:
        value = float(_category_values(df, category).sum()) if not df.empty else 0.0
        totals.append({"name": category, "value": value})

    totals.sort(key=lambda item: item["value"], reverse=True)
    return totals[:limit]


def get_dashboard_metrics(filtered: pd.DataFrame) -> dict:
    """Return the headline metrics for the filtered raw rows.

    Returns
    -------
    Dict with structure:
    {
        "total_sales": 1234567.0,
        "total_cross_sales": 123456.0,
        "cross_sale_pct": 10.0,
        "top_products": [{"name": "Chain", "value": ...}, ...],
    }
    """
    total_sales = float(sum(to_number(v) for v in filtered["total_sales"]))
    total_cross = float(sum(to_number(v) for v in filtered["cross_sales"]))

    return {
        "total_sales": total_sales,
        "total_cross_sales": total_cross,
        "cross_sale_pct": calc_cross_sale_pct(total_cross, total_sales),
        "top_products": summarise_top_products(filtered),
    }
