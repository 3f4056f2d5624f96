"""
Simulated data generator for the sales performance dashboard.

Generates spreadsheet-shaped sales rows (with the header spellings seen
in real exports) for demos and pipeline smoke tests. All values are
synthetic.
"""

from typing import BinaryIO

import numpy as np
import openpyxl

from .config import PRODUCT_CATEGORIES, TRAINING_STATUS_OPTIONS

_SHOWROOMS = ["Anna Nagar", "T Nagar", "Velachery", "Coimbatore"]
_COUNTERS = ["Gold", "Diamond", "Silver", "Platinum"]
_FIRST_NAMES = [
    "Arun", "Bala", "Chitra", "Divya", "Eswar", "Farah", "Ganesh", "Hema",
    "Imran", "Janani", "Karthik", "Lakshmi", "Mohan", "Nisha", "Prakash", "Revathi",
]

# Typical monthly sales per staff member (mean, std)
_SALES_PARAMS = (450_000, 120_000)
_CROSS_SHARE_RANGE = (0.02, 0.18)


def generate_sales_rows(
    n_staff: int = 12,
    months: tuple[str, ...] = ("Jan-2025", "Feb-2025", "Mar-2025"),
    seed: int = 42,
    n_uncoded: int = 2,
) -> list[dict]:
    """Generate one row per staff member per month.

    The last `n_uncoded` staff have a zero salesman code so that the
    name/showroom/counter identity fallback is exercised.
    """
    rng = np.random.default_rng(seed)
    rows = []

    for i in range(n_staff):
        name = _FIRST_NAMES[i % len(_FIRST_NAMES)]
        if i >= len(_FIRST_NAMES):
            name = f"{name} {i // len(_FIRST_NAMES) + 1}"
        code = 0 if i >= n_staff - n_uncoded else 1001 + i
        showroom = _SHOWROOMS[i % len(_SHOWROOMS)]
        counter = _COUNTERS[rng.integers(len(_COUNTERS))]
        status = TRAINING_STATUS_OPTIONS[rng.integers(len(TRAINING_STATUS_OPTIONS))]

        for month in months:
            total = max(round(float(rng.normal(*_SALES_PARAMS)), 0), 10_000.0)
            cross = round(total * float(rng.uniform(*_CROSS_SHARE_RANGE)), 0)

            # Split the total across product categories
            weights = rng.dirichlet(np.ones(len(PRODUCT_CATEGORIES)))
            split = {
                category: round(total * float(w), 0)
                for category, w in zip(PRODUCT_CATEGORIES, weights)
            }

            rows.append({
                "Salesman Code": code,
                "Salesman Name": name,
                "Show Room": showroom,
                "Bill Month": month,
                "Counter": counter,
                "Total Sales": total,
                "Cross Sales": cross,
                "Training Status": status,
                **split,
            })

    return rows


def write_sales_workbook(rows: list[dict], target: str | BinaryIO, sheet_name: str = "Sales") -> None:
    """Write rows to an .xlsx workbook with a single header row."""
    headers: list[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name
    ws.append(headers)
    for row in rows:
        ws.append([row.get(h) for h in headers])
    wb.save(target)
