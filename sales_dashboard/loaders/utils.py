"""
Shared utilities for data ingestion: numeric coercion, header-key
normalisation, code and month normalisation.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def is_missing(val: Any) -> bool:
    """True for None, NaN, NaT and pd.NA."""
    if val is None:
        return True
    try:
        return bool(pd.isna(val))
    except (TypeError, ValueError):
        return False


def to_number(val: Any) -> float:
    """Coerce a cell value to float, returning 0.0 for anything non-numeric.

    Blank strings, None, NaN and text labels all count as zero so that a
    dirty spreadsheet never breaks aggregation.
    """
    if is_missing(val):
        return 0.0
    if isinstance(val, bool):
        return float(val)
    if isinstance(val, (int, float)):
        return float(val)
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return 0.0
        try:
            num = float(val)
        except ValueError:
            return 0.0
        return 0.0 if math.isnan(num) else num
    try:
        num = float(val)
    except (ValueError, TypeError):
        return 0.0
    return 0.0 if math.isnan(num) else num


def normalise_key(name: Any) -> str:
    """Lower-case a header and drop all whitespace ("Show Room" -> "showroom")."""
    return re.sub(r"\s", "", str(name)).lower()


def normalise_text(val: Any) -> str:
    """Return a stripped string, or "" for missing values."""
    if is_missing(val):
        return ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val).strip()


def normalise_code(val: Any) -> str:
    """Normalise a salesman code.

    Excel hands numeric codes back as floats (1234.0); these are rendered
    without the trailing ".0".
    """
    return normalise_text(val)


def normalise_month(val: Any) -> str:
    """Normalise a bill-month cell to a string usable as a filter value.

    Date cells are rendered as ISO dates; anything else is kept as text.
    """
    if is_missing(val):
        return ""
    if isinstance(val, datetime):
        return val.date().isoformat()
    if isinstance(val, date):
        return val.isoformat()
    return normalise_text(val)
