"""
Configuration: column aliases, product categories, filter sentinels,
store settings and admin credentials.

Environment overrides are read from a local ``.env`` file when present.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# File paths
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"

for _env_path in (Path.cwd() / ".env", BASE_DIR / ".env"):
    if _env_path.exists():
        load_dotenv(_env_path)
        logger.info("Loaded .env from: %s", _env_path)
        break

# ---------------------------------------------------------------------------
# Application identity
# ---------------------------------------------------------------------------
APP_NAME = "Sales Performance"
EXPORT_FILE_NAME = "Sales_Training_Report.xlsx"
EXPORT_SHEET_NAME = "Training Report"

# ---------------------------------------------------------------------------
# Remote store (Supabase); a local JSON file is used when unset
# ---------------------------------------------------------------------------
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")
SALES_TABLE = os.getenv("SALES_TABLE", "sales_data")
SALES_DOCUMENT_ID = "latest"
STATUS_DOCUMENT_ID = "training_status"
LOCAL_STORE_FILE = Path(os.getenv("LOCAL_STORE_FILE", str(DATA_DIR / "sales_data.json")))

# PostgREST error code for ".single()" matching zero rows
ROW_NOT_FOUND_CODE = "PGRST116"

# ---------------------------------------------------------------------------
# Admin access
# ---------------------------------------------------------------------------
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "Admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Admin@123")

# ---------------------------------------------------------------------------
# Record schema
# ---------------------------------------------------------------------------
# canonical column -> key used in the persisted JSON records
RECORD_KEYS: dict[str, str] = {
    "salesman_code": "SalesmanCode",
    "salesman_name": "SalesmanName",
    "showroom": "ShowRoom",
    "bill_month": "BillMo",
    "counter": "Counter",
    "total_sales": "TotalSales",
    "cross_sales": "CrossSales",
    "training_status": "TrainingStatus",
}

RECORD_COLUMNS = list(RECORD_KEYS)

# Spreadsheet header aliases, tried in order
COLUMN_ALIASES: dict[str, list[str]] = {
    "salesman_code": ["SalesmanCode", "Salesman Code", "SALEMANCO", "Code", "Staff Code", "EmpID"],
    "salesman_name": ["SalesmanName", "Salesman Name", "SALESMANNAME", "Name", "Staff Name"],
    "showroom": ["ShowRoom", "Showroom", "Show Room", "Branch"],
    "bill_month": ["BillMo", "Bill Month", "BillMonth", "Month", "Date"],
    "counter": ["Counter", "Count", "Department"],
    "total_sales": ["TotalSales", "Total Sales", "TotalSale", "Total Sale", "Sales", "Net Sales"],
    "cross_sales": ["CrossSales", "Cross Sales", "CrossSale", "Cross Sale"],
    "training_status": ["TrainingStatus", "Training Status", "Training", "Status"],
}

# Value used when a field is missing or falsy in the source row
COLUMN_DEFAULTS: dict[str, object] = {
    "salesman_code": 0,
    "salesman_name": "",
    "showroom": "",
    "bill_month": "",
    "counter": "Others",
    "total_sales": 0,
    "cross_sales": 0,
    "training_status": "Not Available",
}

# Codes treated as "no code" when deriving staff identity
INVALID_CODES = {"", "0", "undefined", "null", "none", "nan"}
UNKNOWN_PART = "Unknown"
MISSING_DISPLAY_CODE = "N/A"

# ---------------------------------------------------------------------------
# Training status
# ---------------------------------------------------------------------------
STATUS_NOT_AVAILABLE = "Not Available"
TRAINING_STATUS_OPTIONS = [
    "Completed",
    "In Progress",
    "Not Applicable",
    STATUS_NOT_AVAILABLE,
]

# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------
ALL_SHOWROOMS = "All Showrooms"
ALL_MONTHS = "All Months"
ALL_COUNTERS = "All Counters"

# ---------------------------------------------------------------------------
# Metrics & charts
# ---------------------------------------------------------------------------
PRODUCT_CATEGORIES = [
    "Bangle",
    "Chain",
    "Earrings",
    "Ethnic&Vint",
    "Kids",
    "Necklace",
    "Oriana",
    "Ring",
    "Others",
]
TOP_PRODUCTS_LIMIT = 8
CROSS_SALE_TARGET_PCT = 10.0
MASKED_AMOUNT = "***,***"

CHART_COLORS = [
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444",
    "#8b5cf6", "#ec4899", "#06b6d4", "#6366f1",
]
CROSS_SALE_COLOR = "#10b981"
REGULAR_SALE_COLOR = "#e5e7eb"
