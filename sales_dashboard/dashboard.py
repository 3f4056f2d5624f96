"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end.
Each function returns plain dicts, DataFrames or Plotly figures suitable
for rendering cards, charts, the rankings table and the Excel export.
"""

import io
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd
import plotly.graph_objects as go

from .config import (
    CHART_COLORS,
    CROSS_SALE_COLOR,
    CROSS_SALE_TARGET_PCT,
    EXPORT_SHEET_NAME,
    MASKED_AMOUNT,
    REGULAR_SALE_COLOR,
)
from .kpis import add_cross_sale_pct, assign_ranks, get_dashboard_metrics
from .loaders.utils import normalise_text, to_number
from .transforms import FilterState, apply_filters, build_staff_summary

logger = logging.getLogger(__name__)

SORT_FIELDS = ("sale_rank", "cross_sale_rank", "total_sales", "cross_sales")
ASC = "asc"
DESC = "desc"
TROPHY = "\U0001F3C6"


def process_sales_data(
    df: pd.DataFrame,
    filters: FilterState | None = None,
) -> tuple[pd.DataFrame, dict]:
    """Single entry point the app calls on every filter change.

    filter -> group by staff -> sum -> cross-sale % -> ranks -> metrics.

    Returns
    -------
    (staff, metrics) where staff has columns
        id, display_code, name, counter, showroom, total_sales,
        cross_sales, training_status, cross_sale_pct, sale_rank,
        cross_sale_rank
    in first-appearance order, and metrics is get_dashboard_metrics().
    """
    filters = filters or FilterState()
    filtered = apply_filters(df, filters)

    staff = build_staff_summary(filtered)
    staff = add_cross_sale_pct(staff)
    staff = assign_ranks(staff)

    metrics = get_dashboard_metrics(filtered)
    return staff, metrics


def get_filter_options(df: pd.DataFrame) -> dict[str, list[str]]:
    """Distinct non-empty showrooms, months and counters for UI dropdowns.

    Values keep their first-appearance order.
    """
    options = {}
    for key, column in (("showrooms", "showroom"), ("months", "bill_month"), ("counters", "counter")):
        if df.empty or column not in df.columns:
            options[key] = []
            continue
        values = [normalise_text(v) for v in df[column]]
        options[key] = list(dict.fromkeys(v for v in values if v))
    return options


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------
def format_currency(value) -> str:
    """Whole-number amount with Indian digit grouping (1234567 -> "12,34,567")."""
    rounded = int(Decimal(to_number(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    sign = "-" if rounded < 0 else ""
    digits = str(abs(rounded))
    if len(digits) <= 3:
        return sign + digits

    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join(groups + [tail])


def format_pct(value: float) -> str:
    """12.5 -> "12.5%", 10.0 -> "10%"."""
    return f"{value:g}%"


def format_rank(rank: int) -> str:
    label = f"#{rank}"
    if rank == 1:
        label = f"{label} {TROPHY}"
    return label


# ---------------------------------------------------------------------------
# Rankings table
# ---------------------------------------------------------------------------
@dataclass
class SortState:
    """Sort selection for the rankings table."""

    field: str = "sale_rank"
    order: str = ASC

    def toggle(self, field: str) -> "SortState":
        """Same field flips the order; a new field starts ascending."""
        if field not in SORT_FIELDS:
            raise ValueError(f"Cannot sort by {field!r}; expected one of {SORT_FIELDS}")
        if field == self.field:
            return SortState(field, DESC if self.order == ASC else ASC)
        return SortState(field, ASC)


def sort_staff(staff: pd.DataFrame, field: str = "sale_rank", order: str = ASC) -> pd.DataFrame:
    """Stable sort of the staff summary by one of SORT_FIELDS."""
    if field not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {field!r}; expected one of {SORT_FIELDS}")
    return staff.sort_values(field, ascending=(order == ASC), kind="stable")


def get_staff_table(staff: pd.DataFrame, is_admin: bool) -> pd.DataFrame:
    """Rankings table as displayed, indexed by staff id.

    Admins see amounts; everyone else sees the matching ranks in their
    place. Row order is preserved from `staff`.
    """
    columns = [
        "Code", "Salesman Name", "Showroom", "Counter",
        "Total Sales" if is_admin else "Sale Rank",
        "Cross Sales" if is_admin else "Cross Rank",
        "Cross %", "Training Status",
    ]
    if staff.empty:
        return pd.DataFrame(columns=columns)

    if is_admin:
        first = staff["total_sales"].map(format_currency)
        second = staff["cross_sales"].map(format_currency)
    else:
        first = staff["sale_rank"].map(format_rank)
        second = staff["cross_sale_rank"].map(lambda r: f"#{r}")

    table = pd.DataFrame({
        "Code": staff["display_code"],
        "Salesman Name": staff["name"],
        "Showroom": staff["showroom"],
        "Counter": staff["counter"],
        columns[4]: first,
        columns[5]: second,
        "Cross %": staff["cross_sale_pct"].map(format_pct),
        "Training Status": staff["training_status"],
    })
    table.index = pd.Index(staff["id"], name="id")
    return table


# ---------------------------------------------------------------------------
# Cards & charts
# ---------------------------------------------------------------------------
def get_metric_cards(metrics: dict, is_admin: bool) -> list[dict]:
    """Headline cards; sales amounts are masked for restricted users."""
    return [
        {
            "label": "Total Sales (Consolidated)",
            "value": format_currency(metrics["total_sales"]) if is_admin else MASKED_AMOUNT,
            "caption": None if is_admin else "Admin access required",
            "color": "#3b82f6",
        },
        {
            "label": "Total Cross Sales",
            "value": format_currency(metrics["total_cross_sales"]) if is_admin else MASKED_AMOUNT,
            "caption": None,
            "color": "#10b981",
        },
        {
            "label": "Cross Sale %",
            "value": format_pct(metrics["cross_sale_pct"]),
            "caption": f"Target: {CROSS_SALE_TARGET_PCT:g}%+",
            "color": "#8b5cf6",
        },
    ]


def get_cross_sale_split(metrics: dict) -> list[dict]:
    """Donut series: cross-sale share against the remainder."""
    pct = metrics["cross_sale_pct"]
    return [
        {"name": "Cross Sales", "value": pct},
        {"name": "Regular Sales", "value": 100 - pct},
    ]


def build_top_products_chart(metrics: dict) -> go.Figure:
    """Bar chart of top product categories, y axis in thousands."""
    products = metrics["top_products"]
    names = [p["name"] for p in products]
    values = [p["value"] for p in products]

    fig = go.Figure(go.Bar(
        x=names,
        y=[v / 1000 for v in values],
        customdata=[format_currency(v) for v in values],
        marker_color=CHART_COLORS[0],
        hovertemplate="<b>%{x}</b><br>Sales: %{customdata}<extra></extra>",
    ))
    fig.update_layout(
        height=300,
        yaxis_ticksuffix="k",
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=20, r=0, t=0, b=0),
        bargap=0.4,
    )
    fig.update_yaxes(gridcolor="#e5e7eb", griddash="dash")
    return fig


def build_cross_sale_donut(metrics: dict) -> go.Figure:
    """Donut chart of the cross-sale rate with the percentage in the centre."""
    split = get_cross_sale_split(metrics)
    fig = go.Figure(go.Pie(
        labels=[s["name"] for s in split],
        values=[max(s["value"], 0) for s in split],
        hole=0.75,
        sort=False,
        direction="clockwise",
        marker_colors=[CROSS_SALE_COLOR, REGULAR_SALE_COLOR],
        textinfo="none",
    ))
    fig.update_layout(
        height=260,
        showlegend=True,
        legend=dict(orientation="h", y=-0.1),
        margin=dict(l=10, r=10, t=10, b=10),
        annotations=[dict(
            text=format_pct(metrics["cross_sale_pct"]),
            x=0.5, y=0.5, showarrow=False,
            font=dict(size=24),
        )],
    )
    return fig


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
def build_export_frame(staff: pd.DataFrame, is_admin: bool) -> pd.DataFrame:
    """Report rows in the current table order.

    Restricted exports carry ranks instead of amounts.
    """
    frame = pd.DataFrame({
        "Code": staff["display_code"],
        "Salesman Name": staff["name"],
        "Showroom": staff["showroom"],
        "Counter": staff["counter"],
    })
    if is_admin:
        frame["Total Sales"] = staff["total_sales"]
        frame["Cross Sales"] = staff["cross_sales"]
    else:
        frame["Sale Rank"] = staff["sale_rank"]
        frame["Cross Rank"] = staff["cross_sale_rank"]
    frame["Cross Sale %"] = staff["cross_sale_pct"].map(format_pct)
    frame["Training Status"] = staff["training_status"]
    return frame.reset_index(drop=True)


def export_report_xlsx(staff: pd.DataFrame, is_admin: bool) -> bytes:
    """Serialise the rankings report to an .xlsx workbook."""
    frame = build_export_frame(staff, is_admin)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=EXPORT_SHEET_NAME, index=False)
    logger.info("Exported %d staff rows (admin=%s)", len(frame), is_admin)
    return buffer.getvalue()
