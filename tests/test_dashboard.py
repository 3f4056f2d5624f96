"""
Tests for the dashboard entry point and role-gated outputs.
"""

import io

import openpyxl
import plotly.graph_objects as go
import pytest

from sales_dashboard.config import EXPORT_SHEET_NAME, MASKED_AMOUNT
from sales_dashboard.dashboard import (
    SortState,
    build_cross_sale_donut,
    build_export_frame,
    build_top_products_chart,
    export_report_xlsx,
    format_currency,
    format_pct,
    get_cross_sale_split,
    get_filter_options,
    get_metric_cards,
    get_staff_table,
    process_sales_data,
    sort_staff,
)
from sales_dashboard.transforms import FilterState

CHITRA = "Chitra-South-Silver"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def processed(raw_df):
    return process_sales_data(raw_df, FilterState())


@pytest.fixture
def staff(processed):
    return processed[0]


@pytest.fixture
def metrics(processed):
    return processed[1]


# ---------------------------------------------------------------------------
# Derivation entry point
# ---------------------------------------------------------------------------
class TestProcessSalesData:
    def test_columns(self, staff):
        assert {
            "id", "display_code", "name", "counter", "showroom", "total_sales",
            "cross_sales", "cross_sale_pct", "training_status", "sale_rank",
            "cross_sale_rank",
        } <= set(staff.columns)

    def test_ranks_and_pct(self, staff):
        by_id = staff.set_index("id")
        assert by_id["sale_rank"].to_dict() == {"101": 3, "102": 1, CHITRA: 2}
        assert by_id["cross_sale_rank"].to_dict() == {"101": 3, "102": 2, CHITRA: 1}
        assert by_id["cross_sale_pct"].to_dict() == {"101": 6.7, "102": 5.0, CHITRA: 20.0}

    def test_filters_rerank(self, raw_df):
        staff, metrics = process_sales_data(raw_df, FilterState(showroom="North"))
        by_id = staff.set_index("id")
        assert by_id["sale_rank"].to_dict() == {"101": 2, "102": 1}
        assert metrics["total_sales"] == 4500.0

    def test_month_filter_uses_rows_of_that_month_only(self, raw_df):
        staff, _ = process_sales_data(raw_df, FilterState(bill_month="Feb"))
        by_id = staff.set_index("id")
        assert by_id.loc["101", "total_sales"] == 500.0
        assert by_id.loc["101", "training_status"] == "Not Available"

    def test_default_filters(self, raw_df):
        staff, _ = process_sales_data(raw_df)
        assert len(staff) == 3

    def test_empty_input(self, raw_df):
        staff, metrics = process_sales_data(raw_df.iloc[0:0])
        assert staff.empty
        assert metrics["total_sales"] == 0.0


class TestFilterOptions:
    def test_unique_in_first_seen_order(self, raw_df):
        options = get_filter_options(raw_df)
        assert options == {
            "showrooms": ["North", "South"],
            "months": ["Jan", "Feb"],
            "counters": ["Gold", "Diamond", "Silver"],
        }

    def test_empty(self, raw_df):
        assert get_filter_options(raw_df.iloc[0:0]) == {"showrooms": [], "months": [], "counters": []}


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------
class TestFormatCurrency:
    @pytest.mark.parametrize("value, expected", [
        (0, "0"),
        (999, "999"),
        (1000, "1,000"),
        (100000, "1,00,000"),
        (1234567, "12,34,567"),
        (123456789, "12,34,56,789"),
        (1234.5, "1,235"),
        (-1234567, "-12,34,567"),
        ("abc", "0"),
    ])
    def test_indian_grouping(self, value, expected):
        assert format_currency(value) == expected

    def test_pct(self):
        assert format_pct(12.5) == "12.5%"
        assert format_pct(10.0) == "10%"


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------
class TestSorting:
    def test_default_state(self):
        state = SortState()
        assert (state.field, state.order) == ("sale_rank", "asc")

    def test_toggle_same_field_flips(self):
        state = SortState().toggle("sale_rank")
        assert state.order == "desc"
        assert state.toggle("sale_rank").order == "asc"

    def test_toggle_new_field_resets(self):
        state = SortState("sale_rank", "desc").toggle("cross_sale_rank")
        assert (state.field, state.order) == ("cross_sale_rank", "asc")

    def test_toggle_unknown_field(self):
        with pytest.raises(ValueError):
            SortState().toggle("name")

    def test_sort_staff(self, staff):
        assert sort_staff(staff)["id"].tolist() == ["102", CHITRA, "101"]
        assert sort_staff(staff, "cross_sales", "desc")["id"].tolist() == [CHITRA, "102", "101"]


# ---------------------------------------------------------------------------
# Role-gated views
# ---------------------------------------------------------------------------
class TestStaffTable:
    def test_admin_sees_amounts(self, staff):
        table = get_staff_table(sort_staff(staff), is_admin=True)
        assert list(table.columns) == [
            "Code", "Salesman Name", "Showroom", "Counter",
            "Total Sales", "Cross Sales", "Cross %", "Training Status",
        ]
        assert table.loc["102", "Total Sales"] == "3,000"
        assert table.loc["101", "Cross %"] == "6.7%"

    def test_restricted_sees_ranks(self, staff):
        table = get_staff_table(sort_staff(staff), is_admin=False)
        assert "Total Sales" not in table.columns
        assert table.loc["102", "Sale Rank"].startswith("#1")
        assert table.loc["101", "Sale Rank"] == "#3"
        assert table.loc[CHITRA, "Cross Rank"] == "#1"

    def test_indexed_by_staff_id(self, staff):
        table = get_staff_table(staff, is_admin=False)
        assert table.index.tolist() == staff["id"].tolist()
        assert table.loc[CHITRA, "Code"] == "N/A"

    def test_empty(self, staff):
        assert get_staff_table(staff.iloc[0:0], is_admin=True).empty


class TestMetricCards:
    def test_admin(self, metrics):
        cards = get_metric_cards(metrics, is_admin=True)
        assert [c["value"] for c in cards] == ["6,500", "650", "10%"]

    def test_restricted_masks_amounts(self, metrics):
        cards = get_metric_cards(metrics, is_admin=False)
        assert cards[0]["value"] == MASKED_AMOUNT
        assert cards[1]["value"] == MASKED_AMOUNT
        assert cards[2]["value"] == "10%"
        assert cards[2]["caption"] == "Target: 10%+"


class TestCharts:
    def test_cross_sale_split(self, metrics):
        assert get_cross_sale_split(metrics) == [
            {"name": "Cross Sales", "value": 10.0},
            {"name": "Regular Sales", "value": 90.0},
        ]

    def test_top_products_chart_in_thousands(self, metrics):
        fig = build_top_products_chart(metrics)
        assert isinstance(fig, go.Figure)
        assert list(fig.data[0].y[:2]) == [2.0, 2.0]

    def test_donut(self, metrics):
        fig = build_cross_sale_donut(metrics)
        assert list(fig.data[0].values) == [10.0, 90.0]


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
class TestExport:
    def test_admin_frame(self, staff):
        frame = build_export_frame(sort_staff(staff), is_admin=True)
        assert list(frame.columns) == [
            "Code", "Salesman Name", "Showroom", "Counter",
            "Total Sales", "Cross Sales", "Cross Sale %", "Training Status",
        ]
        assert frame.iloc[0]["Total Sales"] == 3000.0
        assert frame.iloc[0]["Cross Sale %"] == "5%"

    def test_restricted_frame_has_no_amounts(self, staff):
        frame = build_export_frame(staff, is_admin=False)
        assert "Total Sales" not in frame.columns
        assert frame["Sale Rank"].tolist() == [3, 1, 2]

    def test_workbook(self, staff):
        content = export_report_xlsx(sort_staff(staff), is_admin=True)
        wb = openpyxl.load_workbook(io.BytesIO(content))
        assert wb.sheetnames == [EXPORT_SHEET_NAME]
        rows = list(wb[EXPORT_SHEET_NAME].iter_rows(values_only=True))
        assert rows[0][0] == "Code"
        assert rows[1][1] == "Bala"
        assert len(rows) == 4
