"""
Tests for staff identity, filtering, aggregation and status edits.
"""

import pytest

from sales_dashboard.loaders import normalise_records
from sales_dashboard.transforms import (
    FilterState,
    apply_filters,
    apply_status_overrides,
    build_staff_summary,
    get_display_code,
    get_staff_id,
    staff_ids,
    update_training_status,
)

CHITRA = "Chitra-South-Silver"


# ---------------------------------------------------------------------------
# Staff identity
# ---------------------------------------------------------------------------
class TestStaffId:
    """Code when valid, otherwise name-showroom-counter."""

    def test_valid_code(self):
        assert get_staff_id({"salesman_code": "1234", "salesman_name": "A"}) == "1234"

    def test_float_code(self):
        assert get_staff_id({"salesman_code": 1234.0}) == "1234"

    @pytest.mark.parametrize("code", [
        0, "0", "", None, "undefined", "null", "NULL", "None", "nan", "NaN", " Undefined ",
    ])
    def test_invalid_code_uses_composite(self, code):
        record = {"salesman_code": code, "salesman_name": "Asha", "showroom": "North", "counter": "Gold"}
        assert get_staff_id(record) == "Asha-North-Gold"

    def test_missing_parts_are_unknown(self):
        assert get_staff_id({"salesman_code": "0"}) == "Unknown-Unknown-Unknown"

    def test_display_code(self):
        assert get_display_code({"salesman_code": "0"}) == "N/A"
        assert get_display_code({"salesman_code": "None"}) == "N/A"
        assert get_display_code({"salesman_code": "nan"}) == "N/A"
        assert get_display_code({"salesman_code": "NULL"}) == "N/A"
        assert get_display_code({"salesman_code": 77}) == "77"


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------
class TestApplyFilters:
    def test_sentinels_keep_everything(self, raw_df):
        assert len(apply_filters(raw_df, FilterState())) == len(raw_df)

    def test_showroom(self, raw_df):
        filtered = apply_filters(raw_df, FilterState(showroom="North"))
        assert set(filtered["showroom"]) == {"North"}
        assert len(filtered) == 3

    def test_combined(self, raw_df):
        filtered = apply_filters(raw_df, FilterState(showroom="North", bill_month="Feb", counter="Gold"))
        assert len(filtered) == 1

    def test_no_match(self, raw_df):
        assert apply_filters(raw_df, FilterState(counter="Platinum")).empty


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------
class TestBuildStaffSummary:
    """Grouping, summation and status resolution."""

    def test_one_row_per_staff_in_first_seen_order(self, raw_df):
        summary = build_staff_summary(raw_df)
        assert summary["id"].tolist() == ["101", "102", CHITRA]

    def test_totals(self, raw_df):
        summary = build_staff_summary(raw_df).set_index("id")
        assert summary.loc["101", "total_sales"] == 1500
        assert summary.loc["101", "cross_sales"] == 100  # "abc" counts as zero
        assert summary.loc["102", "total_sales"] == 3000
        assert summary.loc[CHITRA, "cross_sales"] == 400

    def test_identity_fields(self, raw_df):
        summary = build_staff_summary(raw_df).set_index("id")
        assert summary.loc[CHITRA, "display_code"] == "N/A"
        assert summary.loc[CHITRA, "name"] == "Chitra"
        assert summary.loc["101", "counter"] == "Gold"

    def test_informative_status_is_not_overwritten(self, raw_df):
        summary = build_staff_summary(raw_df).set_index("id")
        assert summary.loc["101", "training_status"] == "Completed"
        assert summary.loc["102", "training_status"] == "Not Available"

    def test_later_status_wins(self, sample_rows):
        sample_rows[0]["Training Status"] = "Not Available"
        sample_rows[2]["Training Status"] = "In Progress"
        summary = build_staff_summary(normalise_records(sample_rows)).set_index("id")
        assert summary.loc["101", "training_status"] == "In Progress"

    def test_empty(self, raw_df):
        summary = build_staff_summary(raw_df.iloc[0:0])
        assert summary.empty
        assert "total_sales" in summary.columns


# ---------------------------------------------------------------------------
# Status edits
# ---------------------------------------------------------------------------
class TestTrainingStatus:
    def test_update_all_rows_of_staff(self, raw_df):
        updated = update_training_status(raw_df, "101", "Not Applicable")
        rows = updated[staff_ids(updated) == "101"]
        assert (rows["training_status"] == "Not Applicable").all()
        assert len(rows) == 2

    def test_update_leaves_input_untouched(self, raw_df):
        update_training_status(raw_df, CHITRA, "Completed")
        assert raw_df.iloc[3]["training_status"] == "In Progress"

    def test_update_composite_id(self, raw_df):
        updated = update_training_status(raw_df, CHITRA, "Completed")
        assert updated.iloc[3]["training_status"] == "Completed"
        assert updated.iloc[1]["training_status"] == "Not Available"

    def test_unknown_status_rejected(self, raw_df):
        with pytest.raises(ValueError):
            update_training_status(raw_df, "101", "Done")

    def test_overrides_applied(self, raw_df):
        updated = apply_status_overrides(raw_df, {"102": "Completed", "999": "Completed", "101": "bogus"})
        summary = build_staff_summary(updated).set_index("id")
        assert summary.loc["102", "training_status"] == "Completed"
        assert summary.loc["101", "training_status"] == "Completed"
