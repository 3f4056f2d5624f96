"""
Shared fixtures: a small hand-checked set of sales rows.

Expected aggregates (no filters):
    101 Asha              total 1500  cross 100  -> 6.7 %
    102 Bala              total 3000  cross 150  -> 5.0 %
    Chitra-South-Silver   total 2000  cross 400  -> 20.0 %
"""

import pytest

from sales_dashboard.loaders import normalise_records


@pytest.fixture
def sample_rows():
    return [
        {
            "Salesman Code": 101, "Salesman Name": "Asha", "Show Room": "North",
            "Bill Month": "Jan", "Counter": "Gold", "Total Sales": 1000,
            "Cross Sales": 100, "Training Status": "Completed",
            "Bangle": 300, "Chain": 700,
        },
        {
            "Salesman Code": 102, "Salesman Name": "Bala", "Show Room": "North",
            "Bill Month": "Jan", "Counter": "Diamond", "Total Sales": 3000,
            "Cross Sales": 150, "Bangle": 1000, "Ring": 2000,
        },
        {
            "Salesman Code": 101, "Salesman Name": "Asha", "Show Room": "North",
            "Bill Month": "Feb", "Counter": "Gold", "Total Sales": "500",
            "Cross Sales": "abc", "Training Status": "Not Available", "Chain": 500,
        },
        {
            "Salesman Code": 0, "Salesman Name": "Chitra", "Show Room": "South",
            "Bill Month": "Feb", "Counter": "Silver", "Total Sales": 2000,
            "Cross Sales": 400, "Training Status": "In Progress", "Necklace Qty": 2000,
        },
    ]


@pytest.fixture
def raw_df(sample_rows):
    return normalise_records(sample_rows)
