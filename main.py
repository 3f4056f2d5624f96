"""
Sales Performance — End-to-end analytics pipeline.

Runs the derivation pipeline from a sales workbook (or simulated rows)
to dashboard-ready outputs and prints smoke-test summaries.

Usage:
    python main.py                      # simulated data
    python main.py path/to/sales.xlsx   # real workbook
"""

import argparse
import logging

import pandas as pd

from sales_dashboard.dashboard import (
    format_currency,
    get_filter_options,
    get_metric_cards,
    get_staff_table,
    process_sales_data,
    sort_staff,
)
from sales_dashboard.loaders import load_sales_workbook, normalise_records
from sales_dashboard.simulator import generate_sales_rows
from sales_dashboard.transforms import FilterState

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""
    parser = argparse.ArgumentParser(description="Sales performance pipeline smoke test")
    parser.add_argument("workbook", nargs="?", help="Sales .xlsx file (simulated data if omitted)")
    args = parser.parse_args(argv)

    print("=" * 70)
    print("  SALES PERFORMANCE — Staff Rankings & Cross-Sale Dashboard")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load source data
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    if args.workbook:
        raw = load_sales_workbook(args.workbook)
    else:
        raw = normalise_records(generate_sales_rows())
    print(f"\nSales rows: {len(raw)} loaded")
    if not raw.empty:
        print(raw.head().to_string(index=False))

    options = get_filter_options(raw)
    print(f"\nShowrooms: {options['showrooms']}")
    print(f"Months:    {options['months']}")
    print(f"Counters:  {options['counters']}")

    # ------------------------------------------------------------------
    # 2. Aggregate & rank
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] STAFF SUMMARY (all filters)")
    print("-" * 40)

    staff, metrics = process_sales_data(raw, FilterState())
    print(f"\nStaff members: {len(staff)}")
    if not staff.empty:
        print(sort_staff(staff).to_string(index=False))

    print("\nHeadline metrics:")
    print(f"  Total sales:       {format_currency(metrics['total_sales'])}")
    print(f"  Total cross sales: {format_currency(metrics['total_cross_sales'])}")
    print(f"  Cross sale %:      {metrics['cross_sale_pct']}")
    print("  Top products:")
    for product in metrics["top_products"]:
        print(f"    {product['name']:12s} {format_currency(product['value']):>14s}")

    # ------------------------------------------------------------------
    # 3. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    for is_admin in (True, False):
        view = "Admin" if is_admin else "Restricted"
        print(f"\n{view} cards:")
        for card in get_metric_cards(metrics, is_admin):
            print(f"  {card['label']:28s} | {card['value']}")
        print(f"\n{view} table:")
        print(get_staff_table(sort_staff(staff), is_admin).head(10).to_string(index=False))

    if options["showrooms"]:
        showroom = options["showrooms"][0]
        filtered_staff, filtered_metrics = process_sales_data(raw, FilterState(showroom=showroom))
        print(f"\nShowroom '{showroom}': {len(filtered_staff)} staff, "
              f"cross sale {filtered_metrics['cross_sale_pct']}%")

    # ------------------------------------------------------------------
    # 4. Consistency checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] CONSISTENCY CHECKS")
    print("-" * 40)

    check1 = abs(staff["total_sales"].sum() - metrics["total_sales"]) < 1e-6 if not staff.empty else True
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] Staff totals add up to headline total")

    ranks = sorted(staff["sale_rank"].tolist())
    check2 = ranks == list(range(1, len(staff) + 1))
    print(f"  [{'PASS' if check2 else 'FAIL'}] Sale ranks are 1..{len(staff)}")

    check3 = staff["id"].is_unique if not staff.empty else True
    print(f"  [{'PASS' if check3 else 'FAIL'}] Staff ids are unique")

    uncoded = int((staff["display_code"] == "N/A").sum()) if not staff.empty else 0
    print(f"  [INFO] {uncoded} staff identified by name/showroom/counter")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    pd.set_option("display.width", 160)
    main()
