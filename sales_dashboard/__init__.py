"""
Sales Performance Dashboard

Analytics backend that turns a per-transaction sales workbook into
ranked, cross-sale annotated staff summaries and chart-ready series.

To connect to Streamlit:
    Call dashboard.process_sales_data(df, filters) to get the staff
    summary and headline metrics, then dashboard.get_staff_table() /
    get_metric_cards() for the role-gated views.

To swap the storage backend:
    store.SalesStore reads and writes whole JSON documents; set
    SUPABASE_URL and SUPABASE_KEY to use Supabase, otherwise a local
    JSON file is used.

To add product categories:
    Append the column name to config.PRODUCT_CATEGORIES.
"""
