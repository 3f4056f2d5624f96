"""
Sales Performance — Interactive Dashboard

Run with:  streamlit run app.py
"""

import logging
from datetime import datetime

import pandas as pd
import streamlit as st

from sales_dashboard.auth import INVALID_CREDENTIALS, verify_admin
from sales_dashboard.config import (
    ALL_COUNTERS,
    ALL_MONTHS,
    ALL_SHOWROOMS,
    APP_NAME,
    EXPORT_FILE_NAME,
    TRAINING_STATUS_OPTIONS,
)
from sales_dashboard.dashboard import (
    SortState,
    build_cross_sale_donut,
    build_top_products_chart,
    export_report_xlsx,
    get_filter_options,
    get_metric_cards,
    get_staff_table,
    process_sales_data,
    sort_staff,
)
from sales_dashboard.loaders import load_sales_workbook
from sales_dashboard.store import SalesStore, frame_from_records
from sales_dashboard.transforms import (
    FilterState,
    apply_status_overrides,
    update_training_status,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title=f"{APP_NAME} Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ---------------------------------------------------------------------------
# Store & session state
# ---------------------------------------------------------------------------
@st.cache_resource(show_spinner=False)
def get_store() -> SalesStore:
    return SalesStore.from_config()


store = get_store()

if "raw_data" not in st.session_state:
    with st.spinner("Loading..."):
        try:
            st.session_state.raw_data = store.get_data()
        except Exception:
            logger.exception("Failed to load data")
            st.error("Failed to load saved sales data.")
            st.session_state.raw_data = frame_from_records(None)
st.session_state.setdefault("is_admin", False)
st.session_state.setdefault("sort_state", SortState())
st.session_state.setdefault("uploaded_file_id", None)

raw_data: pd.DataFrame = st.session_state.raw_data
is_admin: bool = st.session_state.is_admin


# ---------------------------------------------------------------------------
# Sidebar: admin access & actions
# ---------------------------------------------------------------------------
st.sidebar.title(APP_NAME)
st.sidebar.caption(f"Last updated: {datetime.now().strftime('%H:%M:%S')}")
st.sidebar.divider()

if is_admin:
    if st.sidebar.button("🔓 Disable Admin View", use_container_width=True):
        st.session_state.is_admin = False
        st.rerun()
else:
    with st.sidebar.expander("🔒 Admin View"):
        with st.form("admin_login", clear_on_submit=True):
            username = st.text_input("Username", placeholder="Enter username")
            password = st.text_input("Password", type="password", placeholder="Enter password")
            submitted = st.form_submit_button("Access Dashboard Data", use_container_width=True)
        if submitted:
            if verify_admin(username, password):
                st.session_state.is_admin = True
                st.rerun()
            else:
                st.error(INVALID_CREDENTIALS)

st.sidebar.divider()
st.sidebar.subheader("Actions")

if is_admin:
    st.sidebar.caption(
        "Uploading a new file will overwrite the current sales data. "
        "Training statuses for matching staff IDs will be preserved if possible."
    )
    uploaded = st.sidebar.file_uploader("Upload New Excel", type=["xlsx"])
    if uploaded is not None and uploaded.file_id != st.session_state.uploaded_file_id:
        try:
            new_data = load_sales_workbook(uploaded)
            new_data = apply_status_overrides(new_data, store.get_status_overrides())
            store.save_data(new_data)
        except Exception:
            logger.exception("Upload failed")
            st.sidebar.error("Could not read or save the uploaded workbook.")
        else:
            st.session_state.raw_data = new_data
            st.session_state.uploaded_file_id = uploaded.file_id
            st.rerun()
else:
    st.sidebar.caption("_Admin access required for actions_")


# ---------------------------------------------------------------------------
# Helper: metric card
# ---------------------------------------------------------------------------
def metric_card(label: str, value: str, color: str, caption: str | None = None):
    caption_html = (
        f'<div style="font-size: 12px; color: #888; margin-top: 6px;">{caption}</div>'
        if caption else ""
    )
    st.markdown(
        f"""
        <div style="background: #fff; border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;
                    box-shadow: 0 1px 2px rgba(0,0,0,0.05);">
            <div style="font-size: 12px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value}</div>
            {caption_html}
        </div>
        """,
        unsafe_allow_html=True,
    )


# ===========================================================================
# Main view
# ===========================================================================
st.title(APP_NAME)

# Filters
options = get_filter_options(raw_data)
col1, col2, col3 = st.columns(3)
with col1:
    showroom = st.selectbox("Showroom", [ALL_SHOWROOMS] + options["showrooms"])
with col2:
    bill_month = st.selectbox("Bill Month", [ALL_MONTHS] + options["months"])
with col3:
    counter = st.selectbox("Counter", [ALL_COUNTERS] + options["counters"])

filters = FilterState(showroom=showroom, bill_month=bill_month, counter=counter)

if is_admin and raw_data.empty:
    st.info(
        "**Setup Required** — The dashboard is currently empty. "
        "Use **Upload New Excel** in the sidebar to load sales data."
    )

staff, metrics = process_sales_data(raw_data, filters)

# Key metric cards
cols = st.columns(3)
for col, card in zip(cols, get_metric_cards(metrics, is_admin)):
    with col:
        metric_card(card["label"], card["value"], card["color"], card["caption"])

st.divider()

# Charts
chart_col, donut_col = st.columns([2, 1])
with chart_col:
    st.subheader("Top Products / Counters")
    st.plotly_chart(build_top_products_chart(metrics), use_container_width=True)
with donut_col:
    st.subheader("Cross Sale Rate")
    st.plotly_chart(build_cross_sale_donut(metrics), use_container_width=True)

st.divider()

# ---------------------------------------------------------------------------
# Staff rankings
# ---------------------------------------------------------------------------
sort_state: SortState = st.session_state.sort_state

head_col, b1, b2, b3 = st.columns([4, 1, 1, 1])
with head_col:
    st.subheader("Salesman Rankings")
with b1:
    if st.button("Sort Sale Rank ↕", type="primary" if sort_state.field == "sale_rank" else "secondary"):
        st.session_state.sort_state = sort_state.toggle("sale_rank")
        st.rerun()
with b2:
    if st.button("Sort Cross Rank ↕", type="primary" if sort_state.field == "cross_sale_rank" else "secondary"):
        st.session_state.sort_state = sort_state.toggle("cross_sale_rank")
        st.rerun()

sorted_staff = sort_staff(staff, sort_state.field, sort_state.order)

with b3:
    st.download_button(
        "⬇ Export",
        data=export_report_xlsx(sorted_staff, is_admin),
        file_name=EXPORT_FILE_NAME,
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        disabled=sorted_staff.empty,
    )

if sorted_staff.empty:
    st.caption("No staff data matches the selected filters.")
else:
    table = get_staff_table(sorted_staff, is_admin)
    edited = st.data_editor(
        table,
        hide_index=True,
        use_container_width=True,
        disabled=[c for c in table.columns if c != "Training Status"],
        column_config={
            "Training Status": st.column_config.SelectboxColumn(
                "Training Status",
                options=TRAINING_STATUS_OPTIONS,
                required=True,
            ),
        },
        key=f"staff_table_{sort_state.field}_{sort_state.order}_{showroom}_{bill_month}_{counter}_{is_admin}",
    )

    changed = edited["Training Status"] != table["Training Status"]
    if changed.any():
        updated = raw_data
        edits = edited.loc[changed, "Training Status"].to_dict()
        try:
            for staff_id, status in edits.items():
                updated = update_training_status(updated, staff_id, status)
            store.update_training_status(updated, edits)
        except Exception:
            logger.exception("Training status update failed")
            st.error("Could not save the training status change.")
        else:
            st.session_state.raw_data = updated
            st.rerun()
