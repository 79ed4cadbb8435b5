"""
Streamlit UI for the PO Sentinel dashboard

This is a presentation layer that:
- Shows the filtered order table with urgency badges
- Renders the summary cards and charts
- Hosts the alert center, the assistant chat and the reminder prompt
- Handles spreadsheet import and export downloads

NO BUSINESS LOGIC IS IMPLEMENTED HERE.
All logic is in sentinel.services and sentinel.main.
"""

# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import streamlit as st
import asyncio
from datetime import date, datetime, timedelta
from typing import Any
import pandas as pd

from sentinel.main import SentinelDashboard
from sentinel.schemas.order import POPriority, POStatus
from sentinel.services import exporter, filtering, importer
from sentinel.services.filtering import ALL, DateField, FilterSpec
from sentinel.store import ConfirmationRequired
from sentinel.ui.ui_utils import (
    chart_rows,
    format_amount,
    format_orders_for_display,
    get_alert_emoji,
    style_order_table,
)
from sentinel.config import get_config


config = get_config()


# ============================================================================
# SESSION SETUP
# ============================================================================

class ToastNotifier:
    """Platform notification channel for the browser session."""

    def notify(self, title: str, body: str) -> None:
        st.toast(f"**{title}**\n\n{body}", icon="🚨")


def run_async(coro) -> Any:
    """Run a coroutine from the synchronous Streamlit script."""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_dashboard() -> SentinelDashboard:
    if "dashboard" not in st.session_state:
        st.session_state.dashboard = SentinelDashboard.open(notifier=ToastNotifier())
    return st.session_state.dashboard


# ============================================================================
# PAGE CONFIGURATION
# ============================================================================

st.set_page_config(
    page_title="PO Sentinel",
    page_icon="📦",
    layout="wide",
    initial_sidebar_state="expanded"
)

dashboard = get_dashboard()
today = date.today()

st.title("📦 PO Sentinel")
st.caption(f"Tier table: **{dashboard.tier_table.name}** · Today: {today.strftime('%d-%m-%Y')}")


# ============================================================================
# SIDEBAR - FILTERS & SETTINGS
# ============================================================================

augmented = dashboard.augmented(today)

with st.sidebar:
    st.header("🔎 Filters")

    search = st.text_input("Search vendor, PO or item code", value="")
    status = st.selectbox("Status", [ALL] + [s.value for s in POStatus])
    urgency = st.selectbox("Urgency", [ALL] + [label.value for label in dashboard.tier_table.labels])
    item_code = st.selectbox("Item code", [ALL] + filtering.item_code_options(augmented))

    date_field = st.selectbox(
        "Date field",
        [f.value for f in DateField],
        format_func=lambda v: v.replace("_", " ").title(),
    )
    use_range = st.checkbox("Filter by date range", value=False)
    start_date = end_date = None
    if use_range:
        start_date = st.date_input("From", value=today - timedelta(days=30))
        end_date = st.date_input("To", value=today)

    dashboard.state.filters = FilterSpec(
        search=search,
        status=status,
        urgency=urgency,
        item_code=item_code,
        date_field=date_field,
        start_date=start_date,
        end_date=end_date,
    )

    st.divider()
    st.header("⚙️ Settings")
    dashboard.state.notifications_enabled = st.checkbox(
        "Desktop notifications",
        value=dashboard.state.notifications_enabled,
        help="Show a popup when a new critical alert is raised",
    )

    with st.expander("System Configuration", expanded=False):
        st.info(f"""
        **LLM Provider**: {config.LLM_PROVIDER}
        **Model**: {config.LLM_MODEL}
        **Tier table**: {config.URGENCY_TIER_TABLE}
        **Reminder window**: {dashboard.scheduler.window.describe()}
        **Store**: {config.STORE_PATH}
        """)

    with st.expander("Danger zone", expanded=False):
        confirm_reset = st.checkbox("I understand this permanently deletes all records")
        if st.button("Reset system", type="secondary"):
            try:
                dashboard.reset(confirm=confirm_reset)
                st.success("All records were deleted")
                st.rerun()
            except ConfirmationRequired as e:
                st.warning(str(e))


# ============================================================================
# ALERTS & REMINDER
# ============================================================================

dashboard.refresh_alerts(today)


@st.fragment(run_every=dashboard.scheduler.poll_seconds)
def reminder_prompt():
    """Re-checks the reminder gate on the polling interval, even when the page sits idle."""
    fresh = run_async(dashboard.poll_reminder(datetime.now()))
    if fresh is not None:
        st.session_state.reminder_draft = fresh

    draft = st.session_state.get("reminder_draft")
    if draft is None or not dashboard.scheduler.prompt_open:
        return

    with st.container(border=True):
        st.subheader("✉️ Daily PO reminder")
        st.markdown(f"**To:** {draft.recipient}  \n**Subject:** {draft.subject}")
        st.text_area("Body", draft.body, height=200, disabled=True)
        cols = st.columns(3)
        with cols[0]:
            st.link_button("Open in mail client", draft.mailto)
        with cols[1]:
            if st.button("Mark as sent"):
                dashboard.confirm_reminder_sent(date.today())
                st.session_state.reminder_draft = None
                st.rerun(scope="fragment")
        with cols[2]:
            if st.button("Dismiss"):
                dashboard.dismiss_reminder(datetime.now())
                st.session_state.reminder_draft = None
                st.rerun(scope="fragment")


reminder_prompt()


# ============================================================================
# SUMMARY
# ============================================================================

summary = dashboard.summary(today)

col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Total Orders", summary.total_orders)
with col2:
    st.metric("Total Value", format_amount(summary.total_amount))
with col3:
    st.metric("Overdue", summary.overdue_count)
with col4:
    st.metric("Average Age", f"{summary.average_age:.0f} days")

tab_orders, tab_charts, tab_alerts, tab_chat, tab_data = st.tabs(
    ["📋 Orders", "📊 Charts", f"🔔 Alerts ({dashboard.state.unread_count})", "💬 Assistant", "📁 Import / Export"]
)


# ============================================================================
# ORDER TABLE
# ============================================================================

with tab_orders:
    rows = dashboard.view(today=today)
    st.caption(f"{len(rows)} of {len(augmented)} orders")
    if rows:
        st.dataframe(style_order_table(format_orders_for_display(rows)), width="stretch", hide_index=True)
    else:
        st.info("No purchase orders match the current filters")

    with st.expander("➕ Add purchase order", expanded=False):
        with st.form("add_order_form", clear_on_submit=True):
            c1, c2 = st.columns(2)
            with c1:
                po_number = st.text_input("PO Number")
                vendor = st.text_input("Vendor")
                item_code_input = st.text_input("Item Code")
                description = st.text_input("Description")
                quantity = st.number_input("Quantity", min_value=0.0, value=1.0)
                unit_price = st.number_input("Unit Price", min_value=0.0, value=0.0)
            with c2:
                creation_date = st.date_input("Order Date", value=today)
                approve_date = st.date_input("Approval Date", value=None, help="Leave empty while awaiting approval")
                delivery_date = st.date_input(
                    "Delivery Date",
                    value=None,
                    help=f"Defaults to {config.FORM_DEFAULT_LEAD_DAYS} days after the order date",
                )
                new_status = st.selectbox("Status", [s.value for s in POStatus], index=1)
                priority = st.selectbox("Priority", [p.value for p in POPriority], index=1)

            if st.form_submit_button("Save"):
                if not po_number or not vendor:
                    st.error("PO Number and Vendor are required")
                else:
                    dashboard.new_order(
                        po_number=po_number,
                        vendor=vendor,
                        creation_date=creation_date,
                        approve_date=approve_date,
                        delivery_date=delivery_date,
                        status=new_status,
                        priority=priority,
                        item_code=item_code_input,
                        item_description=description,
                        quantity=quantity,
                        unit_price=unit_price,
                        total_amount=quantity * unit_price,
                    )
                    st.success(f"Added {po_number}")
                    st.rerun()

    with st.expander("✏️ Edit purchase order", expanded=False):
        editable = {f"{o.po_number} · {o.vendor}": o.id for o in rows}
        if editable:
            edit_choice = st.selectbox("Order", list(editable.keys()), key="edit_choice")
            current = dashboard.store.get(editable[edit_choice])
            with st.form(f"edit_order_form_{current.id}"):
                c1, c2 = st.columns(2)
                with c1:
                    edit_po_number = st.text_input("PO Number", value=current.po_number)
                    edit_vendor = st.text_input("Vendor", value=current.vendor)
                    edit_item_code = st.text_input("Item Code", value=current.item_code or "")
                    edit_description = st.text_input("Description", value=current.item_description or "")
                    edit_quantity = st.number_input("Quantity", min_value=0.0, value=float(current.quantity or 0))
                    edit_unit_price = st.number_input("Unit Price", min_value=0.0, value=float(current.unit_price or 0))
                with c2:
                    edit_creation = st.date_input("Order Date", value=current.creation_date)
                    edit_approve = st.date_input("Approval Date", value=current.approve_date)
                    edit_delivery = st.date_input("Delivery Date", value=current.delivery_date)
                    statuses = [s.value for s in POStatus]
                    priorities = [p.value for p in POPriority]
                    edit_status = st.selectbox("Status", statuses, index=statuses.index(current.status.value))
                    edit_priority = st.selectbox("Priority", priorities, index=priorities.index(current.priority.value))

                if st.form_submit_button("Update"):
                    if not edit_po_number or not edit_vendor:
                        st.error("PO Number and Vendor are required")
                    else:
                        dashboard.edit_order(
                            current.id,
                            po_number=edit_po_number,
                            vendor=edit_vendor,
                            creation_date=edit_creation,
                            approve_date=edit_approve,
                            delivery_date=edit_delivery,
                            status=edit_status,
                            priority=edit_priority,
                            item_code=edit_item_code,
                            item_description=edit_description,
                            quantity=edit_quantity,
                            unit_price=edit_unit_price,
                            total_amount=edit_quantity * edit_unit_price,
                        )
                        st.success(f"Updated {edit_po_number}")
                        st.rerun()

    with st.expander("🗑️ Delete purchase order", expanded=False):
        options = {f"{o.po_number} · {o.vendor}": o.id for o in rows}
        if options:
            choice = st.selectbox("Order", list(options.keys()))
            confirm_delete = st.checkbox("Are you sure you want to delete this purchase order?")
            if st.button("Delete"):
                try:
                    dashboard.delete_order(options[choice], confirm=confirm_delete)
                    st.rerun()
                except ConfirmationRequired as e:
                    st.warning(str(e))


# ============================================================================
# CHARTS
# ============================================================================

with tab_charts:
    c1, c2 = st.columns(2)
    with c1:
        st.subheader("By urgency")
        if summary.by_tier:
            st.bar_chart(pd.DataFrame(chart_rows(summary.by_tier, "Tier")), x="Tier", y="Orders")
    with c2:
        st.subheader("By status")
        if summary.by_status:
            st.bar_chart(pd.DataFrame(chart_rows(summary.by_status, "Status")), x="Status", y="Orders")

    st.subheader("Oldest active orders")
    if summary.oldest_active:
        st.dataframe(
            style_order_table(format_orders_for_display(summary.oldest_active)),
            width="stretch",
            hide_index=True,
        )


# ============================================================================
# ALERT CENTER
# ============================================================================

with tab_alerts:
    if not dashboard.state.alerts:
        st.info("No alerts")
    else:
        if st.button("Mark all as read"):
            dashboard.state.mark_all_read()
            st.rerun()
        for alert in dashboard.state.alerts:
            marker = "" if alert.is_read else " · **new**"
            st.markdown(f"{get_alert_emoji(alert.type)} **{alert.title}** ({alert.po_number}){marker}")
            st.caption(f"{alert.message} · {alert.timestamp.strftime('%d-%m-%Y %H:%M')}")
            if not alert.is_read and st.button("Mark read", key=f"read-{alert.id}"):
                dashboard.state.mark_alert_read(alert.id)
                st.rerun()


# ============================================================================
# ASSISTANT
# ============================================================================

with tab_chat:
    for message in dashboard.state.chat_history:
        with st.chat_message("assistant" if message.role == "model" else "user"):
            st.markdown(message.content)

    question = st.chat_input("Ask about your purchase orders", disabled=dashboard.state.assistant_busy)
    if question:
        with st.spinner("Thinking..."):
            run_async(dashboard.ask(question))
        st.rerun()


# ============================================================================
# IMPORT / EXPORT
# ============================================================================

with tab_data:
    st.subheader("📤 Import")
    uploaded_file = st.file_uploader(
        "Excel or CSV file",
        type=["xlsx", "xlsm", "csv"],
        help="Headers are matched by name, e.g. PO Number, Vendor Name, PO Date",
    )
    if uploaded_file is not None and st.button("Import"):
        try:
            imported = dashboard.import_file(uploaded_file, today)
            st.success(f"Successfully imported {len(imported)} records.")
        except importer.ImportFormatError as e:
            st.error(f"Failed to parse the file. Please check column headers. ({e})")

    st.subheader("📥 Export current view")
    export_rows = dashboard.view(today=today)
    if export_rows:
        st.download_button(
            "Download Excel",
            data=exporter.to_xlsx_bytes(export_rows),
            file_name=exporter.export_filename(today),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        st.download_button(
            "Download CSV",
            data=exporter.to_csv(export_rows),
            file_name=exporter.export_filename(today).replace(".xlsx", ".csv"),
            mime="text/csv",
        )
    else:
        st.info("No data available to export with current filters.")
