from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import streamlit as st

from itsm_dashboard.aggregation import count_by, sla_compliance, top_n
from itsm_dashboard.config import DashboardConfig, configure_logging
from itsm_dashboard.constants import INCIDENT, REQUEST
from itsm_dashboard.filters import RecordFilter, apply_filters, search_records
from itsm_dashboard.history import build_monthly_history, location_variation, monthly_variation
from itsm_dashboard.insights import build_dashboard_report
from itsm_dashboard.loaders import read_records_bytes
from itsm_dashboard.normalization import original_location_name
from itsm_dashboard.pipeline import DashboardSession, run_record_pipeline
from itsm_dashboard.shifts import shift_history
from itsm_dashboard.stats import build_dashboard_cards
from itsm_dashboard.visualization import count_bar_figure, sla_figure, trend_figure
from itsm_dashboard.workspace import SessionContext, session_summary, suggest_filter_values


st.set_page_config(page_title="ITSM Dashboard", page_icon="📊", layout="wide")

config = DashboardConfig.from_env()
configure_logging(config.log_level)


@st.cache_data(show_spinner=False)
def _load_uploaded_file(file_name: str, payload: bytes) -> pd.DataFrame:
    return read_records_bytes(file_name, payload)


@st.cache_data(show_spinner=False)
def _run_pipeline_cached(df: pd.DataFrame, kind: str) -> pd.DataFrame:
    return run_record_pipeline(
        df,
        kind,
        sla_threshold_hours=config.sla_overrides(kind),
        location_aliases=config.location_aliases,
        shifts=config.shifts,
    )


if "context" not in st.session_state:
    st.session_state["context"] = SessionContext()
context: SessionContext = st.session_state["context"]

if not context.authenticated:
    st.title("ITSM Dashboard")
    user = st.text_input("User")
    if st.button("Sign in"):
        try:
            st.session_state["context"] = context.login(user)
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.rerun()
    st.stop()

st.sidebar.write(f"Signed in as **{context.user}**")
if st.sidebar.button("Sign out"):
    st.session_state["context"] = context.logout()
    st.rerun()

st.title("ITSM Incident & Request Dashboard")

upload_left, upload_right = st.columns(2)
uploads = {
    INCIDENT: upload_left.file_uploader("Incident export", type=["xlsx", "xls", "xlsb", "csv"], key="incident_upload"),
    REQUEST: upload_right.file_uploader("Request export", type=["xlsx", "xls", "xlsb", "csv"], key="request_upload"),
}
for kind, uploaded in uploads.items():
    if uploaded is None:
        continue
    already_loaded = any(
        entry.file_name == uploaded.name and entry.kind == kind for entry in context.upload_history
    )
    if already_loaded:
        continue
    try:
        raw = _load_uploaded_file(uploaded.name, uploaded.getvalue())
    except ValueError as exc:
        st.error(f"Could not read {uploaded.name}: {exc}")
        continue
    context = context.with_records(kind, _run_pipeline_cached(raw, kind), uploaded.name)
    st.session_state["context"] = context

if not context.records:
    st.info("Upload an incident or request export to start.")
    st.stop()

st.sidebar.header("Filters")
today = date.today()
period = st.sidebar.date_input("Period", value=(date(today.year, 1, 1), today))
start_date, end_date = (period[0], period[-1]) if isinstance(period, (list, tuple)) else (period, period)
search_text = st.sidebar.text_input("Search")

kind_labels = {INCIDENT: "Incidents", REQUEST: "Requests"}
available = [kind for kind in (INCIDENT, REQUEST) if context.records_for(kind) is not None]
kind = st.sidebar.radio("Records", available, format_func=kind_labels.get)
enriched = context.records_for(kind)

options = suggest_filter_values(enriched)


def _select(label: str, column: str) -> str | None:
    choice = st.sidebar.selectbox(label, ["All", *options.get(column, [])])
    return None if choice == "All" else choice


record_filter = RecordFilter(
    start_date=start_date,
    end_date=end_date,
    search_text=search_text,
    category=_select("Category", "category_derived"),
    status=_select("Status", "status_derived"),
    priority=_select("Priority", "priority_derived"),
    location=_select("Location", "location_derived"),
)
filtered = apply_filters(enriched, record_filter)
session = DashboardSession(kind=kind, enriched_df=enriched)

cards = build_dashboard_cards(filtered, kind, top=config.top_n)
report = build_dashboard_report(filtered, kind)
metrics = report["metrics"]

col1, col2, col3, col4 = st.columns(4)
col1.metric(f"Total {kind_labels[kind]}", f"{metrics['total']}")
col2.metric("Active", f"{metrics['active']}")
col3.metric("High Priority Active", f"{metrics['high_priority_active']}")
col4.metric("SLA Compliance", f"{metrics['sla_compliance_pct']}%")

overview_tab, sla_tab, history_tab, data_tab = st.tabs(["Overview", "SLA", "History", "Data Explorer"])

with overview_tab:
    left, right = st.columns(2)

    with left:
        fig = count_bar_figure(cards["stats"]["total_by_priority"], "By Priority", label="priority")
        if fig is not None:
            st.plotly_chart(fig, use_container_width=True)

        fig = count_bar_figure(cards["stats"]["total_by_status"], "By Status", label="status")
        if fig is not None:
            st.plotly_chart(fig, use_container_width=True)

    with right:
        trend = session.trend(start_date, end_date, record_filter=record_filter)
        fig = trend_figure(trend, "Volume Trend")
        if fig is not None:
            st.plotly_chart(fig, use_container_width=True)

        st.subheader("Top Locations")
        top_locations = cards["top_locations"].copy()
        top_locations["group"] = top_locations["location_derived"].map(
            lambda label: original_location_name(label, config.location_aliases)
        )
        st.dataframe(top_locations, use_container_width=True)

    st.subheader("Top Categories")
    st.dataframe(cards["top_categories"], use_container_width=True)

    st.subheader("Recommendations")
    for recommendation in report["recommendations"]:
        st.write(f"- {recommendation}")

    st.subheader("Priority Alerts")
    st.dataframe(report["priority_alerts"], use_container_width=True)

with sla_tab:
    sla = sla_compliance(filtered, kind)
    fig = sla_figure(sla, "SLA Compliance by Priority")
    if fig is not None:
        st.plotly_chart(fig, use_container_width=True)
    st.dataframe(sla, use_container_width=True)

    st.subheader("Outside SLA")
    st.dataframe(report["out_of_sla"], use_container_width=True)

    st.subheader("Shifts")
    st.dataframe(shift_history(filtered, kind, config.shifts), use_container_width=True)

with history_tab:
    incidents = context.records_for(INCIDENT)
    requests = context.records_for(REQUEST)
    history_start = datetime(start_date.year, start_date.month, 1)

    st.subheader("Month over Month")
    st.dataframe(monthly_variation(incidents, requests, history_start, end_date), use_container_width=True)

    st.subheader("Locations vs Previous Period")
    st.dataframe(location_variation(incidents, requests, start_date, end_date), use_container_width=True)

    with st.expander("Monthly detail"):
        st.json(build_monthly_history(incidents, requests, history_start, end_date))

with data_tab:
    quick = st.text_input("Quick search by number or description")
    if quick:
        st.dataframe(search_records(enriched, quick), use_container_width=True)

    st.subheader("Analysts")
    st.write(count_by(filtered, "analyst_derived"))
    st.dataframe(top_n(filtered, "requester_derived", n=config.top_n), use_container_width=True)

    st.subheader("Filtered Records")
    st.dataframe(filtered, use_container_width=True)

    st.download_button(
        "Download Filtered CSV",
        data=filtered.to_csv(index=False).encode("utf-8"),
        file_name=f"{kind}_records.csv",
        mime="text/csv",
    )

    with st.expander("Session"):
        st.json(session_summary(context))
