import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from dashboard.charts import monthly_category_chart, new_vs_returning_chart, sparkline_chart
from dashboard.config import Settings
from dashboard.data import load_sample_rows
from dashboard.errors import DashboardError, InputParseError
from dashboard.ga4 import fetch_demo_report
from dashboard.overview import compute_overview
from dashboard.parsing import parse_text
from dashboard.rows import Row, rows_to_frame
from dashboard.windows import RANGE_OPTIONS

alt.data_transformers.disable_max_rows()
logger = logging.getLogger(__name__)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str, export_rows: Optional[List[Row]] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_rows:
            st.download_button(
                "Export CSV",
                data=rows_to_frame(export_rows).to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )


def format_number(value: float) -> str:
    return f"{value:,.0f}" if value >= 100 else f"{value:,.1f}"


def format_delta(kpi: Dict[str, Any], range_days: int) -> str:
    delta = kpi["delta"]
    sign = "+" if delta["direction"] == "up" else ""
    return f"{sign}{delta['percent']:.1f}% vs prior {range_days}d"


# ---------- Pages ----------
def render_kpi_tiles(payload: Dict[str, Any]):
    kpis = payload["kpis"]
    range_days = payload["range_days"]
    cols = st.columns(4)
    cols[0].metric("Visits", format_number(kpis["sessions"]["value"]), delta=format_delta(kpis["sessions"], range_days))
    cols[1].metric(
        "Pages / Visit",
        f"{kpis['pages_per_visit']['value']:.2f}",
        delta=format_delta(kpis["pages_per_visit"], range_days),
        help="Pageviews divided by sessions for the selected range.",
    )
    cols[2].metric("Unique Visitors", format_number(kpis["users"]["value"]), delta=format_delta(kpis["users"], range_days))
    cols[3].metric(
        "Conversion Rate",
        f"{kpis['conversion_rate']['value']:.1f}%",
        delta=format_delta(kpis["conversion_rate"], range_days),
        help="Conversions divided by sessions.",
    )


def render_dashboard(rows: List[Row], range_days: int, source_label: str):
    render_page_header("Traffic Overview", f"Home / {source_label}", export_rows=rows, export_name="traffic.csv")
    if not rows:
        st.info("No analytics data available for the selected range.")
        return

    payload = compute_overview(rows, range_days)
    window = payload["window"]
    st.caption(
        f"Current window {window['current']['start']} to {window['current']['end']} ({window['current']['days']} days); "
        f"comparison window {window['previous']['days']} days."
    )
    with card("KPI Tiles"):
        render_kpi_tiles(payload)

    series = payload["series"]
    spark_cols = st.columns(3)
    with spark_cols[0]:
        with card("Visits"):
            st.altair_chart(sparkline_chart(series["sparkline"], "sessions", color="#22c55e", title="Visits"), use_container_width=True)
    with spark_cols[1]:
        with card("Pages / Visit"):
            st.altair_chart(
                sparkline_chart(series["sparkline"], "pages_per_visit", color="#0ea5e9", title="Pages / Visit", area=False),
                use_container_width=True,
            )
    with spark_cols[2]:
        with card("Unique Visitors"):
            st.altair_chart(sparkline_chart(series["sparkline"], "users", color="#8b5cf6", title="Visitors"), use_container_width=True)

    bottom = st.columns([3, 2])
    with bottom[0]:
        with card("Visits by Medium (monthly)"):
            if series["monthly"]:
                st.altair_chart(monthly_category_chart(series["monthly"]), use_container_width=True)
            else:
                st.info("No dated rows in the selected range.")
    with bottom[1]:
        with card("New vs Returning"):
            st.altair_chart(new_vs_returning_chart(series["new_vs_returning"]), use_container_width=True)
            st.dataframe(
                pd.DataFrame(series["new_vs_returning"])[["name", "value", "percent"]],
                hide_index=True,
                use_container_width=True,
            )


def render_ga4_demo(settings: Settings):
    render_page_header("GA4 Demo", "Home / GA4 Demo")
    try:
        rows = fetch_demo_report(settings)
    except DashboardError as exc:
        st.error(f"Error: {exc}")
        return
    if not rows:
        st.info("No rows returned for the last 7 days.")
        return
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)


def render_health(settings: Settings):
    render_page_header("Health", "Home / Health")
    presence = settings.env_presence()
    st.dataframe(
        pd.DataFrame([{"variable": k, "present": v} for k, v in presence.items()]),
        hide_index=True,
        use_container_width=True,
    )


# ---------- UI setup ----------
st.set_page_config(page_title="Traffic Dashboard", layout="wide")
inject_base_styles()
st.title("Traffic Dashboard")
st.caption("Visits, engagement and audience mix with period-over-period comparison.")

settings = Settings.from_env()

with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Dashboard", "GA4 Demo", "Health"], index=0)
    st.markdown("---")
    range_days = st.radio("Date range (days)", list(RANGE_OPTIONS), index=0, horizontal=True)
    source = st.radio("Data source", ["Sample data", "Paste CSV / JSON"], index=0)
    pasted = ""
    if source != "Sample data":
        pasted = st.text_area("Rows (CSV with header, or JSON array)", height=220)

if nav_choice == "GA4 Demo":
    render_ga4_demo(settings)
elif nav_choice == "Health":
    render_health(settings)
elif source == "Sample data":
    try:
        sample_rows = load_sample_rows(settings.sample_data_path)
    except DashboardError as exc:
        logger.exception("sample load failed")
        st.error(f"Unable to load analytics data: {exc}")
        st.stop()
    render_dashboard(sample_rows, range_days, "Sample data")
else:
    try:
        result = parse_text(pasted)
    except InputParseError as exc:
        st.error(str(exc))
        st.stop()
    if result.format != "empty" and not result.rows:
        st.warning("No rows parsed. Check that the input has a date column and at least one dated row.")
    render_dashboard(result.rows, range_days, "Pasted data")
