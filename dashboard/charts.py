from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from dashboard.rows import CATEGORIES, CATEGORY_COLORS

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def sparkline_chart(points: List[Dict[str, Any]], field: str, *, color: str, title: str, area: bool = True) -> alt.Chart:
    df = pd.DataFrame(points, columns=["date", "sessions", "pages_per_visit", "users"])
    base = alt.Chart(df)
    mark = base.mark_area(line={"color": color}, color=color, opacity=0.25) if area else base.mark_line(color=color)
    fmt = ".2f" if field == "pages_per_visit" else ","
    return (
        mark.encode(
            x=alt.X("date:O", title=None, axis=alt.Axis(labels=False, ticks=False, domain=False)),
            y=alt.Y(f"{field}:Q", title=None, axis=alt.Axis(labels=False, ticks=False, domain=False, grid=False)),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip(f"{field}:Q", title=title, format=fmt)],
        )
        .properties(height=80)
    )


def monthly_category_chart(buckets: List[Dict[str, Any]]) -> alt.Chart:
    wide = pd.DataFrame(buckets, columns=["month", "order", *CATEGORIES])
    long_df = wide.melt(id_vars=["month", "order"], value_vars=list(CATEGORIES), var_name="category", value_name="sessions")
    return (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            x=alt.X("month:N", title=None, sort=alt.SortField("order")),
            y=alt.Y("sessions:Q", stack="zero", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color(
                "category:N",
                title="Medium",
                scale=alt.Scale(domain=list(CATEGORIES), range=[CATEGORY_COLORS[c] for c in CATEGORIES]),
            ),
            tooltip=["month", "category", alt.Tooltip("sessions:Q", format=",")],
        )
        .properties(height=260)
    )


def new_vs_returning_chart(segments: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(segments, columns=["name", "value", "color", "percent"])
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=50)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color(
                "name:N",
                title=None,
                scale=alt.Scale(domain=df["name"].tolist(), range=df["color"].tolist()),
            ),
            tooltip=["name", alt.Tooltip("value:Q", title="Visitors", format=","), alt.Tooltip("percent:Q", format=".1f")],
        )
        .properties(height=220)
    )
