from __future__ import annotations

import calendar
from typing import Any, Dict, List

import pandas as pd

from dashboard.rows import CATEGORIES


SPARKLINE_POINTS = 30

PIE_COLORS = {"New": "#ef4444", "Returning": "#22c55e"}


def build_sparkline(df: pd.DataFrame, points: int = SPARKLINE_POINTS) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    recent = df.tail(points)
    out: List[Dict[str, Any]] = []
    for rec in recent[["date", "sessions", "pageviews", "users"]].to_dict(orient="records"):
        sessions = float(rec["sessions"])
        out.append(
            {
                "date": str(rec["date"])[5:],
                "sessions": sessions,
                "pages_per_visit": float(rec["pageviews"]) / sessions if sessions else 0.0,
                "users": float(rec["users"]),
            }
        )
    return out


def build_monthly_category_series(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Sessions per category, bucketed by calendar month in chronological order."""
    if df.empty:
        return []
    dates = pd.to_datetime(df["date"], format="%Y-%m-%d", errors="coerce")
    valid = df.assign(_dt=dates).dropna(subset=["_dt"])
    if valid.empty:
        return []

    valid = valid.assign(order=valid["_dt"].dt.year * 12 + (valid["_dt"].dt.month - 1))
    pivot = (
        valid.pivot_table(index="order", columns="category", values="sessions", aggfunc="sum", fill_value=0.0)
        .reindex(columns=list(CATEGORIES), fill_value=0.0)
        .sort_index()
    )

    out: List[Dict[str, Any]] = []
    for order, sums in pivot.iterrows():
        bucket: Dict[str, Any] = {"month": calendar.month_abbr[int(order) % 12 + 1], "order": int(order)}
        for cat in CATEGORIES:
            bucket[cat] = float(sums[cat])
        out.append(bucket)
    return out


def build_new_vs_returning(df: pd.DataFrame) -> List[Dict[str, Any]]:
    total_new = float(df["users_new"].sum()) if not df.empty else 0.0
    total_returning = float(df["users_returning"].sum()) if not df.empty else 0.0
    denominator = (total_new + total_returning) or 1.0
    return [
        {"name": "New", "value": total_new, "color": PIE_COLORS["New"], "percent": total_new / denominator * 100},
        {
            "name": "Returning",
            "value": total_returning,
            "color": PIE_COLORS["Returning"],
            "percent": total_returning / denominator * 100,
        },
    ]
