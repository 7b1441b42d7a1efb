from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from dashboard.charts import monthly_category_chart, new_vs_returning_chart, sparkline_chart, to_vega_spec
from dashboard.metrics import Totals, aggregate_totals, compute_delta
from dashboard.rows import Row, rows_to_frame
from dashboard.series import build_monthly_category_series, build_new_vs_returning, build_sparkline
from dashboard.windows import drop_undated, sort_rows, split_windows


KPI_FIELDS = ("sessions", "pages_per_visit", "users", "conversion_rate")


def _kpi(name: str, current: Totals, previous: Totals) -> Dict[str, Any]:
    value = float(getattr(current, name))
    prev_value = float(getattr(previous, name))
    return {"value": value, "previous": prev_value, "delta": asdict(compute_delta(value, prev_value))}


def _bounds(dates: List[str]) -> Dict[str, Optional[Any]]:
    return {"start": dates[0] if dates else None, "end": dates[-1] if dates else None, "days": len(dates)}


def compute_overview(rows: Iterable[Row], range_days: int) -> Dict[str, Any]:
    sorted_df: pd.DataFrame = sort_rows(drop_undated(rows_to_frame(rows)))
    windows = split_windows(sorted_df, range_days)
    current_df = windows.current
    previous_df = windows.previous

    totals = aggregate_totals(current_df)
    previous_totals = aggregate_totals(previous_df)

    sparkline_src = current_df if not current_df.empty else sorted_df
    sparkline = build_sparkline(sparkline_src)
    monthly = build_monthly_category_series(current_df)
    new_vs_returning = build_new_vs_returning(current_df)

    charts: Dict[str, Any] = {}
    if sparkline:
        charts["visits_sparkline"] = to_vega_spec(sparkline_chart(sparkline, "sessions", color="#22c55e", title="Visits"))
        charts["pages_per_visit_sparkline"] = to_vega_spec(
            sparkline_chart(sparkline, "pages_per_visit", color="#0ea5e9", title="Pages / Visit", area=False)
        )
        charts["visitors_sparkline"] = to_vega_spec(sparkline_chart(sparkline, "users", color="#8b5cf6", title="Visitors"))
    if monthly:
        charts["monthly_by_medium"] = to_vega_spec(monthly_category_chart(monthly))
    if not current_df.empty:
        charts["new_vs_returning"] = to_vega_spec(new_vs_returning_chart(new_vs_returning))

    return {
        "range_days": int(range_days),
        "window": {
            "current": _bounds(windows.current_dates),
            "previous": _bounds(windows.previous_dates),
            "rows": {"current": int(len(current_df)), "previous": int(len(previous_df))},
        },
        "kpis": {name: _kpi(name, totals, previous_totals) for name in KPI_FIELDS},
        "totals": totals.to_dict(),
        "previous_totals": previous_totals.to_dict(),
        "series": {
            "sparkline": sparkline,
            "monthly": monthly,
            "new_vs_returning": new_vs_returning,
        },
        "charts": charts,
    }
