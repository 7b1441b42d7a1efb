from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import pandas as pd

from dashboard.rows import METRIC_FIELDS


Direction = Literal["up", "down"]


@dataclass(frozen=True)
class Totals:
    sessions: float = 0.0
    users: float = 0.0
    pageviews: float = 0.0
    conversions: float = 0.0
    revenue: float = 0.0
    users_new: float = 0.0
    users_returning: float = 0.0

    @property
    def pages_per_visit(self) -> float:
        return self.pageviews / self.sessions if self.sessions else 0.0

    @property
    def conversion_rate(self) -> float:
        return self.conversions / self.sessions * 100 if self.sessions else 0.0

    def to_dict(self) -> dict:
        out = {name: getattr(self, name) for name in METRIC_FIELDS}
        out["pages_per_visit"] = self.pages_per_visit
        out["conversion_rate"] = self.conversion_rate
        return out


@dataclass(frozen=True)
class Delta:
    percent: float
    direction: Direction


def aggregate_totals(df: pd.DataFrame) -> Totals:
    if df.empty:
        return Totals()
    sums = df[list(METRIC_FIELDS)].sum(numeric_only=True)
    return Totals(**{name: float(sums.get(name, 0.0) or 0.0) for name in METRIC_FIELDS})


def compute_delta(current: float, previous: float) -> Delta:
    """Signed percent change from ``previous`` to ``current``.

    A zero or negative baseline cannot be divided by, so any positive current
    value counts as a full +100% swing and zero counts as no change.
    """
    if previous <= 0:
        return Delta(percent=100.0 if current > 0 else 0.0, direction="up" if current >= 0 else "down")
    change = (current - previous) / previous * 100
    return Delta(percent=change, direction="up" if change >= 0 else "down")
