from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, fields
from typing import Any, Iterable, List, Mapping

import pandas as pd


CATEGORIES = ("direct", "organic", "paid", "referral", "social", "email")
DEFAULT_CATEGORY = "direct"

CATEGORY_COLORS = {
    "direct": "#22c55e",
    "organic": "#0ea5e9",
    "paid": "#ef4444",
    "referral": "#f59e0b",
    "social": "#8b5cf6",
    "email": "#14b8a6",
}

METRIC_FIELDS = (
    "sessions",
    "users",
    "pageviews",
    "conversions",
    "revenue",
    "users_new",
    "users_returning",
)

# Loosely-typed input (parsed JSON, CSV cells, API bodies). Only `normalize_row` reads it.
UntypedRecord = Mapping[str, Any]


@dataclass(frozen=True)
class Row:
    date: str
    category: str = DEFAULT_CATEGORY
    sessions: float = 0.0
    users: float = 0.0
    pageviews: float = 0.0
    conversions: float = 0.0
    revenue: float = 0.0
    users_new: float = 0.0
    users_returning: float = 0.0


ROW_COLUMNS = [f.name for f in fields(Row)]


def coerce_number(value: object) -> float:
    """Coerce a loose value to a finite float, falling back to 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, numbers.Real):
        out = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return 0.0
        try:
            out = float(s)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(out) or math.isinf(out):
        return 0.0
    return out


def normalize_category(value: object) -> str:
    if isinstance(value, str):
        s = value.strip().lower()
        if s in CATEGORIES:
            return s
    return DEFAULT_CATEGORY


def _date_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_row(record: UntypedRecord) -> Row:
    category = record.get("category")
    if category is None or (isinstance(category, str) and not category.strip()):
        category = record.get("medium")

    users = max(0.0, coerce_number(record.get("users")))
    users_new = min(users, max(0.0, coerce_number(record.get("users_new"))))

    return Row(
        date=_date_text(record.get("date")),
        category=normalize_category(category),
        sessions=max(0.0, coerce_number(record.get("sessions"))),
        users=users,
        pageviews=max(0.0, coerce_number(record.get("pageviews"))),
        conversions=max(0.0, coerce_number(record.get("conversions"))),
        revenue=max(0.0, coerce_number(record.get("revenue"))),
        users_new=users_new,
        users_returning=max(0.0, users - users_new),
    )


def normalize_records(records: Iterable[object]) -> List[Row]:
    return [normalize_row(r) for r in records if isinstance(r, Mapping)]


def rows_to_frame(rows: Iterable[Row]) -> pd.DataFrame:
    records = [asdict(r) for r in rows]
    if not records:
        return pd.DataFrame(columns=ROW_COLUMNS).astype({c: "float64" for c in METRIC_FIELDS})
    return pd.DataFrame.from_records(records, columns=ROW_COLUMNS)
