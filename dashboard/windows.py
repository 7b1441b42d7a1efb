from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from dashboard.rows import ROW_COLUMNS


logger = logging.getLogger(__name__)


RANGE_OPTIONS = (30, 60, 90)
DEFAULT_RANGE = 30


@dataclass(frozen=True)
class WindowPair:
    current: pd.DataFrame
    previous: pd.DataFrame
    current_dates: List[str] = field(default_factory=list)
    previous_dates: List[str] = field(default_factory=list)


def drop_undated(df: pd.DataFrame) -> pd.DataFrame:
    """Keep only rows whose date parses as ``YYYY-MM-DD``; the rest belong to no window."""
    if df.empty:
        return df.copy()
    keys = pd.to_datetime(df["date"], format="%Y-%m-%d", errors="coerce")
    dropped = int(keys.isna().sum())
    if dropped:
        logger.info("Leaving %d rows without a usable date out of the windows", dropped)
    return df[keys.notna()].reset_index(drop=True)


def sort_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Stable ascending sort by date; unparsable dates go last."""
    if df.empty:
        return df.copy()
    keys = pd.to_datetime(df["date"], format="%Y-%m-%d", errors="coerce")
    order = keys.sort_values(kind="mergesort", na_position="last").index
    return df.loc[order].reset_index(drop=True)


def unique_dates(df: pd.DataFrame) -> List[str]:
    if df.empty:
        return []
    return df["date"].drop_duplicates().tolist()


def split_windows(df: pd.DataFrame, days: int) -> WindowPair:
    """Split date-sorted rows into the latest ``days`` dates and the ``days`` before them.

    Windows count unique dates, not rows, so per-category rows for one date
    always land together. Short histories shrink the previous window (possibly
    to nothing).
    """
    days = int(days)
    if days < 1:
        raise ValueError(f"window size must be at least 1 day, got {days}")
    if df.empty:
        empty = pd.DataFrame(columns=df.columns if len(df.columns) else ROW_COLUMNS)
        return WindowPair(current=empty, previous=empty.copy())

    dates = unique_dates(df)
    total = len(dates)
    current_start = max(total - days, 0)
    previous_start = max(current_start - days, 0)

    current_dates = dates[current_start:]
    previous_dates = dates[previous_start:current_start]

    current = df[df["date"].isin(current_dates)].reset_index(drop=True)
    previous = df[df["date"].isin(previous_dates)].reset_index(drop=True)
    return WindowPair(current=current, previous=previous, current_dates=current_dates, previous_dates=previous_dates)
