from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel


RangeDays = Literal[30, 60, 90]


class ParseRequestModel(BaseModel):
    text: str = ""


class DashboardRequestModel(BaseModel):
    range_days: RangeDays = 30
    # Loosely-typed records; the row normalizer owns coercion.
    rows: Optional[List[Any]] = None
