from __future__ import annotations

import logging
import math
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import DashboardRequestModel, ParseRequestModel
from dashboard.config import Settings
from dashboard.data import load_sample_records, load_sample_rows
from dashboard.errors import InputParseError
from dashboard.ga4 import fetch_demo_report
from dashboard.overview import compute_overview
from dashboard.parsing import parse_text
from dashboard.rows import normalize_records


logger = logging.getLogger(__name__)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": str(exc) or type(exc).__name__})


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Traffic Dashboard API", version="0.1.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health(settings: Settings = Depends(get_settings)):
        return _json({"ok": True, "env": settings.env_presence(), "ts": _utc_timestamp()})

    @app.get("/api/ga4-demo")
    def ga4_demo(settings: Settings = Depends(get_settings)):
        try:
            return _json({"ok": True, "rows": fetch_demo_report(settings)})
        except Exception as exc:
            logger.exception("ga4_demo failed")
            return _error(exc)

    @app.get("/api/sample")
    def sample(settings: Settings = Depends(get_settings)):
        try:
            return _json({"ok": True, "rows": load_sample_records(settings.sample_data_path)})
        except Exception as exc:
            logger.exception("sample failed")
            return _error(exc)

    @app.post("/api/parse")
    def parse(body: ParseRequestModel):
        try:
            result = parse_text(body.text)
            return _json({"ok": True, "format": result.format, "rows": [asdict(r) for r in result.rows]})
        except InputParseError as exc:
            logger.warning("parse rejected %s input: %s", exc.format, exc)
            return _error(exc, status_code=400)
        except Exception as exc:
            logger.exception("parse failed")
            return _error(exc)

    @app.post("/api/dashboard")
    def dashboard(body: DashboardRequestModel, settings: Settings = Depends(get_settings)):
        try:
            if body.rows is None:
                rows = load_sample_rows(settings.sample_data_path)
            else:
                rows = normalize_records(body.rows)
            return _json({"ok": True, **compute_overview(rows, body.range_days)})
        except Exception as exc:
            logger.exception("dashboard failed")
            return _error(exc)

    return app


app = create_app()
