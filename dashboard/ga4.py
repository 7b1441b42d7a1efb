from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import DateRange, Dimension, Metric, RunReportRequest
from google.api_core.exceptions import GoogleAPICallError
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account

from dashboard.config import Settings
from dashboard.errors import ConfigurationError, UpstreamServiceError


logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


def parse_credentials(raw: Optional[str]) -> Tuple[str, str, Dict[str, Any]]:
    """Validate service-account JSON; returns (client_email, private_key, info)."""
    if not raw:
        raise ConfigurationError("Missing GOOGLE_APPLICATION_CREDENTIALS_JSON environment variable")
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("Invalid GOOGLE_APPLICATION_CREDENTIALS_JSON value; must be valid JSON") from exc
    if not isinstance(info, dict):
        raise ConfigurationError("Invalid GOOGLE_APPLICATION_CREDENTIALS_JSON value; must be a JSON object")

    client_email = info.get("client_email")
    private_key = info.get("private_key")
    if not client_email or not private_key:
        raise ConfigurationError("Service account credentials must include client_email and private_key")
    return str(client_email), str(private_key), info


def build_client(client_email: str, private_key: str, info: Dict[str, Any]) -> BetaAnalyticsDataClient:
    sa_info = {
        "client_email": client_email,
        "private_key": private_key,
        "token_uri": info.get("token_uri") or DEFAULT_TOKEN_URI,
    }
    try:
        creds = service_account.Credentials.from_service_account_info(sa_info)
    except ValueError as exc:
        raise ConfigurationError(f"Service account credentials could not be loaded: {exc}") from exc
    return BetaAnalyticsDataClient(credentials=creds)


def _parse_int(value: object) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        pass
    try:
        return int(float(str(value)))
    except (ValueError, OverflowError):
        return 0


def _iso_date(value: str) -> str:
    """GA4 reports dates as YYYYMMDD."""
    if re.fullmatch(r"\d{8}", value):
        return f"{value[:4]}-{value[4:6]}-{value[6:]}"
    return value


def report_rows(report: Any) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for row in getattr(report, "rows", None) or []:
        dims = list(row.dimension_values or [])
        mets = list(row.metric_values or [])
        date = dims[0].value if dims else ""
        rows.append(
            {
                "date": _iso_date(date or ""),
                "sessions": _parse_int(mets[0].value if len(mets) > 0 else "0"),
                "users": _parse_int(mets[1].value if len(mets) > 1 else "0"),
            }
        )
    rows.sort(key=lambda r: r["date"])
    return rows


def fetch_demo_report(settings: Settings) -> List[Dict[str, Any]]:
    """Sessions and users per day for the last 7 complete days."""
    if not settings.ga4_property_id:
        raise ConfigurationError("Missing GA4_PROPERTY_ID environment variable")
    client_email, private_key, info = parse_credentials(settings.credentials_json)
    client = build_client(client_email, private_key, info)

    request = RunReportRequest(
        property=f"properties/{settings.ga4_property_id}",
        date_ranges=[DateRange(start_date="7daysAgo", end_date="yesterday")],
        dimensions=[Dimension(name="date")],
        metrics=[Metric(name="sessions"), Metric(name="totalUsers")],
    )
    try:
        report = client.run_report(request)
    except (GoogleAPICallError, GoogleAuthError) as exc:
        raise UpstreamServiceError(f"GA4 report request failed: {exc}") from exc
    rows = report_rows(report)
    logger.info("GA4 demo report returned %d rows for property %s", len(rows), settings.ga4_property_id)
    return rows
