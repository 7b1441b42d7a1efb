"""Pasted-text ingestion.

Text is routed by a sniffing predicate instead of trying one parser and falling
back to the other: anything whose first non-blank character is ``[`` or ``{``
is JSON, everything else is CSV. A broken JSON payload therefore surfaces its
own decoder error rather than an empty CSV result.
"""

from __future__ import annotations

import io
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from dashboard.errors import InputParseError
from dashboard.rows import METRIC_FIELDS, Row, coerce_number, normalize_row


logger = logging.getLogger(__name__)

FORMAT_EMPTY = "empty"
FORMAT_JSON = "json"
FORMAT_CSV = "csv"

CSV_COLUMNS = ("date", "category", "medium") + METRIC_FIELDS


@dataclass(frozen=True)
class ParseResult:
    format: str
    rows: List[Row]


def detect_format(text: Optional[str]) -> str:
    stripped = (text or "").strip()
    if not stripped:
        return FORMAT_EMPTY
    if stripped[0] in "[{":
        return FORMAT_JSON
    return FORMAT_CSV


def _has_date(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


# ---------------- JSON ----------------
def _json_record(item: Mapping[str, Any]) -> Dict[str, Any]:
    record: Dict[str, Any] = {"date": item["date"], "category": item.get("category"), "medium": item.get("medium")}
    for col in METRIC_FIELDS:
        if col in item:
            record[col] = coerce_number(item[col])
    return record


def parse_json_rows(text: str) -> List[Row]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputParseError(f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})", fmt=FORMAT_JSON) from exc

    if isinstance(payload, dict) and isinstance(payload.get("rows"), list):
        payload = payload["rows"]
    if not isinstance(payload, list):
        raise InputParseError("JSON input must be an array of row objects", fmt=FORMAT_JSON)

    rows: List[Row] = []
    dropped = 0
    for item in payload:
        if not isinstance(item, dict) or not _has_date(item.get("date")):
            dropped += 1
            continue
        rows.append(normalize_row(_json_record(item)))
    if dropped:
        logger.debug("Dropped %d JSON elements without an object shape or date", dropped)
    return rows


# ---------------- CSV ----------------
def _csv_frame(text: str) -> pd.DataFrame:
    """Whitelisted columns only, lower-cased, first spelling wins; cells stripped."""
    ignored: List[str] = []

    def wanted(name: Any) -> bool:
        if str(name).strip().lower() in CSV_COLUMNS:
            return True
        ignored.append(str(name))
        return False

    try:
        # usecols also makes the tokenizer drop fields past the header width
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
            index_col=False,
            usecols=wanted,
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    if ignored:
        logger.debug("Ignoring unrecognized CSV columns: %s", ", ".join(dict.fromkeys(ignored)))

    df.columns = [str(c).strip().lower() for c in df.columns]
    df = df.loc[:, ~df.columns.duplicated()].fillna("")
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def parse_csv_rows(text: str) -> List[Row]:
    try:
        df = _csv_frame(text)
    except pd.errors.ParserError as exc:
        raise InputParseError(f"Invalid CSV: {exc}", fmt=FORMAT_CSV) from exc

    if "date" not in df.columns:
        logger.info("CSV header has no date column; no rows parsed")
        return []

    df = df[df["date"] != ""]
    return [normalize_row(record) for record in df.to_dict(orient="records")]


def parse_text(text: Optional[str]) -> ParseResult:
    fmt = detect_format(text)
    if fmt == FORMAT_EMPTY:
        return ParseResult(format=fmt, rows=[])
    if fmt == FORMAT_JSON:
        rows = parse_json_rows(text or "")
    else:
        rows = parse_csv_rows(text or "")
    logger.info("Parsed %d rows from %s input", len(rows), fmt)
    return ParseResult(format=fmt, rows=rows)
