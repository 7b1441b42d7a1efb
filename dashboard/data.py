from __future__ import annotations

import copy
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

from dashboard.errors import SampleDataError
from dashboard.rows import Row, normalize_records


logger = logging.getLogger(__name__)


def file_signature(path: Path) -> Tuple[str, float]:
    try:
        return str(path), path.stat().st_mtime
    except FileNotFoundError as exc:
        raise SampleDataError(f"Sample data file not found: {path}") from exc


@lru_cache(maxsize=4)
def _load_sample_cached(file_sig: Tuple[str, float]) -> List[Dict[str, Any]]:
    path = Path(file_sig[0])
    logger.info("Loading sample data from %s", path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SampleDataError(f"Failed to read sample data: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SampleDataError(f"Sample data is not valid JSON: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(payload, list):
        raise SampleDataError("Sample data must be a JSON array of rows")
    return payload


def load_sample_records(path: Path) -> List[Dict[str, Any]]:
    """Raw sample records, as shipped. Callers get their own copy."""
    return copy.deepcopy(_load_sample_cached(file_signature(Path(path))))


def load_sample_rows(path: Path) -> List[Row]:
    return normalize_records(load_sample_records(path))
