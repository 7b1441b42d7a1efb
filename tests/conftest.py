from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from dashboard.config import Settings


@pytest.fixture
def sample_records() -> List[Dict[str, Any]]:
    return [
        {"date": "2024-01-01", "medium": "organic", "sessions": 100, "users": 80, "users_new": 30, "pageviews": 250, "conversions": 4, "revenue": 40.0},
        {"date": "2024-01-01", "medium": "paid", "sessions": 50, "users": 40, "users_new": 20, "pageviews": 90, "conversions": 2, "revenue": 30.0},
        {"date": "2024-01-02", "medium": "email", "sessions": 20, "users": 15, "users_new": 5, "pageviews": 60, "conversions": 1, "revenue": 10.0},
    ]


@pytest.fixture
def sample_file(tmp_path: Path, sample_records) -> Path:
    path = tmp_path / "sample_analytics.json"
    path.write_text(json.dumps(sample_records), encoding="utf-8")
    return path


@pytest.fixture
def settings(sample_file: Path) -> Settings:
    return Settings(sample_data_path=sample_file)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))
