from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple


DATA_DIR = Path(__file__).resolve().parents[1] / "data"
SAMPLE_DATA_PATH = DATA_DIR / "sample_analytics.json"

DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def _env_value(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(key)
    if value is None or not value.strip():
        return None
    return value


def _as_origin_tuple(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return DEFAULT_CORS_ORIGINS
    origins = tuple(o.strip() for o in value.split(",") if o.strip())
    return origins or DEFAULT_CORS_ORIGINS


@dataclass(frozen=True)
class Settings:
    ga4_property_id: Optional[str] = None
    credentials_json: Optional[str] = None
    bigquery_project_id: Optional[str] = None
    sample_data_path: Path = SAMPLE_DATA_PATH
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        sample_path = _env_value(env, "SAMPLE_DATA_PATH")
        return cls(
            ga4_property_id=_env_value(env, "GA4_PROPERTY_ID"),
            credentials_json=_env_value(env, "GOOGLE_APPLICATION_CREDENTIALS_JSON"),
            bigquery_project_id=_env_value(env, "BIGQUERY_PROJECT_ID"),
            sample_data_path=Path(sample_path) if sample_path else SAMPLE_DATA_PATH,
            cors_origins=_as_origin_tuple(_env_value(env, "CORS_ALLOW_ORIGINS")),
        )

    def env_presence(self) -> dict:
        return {
            "GA4_PROPERTY_ID": self.ga4_property_id is not None,
            "BIGQUERY_PROJECT_ID": self.bigquery_project_id is not None,
            "GOOGLE_APPLICATION_CREDENTIALS_JSON": self.credentials_json is not None,
        }
