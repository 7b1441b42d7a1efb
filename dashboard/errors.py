from __future__ import annotations

from typing import Optional


class DashboardError(Exception):
    """Base class for errors surfaced to API and UI callers."""


class ConfigurationError(DashboardError):
    pass


class UpstreamServiceError(DashboardError):
    pass


class SampleDataError(DashboardError):
    pass


class InputParseError(DashboardError):
    def __init__(self, message: str, *, fmt: Optional[str] = None) -> None:
        super().__init__(message)
        self.format = fmt
