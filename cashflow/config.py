from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_FRONTEND_ORIGIN = "http://localhost:3000"
DEFAULT_FORECAST_DAYS = 7
DEFAULT_MAX_FORECAST_DAYS = 366
LOG_FORMATS = {"standard", "json"}


@dataclass(frozen=True)
class Settings:
    frontend_origin: str = DEFAULT_FRONTEND_ORIGIN
    forecast_days: int = DEFAULT_FORECAST_DAYS
    max_forecast_days: int = DEFAULT_MAX_FORECAST_DAYS
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "Settings":
        max_days = _get_positive_int("MAX_FORECAST_DAYS", DEFAULT_MAX_FORECAST_DAYS)
        forecast_days = min(_get_positive_int("FORECAST_DAYS", DEFAULT_FORECAST_DAYS), max_days)
        log_format = os.getenv("LOG_FORMAT", "standard").strip().lower()
        if log_format not in LOG_FORMATS:
            log_format = "standard"
        return cls(
            frontend_origin=os.getenv("FRONTEND_ORIGIN", DEFAULT_FRONTEND_ORIGIN),
            forecast_days=forecast_days,
            max_forecast_days=max_days,
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            log_format=log_format,
        )


def _get_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    return value
