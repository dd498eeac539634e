"""Runtime configuration for the EVDash API and CLI.

Values come from environment variables; CLI flags override them.

    EVDASH_DATA_PATH      dataset file (.csv or .xlsx)
    EVDASH_PAGE_SIZE      rows per table page (default 10)
    EVDASH_CACHE_SECONDS  max-age sent with dataset responses (default 3600)
    EVDASH_LOG_FORMAT     "text" (default) or "json"
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .models import PAGE_SIZE

DEFAULT_DATA_PATH = "data/Electric_Vehicle_Population_Data.csv"
DEFAULT_CACHE_SECONDS = 3600


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class DashboardConfig:
    data_path: str = DEFAULT_DATA_PATH
    page_size: int = PAGE_SIZE
    cache_seconds: int = DEFAULT_CACHE_SECONDS
    log_format: str = "text"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "DashboardConfig":
        env = os.environ if env is None else env
        log_format = env.get("EVDASH_LOG_FORMAT", "text").strip().lower() or "text"
        if log_format not in ("text", "json"):
            raise ValueError(f"EVDASH_LOG_FORMAT must be 'text' or 'json', got {log_format!r}")
        return cls(
            data_path=env.get("EVDASH_DATA_PATH", "").strip() or DEFAULT_DATA_PATH,
            page_size=_int_env(env, "EVDASH_PAGE_SIZE", PAGE_SIZE),
            cache_seconds=_int_env(env, "EVDASH_CACHE_SECONDS", DEFAULT_CACHE_SECONDS),
            log_format=log_format,
        )

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self.cache_seconds}"
