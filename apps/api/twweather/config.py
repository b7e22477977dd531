from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_PORT = 3000
DEFAULT_CWA_BASE_URL = "https://opendata.cwa.gov.tw/api"
DEFAULT_TIMEOUT_SECONDS = 10.0


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and passed down explicitly."""

    cwa_api_key: Optional[str] = None
    port: int = DEFAULT_PORT
    cwa_base_url: str = DEFAULT_CWA_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    city_set: str = "all"
    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()

        # An empty key counts as unset; it is reported per request, not at startup.
        api_key = (os.environ.get("CWA_API_KEY") or "").strip() or None

        cors = os.environ.get("TWWEATHER_CORS_ORIGINS")
        origins = tuple(o.strip() for o in cors.split(",") if o.strip()) if cors else ("*",)

        return cls(
            cwa_api_key=api_key,
            port=_int_env("PORT", DEFAULT_PORT),
            cwa_base_url=os.environ.get("CWA_API_BASE_URL", DEFAULT_CWA_BASE_URL).rstrip("/"),
            timeout_seconds=_float_env("CWA_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            city_set=os.environ.get("TWWEATHER_CITY_SET", "all").strip() or "all",
            cors_origins=origins or ("*",),
            log_level=os.environ.get("TWWEATHER_LOG_LEVEL", "INFO").upper(),
        )
