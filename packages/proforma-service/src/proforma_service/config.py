"""
Service configuration read from environment variables.
"""

import os
from dataclasses import dataclass

from proforma_engine import DEFAULT_HORIZON_MONTHS


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    snapshot_store: str = "memory"
    snapshot_dir: str = "snapshots"
    default_months: int = DEFAULT_HORIZON_MONTHS
    projection_cache_size: int = 128


def load_settings() -> Settings:
    return Settings(
        log_level=os.environ.get("PROFORMA_LOG_LEVEL", "INFO").upper(),
        snapshot_store=os.environ.get("PROFORMA_SNAPSHOT_STORE", "memory").lower(),
        snapshot_dir=os.environ.get("PROFORMA_SNAPSHOT_DIR", "snapshots"),
        default_months=_env_int("PROFORMA_DEFAULT_MONTHS", DEFAULT_HORIZON_MONTHS),
        projection_cache_size=_env_int("PROFORMA_PROJECTION_CACHE_SIZE", 128),
    )


settings = load_settings()
