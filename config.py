"""
config.py
App configuration. This is the ONLY place env vars are read.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DB_URL = "data/residencial.db"
DEFAULT_SAMPLE_DB_URL = "data/residencial_sample.db"


@dataclass(frozen=True)
class AppConfig:
    # Primary source: URL (http/https) or local path
    db_url: str
    # Bundled sample dataset used when the primary source is unavailable
    sample_db_url: str
    # None = wait as long as the transport does
    fetch_timeout: Optional[float]
    log_level: str


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name, default)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def get_config() -> AppConfig:
    """
    Loads `.env` if present (local dev), then reads RESIDENCIAL_* variables.
    """
    load_dotenv(override=False)

    timeout = _getenv("RESIDENCIAL_FETCH_TIMEOUT")
    return AppConfig(
        db_url=_getenv("RESIDENCIAL_DB_URL", DEFAULT_DB_URL) or DEFAULT_DB_URL,
        sample_db_url=_getenv("RESIDENCIAL_SAMPLE_DB_URL", DEFAULT_SAMPLE_DB_URL) or DEFAULT_SAMPLE_DB_URL,
        fetch_timeout=float(timeout) if timeout else None,
        log_level=(_getenv("RESIDENCIAL_LOG_LEVEL", "INFO") or "INFO").upper(),
    )
