"""
Configuration helpers for the Troq backend.

Settings are read once from environment variables; tests call
``get_settings.cache_clear()`` after changing the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[1] / "database.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    data_file: Path
    database_url: str
    session_ttl_seconds: int
    media_upload_url: str
    media_api_key: str
    media_upload_timeout: float
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    data_file = os.getenv("DATA_FILE", "").strip()
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=(os.getenv("STORAGE_BACKEND") or "json").strip().lower(),
        data_file=Path(data_file) if data_file else DEFAULT_DATA_FILE,
        database_url=os.getenv("DATABASE_URL", ""),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "3600"), 3600),
        media_upload_url=os.getenv("MEDIA_UPLOAD_URL", "").strip(),
        media_api_key=os.getenv("MEDIA_API_KEY", ""),
        media_upload_timeout=_float(os.getenv("MEDIA_UPLOAD_TIMEOUT", "15"), 15.0),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
