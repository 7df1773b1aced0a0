"""Environment-driven settings.

Values are read on every call so tests can use ``monkeypatch.setenv``
without reloading modules.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DEFAULT_CONTENT_DIR = "src/content"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_EMBEDDING_BATCH_SIZE = 20
DEFAULT_SNAPSHOT_TTL_HOURS = 24.0


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def content_dir() -> Path:
    return Path(os.getenv("IMPOSTOFACIL_CONTENT_DIR", DEFAULT_CONTENT_DIR))


def database_url() -> Optional[str]:
    """Storage DSN; ``None`` means no storage is configured."""

    return os.getenv("DATABASE_URL") or None


def openai_api_key() -> Optional[str]:
    return os.getenv("OPENAI_API_KEY") or None


def embedding_model() -> str:
    return os.getenv("IMPOSTOFACIL_EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL)


def embedding_batch_size() -> int:
    return _int_env("IMPOSTOFACIL_EMBEDDING_BATCH_SIZE", DEFAULT_EMBEDDING_BATCH_SIZE)


def sources_file() -> Path:
    raw = os.getenv("IMPOSTOFACIL_SOURCES_FILE")
    if raw:
        return Path(raw)
    return content_dir() / "sources.json"


def snapshot_ttl_hours() -> float:
    raw = os.getenv("IMPOSTOFACIL_SNAPSHOT_TTL_HOURS")
    if not raw:
        return DEFAULT_SNAPSHOT_TTL_HOURS
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"IMPOSTOFACIL_SNAPSHOT_TTL_HOURS must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError("IMPOSTOFACIL_SNAPSHOT_TTL_HOURS must be positive")
    return value


def redis_url() -> Optional[str]:
    return os.getenv("REDIS_URL") or None
