"""Run-scoped observability helpers for ingestion and verification runs."""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar, Token
from typing import Optional

logger = logging.getLogger(__name__)

_run_id_ctx: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def generate_run_id() -> str:
    return uuid.uuid4().hex[:12]


def new_run_id() -> str:
    """Generate a new run identifier and bind it to the current context."""

    value = generate_run_id()
    _run_id_ctx.set(value)
    return value


def bind_run_id(value: Optional[str]) -> Optional[Token]:
    """Bind a run_id for the current context and return the reset token."""

    if value is None:
        return None
    return _run_id_ctx.set(value)


def reset_run_id(token: Optional[Token]) -> None:
    if token is None:
        return
    _run_id_ctx.reset(token)


def current_run_id() -> Optional[str]:
    return _run_id_ctx.get()


def redact_secret(raw: Optional[str]) -> str:
    """Return a redacted form of a credential (API key, DSN password) for logs."""

    if not raw:
        return "<missing>"
    if "://" in raw and "@" in raw:
        scheme, rest = raw.split("://", 1)
        host = rest.rsplit("@", 1)[1]
        return f"{scheme}://***@{host}"
    if len(raw) <= 3:
        return "***"
    return f"{raw[:4]}***"


def log_event(message: str, level: int = logging.INFO, **extra: object) -> None:
    """Log an event with the active run_id attached to the record payload."""

    payload = {"run_id": current_run_id(), **extra}
    logger.log(level, message, extra={"payload": payload})
