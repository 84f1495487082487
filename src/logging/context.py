# src/logging/context.py — v2
"""Contextual logging support: attach run_id, record_id and stage to log records.

Context variables are copied into worker threads by asyncio.to_thread, so a
card rendered off the event loop still logs under its record id.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_record_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "record_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    run_id: str | None = None
    record_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        record_id=_record_id.get(),
        stage=_stage.get(),
    )


def set_run_context(run_id: str) -> None:
    """Set build-level context (called once per build run)."""
    _run_id.set(run_id)


def set_record_context(record_id: str | None, stage: str | None = None) -> None:
    """Set per-artifact context (card, wrapper, group)."""
    _record_id.set(record_id)
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _record_id.set(None)
    _stage.set(None)
