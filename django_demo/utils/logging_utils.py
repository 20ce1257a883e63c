"""Helpers for emitting consistent structured logs and stage telemetry."""

from __future__ import annotations

import logging
import time
from contextlib import AbstractContextManager
from typing import Any, Dict, Literal

STRUCTURED_LOG_ALLOWED_FIELDS: frozenset[str] = frozenset(
    {
        "addr",
        "bind",
        "component",
        "debug_enabled",
        "debugger_port",
        "duration_ms",
        "error",
        "error_type",
        "event",
        "exit_code",
        "method",
        "mode",
        "path",
        "pid",
        "port",
        "reason",
        "reload",
        "request_id",
        "stage",
        "status",
        "status_code",
        "task",
        "task_id",
        "timeout",
        "worker_class",
        "workers",
    }
)


def _filter_structured_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value
        for key, value in fields.items()
        if key in STRUCTURED_LOG_ALLOWED_FIELDS and value is not None
    }


def structured_log(
    logger: logging.Logger, level: int, event: str, **fields: Any
) -> None:
    """Emit a log record with an `event` attribute and structured extras."""
    payload: Dict[str, Any] = {"event": event, "_structured_log": True}
    payload.update(_filter_structured_fields(fields))
    logger.log(level, event, extra=payload)


class StageMarker(AbstractContextManager["StageMarker"]):
    """Context manager that emits stage start/completion telemetry."""

    def __init__(
        self,
        logger: logging.Logger,
        *,
        stage: str,
        level: int = logging.INFO,
        **base_fields: Any,
    ) -> None:
        self._logger = logger
        merged_fields = {"stage": stage}
        merged_fields.update(base_fields)
        self._base_fields: Dict[str, Any] = _filter_structured_fields(merged_fields)
        self._level = level
        self._started_at: float | None = None

    def __enter__(self) -> "StageMarker":
        self._started_at = time.perf_counter()
        structured_log(
            self._logger,
            self._level,
            "startup_stage",
            status="started",
            **self._base_fields,
        )
        return self

    def __exit__(
        self,
        exc_type,
        exc: BaseException | None,
        _tb,
    ) -> Literal[False]:
        now = time.perf_counter()
        duration_ms = (
            int((now - self._started_at) * 1000) if self._started_at is not None else 0
        )
        payload = dict(self._base_fields)
        payload["duration_ms"] = duration_ms
        if exc:
            payload["status"] = "failed"
            payload["error_type"] = exc.__class__.__name__
            structured_log(self._logger, logging.ERROR, "startup_stage", **payload)
        else:
            payload["status"] = "completed"
            structured_log(self._logger, logging.INFO, "startup_stage", **payload)
        return False


def stage_marker(
    logger: logging.Logger, *, stage: str, level: int = logging.INFO, **fields: Any
) -> StageMarker:
    """Convenience helper mirroring `with stage_marker(...)` usage."""
    return StageMarker(logger, stage=stage, level=level, **fields)


def log_stage_skipped(
    logger: logging.Logger,
    *,
    stage: str,
    reason: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit a deterministic record when a stage is bypassed."""
    payload = {"stage": stage, "status": "skipped", "reason": reason}
    payload.update(fields)
    structured_log(logger, level, "startup_stage", **payload)


__all__ = [
    "StageMarker",
    "log_stage_skipped",
    "stage_marker",
    "structured_log",
    "STRUCTURED_LOG_ALLOWED_FIELDS",
]
