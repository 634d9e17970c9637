"""
Structured logging for computelab.

This module provides:
- A StructuredLogger that renders every event as one JSON object (or a
  readable text line) on top of stdlib ``logging``
- Typed records for job transitions and HTTP requests
- A per-task LogContext, so concurrent requests and timelines keep their
  correlation ids apart
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _compact(record: Any) -> dict[str, Any]:
    return {k: v for k, v in asdict(record).items() if v is not None}


# =============================================================================
# Log Record Types
# =============================================================================


@dataclass(frozen=True)
class LogContext:
    """Correlation fields stamped onto every record logged inside a context."""

    trace_id: str | None = None
    request_id: str | None = None
    job_id: str | None = None
    toolkit: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = {k: v for k, v in asdict(self).items() if v is not None and k != "extra"}
        d.update(self.extra)
        return d

    def with_update(self, **kwargs) -> LogContext:
        """Copy with the given fields replaced; ``extra`` is merged."""
        extra = {**self.extra, **kwargs.pop("extra", {})}
        return replace(self, extra=extra, **kwargs)


@dataclass
class TransitionLog:
    """One job status change. ``from_status`` is None for a new job."""

    job_id: str
    toolkit: str
    from_status: str | None
    to_status: str

    timestamp: str = field(default_factory=_utcnow)
    progress: float | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(self)


@dataclass
class RequestLog:
    """One handled HTTP request."""

    request_id: str
    method: str
    path: str
    status_code: int

    timestamp: str = field(default_factory=_utcnow)
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(self)


_current_context: ContextVar[LogContext] = ContextVar("computelab_log_context", default=LogContext())


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger:
    """
    Job-service logger with structured output.

    Example:
        ```python
        logger = StructuredLogger("computelab", json_output=False)

        with logger.trace_context(request_id="req_1"):
            logger.info("Job accepted", job_id=job.id)
        ```
    """

    def __init__(
        self,
        name: str = "computelab",
        level: str = "INFO",
        json_output: bool = True,
        log_file: Path | None = None,
    ):
        self.name = name
        self.json_output = json_output

        self._logger = logging.getLogger(name)
        self._logger.setLevel(level.upper())

        if not self._logger.handlers:
            handler = logging.FileHandler(log_file) if log_file else logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter() if json_output else TextFormatter())
            self._logger.addHandler(handler)

    @property
    def context(self) -> LogContext:
        return _current_context.get()

    @property
    def stdlib_logger(self) -> logging.Logger:
        return self._logger

    @contextmanager
    def trace_context(self, trace_id: str | None = None, **kwargs) -> Iterator[str]:
        """
        Scope correlation fields to the current task.

        Yields:
            The trace ID (generated when not given)
        """
        trace_id = trace_id or generate_trace_id()
        token = _current_context.set(self.context.with_update(trace_id=trace_id, **kwargs))
        try:
            yield trace_id
        finally:
            _current_context.reset(token)

    def _emit(self, level: int, message: str, event_type: str | None, data: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        payload = {"message": message, **self.context.to_dict()}
        if event_type:
            payload["event_type"] = event_type
        payload.update(data)

        if self.json_output:
            self._logger.log(level, json.dumps(payload, default=str))
        else:
            fields = " ".join(f"{k}={v}" for k, v in payload.items() if k != "message")
            self._logger.log(level, f"{message} {fields}".rstrip())

    def debug(self, message: str, **kwargs) -> None:
        self._emit(logging.DEBUG, message, None, kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._emit(logging.INFO, message, None, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._emit(logging.WARNING, message, None, kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._emit(logging.ERROR, message, None, kwargs)

    def log_transition(self, transition: TransitionLog) -> None:
        """Failures are logged at WARNING, every other transition at INFO."""
        level = logging.WARNING if transition.to_status == "failed" else logging.INFO
        origin = transition.from_status or "new"
        self._emit(
            level,
            f"Job {transition.job_id} {origin} -> {transition.to_status}",
            "transition",
            transition.to_dict(),
        )

    def log_request(self, request: RequestLog) -> None:
        level = logging.WARNING if request.status_code >= 500 else logging.INFO
        message = f"{request.method} {request.path} -> {request.status_code}"
        if request.duration_ms is not None:
            message = f"{message} ({request.duration_ms:.0f}ms)"
        self._emit(level, message, "request", request.to_dict())

    def log_error(self, error: Exception, message: str | None = None, **kwargs) -> None:
        """Log an exception, expanding code and context of ComputeLabError."""
        data: dict[str, Any] = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        code = getattr(error, "code", None)
        if code is not None:
            data["error_code"] = getattr(code, "value", str(code))
        context = getattr(error, "context", None)
        if context is not None and hasattr(context, "to_dict"):
            data["error_context"] = context.to_dict()
        data.update(kwargs)
        self._emit(logging.ERROR, message or f"Error: {error}", "error", data)


# =============================================================================
# Formatters
# =============================================================================


class JSONFormatter(logging.Formatter):
    """Wraps a StructuredLogger payload with level, logger name and time."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        text = record.getMessage()
        try:
            payload = json.loads(text)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            entry.update(payload)
        else:
            entry["message"] = text

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``HH:MM:SS.mmm LEVEL message`` with the level coloured on a TTY."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }

    def __init__(self, color: bool | None = None):
        super().__init__()
        self.color = sys.stdout.isatty() if color is None else color

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        level = f"{record.levelname:8}"
        if self.color and record.levelno in self.COLORS:
            level = f"{self.COLORS[record.levelno]}{level}\033[0m"
        return f"{stamp} {level} {record.getMessage()}"


# =============================================================================
# Utilities
# =============================================================================


def generate_trace_id() -> str:
    return f"trace_{uuid.uuid4().hex[:16]}"


def generate_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


@dataclass
class Timer:
    """Wall-time stopwatch in milliseconds; reads live until stopped."""

    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None

    def stop(self) -> float:
        self.end_time = time.perf_counter()
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        end = time.perf_counter() if self.end_time is None else self.end_time
        return (end - self.start_time) * 1000


@contextmanager
def timed() -> Iterator[Timer]:
    timer = Timer()
    try:
        yield timer
    finally:
        timer.stop()


# =============================================================================
# Global Logger
# =============================================================================

_default_logger: StructuredLogger | None = None


def get_logger(name: str = "computelab") -> StructuredLogger:
    """Return the process-wide logger, creating it on first use."""
    global _default_logger
    if _default_logger is None or _default_logger.name != name:
        _default_logger = StructuredLogger(name)
    return _default_logger


def configure_logging(level: str = "INFO", json_output: bool = True, **kwargs: Any) -> StructuredLogger:
    """Replace the process-wide logger, e.g. from LoggingConfig."""
    global _default_logger
    _default_logger = StructuredLogger(level=level, json_output=json_output, **kwargs)
    return _default_logger


__all__ = [
    "LogContext",
    "TransitionLog",
    "RequestLog",
    "StructuredLogger",
    "JSONFormatter",
    "TextFormatter",
    "Timer",
    "timed",
    "generate_trace_id",
    "generate_request_id",
    "get_logger",
    "configure_logging",
]
