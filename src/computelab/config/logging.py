"""
Logging configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import get_args

from .base import LogFormat, LogLevel


@dataclass
class LoggingConfig:
    """Where and how the service logs.

    ``log_transitions`` and ``log_requests`` switch off the two high-volume
    event streams (job status changes and HTTP access lines).
    """

    level: LogLevel = "INFO"
    format: LogFormat = "json"
    log_file: Path | None = None

    log_transitions: bool = True
    log_requests: bool = True

    def __post_init__(self):
        levels = get_args(LogLevel)
        if self.level not in levels:
            raise ValueError(f"Invalid log level: {self.level}. Must be one of {levels}")
        formats = get_args(LogFormat)
        if self.format not in formats:
            raise ValueError(f"Invalid log format: {self.format}. Must be one of {formats}")
        if isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)


__all__ = ["LoggingConfig"]
