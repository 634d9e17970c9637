"""
HTTP server configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """Configuration for the HTTP adapter."""

    host: str = "0.0.0.0"
    port: int = 3000
    version: str = "0.1.2"
    title: str = "ComputeLab Platform"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self):
        if self.port < 1 or self.port > 65535:
            raise ValueError("port must be between 1 and 65535")
        if not self.version:
            raise ValueError("version cannot be empty")


__all__ = ["ServerConfig"]
