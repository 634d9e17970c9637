"""
Settings master configuration and global helpers.
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
from dotenv import find_dotenv, load_dotenv

from .logging import LoggingConfig
from .scheduler import QueryConfig, SchedulerConfig
from .schema import CONFIG_SCHEMA
from .server import ServerConfig

# Environment variable (without prefix) -> (section, field, parser)
_ENV_FIELDS: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "START_DELAY": ("scheduler", "start_delay", float),
    "TICK_INTERVAL": ("scheduler", "tick_interval", float),
    "MAX_PROGRESS_INCREMENT": ("scheduler", "max_progress_increment", float),
    "COMPLETION_HORIZON": ("scheduler", "completion_horizon", float),
    "DEFAULT_LIMIT": ("query", "default_limit", int),
    "HOST": ("server", "host", str),
    "PORT": ("server", "port", int),
    "VERSION": ("server", "version", str),
    "LOG_LEVEL": ("logging", "level", str.upper),
    "LOG_FORMAT": ("logging", "format", str.lower),
    "LOG_FILE": ("logging", "log_file", str),
}


@dataclass
class Settings:
    """
    Master configuration for the job service.

    Aggregates all configuration sections into a single object that can be
    loaded from environment variables, files, or constructed programmatically.
    """

    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, prefix: str = "COMPUTELAB_") -> Settings:
        """
        Load settings from environment variables.

        Example:
            COMPUTELAB_START_DELAY=0.5
            COMPUTELAB_TICK_INTERVAL=0.25
            COMPUTELAB_LOG_FORMAT=text
            PORT=8080

        Values go through the same schema and section validation as files.
        """
        data: dict[str, dict[str, Any]] = {}
        for name, (section, key, parse) in _ENV_FIELDS.items():
            value = os.getenv(f"{prefix}{name}")
            # The bare PORT variable is honoured for platform deployments.
            if not value and name == "PORT":
                value = os.getenv("PORT")
            if value:
                data.setdefault(section, {})[key] = parse(value)
        return cls._from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> Settings:
        """
        Load settings from a YAML or TOML file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .toml)
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            import yaml

            with open(path) as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            import tomllib

            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}")

        return cls._from_dict(data)

    @classmethod
    def default(cls) -> Settings:
        return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """
        Create Settings from a dictionary.

        The dictionary is validated against the configuration schema first.
        """
        try:
            jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e.message}") from e

        return cls(
            scheduler=SchedulerConfig(**data.get("scheduler", {})),
            query=QueryConfig(**data.get("query", {})),
            server=ServerConfig(**data.get("server", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""

        def convert(obj):
            if isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            if isinstance(obj, Path):
                return str(obj)
            return obj

        return convert(dataclasses.asdict(self))


# =============================================================================
# Global Settings & Helpers
# =============================================================================

_global_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, creating from the environment if needed."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.from_env()
    return _global_settings


def configure(settings: Settings | None = None, **kwargs) -> Settings:
    """
    Configure global settings.

    Args:
        settings: Settings object to use globally
        **kwargs: Replace whole sections (e.g. ``scheduler=SchedulerConfig(...)``)
    """
    global _global_settings

    if settings is not None:
        _global_settings = settings
    elif _global_settings is None:
        _global_settings = Settings.from_env()

    for key, value in kwargs.items():
        if hasattr(_global_settings, key):
            setattr(_global_settings, key, value)

    return _global_settings


def load_env(path: str | None = None, *, override: bool = False) -> bool:
    """
    Load environment variables from a .env file.

    Returns:
        True if a .env file was found and loaded, False otherwise.
    """
    env_path = path or find_dotenv(usecwd=True)
    if not env_path:
        return False
    return load_dotenv(env_path, override=override)


__all__ = ["Settings", "get_settings", "configure", "load_env"]
