"""
JSON schemas for configuration validation.
"""

SCHEDULER_SCHEMA = {
    "type": "object",
    "properties": {
        "start_delay": {"type": "number", "minimum": 0},
        "tick_interval": {"type": "number", "exclusiveMinimum": 0},
        "max_progress_increment": {"type": "number", "exclusiveMinimum": 0},
        "completion_horizon": {"type": "number", "minimum": 0},
    },
    "additionalProperties": False,
}

QUERY_SCHEMA = {
    "type": "object",
    "properties": {
        "default_limit": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": False,
}

SERVER_SCHEMA = {
    "type": "object",
    "properties": {
        "host": {"type": "string"},
        "port": {"type": "integer", "minimum": 1, "maximum": 65535},
        "version": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "cors_origins": {"type": "array", "items": {"type": "string"}},
    },
    "additionalProperties": False,
}

LOGGING_SCHEMA = {
    "type": "object",
    "properties": {
        "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
        "format": {"type": "string", "enum": ["text", "json"]},
        "log_file": {"type": ["string", "null"]},
        "log_transitions": {"type": "boolean"},
        "log_requests": {"type": "boolean"},
    },
    "additionalProperties": False,
}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "scheduler": SCHEDULER_SCHEMA,
        "query": QUERY_SCHEMA,
        "server": SERVER_SCHEMA,
        "logging": LOGGING_SCHEMA,
    },
    "additionalProperties": False,
}


__all__ = ["CONFIG_SCHEMA"]
