"""
JSON schemas for configuration validation.
"""

CONNECTION_SCHEMA = {
    "type": "object",
    "properties": {
        "url": {"type": ["string", "null"], "pattern": "^https?://"},
        "db": {"type": ["string", "null"]},
        "login": {"type": ["string", "null"]},
        "password": {"type": ["string", "null"]},
        "timeout": {"type": "number", "exclusiveMinimum": 0},
        "verify_ssl": {"type": "boolean"},
    },
    "additionalProperties": False,
}

RESOLUTION_SCHEMA = {
    "type": "object",
    "properties": {
        "expand_missing": {"type": "string", "enum": ["omit", "raise"]},
        "collapse_missing": {"type": "string", "enum": ["omit", "raise"]},
        "ambiguous_metadata": {"type": "string", "enum": ["first", "raise"]},
    },
    "additionalProperties": False,
}

LOGGING_SCHEMA = {
    "type": "object",
    "properties": {
        "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
        "format": {"type": "string", "enum": ["text", "json"]},
        "log_calls": {"type": "boolean"},
        "redact_secrets": {"type": "boolean"},
    },
    "additionalProperties": False,
}

CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "odoo-rpc configuration",
    "type": "object",
    "properties": {
        "connection": CONNECTION_SCHEMA,
        "resolution": RESOLUTION_SCHEMA,
        "logging": LOGGING_SCHEMA,
    },
    "additionalProperties": False,
}

__all__ = ["CONFIG_SCHEMA", "CONNECTION_SCHEMA", "RESOLUTION_SCHEMA", "LOGGING_SCHEMA"]
