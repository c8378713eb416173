"""
Configuration system for odoo-rpc.

This package provides typed configuration classes with:
- Dataclass-based settings with validation
- Environment variable loading
- YAML/TOML file loading
- Sensible defaults with override capability
"""

from .base import AmbiguityPolicy, LogFormat, LogLevel, MissingPolicy
from .connection import ConnectionConfig
from .logging import LoggingConfig
from .resolution import ResolutionConfig
from .settings import Settings, configure, get_settings, load_env

__all__ = [
    # Types
    "LogLevel",
    "LogFormat",
    "MissingPolicy",
    "AmbiguityPolicy",
    # Section configs
    "ConnectionConfig",
    "ResolutionConfig",
    "LoggingConfig",
    # Master config
    "Settings",
    # Global functions
    "get_settings",
    "configure",
    "load_env",
]
