"""
Settings master configuration and global helpers.
"""

from __future__ import annotations

import dataclasses
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
from dotenv import find_dotenv, load_dotenv

from ..config_schema import CONFIG_SCHEMA
from ..errors import InvalidConfigError
from ..logging import redact_secret
from .connection import ConnectionConfig
from .logging import LoggingConfig
from .resolution import ResolutionConfig


@dataclass
class Settings:
    """
    Master configuration for the Odoo client.

    This aggregates all configuration sections into a single object
    that can be loaded from environment variables, files, or constructed
    programmatically.
    """

    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    resolution: ResolutionConfig = field(default_factory=ResolutionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, prefix: str = "ODOO_") -> Settings:
        """
        Load settings from environment variables.

        Example:
            ODOO_URL=https://erp.example.com
            ODOO_DB=production
            ODOO_EXPAND_MISSING=raise
            ODOO_LOG_LEVEL=DEBUG
        """
        settings = cls()

        # Connection settings
        if url := os.getenv(f"{prefix}URL"):
            settings.connection.url = url.rstrip("/")
        if db := os.getenv(f"{prefix}DB"):
            settings.connection.db = db
        if login := os.getenv(f"{prefix}LOGIN"):
            settings.connection.login = login
        if password := os.getenv(f"{prefix}PASSWORD"):
            settings.connection.password = password
        if timeout := os.getenv(f"{prefix}TIMEOUT"):
            settings.connection.timeout = float(timeout)
        if verify_ssl := os.getenv(f"{prefix}VERIFY_SSL"):
            settings.connection.verify_ssl = verify_ssl.lower() == "true"

        # Resolution settings
        if expand_missing := os.getenv(f"{prefix}EXPAND_MISSING"):
            settings.resolution.expand_missing = expand_missing.lower()  # type: ignore
        if collapse_missing := os.getenv(f"{prefix}COLLAPSE_MISSING"):
            settings.resolution.collapse_missing = collapse_missing.lower()  # type: ignore
        if ambiguous := os.getenv(f"{prefix}AMBIGUOUS_METADATA"):
            settings.resolution.ambiguous_metadata = ambiguous.lower()  # type: ignore

        # Logging settings
        if level := os.getenv(f"{prefix}LOG_LEVEL"):
            settings.logging.level = level.upper()  # type: ignore
        if log_format := os.getenv(f"{prefix}LOG_FORMAT"):
            settings.logging.format = log_format.lower()  # type: ignore

        # Rebuild each section so __post_init__ validates the overrides
        return cls(
            connection=dataclasses.replace(settings.connection),
            resolution=dataclasses.replace(settings.resolution),
            logging=dataclasses.replace(settings.logging),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> Settings:
        """
        Load settings from a YAML or TOML file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .toml)

        Returns:
            Settings object with values from file
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            try:
                import yaml  # type: ignore[import-untyped]
            except ImportError as exc:
                raise ImportError("PyYAML is required for YAML config files: pip install pyyaml") from exc
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """
        Create Settings from a dictionary.

        The dictionary is validated against the configuration schema before
        any value is applied.
        """
        try:
            jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise InvalidConfigError(f"Configuration validation failed: {e.message}", cause=e) from e

        connection = ConnectionConfig(**data.get("connection", {}))
        resolution = ResolutionConfig(**data.get("resolution", {}))
        logging_config = LoggingConfig(**data.get("logging", {}))
        return cls(connection=connection, resolution=resolution, logging=logging_config)

    def to_dict(self, *, redact: bool = True) -> dict[str, Any]:
        """Convert settings to dictionary."""
        data = dataclasses.asdict(self)
        if redact:
            data["connection"]["password"] = redact_secret(self.connection.password)
        return data


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
        **kwargs: Override specific sections (connection, resolution, logging)

    Returns:
        The configured Settings object
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

    Args:
        path: Optional path to a .env file. If not provided, uses find_dotenv().
        override: Whether to override existing environment variables.

    Returns:
        True if a .env file was found and loaded, False otherwise.
    """
    env_path = path or find_dotenv(usecwd=True)
    if not env_path:
        return False
    return load_dotenv(env_path, override=override)


__all__ = ["Settings", "get_settings", "configure", "load_env"]
