"""
Connection configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class ConnectionConfig:
    """Where and as whom to connect."""

    url: str | None = field(default_factory=lambda: os.getenv("ODOO_URL"))
    db: str | None = field(default_factory=lambda: os.getenv("ODOO_DB"))
    login: str | None = field(default_factory=lambda: os.getenv("ODOO_LOGIN"))
    password: str | None = field(default_factory=lambda: os.getenv("ODOO_PASSWORD"), repr=False)

    # Request settings
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.url:
            self.url = self.url.rstrip("/")


__all__ = ["ConnectionConfig"]
