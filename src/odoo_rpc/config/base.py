"""
Base types for configuration.
"""

from __future__ import annotations

from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["text", "json"]
MissingPolicy = Literal["omit", "raise"]
AmbiguityPolicy = Literal["first", "raise"]


__all__ = ["LogLevel", "LogFormat", "MissingPolicy", "AmbiguityPolicy"]
