"""
Error taxonomy for odoo-rpc.

This module provides a hierarchical exception system with:
- Error codes for programmatic handling
- Retryable vs non-retryable classification (informational, nothing retries)
- Structured context for debugging
- Mapping from Odoo server fault payloads
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for the Odoo client."""

    # Lookup errors (1xxx)
    NOT_FOUND = "ERR_1000"
    AMBIGUOUS_METADATA = "ERR_1001"
    NOT_RELATIONAL = "ERR_1002"

    # Validation errors (2xxx)
    VALIDATION_ERROR = "ERR_2000"
    MALFORMED_INPUT = "ERR_2001"
    INVALID_RELATION_SPEC = "ERR_2002"

    # Transport errors (3xxx)
    TRANSPORT_ERROR = "ERR_3000"
    TRANSPORT_TIMEOUT = "ERR_3001"
    INVALID_RESPONSE = "ERR_3002"

    # Remote errors (4xxx)
    REMOTE_ERROR = "ERR_4000"
    REMOTE_ACCESS = "ERR_4001"
    REMOTE_VALIDATION = "ERR_4002"
    REMOTE_MISSING = "ERR_4003"

    # Session errors (5xxx)
    AUTHENTICATION = "ERR_5000"

    # Configuration errors (6xxx)
    CONFIG_ERROR = "ERR_6000"
    INVALID_CONFIG = "ERR_6001"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "ERR_9000"


@dataclass
class ErrorContext:
    """Structured context for error debugging."""

    request_id: str | None = None
    model: str | None = None
    method: str | None = None
    field: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "model": self.model,
            "method": self.method,
            "field": self.field,
            "operation": self.operation,
            **self.extra,
        }


class OdooRPCError(Exception):
    """
    Base exception for all odoo-rpc errors.

    Attributes:
        code: Standardized error code for programmatic handling
        message: Human-readable error message
        retryable: Whether the operation could succeed if repeated
        context: Structured debugging context
        cause: Original exception that caused this error
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if retryable is not None:
            self.retryable = retryable
        self.context = context or ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.context.request_id:
            parts.append(f"(request_id={self.context.request_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# =============================================================================
# Lookup Errors
# =============================================================================


class NotFoundError(OdooRPCError):
    """A lookup (record, metadata row, relation match) returned zero rows."""

    code = ErrorCode.NOT_FOUND

    def __init__(
        self,
        message: str | None = None,
        *,
        model: str | None = None,
        domain: list[Any] | None = None,
        ids: list[int] | None = None,
        **kwargs,
    ):
        if message is None:
            if ids is not None:
                message = f"{ids} not found on model: {model}"
            elif domain is not None:
                message = f"{domain} not found on model: {model}"
            else:
                message = f"Nothing found on model: {model}"
        kwargs.setdefault("context", ErrorContext(model=model))
        super().__init__(message, **kwargs)
        self.model = model
        self.domain = domain
        self.ids = ids


class AmbiguousMetadataError(OdooRPCError):
    """More than one metadata row matched where exactly one was expected."""

    code = ErrorCode.AMBIGUOUS_METADATA

    def __init__(
        self,
        message: str | None = None,
        *,
        model: str | None = None,
        domain: list[Any] | None = None,
        matches: int = 0,
        **kwargs,
    ):
        if message is None:
            message = f"{matches} rows matched {domain} on model: {model}"
        super().__init__(message, **kwargs)
        self.model = model
        self.domain = domain
        self.matches = matches


class NotRelationalFieldError(OdooRPCError):
    """The named field exists but does not reference another model."""

    code = ErrorCode.NOT_RELATIONAL

    def __init__(
        self,
        message: str | None = None,
        *,
        model: str | None = None,
        field_name: str | None = None,
        field_type: str | None = None,
        **kwargs,
    ):
        if message is None:
            message = f"Field {model}.{field_name} ({field_type}) is not relational"
        super().__init__(message, **kwargs)
        self.model = model
        self.field_name = field_name
        self.field_type = field_type


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(OdooRPCError):
    """Base class for client-side input validation errors."""

    code = ErrorCode.VALIDATION_ERROR


class MalformedInputError(ValidationError):
    """Input rejected before any I/O, e.g. a non-HTTP base URL."""

    code = ErrorCode.MALFORMED_INPUT


class InvalidRelationSpecError(ValidationError):
    """A relation specification is missing required keys."""

    code = ErrorCode.INVALID_RELATION_SPEC


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(OdooRPCError):
    """The HTTP call could not complete."""

    code = ErrorCode.TRANSPORT_ERROR
    http_status: int | None = None

    def __init__(
        self,
        message: str = "Transport failure",
        *,
        http_status: int | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.http_status = http_status


class TransportTimeoutError(TransportError):
    """The HTTP call timed out."""

    code = ErrorCode.TRANSPORT_TIMEOUT
    retryable = True

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        timeout: float | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.timeout = timeout


class InvalidResponseError(TransportError):
    """The server answered with something that is not a JSON-RPC envelope."""

    code = ErrorCode.INVALID_RESPONSE


# =============================================================================
# Remote Errors
# =============================================================================


class RemoteError(OdooRPCError):
    """
    The server's RPC layer reported a fault.

    The payload is kept verbatim; ``remote_name`` is the server-side
    exception class (``data.name``) when the server provides one.
    """

    code = ErrorCode.REMOTE_ERROR

    def __init__(
        self,
        message: str | None = None,
        *,
        payload: dict[str, Any] | None = None,
        **kwargs,
    ):
        self.payload = payload or {}
        data = self.payload.get("data") or {}
        self.remote_name: str | None = data.get("name")
        self.remote_message: str | None = data.get("message")
        self.debug: str | None = data.get("debug")
        if message is None:
            message = self.remote_message or self.payload.get("message") or "Remote error"
        super().__init__(message, **kwargs)


class RemoteAccessError(RemoteError):
    """Access rights or credentials were refused by the server."""

    code = ErrorCode.REMOTE_ACCESS


class RemoteValidationError(RemoteError):
    """The server rejected the values (constraint or user error)."""

    code = ErrorCode.REMOTE_VALIDATION


class RemoteMissingError(RemoteError):
    """The server reports that a targeted record no longer exists."""

    code = ErrorCode.REMOTE_MISSING


class AuthenticationError(OdooRPCError):
    """The one-time session handshake failed."""

    code = ErrorCode.AUTHENTICATION

    def __init__(
        self,
        message: str = "Authentication failed. Check login and password.",
        *,
        payload: dict[str, Any] | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.payload = payload


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(OdooRPCError):
    """Base class for configuration errors."""

    code = ErrorCode.CONFIG_ERROR


class InvalidConfigError(ConfigError):
    """Configuration is invalid."""

    code = ErrorCode.INVALID_CONFIG


# =============================================================================
# Error Mapping from Remote Payloads
# =============================================================================


_REMOTE_ERROR_MAP: dict[str, type[RemoteError]] = {
    "odoo.exceptions.AccessDenied": RemoteAccessError,
    "odoo.exceptions.AccessError": RemoteAccessError,
    "odoo.exceptions.ValidationError": RemoteValidationError,
    "odoo.exceptions.UserError": RemoteValidationError,
    "odoo.exceptions.MissingError": RemoteMissingError,
}


def error_from_payload(
    payload: dict[str, Any],
    *,
    context: ErrorContext | None = None,
) -> RemoteError:
    """
    Create an appropriate RemoteError from a JSON-RPC ``error`` member.

    Args:
        payload: The ``error`` object of the JSON-RPC response
        context: Additional error context

    Returns:
        Appropriate RemoteError subclass
    """
    data = payload.get("data") or {}
    error_class = _REMOTE_ERROR_MAP.get(data.get("name", ""), RemoteError)
    return error_class(payload=payload, context=context)


def is_retryable(error: Exception) -> bool:
    """
    Check if an error is retryable.

    Args:
        error: Exception to check

    Returns:
        True if the error is retryable
    """
    if isinstance(error, OdooRPCError):
        return error.retryable

    import asyncio

    retryable_types = (
        asyncio.TimeoutError,
        ConnectionError,
        TimeoutError,
    )
    return isinstance(error, retryable_types)


__all__ = [
    # Base
    "ErrorCode",
    "ErrorContext",
    "OdooRPCError",
    # Lookup errors
    "NotFoundError",
    "AmbiguousMetadataError",
    "NotRelationalFieldError",
    # Validation errors
    "ValidationError",
    "MalformedInputError",
    "InvalidRelationSpecError",
    # Transport errors
    "TransportError",
    "TransportTimeoutError",
    "InvalidResponseError",
    # Remote errors
    "RemoteError",
    "RemoteAccessError",
    "RemoteValidationError",
    "RemoteMissingError",
    "AuthenticationError",
    # Config errors
    "ConfigError",
    "InvalidConfigError",
    # Utilities
    "error_from_payload",
    "is_retryable",
]
