"""
JSON-RPC transport.

This module defines the minimal interface the resolution engine and the
verb layer call into, and its aiohttp implementation against Odoo's
``/jsonrpc`` endpoint.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import aiohttp

from .errors import (
    AuthenticationError,
    ErrorContext,
    InvalidResponseError,
    MalformedInputError,
    OdooRPCError,
    RemoteError,
    TransportError,
    TransportTimeoutError,
    error_from_payload,
)
from .logging import CallLog, ResultLog, StructuredLogger, get_logger, timed, truncate_for_log
from .session import SessionHandle, SessionManager

if TYPE_CHECKING:
    from .config import ConnectionConfig

_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",
}


@runtime_checkable
class Transport(Protocol):
    """Executes one remote procedure call on a model."""

    async def call(
        self,
        model: str,
        method: str,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Call ``method`` on ``model`` and return the decoded result.

        Raises:
            TransportError: the HTTP exchange failed
            RemoteError: the server reported a fault
        """
        ...


class JsonRpcTransport:
    """
    Transport speaking JSON-RPC 2.0 to an Odoo server.

    The login handshake runs at most once per transport (see
    ``SessionManager``); ``call()`` waits for it before sending anything
    that needs the user id.

    Example:
        ```python
        async with JsonRpcTransport(ConnectionConfig(url=..., db=..., login=..., password=...)) as rpc:
            ids = await rpc.call("res.partner", "search", [[["is_company", "=", True]]])
        ```
    """

    def __init__(
        self,
        config: ConnectionConfig,
        *,
        http: aiohttp.ClientSession | None = None,
        logger: StructuredLogger | None = None,
        log_calls: bool = True,
    ) -> None:
        self.config = config
        self.logger = logger or get_logger()
        self.log_calls = log_calls
        self.sessions = SessionManager(self.authenticate)
        self._http = http
        self._owns_http = http is None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> JsonRpcTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._http is not None and self._owns_http and not self._http.closed:
            await self._http.close()
        self._http = None

    def _client(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession(
                headers=_HEADERS,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
            )
            self._owns_http = True
        return self._http

    def _check_url(self) -> str:
        url = self.config.url
        if not url or not url.startswith("http"):
            raise MalformedInputError("Malformed Odoo URL", context=ErrorContext(extra={"url": url}))
        return url.rstrip("/")

    async def _post(self, path: str, params: dict[str, Any], context: ErrorContext) -> Any:
        url = f"{self._check_url()}{path}"
        envelope = {
            "jsonrpc": "2.0",
            "method": "call",
            "id": next(self._ids),
            "params": params,
        }

        try:
            async with self._client().post(url, json=envelope, ssl=self.config.verify_ssl) as response:
                if response.status != 200:
                    text = await response.text()
                    raise TransportError(
                        f"HTTP {response.status} from {url}: {truncate_for_log(text)}",
                        http_status=response.status,
                        context=context,
                    )
                try:
                    body = await response.json(content_type=None)
                except ValueError as exc:
                    raise InvalidResponseError(
                        f"Response from {url} is not JSON", http_status=response.status, context=context, cause=exc
                    ) from exc
        except asyncio.TimeoutError as exc:
            raise TransportTimeoutError(timeout=self.config.timeout, context=context, cause=exc) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Connection to {url} failed: {exc}", context=context, cause=exc) from exc

        if not isinstance(body, dict):
            raise InvalidResponseError(f"Unexpected JSON-RPC envelope from {url}", context=context)
        if body.get("error"):
            raise error_from_payload(body["error"], context=context)
        return body.get("result")

    async def authenticate(self) -> SessionHandle:
        """Perform the login handshake and return the resulting handle."""
        config = self.config
        context = ErrorContext(operation="authenticate", extra={"db": config.db, "login": config.login})
        params = {"db": config.db, "login": config.login, "password": config.password}

        try:
            result = await self._post("/web/session/authenticate", params, context)
        except RemoteError as exc:
            error = AuthenticationError(exc.message, payload=exc.payload, context=context, cause=exc)
            self.logger.log_error(error, "Authentication failed")
            raise error from exc

        uid = (result or {}).get("uid")
        if not uid:
            error = AuthenticationError(context=context)
            self.logger.log_error(error, "Authentication failed")
            raise error

        self.logger.info("Authenticated", db=config.db, login=config.login, uid=uid)
        return SessionHandle(
            uid=uid,
            db=config.db or "",
            login=config.login or "",
            url=self._check_url(),
            server_version=result.get("server_version"),
            user_context=result.get("user_context") or {},
        )

    async def call(
        self,
        model: str,
        method: str,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        self._check_url()
        handle = await self.sessions.ensure()
        args = list(args)
        kwargs = dict(kwargs or {})

        with self.logger.request_context(model, method) as request_id:
            context = ErrorContext(request_id=request_id, model=model, method=method, operation="execute_kw")
            params = {
                "service": "object",
                "method": "execute_kw",
                "args": [handle.db, handle.uid, self.config.password, model, method, args, kwargs],
            }
            if self.log_calls:
                self.logger.log_call(CallLog(request_id, model, method, arg_count=len(args), kwarg_keys=sorted(kwargs)))

            with timed() as timer:
                try:
                    result = await self._post("/jsonrpc", params, context)
                except OdooRPCError as exc:
                    timer.stop()
                    if self.log_calls:
                        self.logger.log_result(
                            ResultLog(
                                request_id,
                                model,
                                method,
                                success=False,
                                status_code=getattr(exc, "http_status", None),
                                error=str(exc),
                                duration_ms=timer.elapsed_ms,
                            )
                        )
                    raise

            if self.log_calls:
                self.logger.log_result(
                    ResultLog(
                        request_id,
                        model,
                        method,
                        duration_ms=timer.elapsed_ms,
                        row_count=len(result) if isinstance(result, list) else None,
                    )
                )
            return result


__all__ = ["Transport", "JsonRpcTransport"]
