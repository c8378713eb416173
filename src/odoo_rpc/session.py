"""
Session handshake bookkeeping.

Odoo's ``execute_kw`` needs the numeric user id returned by the login
handshake. The handshake runs once; every caller that needs the id before
it is known awaits the same in-flight task.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SessionHandle:
    """Result of a successful handshake."""

    uid: int
    db: str
    login: str
    url: str
    server_version: str | None = None
    user_context: dict[str, Any] = field(default_factory=dict)


class SessionManager:
    """
    Owns the one-time handshake.

    ``ensure()`` returns the cached handle, or starts the handshake if none
    is running, or joins the one already running. The shared task is
    shielded so a cancelled caller does not abort it for the others. A
    failed handshake is reported to every waiter and then forgotten, so the
    next ``ensure()`` starts a fresh one.
    """

    def __init__(self, authenticate: Callable[[], Awaitable[SessionHandle]]) -> None:
        self._authenticate = authenticate
        self._handle: SessionHandle | None = None
        self._pending: asyncio.Future[SessionHandle] | None = None

    @property
    def handle(self) -> SessionHandle | None:
        return self._handle

    @property
    def is_authenticated(self) -> bool:
        return self._handle is not None

    def start(self) -> asyncio.Future[SessionHandle]:
        """Begin the handshake without waiting for it (needs a running loop)."""
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._run())
        return self._pending

    async def ensure(self) -> SessionHandle:
        if self._handle is not None:
            return self._handle
        return await asyncio.shield(self.start())

    async def _run(self) -> SessionHandle:
        try:
            handle = await self._authenticate()
        except BaseException:
            self._pending = None
            raise
        self._handle = handle
        return handle

    def reset(self) -> None:
        """Forget the handle; the next call performs a new handshake."""
        self._handle = None
        self._pending = None


__all__ = ["SessionHandle", "SessionManager"]
