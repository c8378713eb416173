"""
High-level Odoo client.

``OdooClient`` exposes one coroutine per Odoo operation. Read verbs can
expand relational fields on the way out (``resolve_fields=["company_id"]``)
and write verbs can collapse natural keys on the way in
(``resolve_fields=[RelationSpec(...)]``).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .collapser import RelationCollapser
from .config import ConnectionConfig, ResolutionConfig, Settings, get_settings
from .errors import NotFoundError
from .expander import RelationExpander
from .logging import StructuredLogger
from .metadata import MetadataResolver
from .session import SessionHandle
from .transport import JsonRpcTransport, Transport
from .types import Domain, Record, RelationDescriptor, RelationSpec

FieldSpecs = Sequence[RelationSpec | Mapping[str, Any]]


def _as_ids(ids: int | Sequence[int]) -> list[int]:
    return [ids] if isinstance(ids, int) else list(ids)


def _options(
    fields: Sequence[str] | None = None,
    context: Mapping[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    options = {k: v for k, v in extra.items() if v is not None}
    if fields:
        options["fields"] = list(fields)
    if context:
        options["context"] = dict(context)
    return options


class OdooClient:
    """
    Async client for the Odoo external API.

    Example:
        ```python
        async with OdooClient("https://erp.example.com", "prod", "bot", "secret") as odoo:
            user = await odoo.read("res.users", 7, resolve_fields=["company_id"])
            user["company_id"]["name"]
        ```
    """

    def __init__(
        self,
        url: str | None = None,
        db: str | None = None,
        login: str | None = None,
        password: str | None = None,
        *,
        settings: Settings | None = None,
        transport: Transport | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        connection = self.settings.connection
        self.connection = ConnectionConfig(
            url=url or connection.url,
            db=db or connection.db,
            login=login or connection.login,
            password=password or connection.password,
            timeout=connection.timeout,
            verify_ssl=connection.verify_ssl,
        )
        self.logger = logger or StructuredLogger(
            level=self.settings.logging.level,
            json_output=self.settings.logging.format == "json",
            redact_secrets=self.settings.logging.redact_secrets,
        )
        self.transport: Transport = transport or JsonRpcTransport(
            self.connection,
            logger=self.logger,
            log_calls=self.settings.logging.log_calls,
        )

        resolution: ResolutionConfig = self.settings.resolution
        self.resolver = MetadataResolver(self.transport, resolution, logger=self.logger)
        self.expander = RelationExpander(self.transport, self.resolver, resolution, logger=self.logger)
        self.collapser = RelationCollapser(self.transport, self.resolver, resolution, logger=self.logger)

    @classmethod
    async def connect(
        cls,
        url: str | None = None,
        db: str | None = None,
        login: str | None = None,
        password: str | None = None,
        **kwargs: Any,
    ) -> OdooClient:
        """Build a client and complete the login handshake before returning it."""
        client = cls(url, db, login, password, **kwargs)
        await client.authenticate()
        return client

    async def authenticate(self) -> SessionHandle | None:
        """Wait for the handshake; transports without sessions return None."""
        sessions = getattr(self.transport, "sessions", None)
        if sessions is None:
            return None
        return await sessions.ensure()

    async def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> OdooClient:
        await self.authenticate()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Raw access and resolution engine
    # ------------------------------------------------------------------

    async def call(
        self,
        model: str,
        method: str,
        args: Sequence[Any] = ([],),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """Call any model method through ``execute_kw``."""
        return await self.transport.call(model, method, args, kwargs or {})

    async def get_field_relation(self, model: str, field: str) -> RelationDescriptor:
        return await self.resolver.resolve_relation(model, field)

    async def resolve_read(self, model: str, records: Any, resolve_fields: Sequence[str]) -> Any:
        return await self.expander.expand(model, records, resolve_fields)

    async def resolve_write(self, model: str, vals: Mapping[str, Any], resolve_fields: FieldSpecs) -> Record:
        return await self.collapser.collapse(model, vals, resolve_fields)

    # ------------------------------------------------------------------
    # Read verbs
    # ------------------------------------------------------------------

    async def read(
        self,
        model: str,
        id: int,
        *,
        resolve_fields: Sequence[str] = (),
        fields: Sequence[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Record:
        rows = await self.call(model, "read", [[id]], _options(fields, context))
        if not rows:
            raise NotFoundError(model=model, ids=[id])
        if resolve_fields:
            return await self.resolve_read(model, rows[0], resolve_fields)
        return rows[0]

    async def read_many(
        self,
        model: str,
        ids: Sequence[int],
        *,
        resolve_fields: Sequence[str] = (),
        fields: Sequence[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> list[Record]:
        rows = await self.call(model, "read", [list(ids)], _options(fields, context))
        if not rows:
            raise NotFoundError(model=model, ids=list(ids))
        if resolve_fields:
            return await self.resolve_read(model, rows, resolve_fields)
        return rows

    async def list(
        self,
        model: str,
        *,
        offset: int = 0,
        limit: int = 100,
        order: str | None = None,
        resolve_fields: Sequence[str] = (),
        fields: Sequence[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> list[Record]:
        try:
            return await self.search_many(
                model,
                [],
                offset=offset,
                limit=limit,
                order=order,
                resolve_fields=resolve_fields,
                fields=fields,
                context=context,
            )
        except NotFoundError as exc:
            raise NotFoundError(model=model, context=exc.context) from exc

    async def search_id(
        self,
        model: str,
        domain: Domain,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> int:
        ids = await self.call(model, "search", [domain], _options(context=context, limit=1))
        if not ids:
            raise NotFoundError(model=model, domain=domain)
        return ids[0]

    async def search_ids(
        self,
        model: str,
        domain: Domain,
        *,
        offset: int = 0,
        limit: int | None = None,
        order: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> list[int]:
        ids = await self.call(
            model,
            "search",
            [domain],
            _options(context=context, offset=offset or None, limit=limit, order=order),
        )
        if not ids:
            raise NotFoundError(model=model, domain=domain)
        return ids

    async def search_count(
        self,
        model: str,
        domain: Domain,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> int:
        return await self.call(model, "search_count", [domain], _options(context=context))

    async def search_many(
        self,
        model: str,
        domain: Domain,
        *,
        offset: int = 0,
        limit: int | None = None,
        order: str | None = None,
        resolve_fields: Sequence[str] = (),
        fields: Sequence[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> list[Record]:
        rows = await self.call(
            model,
            "search_read",
            [domain],
            _options(fields, context, offset=offset or None, limit=limit, order=order),
        )
        if not rows:
            raise NotFoundError(model=model, domain=domain)
        if resolve_fields:
            return await self.resolve_read(model, rows, resolve_fields)
        return rows

    async def search_one(
        self,
        model: str,
        domain: Domain,
        *,
        order: str | None = None,
        resolve_fields: Sequence[str] = (),
        fields: Sequence[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Record:
        rows = await self.call(model, "search_read", [domain], _options(fields, context, limit=1, order=order))
        if not rows:
            raise NotFoundError(model=model, domain=domain)
        if resolve_fields:
            return await self.resolve_read(model, rows[0], resolve_fields)
        return rows[0]

    # ------------------------------------------------------------------
    # Write verbs
    # ------------------------------------------------------------------

    async def create(
        self,
        model: str,
        vals: Mapping[str, Any],
        *,
        resolve_fields: FieldSpecs = (),
        context: Mapping[str, Any] | None = None,
    ) -> int:
        data = await self.resolve_write(model, vals, resolve_fields) if resolve_fields else dict(vals)
        return await self.call(model, "create", [data], _options(context=context))

    async def write(
        self,
        model: str,
        ids: int | Sequence[int],
        vals: Mapping[str, Any],
        *,
        resolve_fields: FieldSpecs = (),
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        data = await self.resolve_write(model, vals, resolve_fields) if resolve_fields else dict(vals)
        return await self.call(model, "write", [_as_ids(ids), data], _options(context=context))

    async def search_and_write(
        self,
        model: str,
        domain: Domain,
        vals: Mapping[str, Any],
        *,
        resolve_fields: FieldSpecs = (),
        context: Mapping[str, Any] | None = None,
    ) -> list[int]:
        ids = await self.search_ids(model, domain, context=context)
        await self.write(model, ids, vals, resolve_fields=resolve_fields, context=context)
        return ids

    async def unlink(self, model: str, ids: int | Sequence[int]) -> bool:
        return await self.call(model, "unlink", [_as_ids(ids)])

    async def send_note(self, model: str, record_id: int, message: str) -> int:
        """Post an internal note in the record's chatter."""
        return await self._message_post(model, record_id, message, "mail.mt_note")

    async def send_message(self, model: str, record_id: int, message: str) -> int:
        """Post a message to the record's followers."""
        return await self._message_post(model, record_id, message, "mail.mt_comment")

    async def _message_post(self, model: str, record_id: int, message: str, subtype: str) -> int:
        return await self.call(
            model,
            "message_post",
            [[record_id]],
            {"body": message, "message_type": "comment", "subtype_xmlid": subtype},
        )


__all__ = ["OdooClient", "FieldSpecs"]
