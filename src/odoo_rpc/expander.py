"""
Read-direction relation resolution.

Replaces raw foreign-key values with the related records themselves:
``{"company_id": [3, "Acme"]}`` becomes ``{"company_id": {"id": 3, ...}}``
and ``{"tag_ids": [4, 5]}`` becomes a list of tag records.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any, overload

from .concurrency import gather_all
from .config import ResolutionConfig
from .errors import ErrorContext, NotFoundError
from .logging import StructuredLogger, get_logger
from .metadata import MetadataResolver
from .transport import Transport
from .types import Cardinality, Record


def _is_expanded(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    return isinstance(value, (list, tuple)) and bool(value) and all(isinstance(v, Mapping) for v in value)


def _raw_ids(value: Any, cardinality: Cardinality) -> list[int] | None:
    """
    Foreign ids carried by a raw field value.

    ``None`` means "leave the value alone" (it is already expanded).
    """
    if _is_expanded(value):
        return None
    if cardinality is Cardinality.MULTIPLE:
        if isinstance(value, (list, tuple)):
            return [v for v in value if isinstance(v, int) and not isinstance(v, bool)]
        return []
    # many2one reads come back as [id, display_name], or False when empty
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], int):
        return [value[0]]
    if isinstance(value, int) and not isinstance(value, bool):
        return [value]
    return []


class RelationExpander:
    """
    Expands relational fields of one record or a batch of records.

    Every requested field is resolved concurrently. Per field, the ids of
    all records are fetched in a single ``read`` on the related model.
    The input is deep-copied first, so the caller's records are never
    modified.
    """

    def __init__(
        self,
        transport: Transport,
        resolver: MetadataResolver | None = None,
        config: ResolutionConfig | None = None,
        *,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.transport = transport
        self.config = config or ResolutionConfig()
        self.logger = logger or get_logger()
        self.resolver = resolver or MetadataResolver(transport, self.config, logger=self.logger)

    @overload
    async def expand(self, model: str, records: Record, fields: Sequence[str]) -> Record: ...

    @overload
    async def expand(self, model: str, records: Sequence[Record], fields: Sequence[str]) -> list[Record]: ...

    async def expand(self, model, records, fields):
        """
        Expand ``fields`` on ``records`` of ``model``.

        A single record (mapping) in gives a single record out; a sequence
        in gives a list of the same length and order out.
        """
        is_batch = not isinstance(records, Mapping)
        rows: list[Record] = copy.deepcopy(list(records) if is_batch else [records])

        if rows and fields:
            # a field named twice would race against itself
            await gather_all(self._expand_field(model, rows, field) for field in dict.fromkeys(fields))

        return rows if is_batch else rows[0]

    async def _expand_field(self, model: str, rows: list[Record], field: str) -> None:
        descriptor = await self.resolver.resolve_relation(model, field)
        cardinality = descriptor.cardinality

        wanted = [_raw_ids(row[field], cardinality) if field in row else None for row in rows]
        union = list(dict.fromkeys(i for ids in wanted if ids for i in ids))

        fetched: dict[int, Record] = {}
        if union:
            related = await self.transport.call(descriptor.target, "read", [union])
            fetched = {record["id"]: record for record in related or []}

        missing = [i for i in union if i not in fetched]
        if missing:
            if self.config.expand_missing == "raise":
                raise NotFoundError(
                    model=descriptor.target,
                    ids=missing,
                    context=ErrorContext(model=model, field=field, operation="expand"),
                )
            self.logger.warning("Related records missing", field=f"{model}.{field}", ids=missing)

        for row, ids in zip(rows, wanted):
            if ids is None:
                continue
            if cardinality is Cardinality.MULTIPLE:
                row[field] = [dict(fetched[i]) for i in ids if i in fetched]
            else:
                row[field] = dict(fetched[ids[0]]) if ids and ids[0] in fetched else None

        self.logger.debug("Expanded field", field=f"{model}.{field}", rows=len(rows), fetched=len(fetched))


__all__ = ["RelationExpander"]
