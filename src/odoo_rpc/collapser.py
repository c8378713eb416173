"""
Write-direction relation resolution.

Turns natural keys into the ids Odoo expects, e.g. with
``RelationSpec(name="company_id", alias="company", foreign_field="name")``
``{"company": "Acme"}`` becomes ``{"company_id": 3}``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .concurrency import gather_all
from .config import ResolutionConfig
from .domain import any_of, eq
from .errors import ErrorContext, NotFoundError
from .logging import StructuredLogger, get_logger
from .metadata import MetadataResolver
from .transport import Transport
from .types import Cardinality, Record, RelationSpec

# _ABSENT: the record does not carry the spec's key, leave it untouched.
# _SKIP: nothing matched under the "omit" policy, drop the key.
_ABSENT = object()
_SKIP = object()


def _key_value(value: Any) -> Any:
    """Comparable form of a natural key; many2one pairs reduce to their id."""
    if isinstance(value, (list, tuple)) and len(value) == 2 and isinstance(value[0], int) and isinstance(value[1], str):
        return value[0]
    return value


class RelationCollapser:
    """
    Collapses natural-key values of one outgoing record into foreign ids.

    Specs are resolved concurrently; each costs one metadata lookup pair
    and one ``search_read`` on the related model.
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

    async def collapse(
        self,
        model: str,
        record: Mapping[str, Any],
        specs: Sequence[RelationSpec | Mapping[str, Any]],
    ) -> Record:
        """
        Return a copy of ``record`` with every spec's natural key replaced
        by the matching id(s) under ``spec.name``.

        Raises:
            NotFoundError: a natural key has no match and ``collapse_missing`` is "raise"
        """
        specs = [RelationSpec.coerce(spec) for spec in specs]
        resolved = await gather_all(self._collapse_spec(model, record, spec) for spec in specs)

        output = dict(record)
        for spec, value in zip(specs, resolved):
            if value is _ABSENT:
                continue
            if spec.alias and spec.alias != spec.name:
                output.pop(spec.alias, None)
            if value is _SKIP:
                output.pop(spec.name, None)
            else:
                output[spec.name] = value
        return output

    async def _collapse_spec(self, model: str, record: Mapping[str, Any], spec: RelationSpec) -> Any:
        if spec.key not in record:
            return _ABSENT

        descriptor = await self.resolver.resolve_relation(model, spec.name)
        multiple = descriptor.cardinality is Cardinality.MULTIPLE
        value = record[spec.key]
        is_list = isinstance(value, (list, tuple))

        if (is_list and not value) or value is None or value is False:
            return [] if multiple else False

        keys: list[Any] = []
        for key in value if is_list else [value]:
            key = _key_value(key)
            if key not in keys:
                keys.append(key)
        domain = any_of(spec.foreign_field, keys) if is_list else [eq(spec.foreign_field, keys[0])]
        matches = await self.transport.call(descriptor.target, "search_read", [domain])
        matches = matches or []

        # list of (key, ids) pairs; keys may be unhashable
        found = [
            (key, [match["id"] for match in matches if _key_value(match.get(spec.foreign_field)) == key])
            for key in keys
        ]

        missing = [key for key, ids in found if not ids]
        if missing:
            if self.config.collapse_missing == "raise":
                raise NotFoundError(
                    f"{missing} not found by {spec.foreign_field} on model: {descriptor.target}",
                    model=descriptor.target,
                    domain=domain,
                    context=ErrorContext(model=model, field=spec.name, operation="collapse"),
                )
            self.logger.warning("Natural keys unmatched", field=f"{model}.{spec.name}", keys=missing)

        self.logger.debug(
            "Collapsed relation",
            field=f"{model}.{spec.name}",
            target=descriptor.target,
            matched=len(keys) - len(missing),
        )

        if multiple:
            return list(dict.fromkeys(i for _, ids in found for i in ids))
        for _, ids in found:
            if ids:
                return ids[0]
        return _SKIP


__all__ = ["RelationCollapser"]
