"""
Relation discovery from Odoo's own metadata models.
"""

from __future__ import annotations

from typing import Any

from .config import ResolutionConfig
from .domain import all_of, eq
from .errors import AmbiguousMetadataError, ErrorContext, NotFoundError, NotRelationalFieldError
from .logging import StructuredLogger, get_logger
from .transport import Transport
from .types import Domain, Record, RelationDescriptor, descriptor_for

MODEL_METADATA = "ir.model"
FIELD_METADATA = "ir.model.fields"


class MetadataResolver:
    """
    Looks up what kind of relation a field is.

    Each ``resolve_relation`` call issues two ``search_read`` calls, one on
    ``ir.model`` and one on ``ir.model.fields``. Nothing is cached.
    """

    def __init__(
        self,
        transport: Transport,
        config: ResolutionConfig | None = None,
        *,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.transport = transport
        self.config = config or ResolutionConfig()
        self.logger = logger or get_logger()

    async def _lookup_one(self, model: str, domain: Domain, fields: list[str], field: str) -> Record:
        rows = await self.transport.call(model, "search_read", [domain], {"fields": fields})
        context = ErrorContext(model=model, field=field, operation="resolve_relation")
        if not rows:
            raise NotFoundError(model=model, domain=domain, context=context)
        if len(rows) > 1 and self.config.ambiguous_metadata == "raise":
            raise AmbiguousMetadataError(model=model, domain=domain, matches=len(rows), context=context)
        return rows[0]

    async def resolve_relation(self, model: str, field: str) -> RelationDescriptor:
        """
        Return the relation descriptor of ``model.field``.

        Raises:
            NotFoundError: the model or the field has no metadata row
            AmbiguousMetadataError: several rows matched and the policy is "raise"
            NotRelationalFieldError: the field exists but is not relational
        """
        owner = await self._lookup_one(MODEL_METADATA, all_of(eq("model", model)), ["id", "model"], field)
        row: dict[str, Any] = await self._lookup_one(
            FIELD_METADATA,
            all_of(eq("model_id", owner["id"]), eq("name", field)),
            ["name", "relation", "ttype"],
            field,
        )

        target = row.get("relation")
        if not target:
            raise NotRelationalFieldError(model=model, field_name=field, field_type=row.get("ttype"))

        descriptor = descriptor_for(target, row.get("ttype", ""))
        self.logger.debug(
            "Resolved relation",
            field=f"{model}.{field}",
            target=descriptor.target,
            cardinality=descriptor.cardinality.value,
        )
        return descriptor


__all__ = ["MetadataResolver", "MODEL_METADATA", "FIELD_METADATA"]
