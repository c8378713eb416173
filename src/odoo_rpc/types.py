"""
Core value types shared by the resolver, expander, collapser and client.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .errors import InvalidRelationSpecError

# One Odoo record: field name to value, always carrying an integer "id".
Record = dict[str, Any]

# A search domain: clauses ``[field, operator, value]`` and the prefix
# operators ``"|"``, ``"&"`` and ``"!"``.
Domain = list[Any]

MULTI_VALUED_TYPES = frozenset({"many2many", "one2many"})


class Cardinality(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class SingleRelation:
    """A field referencing at most one record of ``target``."""

    target: str
    field_type: str = "many2one"

    @property
    def cardinality(self) -> Cardinality:
        return Cardinality.SINGLE


@dataclass(frozen=True)
class MultipleRelation:
    """A field referencing any number of records of ``target``."""

    target: str
    field_type: str = "many2many"

    @property
    def cardinality(self) -> Cardinality:
        return Cardinality.MULTIPLE


RelationDescriptor = Union[SingleRelation, MultipleRelation]


def descriptor_for(target: str, field_type: str) -> RelationDescriptor:
    """Map an Odoo ``ttype`` to the matching descriptor variant."""
    if field_type in MULTI_VALUED_TYPES:
        return MultipleRelation(target=target, field_type=field_type)
    return SingleRelation(target=target, field_type=field_type)


@dataclass(frozen=True)
class RelationSpec:
    """
    Write-direction relation declaration.

    The value found under ``alias or name`` in an outgoing record is a
    natural key (or a list of them) looked up through ``foreign_field`` on
    the related model; the resolved id(s) are written back under ``name``.
    """

    name: str
    foreign_field: str
    alias: str | None = None

    @property
    def key(self) -> str:
        return self.alias or self.name

    @classmethod
    def coerce(cls, value: RelationSpec | Mapping[str, Any]) -> RelationSpec:
        """Accept a RelationSpec or a plain mapping (camelCase keys allowed)."""
        if isinstance(value, RelationSpec):
            return value
        if not isinstance(value, Mapping):
            raise InvalidRelationSpecError(f"Unsupported relation spec: {value!r}")
        name = value.get("name")
        foreign_field = value.get("foreign_field", value.get("foreignField"))
        if not name or not foreign_field:
            raise InvalidRelationSpecError(f"Relation spec needs 'name' and 'foreign_field': {dict(value)!r}")
        return cls(name=name, foreign_field=foreign_field, alias=value.get("alias") or None)


__all__ = [
    "Record",
    "Domain",
    "MULTI_VALUED_TYPES",
    "Cardinality",
    "SingleRelation",
    "MultipleRelation",
    "RelationDescriptor",
    "descriptor_for",
    "RelationSpec",
]
