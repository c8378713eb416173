"""Domain filter builders."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .types import Domain


def eq(field: str, value: Any) -> list[Any]:
    return [field, "=", value]


def any_of(field: str, values: Sequence[Any]) -> Domain:
    """
    ``field`` equals any of ``values``, as OR-ed equality clauses.

    Odoo domains use prefix notation, so n clauses need n-1 leading ``"|"``
    operators: ``["|", c1, "|", c2, c3]``.
    """
    domain: Domain = []
    for index, value in enumerate(values):
        if index < len(values) - 1:
            domain.append("|")
        domain.append(eq(field, value))
    return domain


def all_of(*clauses: list[Any]) -> Domain:
    """AND-ed clauses (Odoo's implicit conjunction)."""
    return list(clauses)


__all__ = ["eq", "any_of", "all_of"]
