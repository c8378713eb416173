"""
Shared test fixtures for odoo-rpc tests.

This module provides:
- FakeOdoo: an in-memory transport that evaluates domains and records calls
- A seeded dataset (users, companies, tags) with matching ir.model metadata
- Resolver / expander / collapser / client fixtures wired to the fake
"""

from __future__ import annotations

import asyncio
import itertools
from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from odoo_rpc.client import OdooClient
from odoo_rpc.collapser import RelationCollapser
from odoo_rpc.config import ConnectionConfig, Settings
from odoo_rpc.expander import RelationExpander
from odoo_rpc.logging import StructuredLogger
from odoo_rpc.metadata import MetadataResolver

# =============================================================================
# In-memory Odoo
# =============================================================================


def _field_value(record: Mapping[str, Any], name: str) -> Any:
    value = record.get(name)
    # many2one values are stored as [id, display_name]
    if isinstance(value, list) and len(value) == 2 and isinstance(value[1], str):
        return value[0]
    return value


def _clause(record: Mapping[str, Any], clause: Sequence[Any]) -> bool:
    name, operator, expected = clause
    value = _field_value(record, name)
    if operator == "=":
        return value == expected
    if operator == "!=":
        return value != expected
    if operator == "in":
        return value in expected
    if operator == "not in":
        return value not in expected
    if operator == "ilike":
        return str(expected).lower() in str(value).lower()
    raise ValueError(f"Unsupported operator in fake: {operator}")


def matches(record: Mapping[str, Any], domain: Sequence[Any]) -> bool:
    """Evaluate a prefix-notation Odoo domain against one record."""
    stack: list[bool] = []
    for token in reversed(domain):
        if token == "|":
            stack.append(stack.pop() | stack.pop())
        elif token == "&":
            stack.append(stack.pop() & stack.pop())
        elif token == "!":
            stack.append(not stack.pop())
        else:
            stack.append(_clause(record, token))
    return all(stack)


class FakeOdoo:
    """In-memory stand-in for the Transport protocol."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[int, dict[str, Any]]] = defaultdict(dict)
        self.calls: list[tuple[str, str, list[Any], dict[str, Any]]] = []
        self._ids = itertools.count(1000)

    # -- seeding -----------------------------------------------------------

    def add(self, model: str, /, id: int | None = None, **values: Any) -> dict[str, Any]:
        record = {"id": id if id is not None else next(self._ids), **values}
        self.tables[model][record["id"]] = record
        return record

    def declare_model(self, model: str) -> int:
        for row in self.tables["ir.model"].values():
            if row["model"] == model:
                return row["id"]
        return self.add("ir.model", model=model)["id"]

    def declare_field(self, model: str, name: str, ttype: str, relation: str | bool = False) -> None:
        owner = self.declare_model(model)
        if relation:
            self.declare_model(relation)
        self.add("ir.model.fields", model_id=owner, name=name, ttype=ttype, relation=relation)

    # -- inspection --------------------------------------------------------

    def calls_to(self, model: str | None = None, method: str | None = None) -> list[tuple]:
        return [
            call
            for call in self.calls
            if (model is None or call[0] == model) and (method is None or call[1] == method)
        ]

    # -- Transport ---------------------------------------------------------

    async def call(
        self,
        model: str,
        method: str,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        args = list(args)
        kwargs = dict(kwargs or {})
        self.calls.append((model, method, args, kwargs))
        await asyncio.sleep(0)
        return getattr(self, f"_do_{method}")(model, *args, **kwargs)

    def _project(self, record: dict[str, Any], fields: Sequence[str] | None) -> dict[str, Any]:
        if not fields:
            return dict(record)
        return {"id": record["id"], **{f: record.get(f, False) for f in fields}}

    def _select(self, model, domain, offset=0, limit=None, order=None, context=None):
        rows = [r for r in self.tables[model].values() if matches(r, domain)]
        rows = rows[offset or 0 :]
        return rows[:limit] if limit else rows

    def _do_search_read(self, model, domain, fields=None, offset=0, limit=None, order=None, context=None):
        return [self._project(r, fields) for r in self._select(model, domain, offset, limit)]

    def _do_search(self, model, domain, offset=0, limit=None, order=None, context=None):
        return [r["id"] for r in self._select(model, domain, offset, limit)]

    def _do_search_count(self, model, domain, context=None):
        return len(self._select(model, domain))

    def _do_read(self, model, ids, fields=None, context=None):
        # table order, not request order, like a database scan
        return [self._project(r, fields) for r in self.tables[model].values() if r["id"] in ids]

    def _do_create(self, model, vals, context=None):
        return self.add(model, **vals)["id"]

    def _do_write(self, model, ids, vals, context=None):
        for record_id in ids:
            self.tables[model][record_id].update(vals)
        return True

    def _do_unlink(self, model, ids, context=None):
        for record_id in ids:
            self.tables[model].pop(record_id, None)
        return True

    def _do_message_post(self, model, ids, **kwargs):
        return self.add("mail.message", res_id=ids[0], res_model=model, **kwargs)["id"]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def odoo() -> FakeOdoo:
    """A fake seeded with users, companies and tags."""
    fake = FakeOdoo()

    fake.declare_field("res.users", "company_id", "many2one", "res.company")
    fake.declare_field("res.users", "tag_ids", "many2many", "res.partner.category")
    fake.declare_field("res.users", "child_ids", "one2many", "res.users")
    fake.declare_field("res.users", "login", "char")

    fake.add("res.company", id=3, name="Acme")
    fake.add("res.company", id=4, name="Globex")

    # inserted out of id order so reads come back 5, 4, 6
    fake.add("res.partner.category", id=5, name="wholesale")
    fake.add("res.partner.category", id=4, name="vip")
    fake.add("res.partner.category", id=6, name="retail")

    fake.add("res.users", id=7, name="Ada", login="ada", company_id=[3, "Acme"], tag_ids=[4, 5])
    fake.add("res.users", id=8, name="Grace", login="grace", company_id=[4, "Globex"], tag_ids=[5, 6])
    fake.add("res.users", id=9, name="Linus", login="linus", company_id=False, tag_ids=[])
    return fake


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    return StructuredLogger("odoo_rpc.tests", level="CRITICAL")


@pytest.fixture
def resolver(odoo, quiet_logger) -> MetadataResolver:
    return MetadataResolver(odoo, logger=quiet_logger)


@pytest.fixture
def expander(odoo, quiet_logger) -> RelationExpander:
    return RelationExpander(odoo, logger=quiet_logger)


@pytest.fixture
def collapser(odoo, quiet_logger) -> RelationCollapser:
    return RelationCollapser(odoo, logger=quiet_logger)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        connection=ConnectionConfig(url="http://odoo.test", db="test", login="admin", password="admin"),
    )


@pytest.fixture
def client(odoo, settings, quiet_logger) -> OdooClient:
    return OdooClient(settings=settings, transport=odoo, logger=quiet_logger)
