"""
Tests for the OdooClient verb layer.
"""

import pytest

from odoo_rpc.client import OdooClient
from odoo_rpc.errors import NotFoundError
from odoo_rpc.types import RelationSpec, SingleRelation


class TestReadVerbs:
    """Test read, read_many, list and the search verbs."""

    @pytest.mark.asyncio
    async def test_read(self, client):
        """read returns a single record."""
        user = await client.read("res.users", 7)

        assert user["login"] == "ada"
        assert user["company_id"] == [3, "Acme"]

    @pytest.mark.asyncio
    async def test_read_with_resolve_fields(self, client):
        """read expands the requested relations."""
        user = await client.read("res.users", 7, resolve_fields=["company_id", "tag_ids"])

        assert user["company_id"] == {"id": 3, "name": "Acme"}
        assert [t["name"] for t in user["tag_ids"]] == ["vip", "wholesale"]

    @pytest.mark.asyncio
    async def test_read_sends_fields_and_context(self, odoo, client):
        """fields and context become execute_kw keyword arguments."""
        await client.read("res.users", 7, fields=["login"], context={"lang": "fr_FR"})

        (call,) = odoo.calls_to("res.users", "read")
        assert call[2] == [[7]]
        assert call[3] == {"fields": ["login"], "context": {"lang": "fr_FR"}}

    @pytest.mark.asyncio
    async def test_read_missing(self, client):
        """An unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            await client.read("res.users", 404)

        assert exc_info.value.model == "res.users"
        assert exc_info.value.ids == [404]

    @pytest.mark.asyncio
    async def test_read_many(self, client):
        """read_many returns a list, optionally expanded."""
        users = await client.read_many("res.users", [7, 8], resolve_fields=["company_id"])

        assert [u["company_id"]["name"] for u in users] == ["Acme", "Globex"]

    @pytest.mark.asyncio
    async def test_list(self, odoo, client):
        """list pages through search_read with offset and limit."""
        users = await client.list("res.users", offset=1, limit=1)

        assert [u["id"] for u in users] == [8]
        (call,) = odoo.calls_to("res.users", "search_read")
        assert call[2] == [[]]
        assert call[3] == {"offset": 1, "limit": 1}

    @pytest.mark.asyncio
    async def test_list_empty_model(self, client):
        """An empty model raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Nothing found on model: res.partner"):
            await client.list("res.partner")

    @pytest.mark.asyncio
    async def test_search_id(self, client):
        """search_id returns the first matching id."""
        assert await client.search_id("res.users", [["login", "=", "grace"]]) == 8

    @pytest.mark.asyncio
    async def test_search_ids(self, client):
        """search_ids returns every matching id."""
        ids = await client.search_ids("res.users", ["|", ["login", "=", "ada"], ["login", "=", "grace"]])

        assert ids == [7, 8]

    @pytest.mark.asyncio
    async def test_search_ids_no_match(self, client):
        """Zero rows raise NotFoundError carrying the domain and model."""
        domain = [["login", "=", "nobody"]]

        with pytest.raises(NotFoundError) as exc_info:
            await client.search_ids("res.users", domain)

        assert exc_info.value.domain == domain
        assert exc_info.value.model == "res.users"
        assert "res.users" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_search_many_and_one(self, client):
        """search_many returns all matches, search_one the first."""
        many = await client.search_many("res.users", [["company_id", "=", 3]], resolve_fields=["company_id"])
        one = await client.search_one("res.users", [["login", "=", "grace"]], resolve_fields=["tag_ids"])

        assert [u["id"] for u in many] == [7]
        assert many[0]["company_id"]["name"] == "Acme"
        assert [t["name"] for t in one["tag_ids"]] == ["wholesale", "retail"]

    @pytest.mark.asyncio
    async def test_search_one_no_match(self, client):
        """search_one raises on zero rows."""
        with pytest.raises(NotFoundError):
            await client.search_one("res.users", [["login", "=", "nobody"]])

    @pytest.mark.asyncio
    async def test_search_count(self, client):
        """search_count does not raise on zero."""
        assert await client.search_count("res.users", [["login", "=", "nobody"]]) == 0
        assert await client.search_count("res.users", []) == 3


class TestWriteVerbs:
    """Test create, write, search_and_write, unlink and messages."""

    @pytest.mark.asyncio
    async def test_create_returns_id(self, odoo, client):
        """create returns the new record id."""
        new_id = await client.create("res.company", {"name": "Initech"})

        assert odoo.tables["res.company"][new_id]["name"] == "Initech"

    @pytest.mark.asyncio
    async def test_create_with_resolve_fields(self, odoo, client):
        """create collapses natural keys before sending."""
        specs = [
            RelationSpec(name="company_id", alias="company", foreign_field="name"),
            RelationSpec(name="tag_ids", foreign_field="name"),
        ]

        new_id = await client.create(
            "res.users", {"login": "alan", "company": "Globex", "tag_ids": ["vip"]}, resolve_fields=specs
        )

        (call,) = odoo.calls_to("res.users", "create")
        assert call[2] == [{"login": "alan", "company_id": 4, "tag_ids": [4]}]
        assert odoo.tables["res.users"][new_id]["company_id"] == 4

    @pytest.mark.asyncio
    async def test_write_accepts_single_id(self, odoo, client):
        """A bare id is wrapped in a list."""
        assert await client.write("res.users", 7, {"login": "ada.l"}) is True

        (call,) = odoo.calls_to("res.users", "write")
        assert call[2] == [[7], {"login": "ada.l"}]

    @pytest.mark.asyncio
    async def test_write_with_resolve_fields(self, odoo, client):
        """write collapses natural keys before sending."""
        spec = RelationSpec(name="company_id", alias="company", foreign_field="name")

        await client.write("res.users", [7, 8], {"company": "Acme"}, resolve_fields=[spec])

        assert odoo.tables["res.users"][8]["company_id"] == 3

    @pytest.mark.asyncio
    async def test_search_and_write(self, odoo, client):
        """search_and_write returns the ids it wrote."""
        ids = await client.search_and_write("res.users", [["login", "in", ["ada", "grace"]]], {"active": False})

        assert ids == [7, 8]
        assert odoo.tables["res.users"][7]["active"] is False

    @pytest.mark.asyncio
    async def test_search_and_write_no_match(self, odoo, client):
        """Nothing is written when nothing matches."""
        with pytest.raises(NotFoundError):
            await client.search_and_write("res.users", [["login", "=", "nobody"]], {"active": False})

        assert odoo.calls_to("res.users", "write") == []

    @pytest.mark.asyncio
    async def test_unlink(self, odoo, client):
        """unlink removes the records."""
        assert await client.unlink("res.users", 9) is True
        assert 9 not in odoo.tables["res.users"]

    @pytest.mark.asyncio
    async def test_send_note_and_message(self, odoo, client):
        """Notes and messages differ only by subtype."""
        await client.send_note("res.users", 7, "internal")
        await client.send_message("res.users", 7, "public")

        note, message = odoo.calls_to("res.users", "message_post")
        assert note[2] == [[7]]
        assert note[3] == {"body": "internal", "message_type": "comment", "subtype_xmlid": "mail.mt_note"}
        assert message[3]["subtype_xmlid"] == "mail.mt_comment"


class TestRawAndEngine:
    """Test call and the engine pass-throughs."""

    @pytest.mark.asyncio
    async def test_call(self, odoo, client):
        """call forwards model, method, args and kwargs unchanged."""
        result = await client.call("res.users", "search", [[["login", "=", "ada"]]], {"limit": 1})

        assert result == [7]
        assert odoo.calls[-1] == ("res.users", "search", [[["login", "=", "ada"]]], {"limit": 1})

    @pytest.mark.asyncio
    async def test_get_field_relation(self, client):
        """get_field_relation delegates to the resolver."""
        assert await client.get_field_relation("res.users", "company_id") == SingleRelation("res.company")

    @pytest.mark.asyncio
    async def test_connect_without_sessions(self, odoo, settings, quiet_logger):
        """A transport without a session manager needs no handshake."""
        client = await OdooClient.connect(settings=settings, transport=odoo, logger=quiet_logger)

        assert await client.authenticate() is None
        async with client as entered:
            assert entered is client


class TestRoundTrip:
    """Collapsing then expanding recovers the natural keys."""

    @pytest.mark.asyncio
    async def test_single_round_trip(self, odoo, client):
        """many2one: name -> id -> record -> name."""
        spec = RelationSpec(name="company_id", alias="company", foreign_field="name")
        new_id = await client.create("res.users", {"login": "alan", "company": "Globex"}, resolve_fields=[spec])
        # Odoo reads many2one values back as [id, display_name]
        stored = odoo.tables["res.users"][new_id]
        stored["company_id"] = [stored["company_id"], "Globex"]

        user = await client.read("res.users", new_id, resolve_fields=["company_id"])

        assert user["company_id"]["name"] == "Globex"

    @pytest.mark.asyncio
    async def test_multiple_round_trip(self, client):
        """many2many: names -> ids -> records -> names."""
        names = ["retail", "vip"]
        spec = RelationSpec(name="tag_ids", alias="tags", foreign_field="name")
        new_id = await client.create("res.users", {"login": "alan", "tags": names}, resolve_fields=[spec])

        user = await client.read("res.users", new_id, resolve_fields=["tag_ids"])

        assert [t["name"] for t in user["tag_ids"]] == names
