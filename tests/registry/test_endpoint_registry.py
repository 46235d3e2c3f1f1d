"""Tests for the endpoint registry and its catalog event wiring."""

from __future__ import annotations

import pytest

from tablespine.catalog.models import DataType
from tablespine.core.errors import NotFoundError, ValidationError
from tablespine.registry.endpoints import EndpointRegistry, RegistrationState


class TestLifecycle:
    def test_load_all_registers_existing_tables(self, catalog):
        catalog.create_table("alpha")
        catalog.create_table("beta")
        reg = EndpointRegistry(catalog)
        assert reg.load_all() == 2
        assert reg.names() == ["alpha", "beta"]
        assert len(reg) == 2

    def test_created_table_is_served(self, catalog, registry):
        assert "widgets" not in registry
        catalog.create_table("widgets")
        assert "widgets" in registry
        assert registry.state("widgets") is RegistrationState.REGISTERED

    def test_deleted_table_is_dropped(self, catalog, registry):
        table = catalog.create_table("widgets")
        catalog.delete_table(table.id)
        assert registry.state("widgets") is RegistrationState.UNREGISTERED
        with pytest.raises(NotFoundError, match="Table 'widgets' not found"):
            registry.resolve("widgets")

    def test_register_is_idempotent(self, catalog, registry):
        table = catalog.create_table("widgets")
        first = registry.resolve("widgets")
        assert registry.register(table) is first

    def test_resolve_ignores_case(self, catalog, registry):
        catalog.create_table("widgets")
        assert registry.resolve("WIDGETS").name == "widgets"
        assert "Widgets" in registry
        assert registry.names() == ["widgets"]

    def test_unregister_unknown(self, registry):
        assert registry.unregister("ghost") is False

    def test_detach_stops_updates(self, catalog, registry):
        registry.detach()
        catalog.create_table("widgets")
        assert "widgets" not in registry


class TestRefresh:
    def test_column_changes_rebuild_validators(self, catalog, registry):
        table = catalog.create_table("widgets")
        with pytest.raises(ValidationError):
            registry.resolve("widgets").validators.validate_create({"label": "a"})

        column = catalog.create_column(table.id, "label", DataType.STRING)
        binding = registry.resolve("widgets")
        assert [c.name for c in binding.columns] == ["label"]
        assert binding.validators.validate_create({"label": "a"}) == {"label": "a"}

        catalog.delete_column(column.id)
        assert registry.resolve("widgets").columns == ()

    def test_catalog_only_update_refreshes(self, catalog, registry):
        table = catalog.create_table("widgets")
        column = catalog.create_column(table.id, "label", DataType.STRING, max_length=3)
        catalog.update_column(column.id, {"max_length": 10})
        binding = registry.resolve("widgets")
        assert binding.validators.validate_create({"label": "longer"}) == {"label": "longer"}

    def test_refresh_of_vanished_table(self, catalog, registry):
        table = catalog.create_table("widgets")
        with catalog.engine.transaction() as tx:
            tx.execute("DELETE FROM tables WHERE id = ?", (table.id,))
        assert registry.refresh(table) is None
        assert "widgets" not in registry


class TestHandlers:
    @pytest.fixture
    def handlers(self, catalog, registry):
        table = catalog.create_table("widgets")
        catalog.create_column(table.id, "label", DataType.STRING, is_required=True)
        catalog.create_column(table.id, "qty", DataType.NUMBER, default_value=0)
        return registry.handlers("widgets")

    def test_create_applies_defaults(self, handlers):
        record = handlers.create({"label": "bolt"})
        assert record["id"] == 1
        assert record["label"] == "bolt"
        assert record["qty"] == 0
        assert record["created_at"] == record["updated_at"]

    def test_get_missing(self, handlers):
        with pytest.raises(NotFoundError, match="Record not found"):
            handlers.get(12)

    def test_update_and_delete(self, handlers):
        record = handlers.create({"label": "bolt"})
        updated = handlers.update(record["id"], {"qty": 4})
        assert updated["qty"] == 4
        assert updated["label"] == "bolt"
        assert updated["updated_at"] >= record["updated_at"]

        handlers.delete(record["id"])
        with pytest.raises(NotFoundError):
            handlers.delete(record["id"])
        with pytest.raises(NotFoundError):
            handlers.update(record["id"], {"qty": 1})

    def test_invalid_payload_writes_nothing(self, handlers):
        with pytest.raises(ValidationError):
            handlers.create({"qty": 1})
        assert handlers.list(20, 0)["pagination"]["total"] == 0

    def test_list_pagination(self, handlers):
        for i in range(3):
            handlers.create({"label": f"item{i}"})
        page = handlers.list(2, 0)
        assert [r["label"] for r in page["data"]] == ["item2", "item1"]
        assert page["pagination"] == {"total": 3, "limit": 2, "offset": 0, "hasMore": True}
        page = handlers.list(2, 2)
        assert [r["label"] for r in page["data"]] == ["item0"]
        assert page["pagination"]["hasMore"] is False


class TestStaleBinding:
    """Handlers resolved before a catalog change that commits first."""

    @pytest.fixture
    def table(self, catalog, registry):
        table = catalog.create_table("widgets")
        catalog.create_column(table.id, "label", DataType.STRING)
        return table

    def test_table_deleted_after_resolve(self, catalog, registry, table):
        handlers = registry.handlers("widgets")
        record = handlers.create({"label": "a"})
        catalog.delete_table(table.id)

        with pytest.raises(NotFoundError, match="Table 'widgets' not found"):
            handlers.get(record["id"])
        with pytest.raises(NotFoundError):
            handlers.list(20, 0)
        with pytest.raises(NotFoundError):
            handlers.create({"label": "b"})
        with pytest.raises(NotFoundError):
            handlers.update(record["id"], {"label": "c"})
        with pytest.raises(NotFoundError):
            handlers.delete(record["id"])

    def test_required_column_added_after_resolve(self, catalog, registry, table):
        handlers = registry.handlers("widgets")
        catalog.create_column(table.id, "code", DataType.STRING, is_required=True)

        with pytest.raises(ValidationError):
            handlers.create({"label": "a"})
        assert registry.handlers("widgets").list(20, 0)["pagination"]["total"] == 0

    def test_column_dropped_after_resolve(self, catalog, registry, table):
        handlers = registry.handlers("widgets")
        handlers.create({"label": "a"})
        label = catalog.list_columns(table.id)[0]
        catalog.delete_column(label.id)

        with pytest.raises(ValidationError):
            handlers.list(20, 0)
