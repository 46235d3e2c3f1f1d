"""
Shared pytest fixtures for table-spine tests.

This module provides:
- An open in-memory persistence engine with the catalog schema
- Catalog store and endpoint registry wired together
- A FastAPI TestClient over an in-memory app
- Helpers to declare tables through the HTTP surface

Usage:
    Fixtures are auto-discovered by pytest.

    def test_something(client, declare_table):
        table = declare_table("widgets", [{"name": "label", "data_type": "string"}])
"""

import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

# Ensure tablespine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fastapi.testclient import TestClient

from tablespine.api.app import create_app
from tablespine.api.settings import TableSpineSettings
from tablespine.catalog.schema import ensure_catalog_schema
from tablespine.catalog.store import CatalogStore
from tablespine.core.engine import PersistenceEngine
from tablespine.registry.endpoints import EndpointRegistry


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if test_path.parts[0] in ("api", "cli"):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Engine / catalog / registry
# =============================================================================


@pytest.fixture
def engine() -> Generator[PersistenceEngine, None, None]:
    """Open in-memory engine with the system catalog in place."""
    eng = PersistenceEngine(None, flush_interval_s=0).open()
    ensure_catalog_schema(eng)
    yield eng
    eng.close()


@pytest.fixture
def catalog(engine: PersistenceEngine) -> CatalogStore:
    return CatalogStore(engine)


@pytest.fixture
def registry(catalog: CatalogStore) -> Generator[EndpointRegistry, None, None]:
    reg = EndpointRegistry(catalog)
    reg.load_all()
    reg.attach()
    yield reg
    reg.detach()


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def settings() -> TableSpineSettings:
    return TableSpineSettings(
        database_path=":memory:",
        flush_interval_s=0,
        log_level="WARNING",
        log_json=False,
    )


@pytest.fixture
def client(settings: TableSpineSettings) -> Generator[TestClient, None, None]:
    app = create_app(settings=settings)
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def declare_table(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Declare a table and its columns over HTTP; returns the table payload."""

    def _declare(name: str, columns: list[dict[str, Any]] | None = None) -> dict[str, Any]:
        resp = client.post("/api/v1/tables", json={"name": name})
        assert resp.status_code == 201, resp.text
        table = resp.json()["data"]
        for position, column in enumerate(columns or []):
            body = {"table_id": table["id"], "position": position, **column}
            col_resp = client.post("/api/v1/columns", json=body)
            assert col_resp.status_code == 201, col_resp.text
        return table

    return _declare
