"""
Endpoint registry: live map of declared tables to CRUD bindings.

The data surface is mounted once, as a generic route on
``/data/{table_name}``; each request resolves its table here.  Catalog events
keep the map current, so a new table is served as soon as its creation
commits and a deleted table answers ``404`` immediately afterwards.

State per table name::

    UNREGISTERED ──register()──► REGISTERED ──unregister()──► UNREGISTERED
                                     │  ▲
                                     └──┘ refresh()  (column changes)

Registration is idempotent: registering a table that is already bound to
the same catalog id returns the existing binding.  Lookups ignore case, as
the catalog does when it checks names for duplicates.

Manifesto:
    - **Resolve per request:** handlers never cache a binding
    - **Lock-guarded map:** RLock around every read and write of the map
    - **Rebuild, don't patch:** a column change re-synthesizes all validators

Tags:
    registry, routing, indirection, catalog-events, table-spine
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from tablespine.catalog.models import ColumnDeclaration, TableDeclaration
from tablespine.catalog.store import CatalogEvent, CatalogEventKind, CatalogStore
from tablespine.core.errors import NotFoundError
from tablespine.core.logging import get_logger
from tablespine.core.timestamps import utc_now
from tablespine.registry.handlers import CrudHandlers
from tablespine.validation.synthesizer import TableValidators, synthesize

logger = get_logger(__name__)


def _key(name: str) -> str:
    """Map key for *name*; table names are unique regardless of case."""
    return name.lower()


class RegistrationState(str, Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"


@dataclass(frozen=True)
class TableBinding:
    """Everything a request needs to serve one table."""

    table: TableDeclaration
    columns: tuple[ColumnDeclaration, ...]
    validators: TableValidators
    registered_at: datetime = field(default_factory=utc_now)

    @property
    def name(self) -> str:
        return self.table.name


class EndpointRegistry:
    """Name → :class:`TableBinding` map kept in step with the catalog."""

    def __init__(self, store: CatalogStore) -> None:
        self.store = store
        self._bindings: dict[str, TableBinding] = {}
        self._lock = threading.RLock()
        self._subscription: str | None = None

    # -- Wiring ------------------------------------------------------------

    def attach(self) -> None:
        """Subscribe to catalog events."""
        if self._subscription is None:
            self._subscription = self.store.subscribe(self.handle_event)

    def detach(self) -> None:
        if self._subscription is not None:
            self.store.unsubscribe(self._subscription)
            self._subscription = None

    def load_all(self) -> int:
        """Register every table currently in the catalog."""
        tables = self.store.list_tables()
        for table in tables:
            self.register(table)
        logger.info("registry_loaded", tables=len(tables))
        return len(tables)

    def handle_event(self, event: CatalogEvent) -> None:
        if event.kind is CatalogEventKind.TABLE_CREATED:
            self.register(event.table)
        elif event.kind is CatalogEventKind.TABLE_DELETED:
            self.unregister(event.table.name)
        else:
            self.refresh(event.table)

    # -- State transitions -------------------------------------------------

    def _bind(self, table: TableDeclaration) -> TableBinding:
        columns = tuple(self.store.list_columns(table.id))
        return TableBinding(table=table, columns=columns, validators=synthesize(table.name, columns))

    def register(self, table: TableDeclaration) -> TableBinding:
        with self._lock:
            existing = self._bindings.get(_key(table.name))
            if existing is not None and existing.table.id == table.id:
                return existing
            binding = self._bind(table)
            self._bindings[_key(table.name)] = binding
        logger.info("table_registered", table=table.name, columns=len(binding.columns))
        return binding

    def refresh(self, table: TableDeclaration) -> TableBinding | None:
        """Rebuild the binding after a column change."""
        with self._lock:
            try:
                binding = self._bind(table)
            except NotFoundError:
                # deleted between the event and the refresh
                self._bindings.pop(_key(table.name), None)
                return None
            self._bindings[_key(table.name)] = binding
        logger.debug("table_refreshed", table=table.name, columns=len(binding.columns))
        return binding

    def unregister(self, name: str) -> bool:
        with self._lock:
            removed = self._bindings.pop(_key(name), None) is not None
        if removed:
            logger.info("table_unregistered", table=name)
        return removed

    # -- Lookup ------------------------------------------------------------

    def resolve(self, name: str) -> TableBinding:
        with self._lock:
            binding = self._bindings.get(_key(name))
        if binding is None:
            raise NotFoundError(f"Table '{name}'")
        return binding

    def handlers(self, name: str) -> CrudHandlers:
        """CRUD handlers for the current binding of *name*."""
        return CrudHandlers(self.store.engine, self.resolve(name))

    def state(self, name: str) -> RegistrationState:
        with self._lock:
            registered = _key(name) in self._bindings
        return RegistrationState.REGISTERED if registered else RegistrationState.UNREGISTERED

    def names(self) -> list[str]:
        with self._lock:
            return sorted(b.name for b in self._bindings.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return isinstance(name, str) and _key(name) in self._bindings


__all__ = ["EndpointRegistry", "RegistrationState", "TableBinding"]
