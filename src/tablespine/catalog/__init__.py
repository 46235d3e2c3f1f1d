"""Catalog: declarations, naming rules, schema mutation, sagas.

Architecture::

    models.py       DataType, TableDeclaration, ColumnDeclaration, name rules
    schema.py       System catalog DDL
    repository.py   SQL over the catalog tables
    mutator.py      Declarations → physical DDL
    saga.py         Catalog + physical mutation as one unit
    store.py        CatalogStore operations and CatalogEvent delivery
"""

from tablespine.catalog.models import ColumnDeclaration, DataType, TableDeclaration
from tablespine.catalog.schema import ensure_catalog_schema
from tablespine.catalog.store import CatalogEvent, CatalogEventKind, CatalogStore

__all__ = [
    "CatalogEvent",
    "CatalogEventKind",
    "CatalogStore",
    "ColumnDeclaration",
    "DataType",
    "TableDeclaration",
    "ensure_catalog_schema",
]
