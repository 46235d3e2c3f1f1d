"""
table-spine - metadata-declared tables served as CRUD REST resources.

Packages:
- tablespine.core: errors, logging, settings, dialect, persistence engine
- tablespine.catalog: catalog store, schema mutator, catalog sagas
- tablespine.validation: per-table validator synthesis
- tablespine.registry: endpoint registry and record access
- tablespine.api: FastAPI transport
- tablespine.cli: Typer command line
"""

__version__ = "0.1.0"
