"""Core primitives: errors, logging, settings, dialect, persistence engine.

Architecture::

    errors.py       Error taxonomy + wire envelope
    logging.py      structlog configuration
    settings.py     pydantic-settings base class
    timestamps.py   Canonical UTC/ISO-8601 encodings
    dialect.py      Identifier quoting, placeholders, DDL literals
    engine.py       Single-writer SQLite store with snapshot flushing
    repository.py   Dialect-aware repository base class
"""
