"""FastAPI transport.

Architecture::

    app.py          create_app() + lifespan (engine, catalog, registry)
    deps.py         Dependency getters and Annotated aliases
    settings.py     TableSpineSettings
    schemas/        Shared response envelopes
    middleware/     Request id, timing, error envelope
    routers/        catalog (tables, columns) and data (records)
"""
