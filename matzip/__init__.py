"""
matzip - Local Restaurant Store
===============================
Persistence and domain-mapping layer for the Matzip restaurant app.

Layers (lowest first):
    db/            Schema descriptors, mapped records, store and contexts.
    models/        Immutable domain value objects.
    repositories/  Record <-> domain mapping and per-entity queries.
    services/      Async data-access API consumed by the presentation layer.
"""

__version__ = "1.0.0"
