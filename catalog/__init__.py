"""
Catalog Manager - Application Package
======================================

What: Marks the `catalog` directory as a Python package.
Who:  Used by uvicorn (`catalog.main:app`), Alembic, pytest and `python -m catalog`.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   UI (server-rendered presentation) │  ← talks to the API over HTTP only
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Store, Uploads)   │  ← validation, persistence rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The UI layer never imports services or models. It consumes the same JSON
    contract a browser script would, so the API stays the only seam between
    presentation and storage.
"""

__version__ = "1.0.0"
