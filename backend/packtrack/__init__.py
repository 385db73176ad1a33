"""
PackTrack Backend — Application Package Initializer
====================================================

What: Marks the `packtrack` directory as a Python package.
Who:  Imported by uvicorn (`packtrack.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Aggregate orchestration, auth
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP into service calls, services own the packaging
    aggregate rules and the file lifecycle, and the database layer owns
    the transaction boundary (one session per request).
"""

__version__ = "1.0.0"
