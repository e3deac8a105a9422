"""
DevConnector Backend - Application Package
===========================================

What: REST API for the DevConnector developer network (profiles, posts, GitHub lookup).
Who:  Imported by uvicorn (`devconnector.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Auth gate (token → user id)     │  ← FastAPI dependency
    ├─────────────────────────────────────┤
    │   Services (Profile / Post / GitHub)│  ← Business rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Profile and Post are aggregate roots. Their embedded collections
    (experience, education, likes, comments) are stored inside the owning
    row and are always re-persisted together with it.
"""

__version__ = "1.0.0"
