"""
DevCamper Backend — Application Package
========================================

What: Bootcamp directory REST API (bootcamps, courses, reviews, users, auth).
Who:  Imported by uvicorn (devcamper.main:app), Alembic and pytest.

Layers:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, Result rendering
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← authorization, orchestration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Application Context (Resources)   │  ← engine, geocoder, storage, mail
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
