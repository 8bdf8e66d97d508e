"""
Todo Cards Backend — Application Package Initializer
=====================================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn (`app.main:app`), Alembic and pytest.

Architecture Note:
    The backend is three thin layers over one database:

    ┌─────────────────────────────────────┐
    │        Routes (HTTP handlers)       │  ← parse request, write response
    ├─────────────────────────────────────┤
    │     Services (business rules)       │  ← validate, open transaction, map
    ├─────────────────────────────────────┤
    │     Repository (SQL statements)     │  ← build query, paginate, count
    ├─────────────────────────────────────┤
    │   Models & Database (persistence)   │  ← SQLAlchemy ORM + async sessions
    └─────────────────────────────────────┘

    Data flows top-down per request; there is no state shared between
    requests other than the connection pool.
"""

__version__ = "1.0.0"
