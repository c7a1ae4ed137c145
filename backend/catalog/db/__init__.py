"""Database Metadata — SQLAlchemy declarative Base.

Invariants:
    - Single metadata object shared by models, create_all and alembic
"""
