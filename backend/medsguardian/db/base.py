"""Module: base."""

from sqlalchemy.orm import DeclarativeBase

# Shared SQLAlchemy declarative base that all ORM models inherit from.
# Alembic and create_all both read the tables off Base.metadata.
class Base(DeclarativeBase):
    pass
