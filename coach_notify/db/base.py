"""SQLAlchemy base declarative class and metadata utilities."""
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Matches the constraint names used by the Alembic migrations.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for coach-notify models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
