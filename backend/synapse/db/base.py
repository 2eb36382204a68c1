"""SQLAlchemy Declarative Base — shared base class and column types for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Surrogate keys are BIGINT in PostgreSQL and INTEGER in SQLite (rowid autoincrement)

Design Decisions:
    - Separate file for Base: avoids circular imports between models (ADR: SQLAlchemy best practice)
    - BigIntId variant: SQLite only autoincrements INTEGER PRIMARY KEY, tests run on SQLite
"""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

BigIntId = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all Synapse ORM models."""
    pass
