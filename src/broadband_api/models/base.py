"""Declarative base and shared column mixins for ORM models."""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only auto-increments INTEGER PRIMARY KEY columns.
BigIntegerPK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Declarative base for all persisted tables."""


class IdentityMixin:
    """Surrogate auto-incrementing integer primary key."""

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
