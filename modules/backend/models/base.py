"""
SQLAlchemy Base Model.

Declarative base shared by Note and Image, plus the column mixins they
combine. Constraint names follow a fixed convention so Alembic's batch
mode can rebuild SQLite tables without guessing names.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Integer, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from modules.backend.core.utils import unix_now, utc_now

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class IntegerIdMixin:
    """Database-assigned integer key."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class UUIDMixin:
    """Random UUID4 string key, assigned on insert."""

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )


class TimestampMixin:
    """Naive-UTC created_at / updated_at; updated_at moves on every UPDATE."""

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class UnixCreatedMixin:
    """Integer seconds since the epoch, for rows that are never updated."""

    created_at: Mapped[int] = mapped_column(Integer, default=unix_now, nullable=False)
