"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic auto-generates migrations by comparing these
models to the actual DB.

Key concepts:
- UUID primary keys, assigned by the application on insert
- Portable types (sqlalchemy.Uuid) so the same schema runs on PostgreSQL
  in production and SQLite in tests
- The unique constraint on accounts.username is what actually guarantees
  uniqueness; application code only translates its violation
"""

import datetime as dt
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


def today() -> dt.date:
    return utcnow().date()


class Account(Base):
    """A user account. Created on registration, never updated or deleted."""

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    username: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


class Item(Base):
    """A personal record. owner_id is set once, on creation.

    Learn: amount is free text on purpose (clients send "5", "5.00",
    "5 EUR"); the service never does arithmetic on it.
    """

    __tablename__ = "items"
    __table_args__ = (Index("idx_items_owner", "owner_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[str] = mapped_column(String(100), nullable=False)
    product: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, default=today)
    time: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )
