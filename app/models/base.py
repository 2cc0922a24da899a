"""Shared SQLAlchemy base and common mixins for modular models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.utils.ids import new_record_id

# Calendar dates are stored as YYYY-MM-DD text, never as timezone-aware values.
CALENDAR_DATE = String(10)


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp helper."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base class for the invoice tracker schema."""


class RecordIdMixin:
    """Opaque string primary key."""

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_record_id)


class AuditMixin:
    """Row bookkeeping timestamps (not business dates)."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
