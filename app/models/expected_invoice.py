"""Forecast rows for recurring invoices and their dismissal tombstones."""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import CALENDAR_DATE, AuditMixin, Base, RecordIdMixin


class ExpectedInvoice(Base, RecordIdMixin, AuditMixin):
    __tablename__ = "expected_invoices"
    __table_args__ = (
        Index("idx_expected_invoices_group", "client", "customer_contract", "expected_date"),
        Index("idx_expected_invoices_acknowledged", "acknowledged"),
    )

    client: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_contract: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    invoice_type: Mapped[str] = mapped_column(String(20), nullable=False)
    expected_amount: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    expected_date: Mapped[str] = mapped_column(CALENDAR_DATE, nullable=False)
    frequency: Mapped[str] = mapped_column(String(20), nullable=False)
    last_invoice_number: Mapped[str | None] = mapped_column(String(64))
    last_invoice_date: Mapped[str | None] = mapped_column(CALENDAR_DATE)
    acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    acknowledged_date: Mapped[str | None] = mapped_column(CALENDAR_DATE)


class DismissedExpectedInvoice(Base, RecordIdMixin, AuditMixin):
    """Tombstone that stops a dismissed forecast from being generated again."""

    __tablename__ = "dismissed_expected_invoices"
    __table_args__ = (
        UniqueConstraint(
            "client",
            "customer_contract",
            "invoice_type",
            "expected_date",
            name="uq_dismissed_expected_invoices_key",
        ),
    )

    client: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_contract: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    invoice_type: Mapped[str] = mapped_column(String(20), nullable=False)
    expected_date: Mapped[str] = mapped_column(CALENDAR_DATE, nullable=False)
    dismissed_date: Mapped[str] = mapped_column(CALENDAR_DATE, nullable=False)
    dismissed_by: Mapped[str | None] = mapped_column(String(128))
