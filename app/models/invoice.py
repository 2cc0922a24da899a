"""Invoice model module."""

from __future__ import annotations

from sqlalchemy import Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import Frequency, InvoiceStatus, InvoiceType
from app.models.base import CALENDAR_DATE, AuditMixin, Base, RecordIdMixin


class Invoice(Base, RecordIdMixin, AuditMixin):
    """One row per uploaded PDF.

    ``invoice_number`` is not unique; duplicates are reported, not rejected.
    ``customer_contract`` is a lookup key into ``contracts.contract_name``,
    not a foreign key.
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index("idx_invoices_invoice_number", "invoice_number"),
        Index("idx_invoices_client_contract", "client", "customer_contract"),
        Index("idx_invoices_status", "status"),
    )

    invoice_number: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    invoice_type: Mapped[str] = mapped_column(String(20), default=InvoiceType.PS.value, nullable=False)
    client: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_contract: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    oracle_contract: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    po_number: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    invoice_date: Mapped[str] = mapped_column(CALENDAR_DATE, nullable=False)
    due_date: Mapped[str] = mapped_column(CALENDAR_DATE, nullable=False)
    amount_due: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    frequency: Mapped[str] = mapped_column(String(20), default=Frequency.ADHOC.value, nullable=False)
    upload_date: Mapped[str | None] = mapped_column(CALENDAR_DATE)
    status: Mapped[str] = mapped_column(String(20), default=InvoiceStatus.PENDING.value, nullable=False)
    payment_date: Mapped[str | None] = mapped_column(CALENDAR_DATE)
    pdf_path: Mapped[str | None] = mapped_column(String(512))
    pdf_original_name: Mapped[str | None] = mapped_column(String(255))
    services: Mapped[str | None] = mapped_column(Text)
