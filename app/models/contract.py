"""Contract model module."""

from __future__ import annotations

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import AuditMixin, Base, RecordIdMixin


class Contract(Base, RecordIdMixin, AuditMixin):
    """User-entered contract value keyed by the contract name printed on invoices."""

    __tablename__ = "contracts"

    contract_name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    contract_value: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
