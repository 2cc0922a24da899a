"""Forecasting of recurring invoices.

Each ``(client, contract)`` group moves through four states: no forecast,
forecast pending (an ``expected_invoices`` row), satisfied (a real invoice
arrived and the row was deleted) and dismissed (row deleted and a tombstone
written so the sweep never recreates it).
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy import Boolean, DateTime, Numeric, String, and_, delete, exists, func, insert, literal, select
from sqlalchemy.orm import Session

from app.core.config import Config, get_config
from app.core.enums import Frequency
from app.core.exceptions import NotFoundError
from app.core.logging import LogContext, build_log_event
from app.models.base import utcnow
from app.models.expected_invoice import DismissedExpectedInvoice, ExpectedInvoice
from app.models.invoice import Invoice
from app.parsing.dates import add_months
from app.services.base_service import BaseService
from app.utils.ids import new_record_id
from app.utils.validators import is_iso_date, normalize_key

logger = logging.getLogger(__name__)

FREQUENCY_MONTHS = {
    Frequency.MONTHLY.value: 1,
    Frequency.QUARTERLY.value: 3,
    Frequency.TRI_ANNUAL.value: 4,
    Frequency.BI_ANNUAL.value: 6,
    Frequency.ANNUAL.value: 12,
}

# A forecast within this many days of the computed date counts as the same forecast.
DUPLICATE_WINDOW_DAYS = 1


def _norm(column):
    return func.lower(func.trim(column))


def next_expected_date(last_date: str | None, frequency: str | None) -> str | None:
    """Return the next ``YYYY-MM-DD`` an invoice of ``frequency`` is due after ``last_date``."""
    months = FREQUENCY_MONTHS.get(frequency or "")
    if not months or not is_iso_date(last_date):
        return None
    return add_months(date.fromisoformat(last_date), months).isoformat()


def _tombstoned(client_key, contract_key, invoice_type, expected_date):
    return exists().where(
        _norm(DismissedExpectedInvoice.client) == client_key,
        _norm(DismissedExpectedInvoice.customer_contract) == contract_key,
        DismissedExpectedInvoice.invoice_type == invoice_type,
        DismissedExpectedInvoice.expected_date == expected_date,
    )


class ExpectedInvoiceService(BaseService):
    """Generates, reconciles and manages forecast rows."""

    def __init__(self, db: Session | None = None, config: Config | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()

    def _latest_recurring_invoices(self) -> list[Invoice]:
        rows = (
            self.db.query(Invoice)
            .filter(Invoice.frequency != Frequency.ADHOC.value)
            .order_by(Invoice.invoice_date.desc(), Invoice.created_at.desc())
            .all()
        )
        latest: dict[tuple[str, str], Invoice] = {}
        for row in rows:
            key = (normalize_key(row.client), normalize_key(row.customer_contract))
            latest.setdefault(key, row)
        return list(latest.values())

    def _insert_if_absent(self, invoice: Invoice, expected_date: str) -> bool:
        """Insert one forecast unless a nearby forecast or a tombstone already exists.

        Runs as a single ``INSERT ... SELECT ... WHERE NOT EXISTS`` statement so a
        concurrent upload or sweep cannot slip in between check and insert.
        """
        client_key = normalize_key(invoice.client)
        contract_key = normalize_key(invoice.customer_contract)
        target = date.fromisoformat(expected_date)
        window_start = (target - timedelta(days=DUPLICATE_WINDOW_DAYS)).isoformat()
        window_end = (target + timedelta(days=DUPLICATE_WINDOW_DAYS)).isoformat()
        now = utcnow()

        nearby_forecast = exists().where(
            _norm(ExpectedInvoice.client) == client_key,
            _norm(ExpectedInvoice.customer_contract) == contract_key,
            ExpectedInvoice.expected_date.between(window_start, window_end),
        )
        values = select(
            literal(new_record_id(), String),
            literal(invoice.client, String),
            literal(invoice.customer_contract or "", String),
            literal(invoice.invoice_type, String),
            literal(invoice.amount_due or 0, Numeric(14, 2, asdecimal=False)),
            literal(invoice.currency, String),
            literal(expected_date, String),
            literal(invoice.frequency, String),
            literal(invoice.invoice_number, String),
            literal(invoice.invoice_date, String),
            literal(False, Boolean),
            literal(now, DateTime(timezone=True)),
            literal(now, DateTime(timezone=True)),
        ).where(
            ~nearby_forecast,
            ~_tombstoned(client_key, contract_key, invoice.invoice_type, expected_date),
        )
        statement = insert(ExpectedInvoice).from_select(
            [
                "id",
                "client",
                "customer_contract",
                "invoice_type",
                "expected_amount",
                "currency",
                "expected_date",
                "frequency",
                "last_invoice_number",
                "last_invoice_date",
                "acknowledged",
                "created_at",
                "updated_at",
            ],
            values,
        )
        result = self.db.execute(statement)
        return result.rowcount == 1

    def generate_expected_invoices(self, today: date | None = None, trace_id: str | None = None) -> int:
        """Create forecasts for recurring groups whose next invoice is overdue.

        Returns the number of rows inserted.
        """
        today_iso = self._today(today).isoformat()
        context = LogContext(task_key="sweeps.expected_invoices", trace_id=trace_id)
        created = 0
        skipped = 0
        try:
            for invoice in self._latest_recurring_invoices():
                expected_date = next_expected_date(invoice.invoice_date, invoice.frequency)
                if expected_date is None:
                    skipped += 1
                    logger.warning(
                        "expected_invoices.invalid_last_date",
                        extra=build_log_event(
                            "expected_invoices.invalid_last_date",
                            LogContext(invoice_number=invoice.invoice_number, trace_id=trace_id),
                            invoice_date=invoice.invoice_date,
                            frequency=invoice.frequency,
                        ),
                    )
                    continue
                if expected_date > today_iso:
                    continue
                if self._insert_if_absent(invoice, expected_date):
                    created += 1
            self.commit()
        except Exception:
            self.rollback()
            raise

        logger.info(
            "expected_invoices.generated",
            extra=build_log_event("expected_invoices.generated", context, created=created, skipped=skipped),
        )
        return created

    def reconcile_with_invoice(self, invoice: Invoice) -> int:
        """Delete forecasts satisfied by a newly uploaded invoice; returns rows removed."""
        if invoice.frequency == Frequency.ADHOC.value or not is_iso_date(invoice.invoice_date):
            return 0

        invoice_day = date.fromisoformat(invoice.invoice_date)
        tolerance = self.config.EXPECTED_MATCH_TOLERANCE_DAYS
        candidates = (
            self.db.query(ExpectedInvoice)
            .filter(
                _norm(ExpectedInvoice.client) == normalize_key(invoice.client),
                _norm(ExpectedInvoice.customer_contract) == normalize_key(invoice.customer_contract),
                ExpectedInvoice.invoice_type == invoice.invoice_type,
                ExpectedInvoice.frequency == invoice.frequency,
            )
            .all()
        )
        removed = 0
        for forecast in candidates:
            if not is_iso_date(forecast.expected_date):
                continue
            if abs((invoice_day - date.fromisoformat(forecast.expected_date)).days) <= tolerance:
                self.db.delete(forecast)
                removed += 1

        if removed:
            self.commit()
            logger.info(
                "expected_invoices.reconciled",
                extra=build_log_event(
                    "expected_invoices.reconciled",
                    LogContext(invoice_number=invoice.invoice_number),
                    removed=removed,
                ),
            )
        return removed

    def list_pending(self) -> list[ExpectedInvoice]:
        """Forecast rows ordered by expected date, excluding any with a tombstone."""
        tombstone = exists().where(
            _norm(DismissedExpectedInvoice.client) == _norm(ExpectedInvoice.client),
            _norm(DismissedExpectedInvoice.customer_contract) == _norm(ExpectedInvoice.customer_contract),
            DismissedExpectedInvoice.invoice_type == ExpectedInvoice.invoice_type,
            DismissedExpectedInvoice.expected_date == ExpectedInvoice.expected_date,
        )
        statement = select(ExpectedInvoice).where(~tombstone).order_by(ExpectedInvoice.expected_date.asc())
        return list(self.db.scalars(statement).all())

    def get(self, expected_id: str) -> ExpectedInvoice:
        forecast = self.db.get(ExpectedInvoice, expected_id)
        if forecast is None:
            raise NotFoundError(f"Expected invoice {expected_id} not found")
        return forecast

    def acknowledge(self, expected_id: str, acknowledged: bool, today: date | None = None) -> ExpectedInvoice:
        forecast = self.get(expected_id)
        forecast.acknowledged = bool(acknowledged)
        forecast.acknowledged_date = self._today(today).isoformat() if acknowledged else None
        self.commit()
        self.db.refresh(forecast)
        return forecast

    def dismiss(
        self,
        expected_id: str,
        dismissed_by: str | None = None,
        today: date | None = None,
    ) -> DismissedExpectedInvoice:
        """Tombstone a forecast and delete it so later sweeps leave it alone."""
        forecast = self.get(expected_id)
        tombstone = (
            self.db.query(DismissedExpectedInvoice)
            .filter(
                _norm(DismissedExpectedInvoice.client) == normalize_key(forecast.client),
                _norm(DismissedExpectedInvoice.customer_contract) == normalize_key(forecast.customer_contract),
                DismissedExpectedInvoice.invoice_type == forecast.invoice_type,
                DismissedExpectedInvoice.expected_date == forecast.expected_date,
            )
            .first()
        )
        if tombstone is None:
            tombstone = DismissedExpectedInvoice(
                client=forecast.client,
                customer_contract=forecast.customer_contract or "",
                invoice_type=forecast.invoice_type,
                expected_date=forecast.expected_date,
                dismissed_date=self._today(today).isoformat(),
                dismissed_by=dismissed_by,
            )
            self.db.add(tombstone)
        self.db.delete(forecast)
        self.commit()

        logger.info(
            "expected_invoices.dismissed",
            extra={
                "event": "expected_invoices.dismissed",
                "client": tombstone.client,
                "expected_date": tombstone.expected_date,
                "dismissed_by": dismissed_by,
            },
        )
        return tombstone

    def cleanup_acknowledged(self, today: date | None = None) -> int:
        """Delete acknowledged forecasts older than the retention window."""
        cutoff = (self._today(today) - timedelta(days=self.config.ACKNOWLEDGED_RETENTION_DAYS)).isoformat()
        statement = delete(ExpectedInvoice).where(
            and_(
                ExpectedInvoice.acknowledged.is_(True),
                ExpectedInvoice.acknowledged_date.is_not(None),
                ExpectedInvoice.acknowledged_date < cutoff,
            )
        )
        try:
            removed = self.db.execute(statement).rowcount or 0
            self.commit()
        except Exception:
            self.rollback()
            raise
        logger.info(
            "expected_invoices.acknowledged_cleaned",
            extra={"event": "expected_invoices.acknowledged_cleaned", "removed": removed, "cutoff": cutoff},
        )
        return removed

    def delete_all(self) -> int:
        removed = self.db.execute(delete(ExpectedInvoice)).rowcount or 0
        self.commit()
        return removed
