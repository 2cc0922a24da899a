"""Forecast (expected invoice) endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.api.v1._errors import raise_http
from app.core.dependencies import get_db_session
from app.core.exceptions import InvoiceTrackerError
from app.schemas.expected_invoices import (
    AcknowledgeRequest,
    DismissedExpectedInvoiceResponse,
    DismissRequest,
    ExpectedInvoiceResponse,
    GenerationResponse,
)
from app.services.expected_invoice_service import ExpectedInvoiceService

router = APIRouter(tags=["expected-invoices"])


@router.get("/expected-invoices", response_model=list[ExpectedInvoiceResponse])
def list_expected_invoices(db: Session = Depends(get_db_session)) -> list[ExpectedInvoiceResponse]:
    return [ExpectedInvoiceResponse.model_validate(row) for row in ExpectedInvoiceService(db).list_pending()]


@router.post("/expected-invoices/generate", response_model=GenerationResponse)
def generate_expected_invoices(db: Session = Depends(get_db_session)) -> GenerationResponse:
    return GenerationResponse(created=ExpectedInvoiceService(db).generate_expected_invoices())


@router.put("/expected-invoices/{expected_id}", response_model=ExpectedInvoiceResponse)
def acknowledge_expected_invoice(
    expected_id: str,
    payload: AcknowledgeRequest,
    db: Session = Depends(get_db_session),
) -> ExpectedInvoiceResponse:
    try:
        forecast = ExpectedInvoiceService(db).acknowledge(expected_id, payload.acknowledged)
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return ExpectedInvoiceResponse.model_validate(forecast)


@router.delete("/expected-invoices/{expected_id}", response_model=DismissedExpectedInvoiceResponse)
def dismiss_expected_invoice(
    expected_id: str,
    payload: DismissRequest | None = Body(default=None),
    db: Session = Depends(get_db_session),
) -> DismissedExpectedInvoiceResponse:
    dismissed_by = payload.dismissed_by if payload else None
    try:
        tombstone = ExpectedInvoiceService(db).dismiss(expected_id, dismissed_by=dismissed_by)
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return DismissedExpectedInvoiceResponse.model_validate(tombstone)
