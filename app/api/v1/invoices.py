"""Invoice endpoints: upload, CRUD, duplicates and payment import."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.api.v1._errors import raise_http
from app.core.config import get_config
from app.core.dependencies import get_db_session
from app.core.exceptions import InvoiceTrackerError
from app.schemas.common import APIEnvelope, DeleteCountResponse
from app.schemas.invoices import (
    DeleteAllResponse,
    DuplicateNumberResponse,
    InvoiceResponse,
    InvoiceUpdateRequest,
    PaymentImportResponse,
    UploadResponse,
)
from app.services.ingestion_service import IngestionService, UploadedFile
from app.services.invoice_service import InvoiceService
from app.services.payment_import_service import PaymentImportService

router = APIRouter(tags=["invoices"])


def _read_upload(upload: UploadFile) -> UploadedFile:
    try:
        return UploadedFile(filename=upload.filename or "upload.pdf", content=upload.file.read())
    finally:
        upload.file.close()


@router.get("/invoices", response_model=list[InvoiceResponse])
def list_invoices(db: Session = Depends(get_db_session)) -> list[InvoiceResponse]:
    return [InvoiceResponse.model_validate(row) for row in InvoiceService(db).list_invoices()]


@router.post("/invoices/upload", response_model=UploadResponse)
def upload_invoices(
    files: list[UploadFile] = File(...),
    db: Session = Depends(get_db_session),
) -> UploadResponse:
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")
    uploads = [_read_upload(upload) for upload in files]
    batch = IngestionService(db).upload_batch(uploads)
    return UploadResponse(
        invoices=[InvoiceResponse.model_validate(row) for row in batch.invoices],
        duplicates=[asdict(duplicate) for duplicate in batch.duplicates],
        results=[asdict(result) for result in batch.results],
        expected_created=batch.expected_created,
    )


@router.post("/invoices/{invoice_id}/replace", response_model=InvoiceResponse)
def replace_invoice(
    invoice_id: str,
    pdf: UploadFile = File(...),
    db: Session = Depends(get_db_session),
) -> InvoiceResponse:
    try:
        invoice = IngestionService(db).replace_invoice(invoice_id, _read_upload(pdf))
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return InvoiceResponse.model_validate(invoice)


@router.post("/invoices/payments", response_model=PaymentImportResponse)
def import_payments(
    spreadsheet: UploadFile = File(...),
    db: Session = Depends(get_db_session),
) -> PaymentImportResponse:
    upload = _read_upload(spreadsheet)
    try:
        updated = PaymentImportService(db).import_payments(upload.content, upload.filename)
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return PaymentImportResponse(updated_count=updated)


@router.get("/invoices/duplicates", response_model=list[DuplicateNumberResponse])
def list_duplicate_numbers(db: Session = Depends(get_db_session)) -> list[DuplicateNumberResponse]:
    return [DuplicateNumberResponse(**item) for item in InvoiceService(db).list_duplicate_numbers()]


@router.get("/invoices/duplicates/{invoice_number}", response_model=list[InvoiceResponse])
def list_duplicates(invoice_number: str, db: Session = Depends(get_db_session)) -> list[InvoiceResponse]:
    return [InvoiceResponse.model_validate(row) for row in InvoiceService(db).list_by_number(invoice_number)]


@router.delete("/invoices/duplicates/{invoice_number}", response_model=DeleteCountResponse)
def delete_duplicates(invoice_number: str, db: Session = Depends(get_db_session)) -> DeleteCountResponse:
    deleted = InvoiceService(db).delete_duplicates(invoice_number)
    if not deleted:
        return DeleteCountResponse(message="No duplicates found", deleted=0)
    return DeleteCountResponse(message=f"Deleted {deleted} duplicate(s), kept the most recent", deleted=deleted)


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: str, db: Session = Depends(get_db_session)) -> InvoiceResponse:
    try:
        return InvoiceResponse.model_validate(InvoiceService(db).get_invoice(invoice_id))
    except InvoiceTrackerError as exc:
        raise_http(exc)


@router.patch("/invoices/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: str,
    payload: InvoiceUpdateRequest,
    db: Session = Depends(get_db_session),
) -> InvoiceResponse:
    try:
        invoice = InvoiceService(db).update_invoice(invoice_id, payload.changes())
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return InvoiceResponse.model_validate(invoice)


@router.delete("/invoices/{invoice_id}", response_model=APIEnvelope)
def delete_invoice(invoice_id: str, db: Session = Depends(get_db_session)) -> APIEnvelope:
    try:
        InvoiceService(db).delete_invoice(invoice_id)
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return APIEnvelope(message=f"Invoice {invoice_id} deleted")


@router.delete("/invoices", response_model=DeleteAllResponse)
def delete_all_invoices(db: Session = Depends(get_db_session)) -> DeleteAllResponse:
    if get_config().is_production:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Bulk delete is disabled in production")
    summary = InvoiceService(db).delete_all()
    return DeleteAllResponse(**summary)
