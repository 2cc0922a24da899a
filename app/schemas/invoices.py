"""Invoice request/response schemas for API contracts."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import ISO_DATE_PATTERN, APIEnvelope


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    invoice_number: str
    invoice_type: str
    client: str
    customer_contract: str | None = None
    oracle_contract: str | None = None
    po_number: str | None = None
    invoice_date: str
    due_date: str
    amount_due: float
    currency: str
    frequency: str
    upload_date: str | None = None
    status: str
    payment_date: str | None = None
    pdf_path: str | None = None
    pdf_original_name: str | None = None
    services: str | None = None


class InvoiceUpdateRequest(BaseModel):
    """Partial edit; only fields present in the payload are applied."""

    model_config = ConfigDict(extra="forbid")

    invoice_number: str | None = Field(default=None, max_length=64)
    invoice_date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)
    due_date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)
    client: str | None = Field(default=None, min_length=1, max_length=255)
    customer_contract: str | None = Field(default=None, max_length=128)
    oracle_contract: str | None = Field(default=None, max_length=128)
    po_number: str | None = Field(default=None, max_length=128)
    invoice_type: str | None = None
    amount_due: float | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    status: str | None = None
    payment_date: str | None = None
    services: str | None = Field(default=None, max_length=20000)
    frequency: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ExtractionDiagnosticResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    field: str
    reason: str
    fallback_value: Any = None


class FileResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    filename: str
    status: str
    invoice_id: str | None = None
    invoice_number: str | None = None
    message: str | None = None
    diagnostics: list[ExtractionDiagnosticResponse] = Field(default_factory=list)


class DuplicateNoticeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invoice_number: str
    filename: str
    existing_id: str


class UploadResponse(APIEnvelope):
    invoices: list[InvoiceResponse] = Field(default_factory=list)
    duplicates: list[DuplicateNoticeResponse] = Field(default_factory=list)
    results: list[FileResultResponse] = Field(default_factory=list)
    expected_created: int = 0


class DuplicateNumberResponse(BaseModel):
    invoice_number: str
    count: int


class DeleteAllResponse(APIEnvelope):
    deleted_invoices: int = 0
    moved_files: int = 0


class PaymentImportResponse(APIEnvelope):
    updated_count: int = 0
