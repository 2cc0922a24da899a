"""Pydantic schema package for API contracts."""

from app.schemas.common import APIEnvelope, DeleteCountResponse, ErrorEnvelope
from app.schemas.contracts import (
    ContractProgressResponse,
    ContractResponse,
    ContractUpsertRequest,
    ContractUpsertResponse,
    ContractValueUpdateRequest,
)
from app.schemas.expected_invoices import (
    AcknowledgeRequest,
    DismissedExpectedInvoiceResponse,
    DismissRequest,
    ExpectedInvoiceResponse,
    GenerationResponse,
)
from app.schemas.invoices import (
    DeleteAllResponse,
    DuplicateNumberResponse,
    InvoiceResponse,
    InvoiceUpdateRequest,
    PaymentImportResponse,
    UploadResponse,
)
from app.schemas.query import QueryRequest, QueryResponse

__all__ = [
    "APIEnvelope",
    "AcknowledgeRequest",
    "ContractProgressResponse",
    "ContractResponse",
    "ContractUpsertRequest",
    "ContractUpsertResponse",
    "ContractValueUpdateRequest",
    "DeleteAllResponse",
    "DeleteCountResponse",
    "DismissRequest",
    "DismissedExpectedInvoiceResponse",
    "DuplicateNumberResponse",
    "ErrorEnvelope",
    "ExpectedInvoiceResponse",
    "GenerationResponse",
    "InvoiceResponse",
    "InvoiceUpdateRequest",
    "PaymentImportResponse",
    "QueryRequest",
    "QueryResponse",
    "UploadResponse",
]
