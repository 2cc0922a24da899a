"""Expected (forecast) invoice schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExpectedInvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client: str
    customer_contract: str | None = None
    invoice_type: str
    expected_amount: float
    currency: str
    expected_date: str
    frequency: str
    last_invoice_number: str | None = None
    last_invoice_date: str | None = None
    acknowledged: bool
    acknowledged_date: str | None = None


class AcknowledgeRequest(BaseModel):
    acknowledged: bool


class DismissRequest(BaseModel):
    dismissed_by: str | None = Field(default=None, max_length=128)


class DismissedExpectedInvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client: str
    customer_contract: str | None = None
    invoice_type: str
    expected_date: str
    dismissed_date: str
    dismissed_by: str | None = None


class GenerationResponse(BaseModel):
    created: int
