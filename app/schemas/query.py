"""Invoice question schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.invoices import InvoiceResponse


class QueryRequest(BaseModel):
    query: str = Field(min_length=1, max_length=500)


class QueryResponse(BaseModel):
    type: str
    count: int
    value: float | None = None
    total: float | None = None
    invoices: list[InvoiceResponse] = Field(default_factory=list)
