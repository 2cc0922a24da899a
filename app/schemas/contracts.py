"""Contract request/response schemas for API contracts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import APIEnvelope


class ContractUpsertRequest(BaseModel):
    contract_name: str = Field(min_length=1, max_length=128)
    contract_value: float = Field(gt=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class ContractValueUpdateRequest(BaseModel):
    contract_value: float = Field(gt=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    contract_name: str
    contract_value: float
    currency: str


class ContractUpsertResponse(APIEnvelope):
    action: str
    contract: ContractResponse


class ContractProgressResponse(BaseModel):
    contract_name: str
    contract_value: float
    currency: str
    contract_value_usd: float
    invoiced_usd: float
    paid_usd: float
    remaining_usd: float
    invoiced_percentage: int
    paid_percentage: int
    invoice_count: int
