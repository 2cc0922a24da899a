"""Contract value endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1._errors import raise_http
from app.core.dependencies import get_db_session
from app.core.exceptions import InvoiceTrackerError
from app.schemas.common import APIEnvelope
from app.schemas.contracts import (
    ContractProgressResponse,
    ContractResponse,
    ContractUpsertRequest,
    ContractUpsertResponse,
    ContractValueUpdateRequest,
)
from app.services.contract_service import ContractService
from app.services.exchange_rates import get_exchange_rates

router = APIRouter(tags=["contracts"])


@router.get("/contracts", response_model=list[ContractResponse])
def list_contracts(db: Session = Depends(get_db_session)) -> list[ContractResponse]:
    return [ContractResponse.model_validate(row) for row in ContractService(db).list_contracts()]


@router.post("/contracts", response_model=ContractUpsertResponse)
def upsert_contract(payload: ContractUpsertRequest, db: Session = Depends(get_db_session)) -> ContractUpsertResponse:
    try:
        contract, action = ContractService(db).upsert_contract(
            payload.contract_name, payload.contract_value, payload.currency
        )
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return ContractUpsertResponse(action=action, contract=ContractResponse.model_validate(contract))


@router.get("/contracts/progress", response_model=list[ContractProgressResponse])
def contract_progress(db: Session = Depends(get_db_session)) -> list[ContractProgressResponse]:
    rows = ContractService(db).contract_progress(rates=get_exchange_rates())
    return [ContractProgressResponse(**row) for row in rows]


@router.put("/contracts/{contract_name}", response_model=ContractResponse)
def update_contract(
    contract_name: str,
    payload: ContractValueUpdateRequest,
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    try:
        contract = ContractService(db).update_contract(contract_name, payload.contract_value, payload.currency)
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return ContractResponse.model_validate(contract)


@router.delete("/contracts/{contract_name}", response_model=APIEnvelope)
def delete_contract(contract_name: str, db: Session = Depends(get_db_session)) -> APIEnvelope:
    try:
        ContractService(db).delete_contract(contract_name)
    except InvoiceTrackerError as exc:
        raise_http(exc)
    return APIEnvelope(message=f"Contract {contract_name} deleted")
