"""Plain-English invoice questions and exchange rates."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db_session
from app.schemas.invoices import InvoiceResponse
from app.schemas.query import QueryRequest, QueryResponse
from app.services.exchange_rates import get_exchange_rates
from app.services.invoice_service import InvoiceService
from app.services.query_service import run_invoice_query

router = APIRouter(tags=["query"])


@router.post("/query", response_model=QueryResponse)
def ask(payload: QueryRequest, db: Session = Depends(get_db_session)) -> QueryResponse:
    answer = run_invoice_query(payload.query, InvoiceService(db).list_invoices(), rates=get_exchange_rates())
    answer["invoices"] = [InvoiceResponse.model_validate(row) for row in answer["invoices"]]
    return QueryResponse(**answer)


@router.get("/exchange-rates")
def exchange_rates() -> dict[str, float]:
    return get_exchange_rates()
