"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from app.api.v1 import contracts, expected_invoices, health, invoices, query
from app.core.config import get_config

api_router = APIRouter(prefix=get_config().API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(invoices.router)
api_router.include_router(contracts.router)
api_router.include_router(expected_invoices.router)
api_router.include_router(query.router)


def get_api_router() -> APIRouter:
    return api_router
