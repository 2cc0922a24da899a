"""Shared error mapping for API v1 route modules."""

from __future__ import annotations

from fastapi import HTTPException, status

from app.core.exceptions import ExtractionError, InvoiceTrackerError, NotFoundError, ValidationError


def map_domain_error(exc: InvoiceTrackerError) -> tuple[int, str]:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND, str(exc)
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST, str(exc)
    if isinstance(exc, ExtractionError):
        return 422, str(exc)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc)


def raise_http(exc: InvoiceTrackerError) -> None:
    code, detail = map_domain_error(exc)
    raise HTTPException(status_code=code, detail=detail) from exc
