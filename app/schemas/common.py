"""Common schema module."""

from __future__ import annotations

from pydantic import BaseModel

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class APIEnvelope(BaseModel):
    status: str = "ok"
    message: str | None = None


class ErrorEnvelope(BaseModel):
    status: str = "error"
    error_code: str
    detail: str


class DeleteCountResponse(APIEnvelope):
    deleted: int = 0
