"""Task registry mapping sweep keys to executable callables."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from app.services.exchange_rates import refresh_exchange_rates
from app.services.expected_invoice_service import ExpectedInvoiceService

TaskExecutor = Callable[[str | None], dict[str, Any]]

EXPECTED_INVOICES = "sweeps.expected_invoices"
EXCHANGE_RATES = "sweeps.exchange_rates"
CLEANUP_ACKNOWLEDGED = "sweeps.cleanup_acknowledged"


class TaskRegistry:
    """Mutable task registry for background sweeps."""

    def __init__(self) -> None:
        self._executors: dict[str, TaskExecutor] = {}

    def register(self, task_key: str, executor: TaskExecutor) -> None:
        self._executors[task_key] = executor

    def get(self, task_key: str) -> TaskExecutor:
        if task_key not in self._executors:
            raise KeyError(f"Unknown task key: {task_key}")
        return self._executors[task_key]

    def keys(self) -> list[str]:
        return sorted(self._executors.keys())


def _generate_expected(trace_id: str | None) -> dict[str, Any]:
    with ExpectedInvoiceService() as service:
        return {"created": service.generate_expected_invoices(trace_id=trace_id)}


def _refresh_rates(trace_id: str | None) -> dict[str, Any]:
    return {"rates": refresh_exchange_rates()}


def _cleanup_acknowledged(trace_id: str | None) -> dict[str, Any]:
    with ExpectedInvoiceService() as service:
        return {"removed": service.cleanup_acknowledged()}


def build_default_registry() -> TaskRegistry:
    registry = TaskRegistry()
    registry.register(EXPECTED_INVOICES, _generate_expected)
    registry.register(EXCHANGE_RATES, _refresh_rates)
    registry.register(CLEANUP_ACKNOWLEDGED, _cleanup_acknowledged)
    return registry


default_registry = build_default_registry()
