"""Background sweeps: forecast generation, rate refresh, acknowledged cleanup."""

from __future__ import annotations

import logging
from typing import Any

from app.tasks.celery_app import celery_app
from app.tasks.hooks import after_task, before_task
from app.tasks.registry import CLEANUP_ACKNOWLEDGED, EXCHANGE_RATES, EXPECTED_INVOICES, TaskRegistry, default_registry
from app.utils.ids import new_trace_id

logger = logging.getLogger(__name__)


def execute_sweep(task_key: str, registry: TaskRegistry | None = None) -> dict[str, Any]:
    """Run one registered sweep, logging start and finish.

    Failures are logged and reported in the returned payload; the next
    scheduled run is the retry.
    """
    trace_id = new_trace_id()
    logger.info("task.start", extra=before_task(task_key, trace_id))
    try:
        result = (registry or default_registry).get(task_key)(trace_id)
    except Exception as exc:
        logger.exception("task.failed", extra=after_task(task_key, trace_id, "failed", error=str(exc)))
        return {"task_key": task_key, "status": "failed", "error": str(exc)}

    logger.info("task.finish", extra=after_task(task_key, trace_id, "succeeded", **result))
    return {"task_key": task_key, "status": "succeeded", **result}


@celery_app.task(name=EXPECTED_INVOICES)
def generate_expected_invoices_task() -> dict[str, Any]:
    return execute_sweep(EXPECTED_INVOICES)


@celery_app.task(name=EXCHANGE_RATES)
def refresh_exchange_rates_task() -> dict[str, Any]:
    return execute_sweep(EXCHANGE_RATES)


@celery_app.task(name=CLEANUP_ACKNOWLEDGED)
def cleanup_acknowledged_task() -> dict[str, Any]:
    return execute_sweep(CLEANUP_ACKNOWLEDGED)
