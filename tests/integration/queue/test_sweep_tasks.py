from __future__ import annotations

from app.tasks.celery_app import celery_app
from app.tasks.registry import CLEANUP_ACKNOWLEDGED, EXCHANGE_RATES, EXPECTED_INVOICES, TaskRegistry, default_registry
from app.tasks.sweeps import execute_sweep


def test_default_registry_has_every_sweep():
    assert default_registry.keys() == sorted([CLEANUP_ACKNOWLEDGED, EXCHANGE_RATES, EXPECTED_INVOICES])


def test_beat_schedule_targets_registered_sweeps():
    scheduled = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}
    assert scheduled == set(default_registry.keys())


def test_execute_sweep_reports_executor_result():
    registry = TaskRegistry()
    registry.register("test.sweep", lambda trace_id: {"created": 3})

    result = execute_sweep("test.sweep", registry=registry)

    assert result == {"task_key": "test.sweep", "status": "succeeded", "created": 3}


def test_execute_sweep_reports_failures():
    registry = TaskRegistry()

    def _boom(trace_id):
        raise RuntimeError("database is locked")

    registry.register("test.failing", _boom)

    result = execute_sweep("test.failing", registry=registry)
    assert result["status"] == "failed"
    assert "database is locked" in result["error"]


def test_unknown_sweep_is_reported_as_failed():
    result = execute_sweep("test.missing", registry=TaskRegistry())
    assert result["status"] == "failed"
