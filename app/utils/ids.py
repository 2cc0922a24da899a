"""Identifier generation helpers."""

from __future__ import annotations

import time
import uuid


def new_record_id() -> str:
    """Create an opaque row id: millisecond timestamp plus a random suffix."""
    return f"{int(time.time() * 1000)}{uuid.uuid4().hex[:9]}"


def new_trace_id() -> str:
    """Create a UUID4-based trace identifier for sweep and upload logs."""
    return uuid.uuid4().hex
