"""Identifier source and clock used when records are created."""
from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone


def new_metric_id() -> str:
    """Millisecond timestamp plus a random suffix; unique within the same millisecond."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:10]}"


def new_report_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = ["new_metric_id", "new_report_id", "utcnow"]
