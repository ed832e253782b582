#!/usr/bin/env python3
"""
Records API – Structured Invocation Logging.

Small, Lambda-friendly helpers that emit JSON events to CloudWatch so that
dashboards and log queries can track each request without parsing free-form
messages.

Responsibilities
----------------
* ``log_event`` – write one JSON event with a UTC timestamp
* ``observe``   – context manager that logs ``<NAME>_STARTED`` on entry and
  ``<NAME>_COMPLETED`` / ``<NAME>_FAILED`` on exit, with the duration

Typical usage
-------------
    from records_api.records.observability import observe

    def lambda_handler(event, context):
        with observe("RECORDS_REQUEST", request_id=context.aws_request_id):
            ...
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

# Use the root logger so CloudWatch picks everything up consistently
logger = logging.getLogger()
logger.setLevel(logging.INFO)


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> Dict[str, Any]:
    """Log a structured event and return the payload that was written."""
    payload: Dict[str, Any] = {
        "event": event,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **fields,
    }
    logger.log(level, json.dumps(payload, default=str))
    return payload


@contextmanager
def observe(name: str, **fields: Any) -> Iterator[Dict[str, Any]]:
    """
    Bracket a block of work with STARTED / COMPLETED / FAILED events.

    The yielded dict can be filled in by the caller; its contents are added
    to the completion event. Exceptions are logged and re-raised.
    """
    started = time.perf_counter()
    extra: Dict[str, Any] = {}
    log_event(f"{name}_STARTED", **fields)

    try:
        yield extra
    except Exception as exc:
        log_event(
            f"{name}_FAILED",
            level=logging.ERROR,
            error_type=type(exc).__name__,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            **fields,
        )
        raise

    log_event(
        f"{name}_COMPLETED",
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
        **{**fields, **extra},
    )
