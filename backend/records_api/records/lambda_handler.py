#!/usr/bin/env python3
"""
Records API – Database-backed Lambda Entry Point.

This Lambda sits behind an API Gateway ``GET`` route (``AWS_PROXY``
integration) and returns rows from a MySQL table whose credentials are kept
in AWS Secrets Manager.

Responsibilities
---------------
* Obtain a live database connection from the process-wide
  `ConnectionProvider` (credentials and connection are reused across warm
  invocations)
* Read an optional ``id`` query-string parameter
  - present: look up that single record with a bound parameter
  - absent: return the first 10 records
* Shape an API Gateway proxy response with CORS headers
* Convert every failure into a structured 500 response

Typical event payload
---------------------
    {
        "queryStringParameters": {"id": "42"}
    }

Success body::

    {"success": true, "data": [...], "count": 1, "message": "Record with ID 42"}

Failure body::

    {"success": false, "data": null, "error": "Internal server error",
     "message": "Something went wrong"}

The failure ``message`` carries the exception text only when
``ENVIRONMENT=development``.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

try:
    from dotenv import load_dotenv

    load_dotenv(override=True)
except ImportError:  # pragma: no cover - optional in Lambda
    pass

from records_api.database import ConnectionProvider, OperationError
from records_api.records.observability import log_event, observe

# ============================================================
# Logging / Configuration
# ============================================================

# Use the root logger so CloudWatch picks everything up consistently
logger = logging.getLogger()
logger.setLevel(logging.INFO)

DEFAULT_TABLE = "records"
DEFAULT_LIMIT = 10

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

SUCCESS_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

ERROR_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}

# Created on first use and reused across warm invocations
_provider: Optional[ConnectionProvider] = None


def get_provider() -> ConnectionProvider:
    """Return the process-wide connection provider, creating it on first call."""
    global _provider
    if _provider is None:
        _provider = ConnectionProvider()
    return _provider


def records_table() -> str:
    """Return the configured table name, rejecting anything but an identifier."""
    table = os.environ.get("RECORDS_TABLE", DEFAULT_TABLE).strip()
    if not _IDENTIFIER.match(table):
        raise ValueError(f"RECORDS_TABLE is not a valid table name: {table!r}")
    return table


def is_development() -> bool:
    return os.environ.get("ENVIRONMENT", "production").strip().lower() == "development"


# ============================================================
# Query Logic
# ============================================================


def fetch_records(
    connection: Any,
    record_id: Optional[str] = None,
    table: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch one record by id, or the first page of records.

    Parameters
    ----------
    connection :
        Open PyMySQL connection (DictCursor).
    record_id :
        Value of the ``id`` query parameter, if any.
    table :
        Table to read. Defaults to ``records_table()``.

    Returns
    -------
    List[Dict[str, Any]]
        Rows as column → value dictionaries.

    Raises
    ------
    OperationError
        The statement failed.
    """
    table = table or records_table()

    if record_id:
        query = f"SELECT * FROM {table} WHERE id = %s"
        params: tuple = (record_id,)
    else:
        query = f"SELECT * FROM {table} LIMIT {DEFAULT_LIMIT}"
        params = ()

    try:
        with connection.cursor() as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()
    except Exception as exc:  # noqa: BLE001
        logger.error("Error executing query: %s", exc)
        raise OperationError(f"Query against {table} failed: {exc}") from exc

    return list(rows)


# ============================================================
# Response Shaping
# ============================================================


def success_response(rows: List[Dict[str, Any]], record_id: Optional[str]) -> Dict[str, Any]:
    message = f"Record with ID {record_id}" if record_id else "All records"
    return {
        "statusCode": 200,
        "headers": dict(SUCCESS_HEADERS),
        "body": json.dumps(
            {
                "success": True,
                "data": rows,
                "count": len(rows),
                "message": message,
            },
            default=str,
        ),
    }


def error_response(exc: BaseException) -> Dict[str, Any]:
    return {
        "statusCode": 500,
        "headers": dict(ERROR_HEADERS),
        "body": json.dumps(
            {
                "success": False,
                "data": None,
                "error": "Internal server error",
                "message": str(exc) if is_development() else "Something went wrong",
            }
        ),
    }


def _record_id(event: Dict[str, Any]) -> Optional[str]:
    if not isinstance(event, dict):
        raise ValueError(f"Request event must be an object, got {type(event).__name__}")
    params = event.get("queryStringParameters") or {}
    if not isinstance(params, dict):
        raise ValueError(
            f"queryStringParameters must be an object, got {type(params).__name__}"
        )
    record_id = params.get("id")
    return record_id or None


# ============================================================
# Request Handling
# ============================================================


def handle_request(event: Dict[str, Any], provider: ConnectionProvider) -> Dict[str, Any]:
    """
    Serve one API Gateway request using ``provider`` for the connection.

    Never raises: any failure is logged and returned as a 500 response.
    """
    try:
        record_id = _record_id(event)
        with observe("RECORDS_REQUEST", record_id=record_id) as summary:
            connection = provider.get_connection()
            rows = fetch_records(connection, record_id)
            summary["count"] = len(rows)
    except Exception as exc:  # noqa: BLE001
        logger.error("Lambda execution error: %s", exc, exc_info=True)
        return error_response(exc)

    return success_response(rows, record_id)


# ============================================================
# AWS Lambda Entry Point
# ============================================================


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda handler for the records endpoint.

    Parameters
    ----------
    event :
        API Gateway proxy event.
    context :
        Lambda runtime context object (unused but required by AWS).

    Returns
    -------
    Dict[str, Any]
        Proxy response with ``statusCode``, ``headers`` and JSON ``body``.
    """
    event = event or {}
    logger.info("Records Lambda invoked with event: %s", json.dumps(event, default=str)[:500])

    try:
        provider = get_provider()
    except Exception as exc:  # noqa: BLE001
        logger.error("Records Lambda is misconfigured: %s", exc, exc_info=True)
        log_event("RECORDS_CONFIG_ERROR", level=logging.ERROR, error=str(exc))
        return error_response(exc)

    return handle_request(event, provider)
