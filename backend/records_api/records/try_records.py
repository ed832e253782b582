#!/usr/bin/env python3
"""
Records API – Simple Local Test for the Records Lambda.

This script invokes ``lambda_handler`` directly in the local Python
environment, against whatever database ``DB_SECRET_ARN`` points at. It is
useful for checking credentials, network access and the table name before
deploying.

Responsibilities
----------------
* Load ``.env`` (DB_SECRET_ARN, DEFAULT_AWS_REGION, RECORDS_TABLE, ...)
* Call the handler once without parameters and, if given, once with ``--id``
* Print status codes and the decoded body

Typical usage
-------------
    cd backend
    uv run python -m records_api.records.try_records --id 42
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables (DB secret ARN, region, etc.)
load_dotenv(override=True)

from records_api.records.lambda_handler import lambda_handler  # noqa: E402


# ============================================================
# Test Logic
# ============================================================


def invoke(record_id: Optional[str]) -> Dict[str, Any]:
    """Invoke the handler the way API Gateway would and print the result."""
    event: Dict[str, Any] = {
        "httpMethod": "GET",
        "path": "/records",
        "queryStringParameters": {"id": record_id} if record_id else None,
    }

    result = lambda_handler(event, None)
    body = json.loads(result["body"])

    print(f"Status Code: {result['statusCode']}")
    if result["statusCode"] == 200:
        print(f"Message: {body['message']}")
        print(f"Count:   {body['count']}")
        for row in body["data"]:
            print(f"  • {row}")
    else:
        print(f"Error Response: {body}")

    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Invoke the records Lambda locally")
    parser.add_argument("--id", dest="record_id", help="Record id to look up")
    args = parser.parse_args()

    print("🧪 Records Lambda Local Test")
    print("=" * 60)

    invoke(None)
    if args.record_id:
        print("-" * 60)
        invoke(args.record_id)

    print("=" * 60)


# ============================================================
# CLI Entry Point
# ============================================================

if __name__ == "__main__":
    main()
