#!/usr/bin/env python3
"""
Hello API – Static Greeting Lambda.

The simplest endpoint behind the API Gateway: it ignores the request body
and returns a fixed greeting together with the URL of a hosted image. The
response uses the shape API Gateway expects for an ``AWS_PROXY``
integration (``statusCode``, ``headers``, JSON-string ``body``).

Environment Variables:
    HELLO_IMAGE_URL – image link returned as ``imUrl`` (defaults to the
    CloudFront-hosted image)
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

# Use the root logger so CloudWatch picks everything up consistently
logger = logging.getLogger()
logger.setLevel(logging.INFO)

RESPONSE_MESSAGE = "Hello from Lambda! Your request was successful."
DEFAULT_IMAGE_URL = "https://d2ryl8hnh8mi25.cloudfront.net/week4.jpg"


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Return the greeting and image URL as a 200 proxy response."""
    logger.info("Hello Lambda invoked with event: %s", json.dumps(event, default=str)[:500])

    return {
        "statusCode": 200,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": json.dumps(
            {
                "message": RESPONSE_MESSAGE,
                "imUrl": os.environ.get("HELLO_IMAGE_URL", DEFAULT_IMAGE_URL),
            }
        ),
    }
