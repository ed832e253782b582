"""
Thin wrapper around the AWS Secrets Manager client.

Only one call is needed by the connection provider, ``get_secret_value``,
which returns the secret payload as text. botocore errors are left to
propagate; the provider decides how to classify them.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)


class SecretsClient:
    """Fetches secret payloads from AWS Secrets Manager."""

    def __init__(
        self,
        region: Optional[str] = None,
        client: Optional[Any] = None,
        timeout_seconds: float = 5.0,
        endpoint_url: Optional[str] = None,
    ) -> None:
        """
        Parameters
        ----------
        region : str, optional
            AWS region. Defaults to env `DEFAULT_AWS_REGION` or us-east-1.
        client : botocore client, optional
            Pre-built ``secretsmanager`` client (tests pass a stubbed one).
        timeout_seconds : float, default 5.0
            Connect and read timeout for the Secrets Manager endpoint.
        endpoint_url : str, optional
            Override the service endpoint (VPC interface endpoints, local
            emulators). Defaults to env `SECRETS_MANAGER_ENDPOINT`.
        """
        self.region = region or os.environ.get("DEFAULT_AWS_REGION", "us-east-1")
        self.client = client or boto3.client(
            "secretsmanager",
            region_name=self.region,
            endpoint_url=endpoint_url or os.environ.get("SECRETS_MANAGER_ENDPOINT") or None,
            config=Config(
                connect_timeout=timeout_seconds,
                read_timeout=timeout_seconds,
                # One attempt per fetch; failures surface to the caller.
                retries={"total_max_attempts": 1, "mode": "standard"},
            ),
        )

    def get_secret_value(self, secret_id: str) -> str:
        """
        Return the payload of ``secret_id`` as a string.

        Text secrets come back in ``SecretString``; binary secrets are
        decoded from ``SecretBinary`` as UTF-8.
        """
        logger.info("Fetching secret %s", secret_id)
        response = self.client.get_secret_value(SecretId=secret_id)

        if response.get("SecretString") is not None:
            return response["SecretString"]

        binary = response.get("SecretBinary")
        if binary is None:
            raise ValueError(f"Secret {secret_id} has no SecretString or SecretBinary")
        return binary.decode("utf-8")
