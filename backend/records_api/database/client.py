"""
Resilient MySQL connection provider for AWS Lambda.

This module provides the `ConnectionProvider` class, which hands the records
Lambda a live PyMySQL connection while keeping setup cost down across warm
invocations of the same execution environment.

Two things are cached for the lifetime of the provider:

• The `CredentialSet` read from Secrets Manager (fetched once, optionally
  refreshed after a TTL)
• One open connection, which is pinged before every reuse and discarded
  when the ping fails

Nothing here retries. A failed secret fetch or a failed connect surfaces
immediately to the caller, which is expected to turn it into an error
response. The only recovery path is the one built into `get_connection`:
a dead cached connection is replaced by a fresh one within the same call.

Example:
    provider = ConnectionProvider()
    connection = provider.get_connection()
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")

Environment Variables:
    DB_SECRET_ARN – ARN or name of the credentials secret
    DB_CONNECT_TIMEOUT – Connect/read/write timeout in seconds (default 10)
    DB_CREDENTIALS_TTL – Seconds before credentials are re-fetched (unset = never)
    DB_SSL_VERIFY – Verify the server certificate ("true"/"false", default false)
    DEFAULT_AWS_REGION – Region for the Secrets Manager client
"""

from __future__ import annotations

import json
import logging
import os
import ssl
import threading
from datetime import datetime, timezone
from typing import Any, Optional

import pymysql
import pymysql.cursors
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from .cache import CachedValue
from .errors import (
    ConnectionEstablishmentError,
    CredentialRetrievalError,
    LivenessProbeFailure,
)
from .schemas import CredentialSet
from .secrets import SecretsClient

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


class ConnectionProvider:
    """
    Supplies a validated database connection, reusing it across invocations.

    Build one instance per process (e.g. lazily at module level in the
    Lambda handler) and pass it into each request.
    """

    def __init__(
        self,
        secret_id: Optional[str] = None,
        secrets_client: Optional[SecretsClient] = None,
        connect_timeout: Optional[float] = None,
        credentials_ttl: Optional[float] = None,
        ssl_verify: Optional[bool] = None,
    ) -> None:
        """
        Initialise the provider.

        Parameters
        ----------
        secret_id : str, optional
            Secret holding the credentials. Defaults to env `DB_SECRET_ARN`.
        secrets_client : SecretsClient, optional
            Secret store client. A boto3-backed one is created if omitted.
        connect_timeout : float, optional
            Bound on connection setup. Defaults to env `DB_CONNECT_TIMEOUT` or 10.
        credentials_ttl : float, optional
            Refresh credentials after this many seconds. Defaults to env
            `DB_CREDENTIALS_TTL`; ``None`` keeps them for the process lifetime.
        ssl_verify : bool, optional
            Verify the server's TLS certificate. Defaults to env `DB_SSL_VERIFY`.
        """
        self.secret_id = secret_id or os.environ.get("DB_SECRET_ARN")
        if not self.secret_id:
            raise ValueError(
                "Missing database secret configuration. Ensure DB_SECRET_ARN is set."
            )

        if connect_timeout is None:
            connect_timeout = _env_float("DB_CONNECT_TIMEOUT")
        if connect_timeout is None:
            connect_timeout = DEFAULT_CONNECT_TIMEOUT
        if connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        self.connect_timeout = connect_timeout

        if credentials_ttl is None:
            credentials_ttl = _env_float("DB_CREDENTIALS_TTL")
        self.ssl_verify = _env_flag("DB_SSL_VERIFY") if ssl_verify is None else ssl_verify

        self.secrets_client = secrets_client or SecretsClient()

        self._credentials: CachedValue[CredentialSet] = CachedValue(ttl_seconds=credentials_ttl)
        self._connection: CachedValue[Any] = CachedValue()
        self._lock = threading.RLock()

    # ============================================================
    # Credentials
    # ============================================================

    def get_credentials(self) -> CredentialSet:
        """
        Return cached credentials, fetching them from Secrets Manager once.

        Raises
        ------
        CredentialRetrievalError
            The secret store is unreachable or the payload is unusable.
        """
        with self._lock:
            return self._credentials.get_or_populate(self._fetch_credentials)

    def _fetch_credentials(self) -> CredentialSet:
        try:
            payload = self.secrets_client.get_secret_value(self.secret_id)
        except (ClientError, BotoCoreError, ValueError) as exc:
            logger.error("Error retrieving database credentials: %s", exc)
            raise CredentialRetrievalError(
                f"Unable to retrieve secret {self.secret_id}: {exc}"
            ) from exc

        try:
            credentials = CredentialSet.model_validate(json.loads(payload))
        except (json.JSONDecodeError, TypeError, ValidationError) as exc:
            # The payload itself may contain the password, so only the error
            # type is reported.
            logger.error("Database secret %s is malformed (%s)", self.secret_id, type(exc).__name__)
            raise CredentialRetrievalError(
                f"Secret {self.secret_id} is not a valid credentials document"
            ) from exc

        logger.info(
            "Loaded database credentials for %s@%s:%s/%s",
            credentials.username,
            credentials.host,
            credentials.port,
            credentials.database_name,
        )
        return credentials

    # ============================================================
    # Connections
    # ============================================================

    def get_connection(self) -> Any:
        """
        Return a live connection, reusing the cached one when it still pings.

        Raises
        ------
        CredentialRetrievalError
            Credentials could not be obtained; no connect is attempted.
        ConnectionEstablishmentError
            A new connection could not be opened within the timeout.
        """
        with self._lock:
            cached = self._connection.get()
            if cached is not None:
                try:
                    self._probe(cached)
                    return cached
                except LivenessProbeFailure as exc:
                    logger.info("Cached connection is invalid, creating new connection: %s", exc)
                    self._discard_connection("probe_failed")

            credentials = self.get_credentials()
            return self._connection.populate(self._establish(credentials))

    def _probe(self, connection: Any) -> None:
        try:
            connection.ping(reconnect=False)
        except Exception as exc:  # noqa: BLE001
            raise LivenessProbeFailure(str(exc)) from exc

    def _establish(self, credentials: CredentialSet) -> Any:
        try:
            connection = pymysql.connect(
                **credentials.connect_kwargs(),
                connect_timeout=self.connect_timeout,
                read_timeout=self.connect_timeout,
                write_timeout=self.connect_timeout,
                cursorclass=pymysql.cursors.DictCursor,
                autocommit=True,
                ssl=self._ssl_context(),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Error connecting to database: %s", exc)
            raise ConnectionEstablishmentError(
                f"Could not connect to {credentials.host}:{credentials.port}: {exc}"
            ) from exc

        logger.info("Successfully connected to database")
        logger.info(
            json.dumps(
                {
                    "event": "DB_CONNECTION_ESTABLISHED",
                    "host": credentials.host,
                    "database": credentials.database_name,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            )
        )
        return connection

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self.ssl_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _discard_connection(self, reason: str) -> None:
        stale = self._connection.invalidate()
        if stale is None:
            return
        try:
            stale.close()
        except Exception as exc:  # noqa: BLE001
            # Closing a dead socket commonly fails; the handle is gone either way.
            logger.debug("Ignoring error while closing stale connection: %s", exc)

        logger.info(
            json.dumps(
                {
                    "event": "DB_CONNECTION_INVALIDATED",
                    "reason": reason,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            )
        )

    def reset(self) -> None:
        """Forget cached credentials and close any cached connection."""
        with self._lock:
            self._discard_connection("reset")
            self._credentials.invalidate()
