"""Shared fakes for the connection provider and the records Lambda."""

from __future__ import annotations

import json
import time
from typing import Any, Callable

import pytest

from records_api.database import ConnectionProvider

SECRET_ID = "arn:aws:secretsmanager:us-east-1:123456789012:secret:records-db-AbCdEf"

VALID_SECRET: dict[str, Any] = {
    "host": "records.cluster-abc.us-east-1.rds.amazonaws.com",
    "port": 3306,
    "username": "app",
    "password": "s3cret",
    "database": "appdb",
}


class FakeSecretsClient:
    """Stands in for SecretsClient; counts fetches."""

    def __init__(self, payload: Any = None, error: Exception | None = None) -> None:
        self.payload = json.dumps(VALID_SECRET) if payload is None else payload
        self.error = error
        self.calls: list[str] = []

    def get_secret_value(self, secret_id: str) -> str:
        self.calls.append(secret_id)
        if self.error is not None:
            raise self.error
        return self.payload


class FakeCursor:
    def __init__(self, connection: "FakeConnection") -> None:
        self._connection = connection

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def execute(self, query: str, params: tuple = ()) -> int:
        self._connection.executed.append((query, params))
        if self._connection.query_error is not None:
            raise self._connection.query_error
        return len(self._connection.rows)

    def fetchall(self) -> list[dict[str, Any]]:
        return list(self._connection.rows)


class FakeConnection:
    """Minimal PyMySQL connection double."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows or []
        self.alive = True
        self.closed = False
        self.pings = 0
        self.query_error: Exception | None = None
        self.executed: list[tuple[str, tuple]] = []

    def ping(self, reconnect: bool = True) -> None:
        assert reconnect is False
        self.pings += 1
        if not self.alive:
            raise ConnectionResetError("server has gone away")

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        if self.closed:
            raise RuntimeError("Already closed")
        self.closed = True


class ConnectRecorder:
    """Replacement for ``pymysql.connect`` that hands out FakeConnections."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.connections: list[FakeConnection] = []
        self.error: Exception | None = None
        self.rows: list[dict[str, Any]] = []
        self.delay = 0.0

    def __call__(self, **kwargs: Any) -> FakeConnection:
        self.calls.append(kwargs)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        connection = FakeConnection(rows=self.rows)
        self.connections.append(connection)
        return connection


@pytest.fixture
def connect(monkeypatch: pytest.MonkeyPatch) -> ConnectRecorder:
    recorder = ConnectRecorder()
    monkeypatch.setattr("records_api.database.client.pymysql.connect", recorder)
    return recorder


@pytest.fixture
def secrets() -> FakeSecretsClient:
    return FakeSecretsClient()


@pytest.fixture
def make_provider(secrets: FakeSecretsClient) -> Callable[..., ConnectionProvider]:
    def _make(**kwargs: Any) -> ConnectionProvider:
        kwargs.setdefault("secret_id", SECRET_ID)
        kwargs.setdefault("secrets_client", secrets)
        return ConnectionProvider(**kwargs)

    return _make


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DB_SECRET_ARN",
        "DB_CONNECT_TIMEOUT",
        "DB_CREDENTIALS_TTL",
        "DB_SSL_VERIFY",
        "RECORDS_TABLE",
        "ENVIRONMENT",
        "HELLO_IMAGE_URL",
        "SECRETS_MANAGER_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)
