"""Tests for the Secrets Manager wrapper, using botocore's Stubber."""

from __future__ import annotations

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from records_api.database import ConnectionProvider, CredentialRetrievalError
from records_api.database.secrets import SecretsClient

from conftest import SECRET_ID


@pytest.fixture
def stubbed():
    client = boto3.client(
        "secretsmanager",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield SecretsClient(client=client), stubber
        stubber.assert_no_pending_responses()


def test_returns_secret_string(stubbed) -> None:
    secrets, stubber = stubbed
    stubber.add_response(
        "get_secret_value",
        {"ARN": SECRET_ID, "Name": "records-db", "SecretString": '{"host": "db"}'},
        {"SecretId": SECRET_ID},
    )

    assert secrets.get_secret_value(SECRET_ID) == '{"host": "db"}'


def test_decodes_secret_binary(stubbed) -> None:
    secrets, stubber = stubbed
    stubber.add_response(
        "get_secret_value",
        {"ARN": SECRET_ID, "Name": "records-db", "SecretBinary": b'{"host": "db"}'},
        {"SecretId": SECRET_ID},
    )

    assert secrets.get_secret_value(SECRET_ID) == '{"host": "db"}'


def test_client_errors_propagate(stubbed) -> None:
    secrets, stubber = stubbed
    stubber.add_client_error(
        "get_secret_value",
        service_error_code="ResourceNotFoundException",
        http_status_code=400,
        expected_params={"SecretId": SECRET_ID},
    )

    with pytest.raises(ClientError):
        secrets.get_secret_value(SECRET_ID)


def test_region_defaults_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_AWS_REGION", "eu-west-2")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")

    secrets = SecretsClient()

    assert secrets.region == "eu-west-2"
    assert secrets.client.meta.region_name == "eu-west-2"


def test_unreachable_endpoint_is_tried_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    secrets = SecretsClient(timeout_seconds=0.5, endpoint_url="http://127.0.0.1:9")
    sends: list[str] = []
    secrets.client.meta.events.register(
        "before-send.secrets-manager.GetSecretValue",
        lambda request, **kwargs: sends.append(request.url),
    )
    provider = ConnectionProvider(secret_id=SECRET_ID, secrets_client=secrets)

    with pytest.raises(CredentialRetrievalError):
        provider.get_credentials()

    assert len(sends) == 1


def test_sdk_retries_are_disabled() -> None:
    secrets = SecretsClient(region="us-east-1", endpoint_url="http://127.0.0.1:9")

    assert secrets.client.meta.config.retries["total_max_attempts"] == 1
