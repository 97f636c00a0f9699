"""Tests for the Fordefi and Hypernative webhook endpoints."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from signed_webhooks.core.config import Settings
from signed_webhooks.core.errors import KeyFormatError
from signed_webhooks.main import create_app


@pytest.fixture
def client(settings: Settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


def _hypernative_body(data, signature) -> bytes:
    return json.dumps(
        {"id": "alert-1", "data": data, "digitalSignature": signature},
        separators=(",", ":"),
    ).encode("utf-8")


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "timestamp" in response.json()


def test_fordefi_accepts_valid_signature(client, fordefi_private_key, sign) -> None:
    body = b'{"event_id": "e-1", "event": {"transaction_id": "tx-1"}}'

    response = client.post("/", content=body, headers={"X-Signature": sign(fordefi_private_key, body)})

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "Webhook received and processed"}


def test_fordefi_rejects_missing_signature(client) -> None:
    response = client.post("/", content=b'{"event_id": "e-1"}')

    assert response.status_code == 401
    assert response.json()["detail"] == "Missing signature"


def test_fordefi_rejects_empty_body(client, fordefi_private_key, sign) -> None:
    response = client.post("/", content=b"", headers={"X-Signature": sign(fordefi_private_key, b"")})

    assert response.status_code == 400


def test_fordefi_rejects_tampered_body(client, fordefi_private_key, sign) -> None:
    signature = sign(fordefi_private_key, b'{"amount": "1"}')

    response = client.post("/", content=b'{"amount": "9"}', headers={"X-Signature": signature})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid signature"


def test_fordefi_rejects_reformatted_body(client, fordefi_private_key, sign) -> None:
    signature = sign(fordefi_private_key, b'{"amount":"1"}')

    response = client.post("/", content=b'{"amount": "1"}', headers={"X-Signature": signature})

    assert response.status_code == 401


def test_fordefi_rejects_hypernative_key(client, hypernative_private_key, sign) -> None:
    body = b'{"event_id": "e-1"}'

    response = client.post("/", content=body, headers={"X-Signature": sign(hypernative_private_key, body)})

    assert response.status_code == 401


def test_fordefi_rejects_malformed_signature(client) -> None:
    response = client.post("/", content=b'{"event_id": "e-1"}', headers={"X-Signature": "%%%"})

    assert response.status_code == 401


def test_fordefi_rejects_non_json_after_verification(client, fordefi_private_key, sign) -> None:
    body = b"not json"

    response = client.post("/", content=body, headers={"X-Signature": sign(fordefi_private_key, body)})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid JSON payload"


def test_hypernative_accepts_signed_data_field(client, hypernative_private_key, sign) -> None:
    data = json.dumps({"riskInsight": {"severity": "High", "chain": "ethereum"}})
    body = _hypernative_body(data, sign(hypernative_private_key, data.encode("utf-8")))

    response = client.post(
        "/hypernative",
        content=body,
        headers={"fordefi-transaction-id": "tx-42"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "message": "Hypernative webhook received and processed",
        "transactionId": "tx-42",
    }


def test_hypernative_accepts_non_json_data(client, hypernative_private_key, sign) -> None:
    data = "plain text insight é"
    body = _hypernative_body(data, sign(hypernative_private_key, data.encode("utf-8")))

    response = client.post("/hypernative", content=body)

    assert response.status_code == 200
    assert response.json()["transactionId"] is None


def test_hypernative_rejects_tampered_data(client, hypernative_private_key, sign) -> None:
    signature = sign(hypernative_private_key, b'{"severity": "High"}')
    body = _hypernative_body('{"severity": "Low"}', signature)

    response = client.post("/hypernative", content=body)

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid signature"


def test_hypernative_rejects_signature_over_whole_body(client, hypernative_private_key, sign) -> None:
    envelope = {"id": "alert-1", "data": '{"severity": "High"}'}
    signature = sign(hypernative_private_key, json.dumps(envelope).encode("utf-8"))
    body = json.dumps({**envelope, "digitalSignature": signature}).encode("utf-8")

    response = client.post("/hypernative", content=body)

    assert response.status_code == 401


def test_hypernative_rejects_fordefi_key(client, fordefi_private_key, sign) -> None:
    data = '{"severity": "High"}'
    body = _hypernative_body(data, sign(fordefi_private_key, data.encode("utf-8")))

    response = client.post("/hypernative", content=body)

    assert response.status_code == 401


def test_hypernative_rejects_missing_signature(client) -> None:
    response = client.post("/hypernative", content=b'{"data": "{}"}')

    assert response.status_code == 401
    assert response.json()["detail"] == "Missing digitalSignature"


@pytest.mark.parametrize("data", [None, {"severity": "High"}, 7], ids=["missing", "object", "number"])
def test_hypernative_rejects_non_string_data(client, data) -> None:
    response = client.post("/hypernative", content=_hypernative_body(data, "MEUCIQ=="))

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing data field"


@pytest.mark.parametrize("body", [b"{not json", b"[1, 2, 3]"], ids=["invalid", "array"])
def test_hypernative_rejects_invalid_json(client, body: bytes) -> None:
    response = client.post("/hypernative", content=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid JSON payload"


def test_hypernative_rejects_empty_body(client) -> None:
    response = client.post("/hypernative", content=b"")

    assert response.status_code == 400


def test_requests_before_startup_fail_closed(settings: Settings, fordefi_private_key, sign) -> None:
    # Without the context manager the lifespan never runs, so no verifiers exist
    client = TestClient(create_app(settings))
    body = b'{"event_id": "e-1"}'

    response = client.post("/", content=body, headers={"X-Signature": sign(fordefi_private_key, body)})

    assert response.status_code == 503


def test_startup_aborts_on_malformed_key(fordefi_pem: str, tmp_path) -> None:
    settings = Settings(
        _env_file=None,
        fordefi_public_key=fordefi_pem.replace("A", "*", 1),
        hypernative_public_key=fordefi_pem,
        keys_dir=tmp_path,
    )

    with pytest.raises(KeyFormatError):
        with TestClient(create_app(settings)):
            pass


def test_startup_aborts_without_key_files(tmp_path) -> None:
    settings = Settings(
        _env_file=None,
        fordefi_public_key=None,
        hypernative_public_key=None,
        keys_dir=tmp_path,
    )

    with pytest.raises(KeyFormatError, match="not readable"):
        with TestClient(create_app(settings)):
            pass


def test_startup_loads_keys_from_files(
    tmp_path, fordefi_pem: str, hypernative_pem: str, fordefi_private_key, sign
) -> None:
    (tmp_path / "fordefi_public_key.pem").write_text(fordefi_pem)
    (tmp_path / "hypernative_public_key.pem").write_text(hypernative_pem)
    settings = Settings(
        _env_file=None,
        fordefi_public_key=None,
        hypernative_public_key=None,
        keys_dir=tmp_path,
    )
    body = b'{"event_id": "e-1"}'

    with TestClient(create_app(settings)) as client:
        response = client.post("/", content=body, headers={"X-Signature": sign(fordefi_private_key, body)})

    assert response.status_code == 200
