"""Shared fixtures: P-256 key pairs, signing helpers and app settings."""

from __future__ import annotations

import base64
from collections.abc import Callable

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from signed_webhooks.core.config import Settings


def public_pem(private_key: ec.EllipticCurvePrivateKey) -> str:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")


def sign_b64(private_key: ec.EllipticCurvePrivateKey, payload: bytes) -> str:
    der = private_key.sign(payload, ec.ECDSA(hashes.SHA256()))
    return base64.b64encode(der).decode("ascii")


@pytest.fixture
def fordefi_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def hypernative_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def fordefi_pem(fordefi_private_key: ec.EllipticCurvePrivateKey) -> str:
    return public_pem(fordefi_private_key)


@pytest.fixture
def hypernative_pem(hypernative_private_key: ec.EllipticCurvePrivateKey) -> str:
    return public_pem(hypernative_private_key)


@pytest.fixture
def sign() -> Callable[[ec.EllipticCurvePrivateKey, bytes], str]:
    return sign_b64


@pytest.fixture
def settings(fordefi_pem: str, hypernative_pem: str, tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        fordefi_public_key=fordefi_pem,
        hypernative_public_key=hypernative_pem,
        keys_dir=tmp_path,
    )


@pytest.fixture
def pem_of() -> Callable[[ec.EllipticCurvePrivateKey], str]:
    return public_pem
