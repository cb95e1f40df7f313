"""Shared fixtures: throwaway RSA/EC keys and fake GitHub responses."""

import json
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pkcs1_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def pkcs8_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def ec_pkcs8_pem() -> str:
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()


def make_resp(
    status: int = 200,
    payload: Any = None,
    headers: Optional[Dict[str, str]] = None,
    next_page: Optional[int] = None,
):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    if payload is None:
        payload = {}
    resp.json.return_value = payload
    resp.text = json.dumps(payload)
    resp.links = (
        {"next": {"url": f"https://api.github.com/orgs/acme/repos?per_page=100&page={next_page}", "rel": "next"}}
        if next_page
        else {}
    )
    return resp


def repo_item(owner: str, name: str, archived: Any = False, topics=("production",)) -> Dict[str, Any]:
    item = {
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "topics": list(topics),
    }
    if archived is not None:
        item["archived"] = archived
    return item
