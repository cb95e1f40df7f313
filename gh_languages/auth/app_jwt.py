"""Mint the short-lived RS256 assertion that identifies the GitHub App itself."""

from __future__ import annotations

import base64
import binascii
import re
import time
from dataclasses import dataclass
from typing import Optional

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from gh_languages.errors import KeyParseError, SigningError

from .credentials import Credential

CLOCK_SKEW_SEC = 60
MAX_ASSERTION_LIFETIME_SEC = 600
MIN_PLAUSIBLE_KEY_CHARS = 100
SUPPORTED_PEM_TYPES = ("RSA PRIVATE KEY", "PRIVATE KEY")

_PEM_BLOCK = re.compile(
    r"-----BEGIN (?P<type>[A-Z0-9 ]+)-----\s*(?P<body>.*?)\s*-----END (?P=type)-----",
    re.DOTALL,
)


@dataclass(frozen=True)
class AppAssertion:
    """Signed JWT plus the claims it was built from."""

    token: str
    issuer: int
    issued_at: int
    expires_at: int

    def __repr__(self) -> str:
        return f"AppAssertion(issuer={self.issuer}, issued_at={self.issued_at}, expires_at={self.expires_at})"


def _pem_block_type(text: str) -> Optional[str]:
    """Return the PEM block type when `text` holds a decodable PEM block."""
    match = _PEM_BLOCK.search(text)
    if not match:
        return None
    body = "".join(match.group("body").split())
    try:
        base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        return None
    return match.group("type")


def load_rsa_private_key(private_key_pem: bytes) -> rsa.RSAPrivateKey:
    """Parse a PKCS#1 or PKCS#8 RSA private key, classifying any failure."""
    text = private_key_pem.decode("utf-8", errors="replace").strip()
    try:
        key = serialization.load_pem_private_key(text.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        if len(text) < MIN_PLAUSIBLE_KEY_CHARS:
            raise KeyParseError(
                f"private key appears too short ({len(text)} chars) - ensure the full key is provided",
                KeyParseError.TOO_SHORT,
            ) from exc
        block_type = _pem_block_type(text)
        if block_type is None:
            raise KeyParseError(
                f"private key is not a valid PEM block: {exc}",
                KeyParseError.INVALID_PEM,
            ) from exc
        raise KeyParseError(
            f"failed to parse {block_type} block as an RSA private key: {exc} - "
            "ensure the key is RSA (PKCS#1 or PKCS#8) and not EC/Ed25519 or encrypted",
            KeyParseError.UNSUPPORTED_KEY,
        ) from exc

    block_type = _pem_block_type(text)
    if block_type not in SUPPORTED_PEM_TYPES or not isinstance(key, rsa.RSAPrivateKey):
        raise KeyParseError(
            f"unsupported private key ({block_type or type(key).__name__}) - "
            "must be an RSA key in PKCS#1 or PKCS#8 format",
            KeyParseError.UNSUPPORTED_KEY,
        )
    return key


def mint_app_assertion(credential: Credential, now: Optional[int] = None) -> AppAssertion:
    """Build and sign the app-level JWT for `credential`.

    `iat` is backdated by CLOCK_SKEW_SEC and `exp` is capped at
    MAX_ASSERTION_LIFETIME_SEC after `iat`, the platform ceiling.
    """
    key = load_rsa_private_key(credential.private_key_pem)
    now = int(time.time()) if now is None else int(now)
    issued_at = now - CLOCK_SKEW_SEC
    expires_at = issued_at + MAX_ASSERTION_LIFETIME_SEC
    payload = {
        "iat": issued_at,
        "exp": expires_at,
        # PyJWT >= 2.10 rejects a non-string iss; GitHub accepts the decimal app ID
        "iss": str(credential.app_id),
    }
    try:
        token = jwt.encode(payload, key, algorithm="RS256")
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise SigningError(f"failed to sign app assertion for app_id={credential.app_id}: {exc}") from exc
    if isinstance(token, (bytes, bytearray)):
        token = token.decode()
    print(f"[auth] minted app assertion iss={credential.app_id} iat={issued_at} exp={expires_at}")
    return AppAssertion(token=token, issuer=credential.app_id, issued_at=issued_at, expires_at=expires_at)


__all__ = [
    "AppAssertion",
    "CLOCK_SKEW_SEC",
    "MAX_ASSERTION_LIFETIME_SEC",
    "load_rsa_private_key",
    "mint_app_assertion",
]
