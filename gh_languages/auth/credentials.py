"""Validate raw GitHub App configuration into an immutable credential set."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from gh_languages.errors import ConfigError

PEM_BEGIN = "-----BEGIN"
PEM_END = "-----END"

RawId = Union[str, int, None]


@dataclass(frozen=True)
class AppAuthConfig:
    """Raw GitHub App settings exactly as read from configuration."""

    org: Optional[str] = None
    app_id: RawId = None
    installation_id: RawId = None
    private_key: Optional[str] = None
    private_key_path: Optional[str] = None


@dataclass(frozen=True)
class Credential:
    """Validated App identity used to mint app assertions."""

    app_id: int
    installation_id: int
    private_key_pem: bytes

    def __repr__(self) -> str:
        return (
            f"Credential(app_id={self.app_id}, installation_id={self.installation_id}, "
            f"private_key_pem=<{len(self.private_key_pem)} bytes>)"
        )


def parse_id(raw: RawId, field: str) -> int:
    """Parse a positive integer ID from an int or a (possibly padded) string."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ConfigError(f"{field} is required")
    if isinstance(raw, bool):
        raise ConfigError(f"failed to parse {field} {raw!r} as integer")
    if isinstance(raw, int):
        value = raw
    elif not isinstance(raw, str):
        raise ConfigError(f"failed to parse {field} {raw!r} as integer")
    else:
        text = raw.strip()
        if text.startswith("${file:") and text.endswith("}"):
            print(f"[warn] {field} appears to contain unexpanded file interpolation syntax: {text}")
        try:
            value = int(text, 10)
        except ValueError:
            raise ConfigError(f"failed to parse {field} '{raw}' as integer") from None
    if value <= 0:
        raise ConfigError(f"{field} must be a positive integer, got {value}")
    if value >= 2 ** 63:
        raise ConfigError(f"{field} {value} does not fit in a signed 64-bit integer")
    return value


def sanitize_private_key(raw: str) -> str:
    """Normalize key text: trim, expand literal \\n, decode base64-wrapped PEM."""
    key = raw.strip()
    if key and PEM_BEGIN not in key:
        try:
            decoded = base64.b64decode(key, validate=True).decode("utf-8")
        except (binascii.Error, ValueError):
            decoded = ""
        if PEM_BEGIN in decoded:
            key = decoded.strip()
    return key.replace("\\n", "\n")


def read_private_key(config: AppAuthConfig) -> str:
    """Return key text, preferring inline content over the key file path."""
    inline = (config.private_key or "").strip()
    path = (config.private_key_path or "").strip()
    if inline:
        if path:
            print(f"[warn] both private_key and private_key_path set; ignoring {path}")
        print("[config] using private key from config")
        return inline
    if path:
        try:
            content = Path(path).expanduser().read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"failed to read private key from file {path}: {exc}") from exc
        print(f"[config] loaded private key from {path}")
        return content
    raise ConfigError("github app private key is required (either private_key or private_key_path)")


def build_credential(config: AppAuthConfig) -> Credential:
    """Validate `config` and return a Credential; raise ConfigError on any problem."""
    if not (config.org or "").strip():
        raise ConfigError("organization is required")

    app_id = parse_id(config.app_id, "app_id")
    installation_id = parse_id(config.installation_id, "installation_id")

    key = sanitize_private_key(read_private_key(config))
    if not key:
        raise ConfigError("github app private key is empty")
    if PEM_BEGIN not in key:
        raise ConfigError("private key is not in PEM format: missing -----BEGIN marker")
    if PEM_END not in key:
        raise ConfigError("private key is not in PEM format: missing -----END marker")

    print(f"[config] app_id={app_id} installation_id={installation_id} org={config.org.strip()}")
    return Credential(
        app_id=app_id,
        installation_id=installation_id,
        private_key_pem=key.encode("utf-8"),
    )


__all__ = [
    "AppAuthConfig",
    "Credential",
    "parse_id",
    "sanitize_private_key",
    "read_private_key",
    "build_credential",
]
