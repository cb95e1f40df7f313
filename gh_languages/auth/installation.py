"""Exchange the app assertion for an installation-scoped access token."""

from __future__ import annotations

import datetime as dt
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from gh_languages.errors import EmptyTokenError, RunCancelled, TokenExchangeError
from gh_languages.retrieval import config
from gh_languages.retrieval.http_client import error_message, log_http_error

from .app_jwt import AppAssertion


@dataclass(frozen=True)
class InstallationToken:
    """Installation access token; read-only for the rest of the run."""

    value: str
    expires_at: Optional[dt.datetime] = None

    def is_expired(self, now: Optional[dt.datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or dt.datetime.now(dt.timezone.utc)
        return now >= self.expires_at

    def __repr__(self) -> str:
        return f"InstallationToken(value=<redacted>, expires_at={self.expires_at})"


def app_headers(assertion: AppAssertion) -> Dict[str, str]:
    """Headers for endpoints that authenticate as the App itself."""
    return {
        "Authorization": f"Bearer {assertion.token}",
        "Accept": config.ACCEPT_HEADER,
        "X-GitHub-Api-Version": config.API_VERSION,
        "User-Agent": config.USER_AGENT,
    }


def _parse_expires_at(raw: Any) -> Optional[dt.datetime]:
    if not raw or not isinstance(raw, str):
        return None
    try:
        return dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def exchange_installation_token(
    assertion: AppAssertion,
    installation_id: int,
    *,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> InstallationToken:
    """POST the assertion to GitHub and return the installation token it grants."""
    if cancel is not None and cancel.is_set():
        raise RunCancelled("run cancelled before installation token exchange")

    app_id = assertion.issuer
    url = f"{(base_url or config.BASE_URL).rstrip('/')}/app/installations/{installation_id}/access_tokens"
    print(f"[auth] requesting installation token for installation_id={installation_id}")
    try:
        resp = requests.post(
            url,
            headers=app_headers(assertion),
            timeout=timeout or config.TOKEN_EXCHANGE_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise TokenExchangeError(
            f"failed to create installation token: {exc} - verify App ID ({app_id}) "
            f"and Installation ID ({installation_id}) are correct",
            app_id=app_id,
            installation_id=installation_id,
        ) from exc

    if not 200 <= resp.status_code < 300:
        log_http_error(resp, url)
        message = error_message(resp)
        raise TokenExchangeError(
            f"failed to create installation token (HTTP {resp.status_code}): {message} - "
            f"verify App ID ({app_id}) and Installation ID ({installation_id}) are correct",
            app_id=app_id,
            installation_id=installation_id,
            status_code=resp.status_code,
            platform_message=message,
        )

    try:
        data = resp.json()
    except ValueError:
        data = {}
    value = data.get("token") if isinstance(data, dict) else None
    if not value:
        raise EmptyTokenError(
            f"received empty installation token (HTTP {resp.status_code}) for "
            f"App ID ({app_id}) and Installation ID ({installation_id})",
            app_id=app_id,
            installation_id=installation_id,
            status_code=resp.status_code,
        )

    token = InstallationToken(value=value, expires_at=_parse_expires_at(data.get("expires_at")))
    print(f"[auth] installation token created (expires: {token.expires_at})")
    return token


__all__ = ["InstallationToken", "app_headers", "exchange_installation_token"]
