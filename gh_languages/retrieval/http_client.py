"""Authenticated REST helpers shared by the enumeration and harvesting steps."""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests

from gh_languages.errors import GitHubAPIError, RunCancelled

from .config import ACCEPT_HEADER, API_VERSION, REQUEST_TIMEOUT, USER_AGENT


class InstallationTokenAuth(requests.auth.AuthBase):
    """Attach `Authorization: token <value>` to every outgoing request.

    There is no refresh: once the token expires GitHub answers 401 and the
    error surfaces unchanged through `get_json`.
    """

    def __init__(self, token: str):
        self.token = token

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        request.headers["Authorization"] = f"token {self.token}"
        return request

    def __eq__(self, other: object) -> bool:
        return isinstance(other, InstallationTokenAuth) and other.token == self.token

    def __ne__(self, other: object) -> bool:
        return not self == other


def build_session(token: str) -> requests.Session:
    """Return a session that authenticates every call with the installation token."""
    session = requests.Session()
    session.headers.update(
        {
            "Accept": ACCEPT_HEADER,
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        }
    )
    session.auth = InstallationTokenAuth(token)
    return session


def error_message(resp: requests.Response) -> str:
    """Extract GitHub's error message from a response body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {"text": (resp.text or "")[:300]}
    return str(body.get("message") or body.get("error") or body.get("text") or "")


def log_http_error(resp: requests.Response, url: str) -> None:
    """Print a short, human-readable message when GitHub returns an error."""
    print(f"[error] HTTP {resp.status_code} for {url}\n  -> {error_message(resp)}")


def check_cancelled(cancel: Optional[threading.Event], what: str) -> None:
    if cancel is not None and cancel.is_set():
        raise RunCancelled(f"run cancelled before {what}")


def get_json(
    session: requests.Session,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    cancel: Optional[threading.Event] = None,
    timeout: Optional[float] = None,
) -> Tuple[Any, requests.Response]:
    """GET `url` and return (decoded JSON, response); raise GitHubAPIError on non-2xx."""
    check_cancelled(cancel, f"GET {url}")
    resp = session.get(url, params=params, timeout=timeout or REQUEST_TIMEOUT)
    if not 200 <= resp.status_code < 300:
        log_http_error(resp, url)
        raise GitHubAPIError(resp.status_code, error_message(resp), url)
    return resp.json(), resp


def next_page(resp: requests.Response) -> int:
    """Return the page number from the `rel="next"` Link header, or 0 when there is none."""
    links = resp.links or {}
    next_link = links.get("next") or {}
    next_url = next_link.get("url")
    if not next_url:
        return 0
    values = parse_qs(urlparse(next_url).query).get("page") or []
    try:
        return int(values[0]) if values else 0
    except ValueError:
        return 0


__all__ = [
    "InstallationTokenAuth",
    "build_session",
    "error_message",
    "log_http_error",
    "check_cancelled",
    "get_json",
    "next_page",
]
