"""Tests for gh_languages.retrieval.http_client covering auth injection and error surfacing.

Run with coverage:
    pytest tests/test_http_client.py --maxfail=1 -v --cov=gh_languages.retrieval.http_client --cov-report=term-missing
"""

import threading
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_resp
from gh_languages.errors import GitHubAPIError, RunCancelled
from gh_languages.retrieval import http_client


def test_auth_injects_token_header():
    prepared = requests.Request("GET", "https://api.github.com/orgs/acme/repos").prepare()
    http_client.InstallationTokenAuth("ghs_abc")(prepared)
    assert prepared.headers["Authorization"] == "token ghs_abc"


def test_session_authenticates_every_request():
    session = http_client.build_session("ghs_abc")
    for url in ("https://api.github.com/orgs/acme/repos", "https://api.github.com/repos/acme/a/languages"):
        prepared = session.prepare_request(requests.Request("GET", url))
        assert prepared.headers["Authorization"] == "token ghs_abc"
        assert prepared.headers["Accept"] == "application/vnd.github+json"


def test_get_json_returns_payload():
    session = MagicMock()
    session.get.return_value = make_resp(200, {"Python": 10})
    data, resp = http_client.get_json(session, "url", {"page": 1})
    assert data == {"Python": 10}
    assert resp.status_code == 200
    assert session.get.call_args.kwargs["params"] == {"page": 1}


def test_get_json_surfaces_platform_auth_rejection(capsys):
    session = MagicMock()
    session.get.return_value = make_resp(401, {"message": "Bad credentials"})
    with pytest.raises(GitHubAPIError) as excinfo:
        http_client.get_json(session, "https://api.github.com/x")
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Bad credentials"
    assert "Bad credentials" in capsys.readouterr().out


def test_get_json_checks_cancel_before_calling():
    session = MagicMock()
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(RunCancelled):
        http_client.get_json(session, "url", cancel=cancel)
    session.get.assert_not_called()


def test_error_message_falls_back_to_text():
    resp = make_resp(502)
    resp.json.side_effect = ValueError()
    resp.text = "upstream failure"
    assert http_client.error_message(resp) == "upstream failure"


def test_next_page_reads_link_header():
    assert http_client.next_page(make_resp(200, [], next_page=3)) == 3
    assert http_client.next_page(make_resp(200, [])) == 0

    resp = make_resp(200, [])
    resp.links = {"next": {"url": "https://api.github.com/orgs/acme/repos?page=0"}}
    assert http_client.next_page(resp) == 0
