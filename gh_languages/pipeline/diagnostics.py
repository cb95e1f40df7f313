"""Check a GitHub App configuration end to end and print what it can reach.

Runs the same credential, assertion and token-exchange steps as a harvest,
then probes rate limits, the installation itself, the repositories the
installation can see, organization access and the language map of one
repository. Only the authentication steps and the language lookup are fatal;
the other probes report their failure and continue.
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Any, Dict, List, Optional

import requests

from gh_languages.auth.app_jwt import AppAssertion, mint_app_assertion
from gh_languages.auth.credentials import build_credential
from gh_languages.auth.installation import app_headers, exchange_installation_token
from gh_languages.errors import GitHubAPIError, GitHubLanguagesError
from gh_languages.retrieval.config import BASE_URL, REQUEST_TIMEOUT
from gh_languages.retrieval.http_client import build_session, error_message, get_json
from gh_languages.retrieval.languages import fetch_languages
from gh_languages.retrieval.repositories import Repository

from .config import add_auth_arguments, resolve_auth_config

SAMPLE_REPO_LIMIT = 3


def get_rate_limits(session: requests.Session) -> Dict[str, Any]:
    data, _ = get_json(session, f"{BASE_URL}/rate_limit")
    return data.get("resources") or {}


def get_installation(assertion: AppAssertion, installation_id: int) -> Dict[str, Any]:
    """Installation details; this endpoint needs the app assertion, not the installation token."""
    url = f"{BASE_URL}/app/installations/{installation_id}"
    resp = requests.get(url, headers=app_headers(assertion), timeout=REQUEST_TIMEOUT)
    if resp.status_code != 200:
        raise GitHubAPIError(resp.status_code, error_message(resp), url)
    return resp.json()


def list_installation_repos(session: requests.Session) -> Dict[str, Any]:
    data, _ = get_json(session, f"{BASE_URL}/installation/repositories", {"per_page": 100})
    return data


def get_org(session: requests.Session, org: str) -> Dict[str, Any]:
    data, _ = get_json(session, f"{BASE_URL}/orgs/{org}")
    return data


def _report_rate_limits(session: requests.Session) -> None:
    print("\n[check] rate limits")
    try:
        resources = get_rate_limits(session)
    except (GitHubLanguagesError, requests.RequestException) as exc:
        print(f"  [fail] {exc}")
        return
    for bucket in ("core", "search"):
        info = resources.get(bucket) or {}
        reset = info.get("reset")
        reset_at = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(reset)) if reset else "?"
        print(f"  {bucket}: {info.get('remaining')}/{info.get('limit')} (resets at {reset_at})")


def _report_installation(assertion: AppAssertion, installation_id: int) -> None:
    print("\n[check] installation details")
    try:
        installation = get_installation(assertion, installation_id)
    except (GitHubLanguagesError, requests.RequestException) as exc:
        print(f"  [fail] {exc}")
        print("  check the App ID, the Installation ID and that the App owns this installation")
        return
    account = (installation.get("account") or {}).get("login")
    print(f"  account: {account}")
    print(f"  target type: {installation.get('target_type')}")
    permissions = installation.get("permissions") or {}
    for name in ("metadata", "contents"):
        if name in permissions:
            print(f"  permission {name}: {permissions[name]}")


def _report_installation_repos(session: requests.Session) -> None:
    print("\n[check] repositories visible to the installation")
    try:
        data = list_installation_repos(session)
    except (GitHubLanguagesError, requests.RequestException) as exc:
        print(f"  [fail] {exc}")
        return
    repos: List[Dict[str, Any]] = data.get("repositories") or []
    print(f"  total: {data.get('total_count', len(repos))}")
    for repo in repos[:SAMPLE_REPO_LIMIT]:
        print(f"    - {repo.get('full_name')} (private: {repo.get('private')})")


def _report_org(session: requests.Session, org: str) -> None:
    print(f"\n[check] organization access for '{org}'")
    try:
        data = get_org(session, org)
    except (GitHubLanguagesError, requests.RequestException) as exc:
        print(f"  [fail] {exc}")
        return
    print(f"  name: {data.get('name')}")
    print(f"  public repos: {data.get('public_repos')}")
    print(f"  private repos: {data.get('total_private_repos')}")


def run_checks(args: argparse.Namespace, environ=None, secrets=None) -> bool:
    """Run every check; return False when authentication or the language lookup fails."""
    auth = resolve_auth_config(args, environ, secrets)
    try:
        credential = build_credential(auth)
        assertion = mint_app_assertion(credential)
        token = exchange_installation_token(assertion, credential.installation_id)
    except GitHubLanguagesError as exc:
        print(f"[error] {exc}")
        return False

    session = build_session(token.value)
    owner = args.owner or auth.org
    _report_rate_limits(session)
    _report_installation(assertion, credential.installation_id)
    _report_installation_repos(session)
    _report_org(session, owner)

    print(f"\n[check] languages for {owner}/{args.repo}")
    try:
        report = fetch_languages(session, Repository(owner=owner, name=args.repo))
    except GitHubLanguagesError as exc:
        print(f"  [fail] {exc}")
        print("  the repository may not exist, be private to the App, or the App lacks 'Contents' permission")
        return False
    print(f"  {report.full_name}: {', '.join(report.languages) or '-'}")
    print("\nAll authentication checks completed.")
    return True


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Verify GitHub App authentication and API access.")
    add_auth_arguments(parser)
    parser.add_argument("--owner", default=None, help="repository owner (defaults to --org)")
    parser.add_argument("--repo", required=True, help="repository used for the language lookup")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)
    if not run_checks(args):
        sys.exit(1)


__all__ = [
    "get_rate_limits",
    "get_installation",
    "list_installation_repos",
    "get_org",
    "run_checks",
    "build_arg_parser",
    "main",
]
