"""Fetch language maps for accepted repositories and project them to name lists."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

import requests

from gh_languages.errors import GitHubAPIError, HarvestError

from .config import BASE_URL
from .http_client import get_json
from .repositories import Repository


@dataclass(frozen=True)
class LanguageReport:
    full_name: str
    name: str
    languages: Tuple[str, ...]

    def to_record(self) -> Dict[str, Any]:
        """Row shape advertised downstream: names only, no byte counts."""
        return {"full_name": self.full_name, "name": self.name, "languages": list(self.languages)}


def fetch_languages(
    session: requests.Session,
    repo: Repository,
    *,
    cancel: Optional[threading.Event] = None,
    base_url: Optional[str] = None,
) -> LanguageReport:
    """Return the sorted, de-duplicated language names for `repo`."""
    url = f"{(base_url or BASE_URL).rstrip('/')}/repos/{repo.owner}/{repo.name}/languages"
    try:
        data, _ = get_json(session, url, cancel=cancel)
    except GitHubAPIError as exc:
        raise HarvestError(
            f"failed to fetch languages for {repo.full_name} (HTTP {exc.status_code}): {exc.message}",
            owner=repo.owner,
            name=repo.name,
            status_code=exc.status_code,
        ) from exc
    except requests.RequestException as exc:
        raise HarvestError(
            f"failed to fetch languages for {repo.full_name}: {exc}",
            owner=repo.owner,
            name=repo.name,
        ) from exc

    if not isinstance(data, dict):
        raise HarvestError(
            f"unexpected languages payload for {repo.full_name}",
            owner=repo.owner,
            name=repo.name,
        )
    return LanguageReport(full_name=repo.full_name, name=repo.name, languages=tuple(sorted(set(data))))


def harvest_languages(
    session: requests.Session,
    repos: Iterable[Repository],
    *,
    cancel: Optional[threading.Event] = None,
    base_url: Optional[str] = None,
) -> Iterator[LanguageReport]:
    """Yield one report per repository, in input order; the first failure stops the run."""
    for repo in repos:
        yield fetch_languages(session, repo, cancel=cancel, base_url=base_url)


__all__ = ["LanguageReport", "fetch_languages", "harvest_languages"]
