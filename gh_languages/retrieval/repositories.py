"""Enumerate an organization's repositories and keep the unarchived production ones."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, Optional

import requests

from gh_languages.errors import EnumerationError, GitHubAPIError

from .config import BASE_URL, PER_PAGE, PRODUCTION_TOPIC
from .http_client import get_json, next_page


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str
    archived: Optional[bool] = None
    topics: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Repository":
        """Build a Repository from one entry of the REST listing."""
        owner = (item.get("owner") or {}).get("login") or ""
        name = item.get("name") or ""
        if not owner and "/" in (item.get("full_name") or ""):
            owner = item["full_name"].split("/", 1)[0]
        archived = item.get("archived")
        return cls(
            owner=owner,
            name=name,
            archived=archived if isinstance(archived, bool) else None,
            topics=frozenset(item.get("topics") or ()),
        )


def is_production_repo(repo: Repository) -> bool:
    """True only for repos explicitly unarchived and tagged with the production topic."""
    return repo.archived is False and PRODUCTION_TOPIC in repo.topics


def iter_org_repositories(
    session: requests.Session,
    org: str,
    *,
    cancel: Optional[threading.Event] = None,
    base_url: Optional[str] = None,
) -> Iterator[Repository]:
    """Yield the org's production repositories in the order GitHub lists them.

    Every call starts again from page 1.
    """
    url = f"{(base_url or BASE_URL).rstrip('/')}/orgs/{org}/repos"
    page = 1
    accepted = 0
    while page:
        try:
            batch, resp = get_json(session, url, {"per_page": PER_PAGE, "page": page}, cancel=cancel)
        except GitHubAPIError as exc:
            raise EnumerationError(
                f"failed to list repositories for {org} (page {page}, HTTP {exc.status_code}): {exc.message}",
                org=org,
                page=page,
                status_code=exc.status_code,
            ) from exc
        except requests.RequestException as exc:
            raise EnumerationError(
                f"failed to list repositories for {org} (page {page}): {exc}",
                org=org,
                page=page,
            ) from exc

        if not isinstance(batch, list):
            raise EnumerationError(
                f"unexpected repository listing payload for {org} (page {page})",
                org=org,
                page=page,
                status_code=resp.status_code,
            )

        for item in batch:
            if not isinstance(item, dict):
                raise EnumerationError(
                    f"unexpected repository entry for {org} (page {page}): {item!r}",
                    org=org,
                    page=page,
                    status_code=resp.status_code,
                )
            repo = Repository.from_api(item)
            if is_production_repo(repo):
                accepted += 1
                yield repo

        print(f"[repos] {org}: page {page} -> {accepted} production repos so far")
        following = next_page(resp)
        if following and following <= page:
            raise EnumerationError(
                f"repository listing for {org} points back to page {following} after page {page}",
                org=org,
                page=page,
                status_code=resp.status_code,
            )
        page = following


__all__ = ["Repository", "is_production_repo", "iter_org_repositories"]
