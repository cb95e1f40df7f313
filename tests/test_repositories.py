"""Tests for gh_languages.retrieval.repositories covering pagination and the production filter.

Run with coverage:
    pytest tests/test_repositories.py --maxfail=1 -v --cov=gh_languages.retrieval.repositories --cov-report=term-missing
"""

from unittest.mock import MagicMock

import pytest

from conftest import make_resp, repo_item
from gh_languages.errors import EnumerationError
from gh_languages.retrieval import repositories
from gh_languages.retrieval.repositories import Repository


def _items(start, count):
    return [
        repo_item(
            "acme",
            f"r{i}",
            archived=(i % 3 == 0),
            topics=("production",) if i % 2 == 0 else ("experimental",),
        )
        for i in range(start, start + count)
    ]


def test_three_pages_filtered_in_platform_order():
    pages = [_items(0, 100), _items(100, 100), _items(200, 1)]
    session = MagicMock()
    session.get.side_effect = [
        make_resp(200, pages[0], next_page=2),
        make_resp(200, pages[1], next_page=3),
        make_resp(200, pages[2]),
    ]

    repos = list(repositories.iter_org_repositories(session, "acme"))

    expected = [f"r{i}" for i in range(201) if i % 3 != 0 and i % 2 == 0]
    assert [repo.name for repo in repos] == expected
    assert all(repo.archived is False and "production" in repo.topics for repo in repos)
    assert session.get.call_count == 3
    assert [c.kwargs["params"] for c in session.get.call_args_list] == [
        {"per_page": 100, "page": 1},
        {"per_page": 100, "page": 2},
        {"per_page": 100, "page": 3},
    ]
    assert session.get.call_args_list[0].args[0].endswith("/orgs/acme/repos")


def test_missing_archived_flag_is_excluded():
    session = MagicMock()
    session.get.return_value = make_resp(200, [
        repo_item("acme", "unknown", archived=None),
        repo_item("acme", "live"),
    ])
    repos = list(repositories.iter_org_repositories(session, "acme"))
    assert [repo.full_name for repo in repos] == ["acme/live"]


def test_from_api_tolerates_missing_fields():
    repo = Repository.from_api({"full_name": "acme/x", "name": "x", "topics": None, "archived": False})
    assert repo.owner == "acme"
    assert repo.topics == frozenset()
    assert repositories.is_production_repo(repo) is False


def test_each_call_restarts_from_first_page():
    session = MagicMock()
    session.get.side_effect = lambda url, params=None, timeout=None: make_resp(200, [repo_item("acme", "a")])
    first = list(repositories.iter_org_repositories(session, "acme"))
    second = list(repositories.iter_org_repositories(session, "acme"))
    assert first == second
    assert [c.kwargs["params"]["page"] for c in session.get.call_args_list] == [1, 1]


def test_page_failure_raises_enumeration_error_after_earlier_pages():
    session = MagicMock()
    session.get.side_effect = [
        make_resp(200, [repo_item("acme", "a")], next_page=2),
        make_resp(500, {"message": "Server Error"}),
    ]
    seen = []
    with pytest.raises(EnumerationError) as excinfo:
        for repo in repositories.iter_org_repositories(session, "acme"):
            seen.append(repo.name)
    assert seen == ["a"]
    assert excinfo.value.page == 2
    assert excinfo.value.status_code == 500
    assert "Server Error" in str(excinfo.value)


def test_expired_token_rejection_keeps_platform_status():
    session = MagicMock()
    session.get.return_value = make_resp(401, {"message": "Bad credentials"})
    with pytest.raises(EnumerationError) as excinfo:
        list(repositories.iter_org_repositories(session, "acme"))
    assert excinfo.value.status_code == 401
    assert "Bad credentials" in str(excinfo.value)
    assert excinfo.value.__cause__.status_code == 401


def test_unexpected_payload_is_an_enumeration_error():
    session = MagicMock()
    session.get.return_value = make_resp(200, {"message": "not a list"})
    with pytest.raises(EnumerationError, match="unexpected"):
        list(repositories.iter_org_repositories(session, "acme"))


def test_link_back_to_earlier_page_stops_enumeration():
    session = MagicMock()
    session.get.side_effect = [
        make_resp(200, [repo_item("acme", "a")], next_page=2),
        make_resp(200, [repo_item("acme", "b")], next_page=1),
        make_resp(200, [repo_item("acme", "c")]),
    ]
    seen = []
    with pytest.raises(EnumerationError, match="points back to page 1") as excinfo:
        for repo in repositories.iter_org_repositories(session, "acme"):
            seen.append(repo.name)
    assert seen == ["a", "b"]
    assert excinfo.value.page == 2
    assert session.get.call_count == 2


def test_link_to_same_page_stops_enumeration():
    session = MagicMock()
    session.get.return_value = make_resp(200, [repo_item("acme", "a")], next_page=1)
    with pytest.raises(EnumerationError):
        list(repositories.iter_org_repositories(session, "acme"))
    assert session.get.call_count == 1


def test_non_object_entry_is_an_enumeration_error():
    session = MagicMock()
    session.get.return_value = make_resp(200, ["acme/a"])
    with pytest.raises(EnumerationError, match="unexpected repository entry") as excinfo:
        list(repositories.iter_org_repositories(session, "acme"))
    assert excinfo.value.page == 1
