"""Entry points wiring authentication, enumeration and harvesting into one stream."""

from __future__ import annotations

import json
import os
import queue
import sys
import threading
from pathlib import Path
from typing import Iterator, List, Optional, Union

import requests

from gh_languages.auth.app_jwt import mint_app_assertion
from gh_languages.auth.credentials import AppAuthConfig, build_credential
from gh_languages.auth.installation import exchange_installation_token
from gh_languages.errors import GitHubLanguagesError, RunCancelled
from gh_languages.retrieval.http_client import build_session
from gh_languages.retrieval.languages import LanguageReport, harvest_languages
from gh_languages.retrieval.repositories import iter_org_repositories

from .config import RunSettings, parse_args, resolve_settings

PUT_POLL_SEC = 0.1

_DONE = object()
QueueItem = Union[LanguageReport, BaseException, object]


def authenticate(
    auth: AppAuthConfig,
    *,
    cancel: Optional[threading.Event] = None,
    base_url: Optional[str] = None,
) -> requests.Session:
    """Validate config, mint the app assertion and return an installation-authenticated session."""
    credential = build_credential(auth)
    assertion = mint_app_assertion(credential)
    token = exchange_installation_token(
        assertion, credential.installation_id, base_url=base_url, cancel=cancel
    )
    return build_session(token.value)


def iter_reports(
    auth: AppAuthConfig,
    *,
    cancel: Optional[threading.Event] = None,
    base_url: Optional[str] = None,
) -> Iterator[LanguageReport]:
    """Run the whole pipeline on the calling thread, yielding reports as they are computed."""
    session = authenticate(auth, cancel=cancel, base_url=base_url)
    org = auth.org.strip()
    repos = iter_org_repositories(session, org, cancel=cancel, base_url=base_url)
    yield from harvest_languages(session, repos, cancel=cancel, base_url=base_url)


def _put(out: "queue.Queue[QueueItem]", item: QueueItem, stop: threading.Event) -> bool:
    """Block until `item` is queued; give up (False) once `stop` is set."""
    while not stop.is_set():
        try:
            out.put(item, timeout=PUT_POLL_SEC)
            return True
        except queue.Full:
            continue
    return False


def produce_reports(
    auth: AppAuthConfig,
    out: "queue.Queue[QueueItem]",
    cancel: threading.Event,
    consumer_gone: threading.Event,
    *,
    base_url: Optional[str] = None,
) -> None:
    """Push every report into `out`, then a final end marker or the error that stopped the run."""
    final: QueueItem = _DONE
    try:
        for report in iter_reports(auth, cancel=cancel, base_url=base_url):
            if not _put(out, report, cancel):
                raise RunCancelled(f"run cancelled while emitting {report.full_name}")
    except Exception as exc:
        final = exc
    _put(out, final, consumer_gone)


def stream_reports(
    settings: RunSettings,
    *,
    cancel: Optional[threading.Event] = None,
    base_url: Optional[str] = None,
) -> Iterator[LanguageReport]:
    """Run the pipeline on a producer thread and yield its reports through a bounded queue.

    A slow consumer blocks the producer once `settings.buffer_size` reports are
    waiting. Closing the generator before the end marker sets `cancel`. The producer's
    error, if any, is raised after the reports it already delivered.
    """
    cancel = cancel or threading.Event()
    consumer_gone = threading.Event()
    out: "queue.Queue[QueueItem]" = queue.Queue(maxsize=max(0, settings.buffer_size))
    producer = threading.Thread(
        target=produce_reports,
        args=(settings.auth, out, cancel, consumer_gone),
        kwargs={"base_url": base_url},
        name="gh-languages-producer",
        daemon=True,
    )
    producer.start()
    finished = False
    try:
        while True:
            item = out.get()
            if item is _DONE:
                finished = True
                return
            if isinstance(item, BaseException):
                finished = True
                raise item
            yield item
    finally:
        consumer_gone.set()
        if not finished:
            cancel.set()
        producer.join(timeout=5)


def write_reports(path: Union[str, Path], reports: Iterator[LanguageReport]) -> int:
    """Write each report as one JSON line as soon as it arrives; return the count."""
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for report in reports:
            f.write(json.dumps(report.to_record(), ensure_ascii=False) + "\n")
            f.flush()
            count += 1
            print(f"  {report.full_name}: {', '.join(report.languages) or '-'}")
    return count


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point: harvest languages for the configured org into a JSON-lines file."""
    settings = resolve_settings(parse_args(argv))
    if not settings.org:
        print("No organization specified. Pass --org, set GITHUB_ORG or edit local_secrets.json.")
        sys.exit(1)

    os.makedirs(settings.output.parent or ".", exist_ok=True)
    print(f"=== {settings.org} ===")
    try:
        count = write_reports(settings.output, stream_reports(settings))
    except GitHubLanguagesError as exc:
        print(f"[error] {exc}")
        sys.exit(1)
    print(f"\n{count} repositories written to {settings.output}")


__all__ = [
    "authenticate",
    "iter_reports",
    "produce_reports",
    "stream_reports",
    "write_reports",
    "main",
]
