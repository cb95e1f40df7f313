"""Resolve run settings from the secrets file, the environment and CLI flags."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from gh_languages.auth.credentials import AppAuthConfig
from gh_languages.retrieval.config import OUTPUT_DIR, STREAM_BUFFER_SIZE
from gh_languages.secrets import app_auth_secrets

DEFAULT_OUTPUT_FILE = "languages.jsonl"

# settings field -> environment variable
ENV_VARS = {
    "org": "GITHUB_ORG",
    "app_id": "GITHUB_APP_ID",
    "installation_id": "GITHUB_INSTALLATION_ID",
    "private_key": "GITHUB_PRIVATE_KEY",
    "private_key_path": "GITHUB_PRIVATE_KEY_PATH",
}


@dataclass(frozen=True)
class RunSettings:
    """Resolved runtime settings for one harvesting run."""

    auth: AppAuthConfig
    output: Path
    buffer_size: int = STREAM_BUFFER_SIZE

    @property
    def org(self) -> str:
        return (self.auth.org or "").strip()


def add_auth_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Register the GitHub App credential flags shared by every entry point."""
    parser.add_argument("--org", help=f"organization to harvest (or set {ENV_VARS['org']})")
    parser.add_argument("--app-id", help=f"GitHub App ID (or set {ENV_VARS['app_id']})")
    parser.add_argument(
        "--installation-id",
        help=f"GitHub App installation ID (or set {ENV_VARS['installation_id']})",
    )
    parser.add_argument(
        "--private-key",
        help=f"private key contents; wins over --private-key-path (or set {ENV_VARS['private_key']})",
    )
    parser.add_argument(
        "--private-key-path",
        help=f"path to the private key file (or set {ENV_VARS['private_key_path']})",
    )
    return parser


def build_arg_parser() -> argparse.ArgumentParser:
    """Return the CLI parser used by the harvesting entry point."""
    parser = argparse.ArgumentParser(
        description="Harvest repository languages for an organization as a GitHub App installation.",
    )
    add_auth_arguments(parser)
    parser.add_argument("--output", default=str(Path(OUTPUT_DIR) / DEFAULT_OUTPUT_FILE))
    parser.add_argument("--buffer-size", type=int, default=STREAM_BUFFER_SIZE)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; accepts argv overrides for testing."""
    return build_arg_parser().parse_args(argv)


def resolve_auth_config(
    args: Optional[argparse.Namespace] = None,
    environ: Optional[Mapping[str, str]] = None,
    secrets: Optional[Dict[str, Any]] = None,
) -> AppAuthConfig:
    """Merge credential sources; CLI flags beat environment, environment beats secrets."""
    environ = os.environ if environ is None else environ
    section = app_auth_secrets(secrets)
    values: Dict[str, Any] = {}
    for name, env_var in ENV_VARS.items():
        value = getattr(args, name, None) if args is not None else None
        if value in (None, ""):
            value = environ.get(env_var)
        if value in (None, ""):
            value = section.get(name)
        values[name] = value
    return AppAuthConfig(**values)


def resolve_settings(
    args: Optional[argparse.Namespace] = None,
    environ: Optional[Mapping[str, str]] = None,
    secrets: Optional[Dict[str, Any]] = None,
) -> RunSettings:
    """Return immutable settings for a run."""
    args = args or parse_args([])
    return RunSettings(
        auth=resolve_auth_config(args, environ, secrets),
        output=Path(args.output),
        buffer_size=int(args.buffer_size),
    )


__all__ = [
    "DEFAULT_OUTPUT_FILE",
    "ENV_VARS",
    "RunSettings",
    "add_auth_arguments",
    "build_arg_parser",
    "parse_args",
    "resolve_auth_config",
    "resolve_settings",
]
