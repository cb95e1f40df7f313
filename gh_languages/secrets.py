"""Read GitHub App credentials from the gitignored `local_secrets.json`.

Expected layout:

    {"app_auth": {"org": "...", "app_id": "...", "installation_id": "...",
                  "private_key_path": "..."}}
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SECRETS_FILENAME = "local_secrets.json"
APP_AUTH_SECTION = "app_auth"


def secrets_path(path: Optional[str | Path] = None) -> Path:
    """Explicit path, then LOCAL_SECRETS_FILE, then the file beside the package."""
    if path:
        return Path(path).expanduser()
    override = os.getenv("LOCAL_SECRETS_FILE")
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parents[1] / DEFAULT_SECRETS_FILENAME


def load_local_secrets(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Return the decoded secrets object, or {} when the file is absent or unusable."""
    target = secrets_path(path)
    if not target.is_file():
        return {}
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        print(f"[warn] could not read {target}: {exc}")
        return {}
    if not isinstance(data, dict):
        print(f"[warn] {target} does not hold a JSON object; ignoring it")
        return {}
    return data


def app_auth_secrets(secrets: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the `app_auth` section (empty when absent or not an object)."""
    if secrets is None:
        secrets = load_local_secrets()
    section = secrets.get(APP_AUTH_SECTION)
    return section if isinstance(section, dict) else {}


__all__ = [
    "APP_AUTH_SECTION",
    "DEFAULT_SECRETS_FILENAME",
    "secrets_path",
    "load_local_secrets",
    "app_auth_secrets",
]
