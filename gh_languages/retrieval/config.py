"""Central configuration constants for the GitHub language harvesting workflow."""

from __future__ import annotations

import os

USER_AGENT = "gh-languages/1.0"
BASE_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
ACCEPT_HEADER = "application/vnd.github+json"
API_VERSION = "2022-11-28"
PER_PAGE = 100
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "60"))
TOKEN_EXCHANGE_TIMEOUT = int(os.getenv("TOKEN_EXCHANGE_TIMEOUT", "30"))
PRODUCTION_TOPIC = "production"
OUTPUT_DIR = "./output"
STREAM_BUFFER_SIZE = int(os.getenv("STREAM_BUFFER_SIZE", "1"))  # 0 = unbounded

__all__ = [
    "USER_AGENT",
    "BASE_URL",
    "ACCEPT_HEADER",
    "API_VERSION",
    "PER_PAGE",
    "REQUEST_TIMEOUT",
    "TOKEN_EXCHANGE_TIMEOUT",
    "PRODUCTION_TOPIC",
    "OUTPUT_DIR",
    "STREAM_BUFFER_SIZE",
]
