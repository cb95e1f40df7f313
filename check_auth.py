"""Convenience shim to verify GitHub App authentication from the repository root."""

from __future__ import annotations

import sys

from gh_languages.pipeline.diagnostics import main as check_main


if __name__ == "__main__":
    check_main(sys.argv[1:])
