"""Convenience shim to run the language harvest from the repository root."""

from __future__ import annotations

import sys

from gh_languages.pipeline.runner import main as run_pipeline


if __name__ == "__main__":
    run_pipeline(sys.argv[1:])
