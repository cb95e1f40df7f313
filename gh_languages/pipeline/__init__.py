"""GitHub App language harvesting pipeline."""

from .runner import main, stream_reports

__all__ = ["main", "stream_reports"]
