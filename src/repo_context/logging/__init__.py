"""Structured run logging utilities."""

from .run_log import JsonlRunLogger, RunEvent, sanitize_metadata, utc_timestamp

__all__ = ["JsonlRunLogger", "RunEvent", "sanitize_metadata", "utc_timestamp"]
