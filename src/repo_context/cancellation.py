"""Cooperative cancellation for discovery runs."""

from __future__ import annotations

import threading

from repo_context.errors import DiscoveryCancelledError


class CancellationToken:
    """Thread-safe flag checked between discovery stages."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        """Raise DiscoveryCancelledError when cancellation was requested."""
        if self._event.is_set():
            raise DiscoveryCancelledError(stage)


def check_cancelled(token: CancellationToken | None, stage: str) -> None:
    if token is not None:
        token.raise_if_cancelled(stage)
