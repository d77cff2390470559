"""Token estimators used to cost candidate files."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

TokenEstimator = Callable[[str], int]

CHARS_PER_TOKEN = 4
HEURISTIC_CACHE_KEY = f"heuristic:{CHARS_PER_TOKEN}"


def heuristic_token_estimator(text: str) -> int:
    """Estimate tokens at roughly four characters per token."""
    if not text:
        return 0
    return (len(text) + CHARS_PER_TOKEN - 1) // CHARS_PER_TOKEN


@dataclass(slots=True, frozen=True)
class TiktokenEstimator:
    """Exact counts from one tiktoken encoding."""

    encoding: str
    encoder: Any

    @property
    def cache_key(self) -> str:
        return f"tiktoken:{self.encoding}"

    def __call__(self, text: str) -> int:
        if not text:
            return 0
        return len(self.encoder.encode(text, disallowed_special=()))


def build_tiktoken_estimator(encoding: str = "cl100k_base") -> TiktokenEstimator:
    """Return an estimator backed by a tiktoken encoding.

    Requires the optional ``tiktoken`` extra.
    """
    import tiktoken

    return TiktokenEstimator(encoding=encoding, encoder=tiktoken.get_encoding(encoding))


def estimator_key(estimator: TokenEstimator) -> str:
    """Return the key that separates cached token counts per estimator.

    Built-in estimators have stable keys that survive a cache reload. Any other
    callable is keyed by its qualified name and object identity, so counts are
    only reused with that same estimator object.
    """
    if estimator is heuristic_token_estimator:
        return HEURISTIC_CACHE_KEY
    stable = getattr(estimator, "cache_key", None)
    if isinstance(stable, str) and stable:
        return stable
    module = getattr(estimator, "__module__", None) or type(estimator).__module__
    name = getattr(estimator, "__qualname__", None) or type(estimator).__qualname__
    return f"{module}.{name}@{id(estimator):x}"
