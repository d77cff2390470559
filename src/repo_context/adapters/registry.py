"""Ordered set of language adapters used by the reference graph builder."""

from __future__ import annotations

from dataclasses import dataclass, field

from repo_context.adapters.base import (
    ImportReference,
    LanguageAdapter,
    normalize_and_sort_references,
)


@dataclass(slots=True)
class AdapterRegistry:
    """Language adapters consulted in registration order.

    A path belongs to the first adapter whose ``supports_path`` accepts it.
    Paths nobody claims go to the fallback adapter, which yields no references
    and marks the file as a graph leaf.
    """

    _language_adapters: list[LanguageAdapter] = field(default_factory=list)
    _fallback: LanguageAdapter | None = None

    def register(self, adapter: LanguageAdapter, *, fallback: bool = False) -> None:
        if fallback:
            self._fallback = adapter
        else:
            self._language_adapters.append(adapter)

    def _claiming(self, path: str) -> LanguageAdapter | None:
        return next(
            (adapter for adapter in self._language_adapters if adapter.supports_path(path)),
            None,
        )

    def select(self, path: str) -> LanguageAdapter:
        """Return the adapter that owns ``path``."""
        adapter = self._claiming(path) or self._fallback
        if adapter is None:
            raise LookupError(f"No adapter supports path: {path}")
        return adapter

    def handles(self, path: str) -> bool:
        """Return True when a language adapter, not the fallback, owns ``path``."""
        return self._claiming(path) is not None

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Extract, validate and order the outgoing references of one file.

        Raises ``AdapterContractError`` when the adapter emits a malformed
        reference.
        """
        references = self.select(path).extract_references(path, text)
        return normalize_and_sort_references(references)

    def names(self) -> tuple[str, ...]:
        ordered = [adapter.name for adapter in self._language_adapters]
        if self._fallback is not None:
            ordered.append(self._fallback.name)
        return tuple(ordered)
