"""Lexical fallback adapter for files without a language adapter."""

from __future__ import annotations

from repo_context.adapters.base import ImportReference


class LexicalFallbackAdapter:
    """Default adapter that contributes no references."""

    name = "lexical"

    def supports_path(self, path: str) -> bool:
        """Fallback supports any path."""
        _ = path
        return True

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Fallback returns no references."""
        _ = path
        _ = text
        return []
