"""Go lexical adapter for package imports."""

from __future__ import annotations

import re

from repo_context.adapters.base import ImportReference, line_at, normalize_and_sort_references
from repo_context.adapters.lexical import C_FAMILY_RULES, iter_code_matches

_SINGLE_IMPORT_RE = re.compile(r'\bimport\s+(?:[A-Za-z_.][A-Za-z0-9_]*\s+)?"(?P<spec>[^"\n]+)"')
_BLOCK_IMPORT_RE = re.compile(r"\bimport\s*\((?P<body>[^)]*)\)")
_BLOCK_ENTRY_RE = re.compile(r'(?:[A-Za-z_.][A-Za-z0-9_]*\s+)?"(?P<spec>[^"\n]+)"')


class GoLexicalAdapter:
    """Resolve Go import paths to in-project package directories by path suffix."""

    name = "go_lexical"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a Go source file."""
        return path.lower().endswith(".go")

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Extract single and grouped imports.

        The module path is unknown here, so every trailing suffix of the import
        path is offered as a package directory, longest first.
        """
        _ = path
        references: list[ImportReference] = []
        for match in iter_code_matches(_SINGLE_IMPORT_RE, text, C_FAMILY_RULES):
            references.append(_reference(match.group("spec"), line_at(text, match.start())))
        for block in iter_code_matches(_BLOCK_IMPORT_RE, text, C_FAMILY_RULES):
            body_offset = block.start("body")
            for entry in _BLOCK_ENTRY_RE.finditer(block.group("body")):
                references.append(
                    _reference(entry.group("spec"), line_at(text, body_offset + entry.start()))
                )
        return normalize_and_sort_references(references)


def _reference(specifier: str, line: int) -> ImportReference:
    parts = [part for part in specifier.split("/") if part]
    candidates = tuple(
        f"**/{'/'.join(parts[start:])}/*.go" for start in range(len(parts))
    )
    return ImportReference(specifier=specifier, line=line, candidates=candidates)
