"""TypeScript/JavaScript lexical adapter for relative module imports."""

from __future__ import annotations

import posixpath
import re

from repo_context.adapters.base import (
    ImportReference,
    join_relative,
    line_at,
    normalize_and_sort_references,
)
from repo_context.adapters.lexical import C_FAMILY_RULES, iter_code_matches

_SUPPORTED_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts")
_RESOLVE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")
_IMPORT_RE = re.compile(
    r"""\b(?:import|export)\s+(?:type\s+)?(?:[^'";]*?\s+from\s+)?['"](?P<spec>[^'"\n]+)['"]"""
)
_CALL_RE = re.compile(r"""\b(?:require|import)\s*\(\s*['"](?P<spec>[^'"\n]+)['"]\s*\)""")


class TypeScriptJavaScriptLexicalAdapter:
    """Resolve relative ``import``/``export from``/``require`` specifiers to project files."""

    name = "ts_js_lexical"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a TS/JS source file."""
        return path.lower().endswith(_SUPPORTED_EXTENSIONS)

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Extract relative module specifiers; bare package imports are external."""
        directory = posixpath.dirname(path)
        references: list[ImportReference] = []
        for pattern in (_IMPORT_RE, _CALL_RE):
            for match in iter_code_matches(pattern, text, C_FAMILY_RULES):
                specifier = match.group("spec")
                if not specifier.startswith(("./", "../")) and specifier not in {".", ".."}:
                    continue
                references.append(
                    ImportReference(
                        specifier=specifier,
                        line=line_at(text, match.start()),
                        candidates=resolve_module_candidates(directory, specifier),
                    )
                )
        return normalize_and_sort_references(references)


def resolve_module_candidates(directory: str, specifier: str) -> tuple[str, ...]:
    """Return exact, extension-appended and ``index`` candidates for a relative specifier."""
    base = join_relative(directory, specifier)
    if base is None:
        return ()
    candidates: list[str] = []
    stem, suffix = posixpath.splitext(base)
    if suffix in _RESOLVE_EXTENSIONS or suffix in {".json", ".css"}:
        candidates.append(base)
        if suffix in {".js", ".jsx", ".mjs", ".cjs"}:
            candidates.extend((f"{stem}.ts", f"{stem}.tsx"))
    candidates.extend(f"{base}{extension}" for extension in _RESOLVE_EXTENSIONS)
    candidates.extend(f"{base}/index{extension}" for extension in _RESOLVE_EXTENSIONS)
    return tuple(dict.fromkeys(candidates))
