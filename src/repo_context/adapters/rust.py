"""Rust lexical adapter for module declarations and crate-local ``use`` paths."""

from __future__ import annotations

import posixpath
import re

from repo_context.adapters.base import ImportReference, line_at, normalize_and_sort_references
from repo_context.adapters.lexical import RUST_RULES, iter_code_matches

_MOD_DECL_RE = re.compile(
    r"^[ \t]*(?:pub(?:\([^)]*\))?\s+)?mod\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*;",
    re.MULTILINE,
)
_USE_RE = re.compile(
    r"\buse\s+(?P<anchor>crate|self|super)(?P<rest>(?:\s*::\s*[A-Za-z_][A-Za-z0-9_]*)+)"
)
_MODULE_ROOT_STEMS = {"main", "lib", "mod"}


class RustLexicalAdapter:
    """Resolve ``mod x;`` and ``use crate::...`` references to Rust source files."""

    name = "rust_lexical"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a Rust source file."""
        return path.lower().endswith(".rs")

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Extract module declarations and crate/self/super ``use`` paths."""
        module_dir = _module_dir(path)
        crate_src = _crate_src(path)
        references: list[ImportReference] = []

        for match in iter_code_matches(_MOD_DECL_RE, text, RUST_RULES):
            name = match.group("name")
            references.append(
                ImportReference(
                    specifier=f"mod {name}",
                    line=line_at(text, match.start("name")),
                    candidates=_join_module(module_dir, [name]),
                )
            )

        for match in iter_code_matches(_USE_RE, text, RUST_RULES):
            anchor = match.group("anchor")
            segments = [
                segment.strip() for segment in match.group("rest").split("::") if segment.strip()
            ]
            if anchor == "crate":
                base = crate_src
            elif anchor == "self":
                base = module_dir
            else:
                base = posixpath.dirname(module_dir)
            candidates: list[str] = []
            for length in range(len(segments), 0, -1):
                candidates.extend(_join_module(base, segments[:length]))
            references.append(
                ImportReference(
                    specifier=f"{anchor}::{'::'.join(segments)}",
                    line=line_at(text, match.start()),
                    candidates=tuple(candidates),
                )
            )
        return normalize_and_sort_references(references)


def _module_dir(path: str) -> str:
    """Directory holding child modules of this file (``foo.rs`` owns ``foo/``)."""
    directory = posixpath.dirname(path)
    stem = posixpath.splitext(posixpath.basename(path))[0]
    if stem in _MODULE_ROOT_STEMS:
        return directory
    return posixpath.join(directory, stem) if directory else stem


def _crate_src(path: str) -> str:
    parts = path.split("/")[:-1]
    for index in range(len(parts) - 1, -1, -1):
        if parts[index] == "src":
            return "/".join(parts[: index + 1])
    return "/".join(parts)


def _join_module(base: str, segments: list[str]) -> tuple[str, ...]:
    joined = "/".join(segments)
    prefix = f"{base}/" if base else ""
    return (f"{prefix}{joined}.rs", f"{prefix}{joined}/mod.rs")
