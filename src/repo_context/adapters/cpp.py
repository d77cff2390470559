"""C/C++ lexical adapter for quoted includes."""

from __future__ import annotations

import posixpath
import re

from repo_context.adapters.base import (
    ImportReference,
    join_relative,
    line_at,
    normalize_and_sort_references,
)
from repo_context.adapters.lexical import LexicalRules, iter_code_matches

_SUPPORTED_EXTENSIONS = (".c", ".h", ".cc", ".cpp", ".cxx", ".hpp", ".hh", ".hxx", ".inl")
_INCLUDE_RE = re.compile(r'^[ \t]*#[ \t]*include[ \t]*"(?P<spec>[^"\n]+)"', re.MULTILINE)
_CPP_RULES = LexicalRules(line_comment_prefixes=("//",), string_delimiters=())


class CppLexicalAdapter:
    """Resolve ``#include "..."`` to files beside the includer, the root, or any include dir."""

    name = "cpp_lexical"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a C/C++ source or header."""
        return path.lower().endswith(_SUPPORTED_EXTENSIONS)

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Extract quoted includes; angle-bracket includes are system headers."""
        directory = posixpath.dirname(path)
        references: list[ImportReference] = []
        for match in iter_code_matches(_INCLUDE_RE, text, _CPP_RULES):
            specifier = match.group("spec")
            candidates: list[str] = []
            for base in (directory, ""):
                joined = join_relative(base, specifier)
                if joined is not None:
                    candidates.append(joined)
            if not specifier.startswith("."):
                candidates.append(f"**/{specifier}")
            references.append(
                ImportReference(
                    specifier=specifier,
                    line=line_at(text, match.start("spec")),
                    candidates=tuple(dict.fromkeys(candidates)),
                )
            )
        return normalize_and_sort_references(references)
