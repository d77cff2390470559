"""Java/Kotlin lexical adapter for fully-qualified imports."""

from __future__ import annotations

import re

from repo_context.adapters.base import ImportReference, line_at, normalize_and_sort_references
from repo_context.adapters.lexical import JVM_RULES, iter_code_matches

_IMPORT_RE = re.compile(
    r"^[ \t]*import\s+(?P<static>static\s+)?"
    r"(?P<name>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)(?P<wildcard>\.\*)?",
    re.MULTILINE,
)


class JavaKotlinLexicalAdapter:
    """Resolve JVM imports to ``**/<package path>/<Type>.java|.kt`` suffix candidates."""

    name = "jvm_lexical"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a Java or Kotlin source file."""
        return path.lower().endswith((".java", ".kt", ".kts"))

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Extract single-type imports; wildcard imports name no file and are skipped."""
        _ = path
        references: list[ImportReference] = []
        for match in iter_code_matches(_IMPORT_RE, text, JVM_RULES):
            if match.group("wildcard"):
                continue
            segments = match.group("name").split(".")
            if match.group("static") and len(segments) > 1:
                segments = segments[:-1]
            if len(segments) < 2:
                continue
            candidates: list[str] = []
            for suffix in (segments, segments[:-1]):
                if len(suffix) < 2:
                    continue
                joined = "/".join(suffix)
                candidates.extend((f"**/{joined}.java", f"**/{joined}.kt"))
            references.append(
                ImportReference(
                    specifier=match.group("name"),
                    line=line_at(text, match.start("name")),
                    candidates=tuple(candidates),
                )
            )
        return normalize_and_sort_references(references)
