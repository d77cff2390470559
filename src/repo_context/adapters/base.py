"""Core adapter protocol and data types."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class ImportReference:
    """Single outgoing reference extracted from a source file.

    ``candidates`` lists in-project paths the reference may resolve to, most
    specific first. Each entry is an exact relative path, a directory glob such
    as ``pkg/util/*.go`` (direct children only), or a suffix pattern such as
    ``**/com/acme/Service.java``.
    """

    specifier: str
    line: int
    candidates: tuple[str, ...]


class AdapterContractError(ValueError):
    """Raised when adapter output violates the shared reference contract."""


class LanguageAdapter(Protocol):
    """Protocol implemented by language adapters."""

    name: str

    def supports_path(self, path: str) -> bool:
        """Return True when adapter supports a file path."""

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Return deterministic outgoing references for one file."""


def reference_sort_key(reference: ImportReference) -> tuple[int, str, tuple[str, ...]]:
    """Return deterministic sort key for import references."""
    return (reference.line, reference.specifier, reference.candidates)


def validate_import_references(references: list[ImportReference]) -> None:
    """Validate references against required invariant fields."""
    for reference in references:
        if not reference.specifier.strip():
            raise AdapterContractError("Import reference specifier must be non-empty.")
        if reference.line < 1:
            raise AdapterContractError("Import reference line must be >= 1.")
        for candidate in reference.candidates:
            if not candidate or candidate.startswith("/"):
                raise AdapterContractError(
                    "Import reference candidates must be non-empty relative paths."
                )


def normalize_and_sort_references(references: list[ImportReference]) -> list[ImportReference]:
    """Drop unresolvable references, validate, dedupe and sort deterministically."""
    kept = {
        reference
        for reference in references
        if reference.candidates and reference.specifier.strip()
    }
    ordered = sorted(kept, key=reference_sort_key)
    validate_import_references(ordered)
    return ordered


def join_relative(directory: str, specifier: str) -> str | None:
    """Join a relative specifier onto a directory, rejecting paths above the root."""
    joined = posixpath.normpath(posixpath.join(directory, specifier)) if directory else (
        posixpath.normpath(specifier)
    )
    if joined in {".", ""} or joined == ".." or joined.startswith("../"):
        return None
    return joined


def line_at(text: str, offset: int) -> int:
    """Return the 1-based line number of a character offset."""
    return text.count("\n", 0, offset) + 1
