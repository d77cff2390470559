"""Deterministic lexical scanning helpers for non-AST adapters."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class LexicalRules:
    """Configurable lexical markers used while masking non-code text."""

    line_comment_prefixes: tuple[str, ...] = ("//", "#")
    block_comment_pairs: tuple[tuple[str, str], ...] = (("/*", "*/"),)
    string_delimiters: tuple[str, ...] = ("'''", '"""', "'", '"', "`")
    escape_char: str = "\\"


C_FAMILY_RULES = LexicalRules(
    line_comment_prefixes=("//",),
    string_delimiters=('"', "'", "`"),
)
JVM_RULES = LexicalRules(
    line_comment_prefixes=("//",),
    string_delimiters=('"""', '"', "'"),
)
RUST_RULES = LexicalRules(line_comment_prefixes=("//",), string_delimiters=('"',))


def iter_code_matches(
    pattern: re.Pattern[str],
    text: str,
    rules: LexicalRules | None = None,
) -> Iterator[re.Match[str]]:
    """Yield pattern matches whose first character lies outside comments and strings.

    Matching runs on the original text so quoted specifiers stay readable; the
    masked copy only decides which matches start in live code.
    """
    masked = mask_comments_and_strings(text, rules)
    for match in pattern.finditer(text):
        start = match.start()
        while start < match.end() and text[start].isspace():
            start += 1
        if start < len(masked) and masked[start] == text[start]:
            yield match


def mask_comments_and_strings(text: str, rules: LexicalRules | None = None) -> str:
    """Mask comments and strings while preserving original line count and character offsets."""
    active_rules = rules or LexicalRules()
    line_prefixes = tuple(
        sorted(
            (prefix for prefix in active_rules.line_comment_prefixes if prefix),
            key=len,
            reverse=True,
        )
    )
    block_pairs = tuple(
        sorted(
            ((start, end) for start, end in active_rules.block_comment_pairs if start and end),
            key=lambda pair: len(pair[0]),
            reverse=True,
        )
    )
    string_delimiters = tuple(
        sorted(
            (marker for marker in active_rules.string_delimiters if marker),
            key=len,
            reverse=True,
        )
    )

    chars = list(text)
    length = len(text)
    index = 0
    state: tuple[str, str] | None = None

    while index < length:
        if state is None:
            line_marker = _match_any(text, index, line_prefixes)
            if line_marker is not None:
                for offset in range(len(line_marker)):
                    chars[index + offset] = " "
                state = ("line_comment", line_marker)
                index += len(line_marker)
                continue

            block_marker = _match_block_start(text, index, block_pairs)
            if block_marker is not None:
                start_marker, end_marker = block_marker
                for offset in range(len(start_marker)):
                    chars[index + offset] = " "
                state = ("block_comment", end_marker)
                index += len(start_marker)
                continue

            string_marker = _match_any(text, index, string_delimiters)
            if string_marker is not None:
                for offset in range(len(string_marker)):
                    chars[index + offset] = " "
                state = ("string", string_marker)
                index += len(string_marker)
                continue

            index += 1
            continue

        mode, marker = state
        if mode == "line_comment":
            if text[index] == "\n":
                state = None
                index += 1
            else:
                chars[index] = " "
                index += 1
            continue

        if mode == "block_comment":
            if text.startswith(marker, index):
                for offset in range(len(marker)):
                    chars[index + offset] = " "
                state = None
                index += len(marker)
            else:
                if text[index] != "\n":
                    chars[index] = " "
                index += 1
            continue

        if mode == "string":
            if text.startswith(marker, index) and not _is_escaped(
                text, index, marker, active_rules.escape_char
            ):
                for offset in range(len(marker)):
                    chars[index + offset] = " "
                state = None
                index += len(marker)
            else:
                if text[index] != "\n":
                    chars[index] = " "
                index += 1
            continue

    return "".join(chars)

def _match_any(text: str, index: int, markers: tuple[str, ...]) -> str | None:
    for marker in markers:
        if text.startswith(marker, index):
            return marker
    return None


def _match_block_start(
    text: str,
    index: int,
    pairs: tuple[tuple[str, str], ...],
) -> tuple[str, str] | None:
    for start, end in pairs:
        if text.startswith(start, index):
            return start, end
    return None


def _is_escaped(text: str, index: int, marker: str, escape_char: str) -> bool:
    if len(marker) > 1:
        return False
    backslashes = 0
    cursor = index - 1
    while cursor >= 0 and text[cursor] == escape_char:
        backslashes += 1
        cursor -= 1
    return backslashes % 2 == 1


