"""Query keyword extraction and path tokenisation."""

from __future__ import annotations

import re

TOKEN_PATTERN = re.compile(r"[A-Za-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

MAX_KEYWORDS = 8
MIN_KEYWORD_LENGTH = 3

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "with", "that", "this", "from", "into", "are", "was",
        "were", "has", "have", "had", "not", "but", "all", "any", "can", "will",
        "should", "would", "could", "how", "what", "when", "where", "why", "which",
        "who", "does", "did", "its", "our", "your", "their", "there", "then", "than",
        "them", "they", "you", "use", "using", "make", "add", "fix", "code", "file",
        "files", "please", "need", "want", "about", "also", "some", "more", "most",
    }
)  # fmt: skip


def tokenize(text: str) -> list[str]:
    """Tokenize into deterministic lowercase alphanumeric terms."""
    return [match.group(0).lower() for match in TOKEN_PATTERN.finditer(text)]


def extract_keywords(query: str) -> tuple[str, ...]:
    """Return up to eight distinct non-stop-word keywords of length >= 3, in query order."""
    seen: set[str] = set()
    ordered: list[str] = []
    for token in tokenize(query):
        if len(token) < MIN_KEYWORD_LENGTH or token in STOP_WORDS:
            continue
        if token in seen:
            continue
        seen.add(token)
        ordered.append(token)
        if len(ordered) >= MAX_KEYWORDS:
            break
    return tuple(ordered)


def path_tokens(path: str) -> frozenset[str]:
    """Split a path into lowercase tokens, also breaking camelCase words."""
    output: set[str] = set()
    for match in TOKEN_PATTERN.finditer(path):
        word = match.group(0)
        output.add(word.lower())
        output.update(part.lower() for part in _CAMEL_BOUNDARY.split(word) if part)
    return frozenset(output)


def path_keyword_matches(path: str, keywords: tuple[str, ...]) -> int:
    """Count keywords found in the path.

    A keyword matches when it occurs in the lowercased path, or when a path
    token of at least three characters is a prefix of it (``auth`` matches
    ``authentication``).
    """
    lowered = path.lower()
    tokens = [token for token in path_tokens(path) if len(token) >= MIN_KEYWORD_LENGTH]
    matched = 0
    for keyword in keywords:
        if keyword in lowered or any(keyword.startswith(token) for token in tokens):
            matched += 1
    return matched


def count_occurrences(text: str, keywords: tuple[str, ...]) -> int:
    """Count case-insensitive keyword occurrences in text."""
    lowered = text.lower()
    return sum(lowered.count(keyword) for keyword in keywords)
