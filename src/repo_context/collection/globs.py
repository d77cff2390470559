"""Glob compilation and root ``.gitignore`` rule matching."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from repo_context.errors import DiscoveryConfigError


@dataclass(slots=True, frozen=True)
class CompiledGlob:
    """One glob pattern compiled to an anchored regex over relative POSIX paths."""

    pattern: str
    regex: re.Pattern[str]
    basename_only: bool

    def matches(self, relative_path: str) -> bool:
        if self.basename_only:
            name = relative_path.rsplit("/", 1)[-1]
            return self.regex.fullmatch(name) is not None
        return self.regex.fullmatch(relative_path) is not None


def compile_glob(pattern: str, *, field: str = "glob", match_basename: bool = True) -> CompiledGlob:
    """Compile ``**``, ``*``, ``?``, ``[...]`` and ``{a,b}`` globs.

    With ``match_basename`` a pattern without ``/`` matches the file name at any
    depth; otherwise every pattern is anchored at the project root. A trailing
    ``/`` names a directory and everything below it.
    """
    raw = pattern.strip()
    if not raw:
        raise DiscoveryConfigError(
            field=field, value=pattern, reason="Glob pattern must be non-empty."
        )
    normalized = raw.replace("\\", "/")
    if normalized.endswith("/"):
        stem = normalized.strip("/")
        if not stem:
            raise DiscoveryConfigError(
                field=field, value=pattern, reason=f"Invalid glob pattern: {pattern!r}."
            )
        normalized = f"{stem}/**" if "/" in stem or not match_basename else f"**/{stem}/**"
    normalized = normalized.lstrip("/")
    basename_only = match_basename and "/" not in normalized
    try:
        body = _translate(normalized)
        regex = re.compile(body)
    except (ValueError, re.error) as error:
        raise DiscoveryConfigError(
            field=field,
            value=pattern,
            reason=f"Invalid glob pattern {pattern!r}: {error}",
            hint="Check for unbalanced '[' or '{' characters.",
        ) from error
    return CompiledGlob(pattern=pattern, regex=regex, basename_only=basename_only)


def _translate(pattern: str, *, braces: bool = True) -> str:
    output: list[str] = []
    index = 0
    length = len(pattern)
    brace_depth = 0
    while index < length:
        char = pattern[index]
        if pattern.startswith("**/", index):
            output.append("(?:.*/)?")
            index += 3
            continue
        if pattern.startswith("/**", index) and index + 3 == length:
            output.append("(?:/.*)?")
            index += 3
            continue
        if pattern.startswith("**", index):
            output.append(".*")
            index += 2
            continue
        if char == "*":
            output.append("[^/]*")
        elif char == "?":
            output.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 2 if pattern.startswith("[!", index) else index + 1)
            if end == -1:
                raise ValueError("unterminated character class")
            content = pattern[index + 1 : end].replace("\\", "\\\\")
            if content.startswith("!"):
                content = "^/" + content[1:]
            elif content.startswith("^"):
                content = "\\" + content
            output.append(f"[{content}]")
            index = end + 1
            continue
        elif char == "{" and braces:
            brace_depth += 1
            output.append("(?:")
        elif char == "}" and braces:
            if brace_depth == 0:
                raise ValueError("unbalanced '}'")
            brace_depth -= 1
            output.append(")")
        elif char == "," and brace_depth > 0:
            output.append("|")
        else:
            output.append(re.escape(char))
        index += 1
    if brace_depth:
        raise ValueError("unbalanced '{'")
    return "".join(output)


@dataclass(slots=True, frozen=True)
class GlobSet:
    """Ordered set of compiled globs."""

    globs: tuple[CompiledGlob, ...]

    def matches(self, relative_path: str) -> bool:
        return any(glob.matches(relative_path) for glob in self.globs)

    def first_match_index(self, relative_path: str) -> int | None:
        """Return the index of the first matching pattern, else None."""
        for index, glob in enumerate(self.globs):
            if glob.matches(relative_path):
                return index
        return None

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(glob.pattern for glob in self.globs)


def compile_globs(
    patterns: tuple[str, ...], *, field: str = "glob", match_basename: bool = True
) -> GlobSet:
    """Compile patterns in order; the first invalid one raises DiscoveryConfigError."""
    return GlobSet(
        globs=tuple(
            compile_glob(pattern, field=field, match_basename=match_basename)
            for pattern in patterns
        )
    )


@dataclass(slots=True, frozen=True)
class IgnoreRule:
    """One parsed ``.gitignore`` line."""

    pattern: str
    negated: bool
    directory_only: bool
    anchored: bool
    regex: re.Pattern[str]


@dataclass(slots=True, frozen=True)
class IgnoreRules:
    """Root ``.gitignore`` rules evaluated in file order; the last match wins."""

    rules: tuple[IgnoreRule, ...] = ()

    def is_ignored(self, relative_path: str, *, is_dir: bool = False) -> bool:
        ignored = False
        for rule in self.rules:
            if _matches_gitignore_rule(relative_path, rule, is_dir=is_dir):
                ignored = not rule.negated
        return ignored

    def __bool__(self) -> bool:
        return bool(self.rules)


def parse_gitignore(text: str) -> IgnoreRules:
    """Parse ``.gitignore`` text into ordered rules."""
    rules: list[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.rstrip()
        if not line or line.startswith("#"):
            continue
        negated = line.startswith("!")
        body = line[1:] if negated else line
        if body.startswith("\\"):
            body = body[1:]
        directory_only = body.endswith("/")
        clean = body.strip("/")
        if not clean:
            continue
        anchored = body.startswith("/") or "/" in clean
        rules.append(
            IgnoreRule(
                pattern=clean,
                negated=negated,
                directory_only=directory_only,
                anchored=anchored,
                regex=_gitignore_regex(clean),
            )
        )
    return IgnoreRules(rules=tuple(rules))


def load_root_gitignore(root: Path) -> IgnoreRules:
    """Load rules from the project root ``.gitignore``; unreadable files yield no rules."""
    path = root / ".gitignore"
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return IgnoreRules()
    return parse_gitignore(text)


def _matches_gitignore_rule(relative_path: str, rule: IgnoreRule, *, is_dir: bool) -> bool:
    parts = relative_path.split("/")
    # A rule matching an ancestor directory ignores everything below it.
    for depth in range(1, len(parts) + 1):
        prefix = "/".join(parts[:depth])
        prefix_is_dir = depth < len(parts) or is_dir
        if rule.directory_only and not prefix_is_dir:
            continue
        if rule.anchored:
            if rule.regex.fullmatch(prefix):
                return True
        elif rule.regex.fullmatch(parts[depth - 1]):
            return True
    return False


def _gitignore_regex(pattern: str) -> re.Pattern[str]:
    """Compile a gitignore pattern; a malformed character class matches literally."""
    try:
        return re.compile(_translate(pattern, braces=False))
    except (ValueError, re.error):
        return re.compile(re.escape(pattern))
