"""Project profiles and the fixed ecosystem marker table."""

from __future__ import annotations

from dataclasses import dataclass

COMMON_EXCLUDES = (
    "**/.git/**",
    "**/node_modules/**",
    "**/__pycache__/**",
    "**/.venv/**",
    "**/venv/**",
    "**/.tox/**",
    "**/build/**",
    "**/dist/**",
)
DOC_INCLUDES = ("*.md", "*.rst", "*.txt")


@dataclass(slots=True, frozen=True)
class ProjectProfile:
    """Detected project kind with its entry points and default globs."""

    kind: str
    entry_points: tuple[str, ...]
    include_globs: tuple[str, ...]
    exclude_globs: tuple[str, ...]
    marker_files: tuple[str, ...] = ()
    source: str = "detected"

    def to_public_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "entry_points": list(self.entry_points),
            "include_globs": list(self.include_globs),
            "exclude_globs": list(self.exclude_globs),
            "marker_files": list(self.marker_files),
            "source": self.source,
        }


@dataclass(slots=True, frozen=True)
class EcosystemRule:
    """Marker files plus the profile they imply."""

    kind: str
    markers: tuple[str, ...]
    entry_points: tuple[str, ...]
    include_globs: tuple[str, ...]
    exclude_globs: tuple[str, ...]


ECOSYSTEM_RULES: tuple[EcosystemRule, ...] = (
    EcosystemRule(
        kind="rust",
        markers=("Cargo.toml",),
        entry_points=("src/main.rs", "src/lib.rs", "main.rs", "lib.rs", "src/bin/*.rs"),
        include_globs=("**/*.rs", "Cargo.toml", "Cargo.lock", "build.rs", *DOC_INCLUDES),
        exclude_globs=(*COMMON_EXCLUDES, "**/target/**"),
    ),
    EcosystemRule(
        kind="javascript",
        markers=("package.json",),
        entry_points=(
            "index.js",
            "index.ts",
            "src/index.*",
            "src/main.*",
            "main.js",
            "app.js",
            "server.js",
        ),
        include_globs=(
            "**/*.{js,jsx,ts,tsx,mjs,cjs}",
            "package.json",
            "tsconfig*.json",
            *DOC_INCLUDES,
        ),
        exclude_globs=(*COMMON_EXCLUDES, "**/coverage/**", "**/.next/**", "**/*.min.js"),
    ),
    EcosystemRule(
        kind="python",
        markers=(
            "pyproject.toml",
            "setup.py",
            "setup.cfg",
            "requirements.txt",
            "Pipfile",
            "poetry.lock",
        ),
        entry_points=(
            "main.py",
            "__main__.py",
            "app.py",
            "manage.py",
            "src/main.py",
            "src/*/__main__.py",
            "*/__main__.py",
        ),
        include_globs=(
            "**/*.py",
            "**/*.pyi",
            "pyproject.toml",
            "setup.py",
            "setup.cfg",
            "requirements*.txt",
            "Pipfile",
            "tox.ini",
            *DOC_INCLUDES,
        ),
        exclude_globs=(
            *COMMON_EXCLUDES,
            "**/*.egg-info/**",
            "**/.mypy_cache/**",
            "**/.pytest_cache/**",
        ),
    ),
    EcosystemRule(
        kind="go",
        markers=("go.mod", "go.sum", "Gopkg.toml", "glide.yaml"),
        entry_points=("main.go", "cmd/main.go", "cmd/*/main.go"),
        include_globs=("**/*.go", "go.mod", "go.sum", *DOC_INCLUDES),
        exclude_globs=(*COMMON_EXCLUDES, "**/vendor/**"),
    ),
    EcosystemRule(
        kind="kotlin",
        markers=("build.gradle.kts", "settings.gradle.kts"),
        entry_points=("**/Main.kt", "**/Application.kt", "**/*Application.kt"),
        include_globs=("**/*.kt", "**/*.kts", "**/*.java", "gradle.properties", *DOC_INCLUDES),
        exclude_globs=(*COMMON_EXCLUDES, "**/.gradle/**", "**/out/**"),
    ),
    EcosystemRule(
        kind="java",
        markers=("pom.xml", "build.gradle", "settings.gradle", "build.xml"),
        entry_points=(
            "**/Main.java",
            "**/Application.java",
            "**/*Application.java",
            "**/App.java",
        ),
        include_globs=(
            "**/*.java",
            "pom.xml",
            "build.gradle",
            "settings.gradle",
            "build.xml",
            "**/*.properties",
            *DOC_INCLUDES,
        ),
        exclude_globs=(*COMMON_EXCLUDES, "**/target/**", "**/.gradle/**", "**/out/**"),
    ),
    EcosystemRule(
        kind="git",
        markers=(".git",),
        entry_points=(),
        include_globs=("**/*",),
        exclude_globs=COMMON_EXCLUDES,
    ),
)

GENERIC_RULE = EcosystemRule(
    kind="generic",
    markers=(),
    entry_points=(),
    include_globs=("**/*",),
    exclude_globs=COMMON_EXCLUDES,
)

KNOWN_KINDS = tuple(rule.kind for rule in ECOSYSTEM_RULES) + (GENERIC_RULE.kind,)


def rule_for_kind(kind: str) -> EcosystemRule:
    """Return the rule for a project kind; unknown kinds map to generic."""
    normalized = kind.strip().lower()
    for rule in ECOSYSTEM_RULES:
        if rule.kind == normalized:
            return rule
    return GENERIC_RULE
