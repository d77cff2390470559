"""Language and coarse category classification by path."""

from __future__ import annotations

import posixpath

BINARY_EXTENSIONS = frozenset(
    {
        ".exe", ".bin", ".so", ".dll", ".dylib", ".a", ".lib", ".o", ".obj",
        ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".ico", ".webp", ".svg",
        ".mp3", ".mp4", ".avi", ".mov", ".wav", ".pdf",
        ".zip", ".tar", ".gz", ".7z", ".rar", ".xz", ".bz2",
        ".class", ".jar", ".pyc", ".pyo", ".wasm", ".woff", ".woff2", ".ttf",
    }
)  # fmt: skip

_LANGUAGES = {
    ".py": "python",
    ".pyi": "python",
    ".rs": "rust",
    ".go": "go",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hh": "cpp",
    ".hxx": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".scala": "scala",
    ".sh": "shell",
    ".md": "markdown",
    ".rst": "restructuredtext",
    ".toml": "toml",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".html": "html",
    ".css": "css",
    ".sql": "sql",
}

_SOURCE_EXTENSIONS = frozenset(
    ext for ext, language in _LANGUAGES.items()
    if language not in {"markdown", "restructuredtext", "toml", "json", "yaml", "xml"}
)  # fmt: skip
_CONFIG_EXTENSIONS = frozenset({".toml", ".ini", ".cfg", ".conf", ".yaml", ".yml", ".properties"})
_CONFIG_NAMES = frozenset(
    {
        "cargo.toml", "package.json", "tsconfig.json", "pyproject.toml", "setup.py",
        "setup.cfg", "requirements.txt", "pipfile", "go.mod", "pom.xml", "build.gradle",
        "build.gradle.kts", "settings.gradle", "settings.gradle.kts", "makefile",
        "dockerfile", ".gitignore", ".editorconfig",
    }
)  # fmt: skip
_DOC_EXTENSIONS = frozenset({".md", ".rst", ".txt", ".adoc"})
_DATA_EXTENSIONS = frozenset({".json", ".csv", ".tsv", ".xml", ".sql", ".parquet", ".jsonl"})
_BUILD_ARTIFACT_EXTENSIONS = frozenset({".lock", ".map", ".min.js", ".min.css"})
_BUILD_ARTIFACT_NAMES = frozenset(
    {"cargo.lock", "package-lock.json", "yarn.lock", "pnpm-lock.yaml", "poetry.lock", "go.sum"}
)
_TEST_SUFFIXES = (
    "_test.py",
    "_test.go",
    "_test.rs",
    "test.java",
    "test.kt",
    "tests.java",
    "tests.kt",
    ".test.js",
    ".test.ts",
    ".test.jsx",
    ".test.tsx",
    ".spec.js",
    ".spec.ts",
    ".spec.jsx",
    ".spec.tsx",
)


def language_for_path(relative_path: str) -> str:
    """Return a language name from the file extension, else ``text``."""
    suffix = posixpath.splitext(relative_path)[1].lower()
    return _LANGUAGES.get(suffix, "text")


def has_binary_extension(relative_path: str) -> bool:
    return posixpath.splitext(relative_path)[1].lower() in BINARY_EXTENSIONS


def is_test_path(relative_path: str) -> bool:
    lowered = relative_path.lower()
    name = posixpath.basename(lowered)
    parts = lowered.split("/")[:-1]
    if "test" in parts or "tests" in parts or "__tests__" in parts:
        return True
    return name.startswith("test_") or name.endswith(_TEST_SUFFIXES)


def category_for_path(relative_path: str) -> str:
    """Classify into source, test, config, docs, data, build_artifact or unknown."""
    lowered = relative_path.lower()
    name = posixpath.basename(lowered)
    suffix = posixpath.splitext(name)[1]
    if name in _BUILD_ARTIFACT_NAMES or name.endswith(tuple(_BUILD_ARTIFACT_EXTENSIONS)):
        return "build_artifact"
    if suffix in BINARY_EXTENSIONS:
        return "build_artifact"
    if name in _CONFIG_NAMES:
        return "config"
    if suffix in _SOURCE_EXTENSIONS:
        return "test" if is_test_path(relative_path) else "source"
    if suffix in _CONFIG_EXTENSIONS or name.startswith(".env"):
        return "config"
    if suffix in _DOC_EXTENSIONS or name in {"readme", "license", "changelog"}:
        return "docs"
    if suffix in _DATA_EXTENSIONS:
        return "data"
    return "unknown"
