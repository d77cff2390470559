"""Python AST adapter for import reference extraction."""

from __future__ import annotations

import ast
import posixpath

from repo_context.adapters.base import ImportReference, normalize_and_sort_references

_SOURCE_ROOTS = ("", "src/")


class PythonAstAdapter:
    """Python-first adapter with AST-based import extraction."""

    name = "python"

    def supports_path(self, path: str) -> bool:
        """Return True when path is a Python source file."""
        return path.lower().endswith((".py", ".pyi"))

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        """Extract ``import`` and ``from ... import`` targets as module path candidates."""
        try:
            tree = ast.parse(text)
        except (SyntaxError, ValueError):
            return []

        package_parts = [part for part in posixpath.dirname(path).split("/") if part]
        references: list[ImportReference] = []
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    references.append(
                        ImportReference(
                            specifier=alias.name,
                            line=node.lineno,
                            candidates=_absolute_candidates(alias.name.split(".")),
                        )
                    )
            elif isinstance(node, ast.ImportFrom):
                references.extend(_from_import_references(node, package_parts))
        return normalize_and_sort_references(references)


def _from_import_references(
    node: ast.ImportFrom, package_parts: list[str]
) -> list[ImportReference]:
    module_parts = node.module.split(".") if node.module else []
    dots = "." * node.level
    specifier = f"{dots}{node.module or ''}"
    if node.level == 0:
        base_candidates = _absolute_candidates(module_parts)
        member_candidates = [
            (alias.name, _absolute_candidates([*module_parts, alias.name]))
            for alias in node.names
            if alias.name != "*"
        ]
    else:
        ascend = node.level - 1
        if ascend > len(package_parts):
            return []
        anchor = package_parts[: len(package_parts) - ascend]
        base_candidates = _module_candidates("", [*anchor, *module_parts])
        member_candidates = [
            (alias.name, _module_candidates("", [*anchor, *module_parts, alias.name]))
            for alias in node.names
            if alias.name != "*"
        ]

    references = [
        ImportReference(
            specifier=f"{specifier}.{name}" if module_parts else f"{specifier}{name}",
            line=node.lineno,
            candidates=(*candidates, *base_candidates),
        )
        for name, candidates in member_candidates
    ]
    if not references:
        references.append(
            ImportReference(specifier=specifier, line=node.lineno, candidates=base_candidates)
        )
    return references


def _absolute_candidates(parts: list[str]) -> tuple[str, ...]:
    output: list[str] = []
    for root in _SOURCE_ROOTS:
        output.extend(_module_candidates(root, parts))
    return tuple(output)


def _module_candidates(root: str, parts: list[str]) -> tuple[str, ...]:
    cleaned = [part for part in parts if part]
    if not cleaned:
        return (f"{root}__init__.py",) if root else ("__init__.py",)
    joined = "/".join(cleaned)
    return (f"{root}{joined}.py", f"{root}{joined}/__init__.py")
