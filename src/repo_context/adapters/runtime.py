"""Runtime adapter registry construction."""

from __future__ import annotations

from repo_context.adapters.cpp import CppLexicalAdapter
from repo_context.adapters.fallback import LexicalFallbackAdapter
from repo_context.adapters.go import GoLexicalAdapter
from repo_context.adapters.java_kotlin import JavaKotlinLexicalAdapter
from repo_context.adapters.python import PythonAstAdapter
from repo_context.adapters.registry import AdapterRegistry
from repo_context.adapters.rust import RustLexicalAdapter
from repo_context.adapters.ts_js import TypeScriptJavaScriptLexicalAdapter


def build_adapter_registry() -> AdapterRegistry:
    """Build the closed adapter set in deterministic selection order."""
    registry = AdapterRegistry()
    registry.register(PythonAstAdapter())
    registry.register(GoLexicalAdapter())
    registry.register(JavaKotlinLexicalAdapter())
    registry.register(RustLexicalAdapter())
    registry.register(TypeScriptJavaScriptLexicalAdapter())
    registry.register(CppLexicalAdapter())
    registry.register(LexicalFallbackAdapter(), fallback=True)
    return registry
