"""Language adapters that extract cross-file references."""

from .base import (
    AdapterContractError,
    ImportReference,
    LanguageAdapter,
    normalize_and_sort_references,
    reference_sort_key,
)
from .cpp import CppLexicalAdapter
from .fallback import LexicalFallbackAdapter
from .go import GoLexicalAdapter
from .java_kotlin import JavaKotlinLexicalAdapter
from .lexical import LexicalRules, iter_code_matches, mask_comments_and_strings
from .python import PythonAstAdapter
from .registry import AdapterRegistry
from .runtime import build_adapter_registry
from .rust import RustLexicalAdapter
from .ts_js import TypeScriptJavaScriptLexicalAdapter

__all__ = [
    "AdapterContractError",
    "AdapterRegistry",
    "CppLexicalAdapter",
    "GoLexicalAdapter",
    "ImportReference",
    "JavaKotlinLexicalAdapter",
    "LanguageAdapter",
    "LexicalFallbackAdapter",
    "LexicalRules",
    "PythonAstAdapter",
    "RustLexicalAdapter",
    "TypeScriptJavaScriptLexicalAdapter",
    "build_adapter_registry",
    "iter_code_matches",
    "mask_comments_and_strings",
    "normalize_and_sort_references",
    "reference_sort_key",
]
