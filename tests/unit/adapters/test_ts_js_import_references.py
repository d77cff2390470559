from __future__ import annotations

from repo_context.adapters import TypeScriptJavaScriptLexicalAdapter
from repo_context.adapters.ts_js import resolve_module_candidates


def test_relative_imports_exports_and_requires_are_extracted() -> None:
    adapter = TypeScriptJavaScriptLexicalAdapter()
    source = "\n".join(
        [
            "import { a } from './a';",
            "export * from '../shared/b';",
            "const c = require('./c');",
            "const lazy = import('./d');",
            "import React from 'react';",
        ]
    )

    references = adapter.extract_references("src/app/index.ts", source)

    assert [item.specifier for item in references] == [
        "./a",
        "../shared/b",
        "./c",
        "./d",
    ]
    assert [item.line for item in references] == [1, 2, 3, 4]
    assert references[0].candidates[0] == "src/app/a.ts"
    assert "src/shared/b/index.ts" in references[1].candidates


def test_imports_inside_comments_and_strings_are_ignored() -> None:
    adapter = TypeScriptJavaScriptLexicalAdapter()
    source = "\n".join(
        [
            "// import { x } from './commented';",
            "const text = \"import y from './quoted'\";",
            "/* require('./block') */",
            "import z from './real';",
        ]
    )

    references = adapter.extract_references("main.js", source)

    assert [item.specifier for item in references] == ["./real"]
    assert references[0].line == 4


def test_js_extension_specifier_also_offers_typescript_sources() -> None:
    candidates = resolve_module_candidates("src", "./util.js")

    assert candidates[:3] == ("src/util.js", "src/util.ts", "src/util.tsx")


def test_specifier_escaping_the_root_has_no_candidates() -> None:
    assert resolve_module_candidates("", "../outside") == ()
