from __future__ import annotations

from repo_context.scoring import (
    extract_keywords,
    path_keyword_matches,
    path_tokens,
    tokenize,
)
from repo_context.scoring.keywords import count_occurrences


def test_tokenize_lowercases_alphanumeric_runs() -> None:
    assert tokenize("Fix AuthService.login() v2!") == ["fix", "authservice", "login", "v2"]


def test_extract_keywords_drops_short_words_stop_words_and_duplicates() -> None:
    keywords = extract_keywords("How do I fix the Authentication flow for the login API? auth auth")

    assert keywords == ("authentication", "flow", "login", "api", "auth")


def test_extract_keywords_keeps_at_most_eight_in_query_order() -> None:
    query = "alpha bravo charlie delta echo foxtrot golf hotel india juliet"

    assert extract_keywords(query) == (
        "alpha",
        "bravo",
        "charlie",
        "delta",
        "echo",
        "foxtrot",
        "golf",
        "hotel",
    )


def test_path_tokens_split_directories_and_camel_case() -> None:
    tokens = path_tokens("src/UserService.java")

    assert {"src", "userservice", "user", "service", "java"} <= tokens


def test_path_keyword_matches_accepts_token_prefixes() -> None:
    assert path_keyword_matches("auth/login.x", ("authentication",)) == 1
    assert path_keyword_matches("unrelated/report.x", ("authentication",)) == 0
    assert path_keyword_matches("src/billing/invoice.py", ("invoice", "billing", "tax")) == 2


def test_count_occurrences_is_case_insensitive() -> None:
    assert count_occurrences("Token token TOKEN tok", ("token",)) == 3
