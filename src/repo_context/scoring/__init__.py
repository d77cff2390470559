"""Relevance scoring package."""

from .keywords import extract_keywords, path_keyword_matches, path_tokens, tokenize
from .models import RelevanceScore, ScoreBreakdown, ScoredCandidate, score_sort_key
from .scorer import (
    EntryPointMatcher,
    query_factor,
    rank_candidates,
    recency_factor,
    score_candidates,
    select_content_scan_paths,
)

__all__ = [
    "EntryPointMatcher",
    "RelevanceScore",
    "ScoreBreakdown",
    "ScoredCandidate",
    "extract_keywords",
    "path_keyword_matches",
    "path_tokens",
    "query_factor",
    "rank_candidates",
    "recency_factor",
    "score_candidates",
    "score_sort_key",
    "select_content_scan_paths",
    "tokenize",
]
