"""Text-locator engine: page range resolution and bounded pattern search."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

from pdf_agent.core.page_range import resolve_page_range
from pdf_agent.core.pattern import CompiledPattern, LiteralPattern, RegexPattern, compile_pattern
from pdf_agent.core.search import (
    Match,
    PageRef,
    PageSearchResult,
    SearchOutcome,
    Snippet,
    extract_context,
    pages_from_source,
    scan_page_with_timeout,
    search_pages,
)

__all__ = [
    "resolve_page_range",
    "CompiledPattern",
    "LiteralPattern",
    "RegexPattern",
    "compile_pattern",
    "Match",
    "PageRef",
    "PageSearchResult",
    "SearchOutcome",
    "Snippet",
    "extract_context",
    "pages_from_source",
    "scan_page_with_timeout",
    "search_pages",
]
