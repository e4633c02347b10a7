"""pdf_agent - PDF inspection and bounded text search for LLM agents.

pdf_agent locates text inside PDF documents. A page range expression selects
the pages, a literal or ``/regex/flags`` pattern is matched against each
page's text, and every match is returned with a snippet of surrounding
context. Each page has its own time budget, and a search can stop early after
a number of matches or pages, so a single call stays bounded on large
documents.

Key Features
------------
- Page range expressions: ``"1:5"``, ``"1,3,5"``, ``"2:"``, ``":10"``
- Case-insensitive literal search and JavaScript-style ``/body/flags`` regexes
- Per-page timeouts and match caps; per-page failures never abort a search
- Metadata, plain text and outline extraction using PyMuPDF
- An MCP server (``pdf-agent-mcp``) and a command line tool (``pdf-agent``)

Requirements
------------
- Python 3.10+
- PyMuPDF for document access, httpx for downloads, fastmcp for the server

Examples
--------
Search a document:

    >>> from pdf_agent import PdfDocument, resolve_page_range, search_pages
    >>> with PdfDocument.open("report.pdf") as doc:
    ...     pages = resolve_page_range("1:10", doc.page_count)
    ...     outcome = search_pages(doc.iter_pages(pages), "/revenue\\s+grew/i", 80, 10000)
    >>> outcome.to_dict()["pagesScanned"]
    10

Search text that did not come from a PDF:

    >>> from pdf_agent import PageRef, search_pages
    >>> pages = [PageRef(1, text="alpha beta"), PageRef(2, text="beta gamma")]
    >>> search_pages(pages, "beta", 3, 1000).total_matches
    2

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

__version__ = "1.0.0"

from pdf_agent.core import (
    CompiledPattern,
    LiteralPattern,
    Match,
    PageRef,
    PageSearchResult,
    RegexPattern,
    SearchOutcome,
    Snippet,
    compile_pattern,
    extract_context,
    pages_from_source,
    resolve_page_range,
    scan_page_with_timeout,
    search_pages,
)
from pdf_agent.document import PdfDocument
from pdf_agent.exceptions import (
    DependencyError,
    FileError,
    InvalidPatternError,
    InvalidRangeError,
    MalformedFileError,
    NetworkSecurityError,
    PageExtractionError,
    PageRangeError,
    PasswordProtectedError,
    PdfAgentError,
    RangeErrorReason,
    SearchTimeoutError,
    SecurityError,
    ValidationError,
)
from pdf_agent.options import SearchOptions

__all__ = [
    "__version__",
    # Engine
    "resolve_page_range",
    "compile_pattern",
    "CompiledPattern",
    "LiteralPattern",
    "RegexPattern",
    "scan_page_with_timeout",
    "extract_context",
    "search_pages",
    "pages_from_source",
    "PageRef",
    "Match",
    "Snippet",
    "PageSearchResult",
    "SearchOutcome",
    "SearchOptions",
    # Documents
    "PdfDocument",
    # Exceptions
    "PdfAgentError",
    "ValidationError",
    "PageRangeError",
    "InvalidRangeError",
    "RangeErrorReason",
    "InvalidPatternError",
    "SearchTimeoutError",
    "FileError",
    "MalformedFileError",
    "PageExtractionError",
    "PasswordProtectedError",
    "SecurityError",
    "NetworkSecurityError",
    "DependencyError",
]
