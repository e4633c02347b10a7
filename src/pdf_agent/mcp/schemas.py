"""Tool input schemas for the MCP server.

This module defines the data structures passed from the FastMCP tool
wrappers to the tool implementations. Outputs are plain JSON-able dicts.

Classes
-------
- GetPdfMetadataInput: Input schema for get_pdf_metadata tool
- GetPdfTextInput: Input schema for get_pdf_text tool
- SearchPdfInput: Input schema for search_pdf tool
- GetPdfOutlineInput: Input schema for get_pdf_outline tool
- DownloadPdfInput: Input schema for download_pdf tool

Notes
-----
Every tool that reads a PDF takes the same unified ``source`` parameter,
auto-detected as:
- File path (if file exists in read allowlist)
- Data URI (data:application/pdf;base64,...)
- Base64 string

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

from dataclasses import dataclass

from pdf_agent.constants import DEFAULT_PAGE_RANGE


@dataclass
class GetPdfMetadataInput:
    """Input schema for get_pdf_metadata tool.

    Attributes
    ----------
    source : str
        Unified source parameter (path, data URI or base64)

    """

    source: str


@dataclass
class GetPdfTextInput:
    """Input schema for get_pdf_text tool.

    Attributes
    ----------
    source : str
        Unified source parameter (path, data URI or base64)
    page_range : str
        Page range expression, e.g. "1:5", "1,3,5", "2:", ":10"

    """

    source: str
    page_range: str = DEFAULT_PAGE_RANGE


@dataclass
class SearchPdfInput:
    """Input schema for search_pdf tool.

    Attributes
    ----------
    source : str
        Unified source parameter (path, data URI or base64)
    search_pattern : str
        Literal text (case-insensitive) or ``/regex/flags``
    page_range : str
        Page range expression
    max_results : int | None
        Stop after this many matches have been collected
    max_pages_scanned : int | None
        Stop after this many pages have been scanned
    context_chars : int | None
        Characters of context around each match; None uses the server default
    search_timeout : int | None
        Per-page time budget in milliseconds; None uses the server default

    """

    source: str
    search_pattern: str
    page_range: str = DEFAULT_PAGE_RANGE
    max_results: int | None = None
    max_pages_scanned: int | None = None
    context_chars: int | None = None
    search_timeout: int | None = None


@dataclass
class GetPdfOutlineInput:
    """Input schema for get_pdf_outline tool."""

    source: str
    include_destinations: bool = True
    max_depth: int | None = None
    flatten_structure: bool = False


@dataclass
class DownloadPdfInput:
    """Input schema for download_pdf tool."""

    url: str
    filename: str | None = None
