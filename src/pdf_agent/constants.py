#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for pdf_agent.

This module centralizes the hardcoded limits and defaults shared by the
search engine, the document loader, the network fetcher, the MCP server
and the CLI.

Constants are organized by category:
1. Search Engine - Context, timeout and match limits
2. Documents - File size limits
3. Network - Fetch defaults
4. Dependencies - Optional package requirements
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Search Engine
# =============================================================================

StoppedReason = Literal["max_results", "max_pages"]

DEFAULT_PAGE_RANGE = "1:"

DEFAULT_CONTEXT_CHARS = 150
MIN_CONTEXT_CHARS = 10
MAX_CONTEXT_CHARS = 1000

# Per-page budget, milliseconds
DEFAULT_SEARCH_TIMEOUT_MS = 10_000
MIN_SEARCH_TIMEOUT_MS = 1_000
MAX_SEARCH_TIMEOUT_MS = 60_000

# Hard cap on matches collected from a single page
MAX_MATCHES_PER_PAGE = 10_000

# Flags accepted after the closing slash of a /body/flags pattern
REGEX_WRAPPER_FLAGS = "gimsuy"

# =============================================================================
# Documents
# =============================================================================

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB

MAX_OUTLINE_DEPTH = 10

PDF_CONTENT_TYPE = "application/pdf"

# =============================================================================
# Network
# =============================================================================

DEFAULT_USER_AGENT = "pdf-agent-fetcher/1.0"
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_MAX_REDIRECTS = 5

# =============================================================================
# Dependencies: (install_name, import_name, version_spec)
# =============================================================================

DEPS_PDF = [("pymupdf", "fitz", ">=1.26.4")]
DEPS_NETWORK = [("httpx", "httpx", ">=0.28.1")]
DEPS_MCP = [("fastmcp", "fastmcp", ">=2.0.0")]
