"""FastMCP server for PDF inspection and search.

This module implements the main MCP server using FastMCP with stdio transport.
It exposes metadata, text, search and outline tools to LLMs, plus an
optional download tool when network access is allowed.

Functions
---------
- create_server: Build the FastMCP server and register tools
- main: Server entry point (for CLI)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import logging
import os
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any

from pdf_agent.constants import DEFAULT_PAGE_RANGE, DEPS_MCP
from pdf_agent.exceptions import DependencyError
from pdf_agent.logging_utils import configure_logging as configure_root_logging
from pdf_agent.mcp.config import MCPConfig, load_config
from pdf_agent.mcp.schemas import (
    DownloadPdfInput,
    GetPdfMetadataInput,
    GetPdfOutlineInput,
    GetPdfTextInput,
    SearchPdfInput,
)
from pdf_agent.mcp.security import MCPSecurityError, prepare_allowlist_dirs
from pdf_agent.utils.decorators import ensure_dependencies
from pdf_agent.utils.network_security import NETWORK_DISABLE_ENV

if TYPE_CHECKING:
    from fastmcp import FastMCP

logger = logging.getLogger(__name__)

ToolImpl = Callable[[Any, MCPConfig], dict[str, Any]]

_SOURCE_HELP = (
    "PDF source. Auto-detected as: file path (must be inside the read allowlist), "
    "data URI (data:application/pdf;base64,...), or base64-encoded PDF data. REQUIRED."
)
_RANGE_HELP = (
    "Page range. Examples: '1:5' (pages 1-5), '1,3,5' (specific pages), '2:' (page 2 to end), "
    "':10' (pages 1-10), '1:3,7,10:' (mixed). Default '1:' (all pages)."
)


def create_server(config: MCPConfig, impls: dict[str, ToolImpl]) -> "FastMCP":
    """Create and configure FastMCP server with tools.

    Parameters
    ----------
    config : MCPConfig
        Server configuration
    impls : dict[str, callable]
        Tool implementations keyed by tool name: ``metadata``, ``text``,
        ``search``, ``outline`` and, if downloads are enabled, ``download``

    Returns
    -------
    FastMCP
        Configured MCP server instance

    """
    try:
        ensure_dependencies("mcp", DEPS_MCP)
    except DependencyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        raise

    from fastmcp import FastMCP

    mcp: FastMCP = FastMCP(name="pdf-agent")

    @mcp.tool(name="get_pdf_metadata")
    def get_pdf_metadata(source: Annotated[str, _SOURCE_HELP]) -> dict:
        """Extract metadata from a PDF.

        Returns title, author, subject, keywords, creator, producer, creation
        and modification dates (ISO-8601), page count and file size in bytes.
        """
        return impls["metadata"](GetPdfMetadataInput(source=source), config)

    logger.info("Registered tool: get_pdf_metadata")

    @mcp.tool(name="get_pdf_text")
    def get_pdf_text(
        source: Annotated[str, _SOURCE_HELP],
        page_range: Annotated[str, _RANGE_HELP] = DEFAULT_PAGE_RANGE,
    ) -> dict:
        """Extract plain text from the pages of a PDF.

        Returns a list of {page, text} objects in ascending page order together
        with the document's total page count and the number of pages extracted.
        """
        return impls["text"](GetPdfTextInput(source=source, page_range=page_range), config)

    logger.info("Registered tool: get_pdf_text")

    @mcp.tool(name="search_pdf")
    def search_pdf(
        source: Annotated[str, _SOURCE_HELP],
        search_pattern: Annotated[
            str,
            "Text to find. Plain text is matched case-insensitively. Wrap in slashes for a regular "
            "expression with optional flags i, m, s, e.g. '/chapter\\s+\\d+/i'. REQUIRED.",
        ],
        page_range: Annotated[str, _RANGE_HELP] = DEFAULT_PAGE_RANGE,
        max_results: Annotated[
            int | None, "Stop once this many matches have been found (checked after each page, min 1)."
        ] = None,
        max_pages_scanned: Annotated[int | None, "Stop after scanning this many pages (min 1)."] = None,
        context_chars: Annotated[
            int | None,
            f"Characters of context on each side of a match (10-1000, default {config.default_context_chars}).",
        ] = None,
        search_timeout: Annotated[
            int | None,
            f"Per-page time budget in milliseconds (1000-60000, default {config.default_search_timeout_ms}).",
        ] = None,
    ) -> dict:
        """Search a PDF for text or a regular expression.

        Pages are scanned in ascending order. For every page with matches the
        result lists the match count and a context snippet per match, with the
        match position inside the snippet. Pages that fail or exceed their time
        budget are reported in `errors` and the search continues. When a limit
        stops the search early, `completed` is false and `stoppedReason` says
        which limit ("max_results" or "max_pages").
        """
        input_obj = SearchPdfInput(
            source=source,
            search_pattern=search_pattern,
            page_range=page_range,
            max_results=max_results,
            max_pages_scanned=max_pages_scanned,
            context_chars=context_chars,
            search_timeout=search_timeout,
        )
        return impls["search"](input_obj, config)

    logger.info("Registered tool: search_pdf")

    @mcp.tool(name="get_pdf_outline")
    def get_pdf_outline(
        source: Annotated[str, _SOURCE_HELP],
        include_destinations: Annotated[bool, "Include the target page number of each entry."] = True,
        max_depth: Annotated[int | None, "Maximum outline depth to return (1-10)."] = None,
        flatten_structure: Annotated[bool, "Return a flat list instead of a nested tree."] = False,
    ) -> dict:
        """Extract the outline (bookmarks / table of contents) of a PDF.

        Returns whether the document has an outline, the outline entries
        ({title, level, page?, children?}) and a summary with the number of
        entries, the deepest level and how many entries point to a page.
        """
        input_obj = GetPdfOutlineInput(
            source=source,
            include_destinations=include_destinations,
            max_depth=max_depth,
            flatten_structure=flatten_structure,
        )
        return impls["outline"](input_obj, config)

    logger.info("Registered tool: get_pdf_outline")

    if config.download_enabled:

        @mcp.tool(name="download_pdf")
        def download_pdf(
            url: Annotated[str, "http(s) URL of the PDF. Private and reserved addresses are refused. REQUIRED."],
            filename: Annotated[str | None, "File name to report in the metadata."] = None,
        ) -> dict:
            """Download a PDF from a URL.

            Returns {success, pdfData, metadata} where pdfData is the base64-encoded
            PDF, usable as the `source` of the other tools, and metadata adds the
            original URL, download time and file name to the document metadata.
            On failure returns {success: false, error}.
            """
            return impls["download"](DownloadPdfInput(url=url, filename=filename), config)

        logger.info("Registered tool: download_pdf")

    return mcp


def configure_logging(level: str) -> None:
    """Configure logging for the MCP server."""
    configure_root_logging(level, trace_mode=True)


def main(argv: list[str] | None = None) -> int:
    """Run pdf-agent-mcp server."""
    try:
        # Configure logging with default level first (will be reconfigured if needed)
        configure_logging("INFO")

        config = load_config(argv)

        if config.log_level != "INFO":
            configure_logging(config.log_level)

        logger.info("Starting pdf-agent MCP server")
        logger.info(
            f"Configuration: enable_download={config.enable_download}, disable_network={config.disable_network}, "
            f"context_chars={config.default_context_chars}, search_timeout={config.default_search_timeout_ms}ms"
        )

        try:
            prepared_read = prepare_allowlist_dirs(config.read_allowlist)
            config = config.create_updated(read_allowlist=prepared_read)
        except MCPSecurityError as e:
            logger.error(f"Invalid allowlist configuration: {e}")
            return 1

        if config.read_allowlist:
            logger.info(f"Read allowlist: {len(config.read_allowlist)} directories")
            for dir_path in config.read_allowlist:
                logger.debug(f"  - {dir_path}")

        if config.disable_network:
            os.environ[NETWORK_DISABLE_ENV] = "true"
            logger.info("Network access disabled")
        else:
            # Clear the env var so the fetcher does not refuse requests
            os.environ.pop(NETWORK_DISABLE_ENV, None)
            logger.warning("Network access enabled - ensure this is intentional!")

        from pdf_agent.mcp.tools import (
            download_pdf_impl,
            get_pdf_metadata_impl,
            get_pdf_outline_impl,
            get_pdf_text_impl,
            search_pdf_impl,
        )

        mcp = create_server(
            config,
            {
                "metadata": get_pdf_metadata_impl,
                "text": get_pdf_text_impl,
                "search": search_pdf_impl,
                "outline": get_pdf_outline_impl,
                "download": download_pdf_impl,
            },
        )

        logger.info("Server ready, listening on stdio")
        mcp.run()  # Run with default stdio transport

    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e!r}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
