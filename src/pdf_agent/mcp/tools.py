"""Tool implementations for the MCP server.

This module contains the logic behind each MCP tool. The FastMCP wrappers in
``server.py`` build an input dataclass and delegate here, keeping the
implementations testable without a running server.

Every implementation returns a JSON-able dict. Failures are reported in the
payload (``{"error": "..."}``, or ``{"success": False, "error": "..."}`` for
downloads) so that the calling model can branch on them.

Functions
---------
- get_pdf_metadata_impl: Document metadata
- get_pdf_text_impl: Per-page text for a page range
- search_pdf_impl: Pattern search with context snippets
- get_pdf_outline_impl: Table of contents
- download_pdf_impl: Download a PDF and return it base64-encoded

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import base64
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pdf_agent.constants import MAX_OUTLINE_DEPTH
from pdf_agent.core import resolve_page_range, search_pages
from pdf_agent.document import PdfDocument, decode_base64_pdf
from pdf_agent.exceptions import PageExtractionError, PdfAgentError, ValidationError
from pdf_agent.mcp.config import MCPConfig
from pdf_agent.mcp.schemas import (
    DownloadPdfInput,
    GetPdfMetadataInput,
    GetPdfOutlineInput,
    GetPdfTextInput,
    SearchPdfInput,
)
from pdf_agent.mcp.security import validate_read_path
from pdf_agent.options import SearchOptions
from pdf_agent.utils.network_security import fetch_pdf, filename_from_url

logger = logging.getLogger(__name__)

_BASE64_RE = re.compile(r"[A-Za-z0-9+/=\s]+")

DEFAULT_DOWNLOAD_FILENAME = "downloaded.pdf"


def _detect_source_type(source: str, config: MCPConfig) -> tuple[Path | bytes, str]:
    """Detect and prepare a PDF from the unified source parameter.

    Parameters
    ----------
    source : str
        Unified source string (path, data URI or base64)
    config : MCPConfig
        Server configuration for allowlist validation

    Returns
    -------
    tuple[Path | bytes, str]
        Tuple of (prepared_source, detection_type) where detection_type is
        one of: "path", "data_uri", "base64"

    Raises
    ------
    MCPSecurityError
        If the source names an existing file outside the read allowlist
    ValidationError
        If the source is none of the accepted forms

    """
    source = source.strip()
    if not source:
        raise ValidationError("PDF source cannot be empty", parameter_name="source")

    # 1. Data URI
    if source.startswith("data:"):
        decoded = decode_base64_pdf(source)
        logger.info(f"Detected as data URI ({len(decoded)} bytes)")
        return decoded, "data_uri"

    # 2. File path. Base64 may contain "/", so only existing files count.
    if len(source) < 4096:
        try:
            path_obj = Path(source).expanduser()
            if path_obj.exists():
                validated_path = validate_read_path(path_obj, config.read_allowlist)
                logger.info(f"Detected as file path: {validated_path}")
                return validated_path, "path"
            logger.debug(f"Path does not exist: {path_obj}, trying base64")
        except (OSError, ValueError):
            pass

    # 3. Bare base64
    if _BASE64_RE.fullmatch(source):
        decoded = decode_base64_pdf(source)
        logger.info(f"Detected as base64 ({len(decoded)} bytes)")
        return decoded, "base64"

    raise ValidationError(
        "Source is not an existing file path, a data URI or base64 PDF data",
        parameter_name="source",
        parameter_value=source[:100],
    )


def _open_source(source: str, config: MCPConfig) -> PdfDocument:
    prepared, _ = _detect_source_type(source, config)
    return PdfDocument.open(prepared, max_size=config.max_file_size)


def _error_payload(prefix: str, error: Exception) -> dict[str, Any]:
    """Build the error payload returned by a failed tool call."""
    if isinstance(error, PdfAgentError):
        logger.warning(f"{prefix}: {error.message}")
        return {"error": f"{prefix}: {error.message}"}
    logger.error(f"{prefix}: unexpected {error!r}", exc_info=True)
    return {"error": f"{prefix}: {error}"}


def get_pdf_metadata_impl(input_data: GetPdfMetadataInput, config: MCPConfig) -> dict[str, Any]:
    """Implement get_pdf_metadata tool.

    Returns
    -------
    dict
        title, author, subject, keywords, creator, producer, creationDate,
        modificationDate, pageCount and fileSize; or an error payload

    """
    try:
        with _open_source(input_data.source, config) as doc:
            return doc.metadata()
    except Exception as e:
        return _error_payload("Error extracting PDF metadata", e)


def get_pdf_text_impl(input_data: GetPdfTextInput, config: MCPConfig) -> dict[str, Any]:
    """Implement get_pdf_text tool.

    A page whose text cannot be extracted is returned with a bracketed error
    note in place of its text rather than failing the whole call.

    Returns
    -------
    dict
        ``pages`` (list of ``{page, text}``), ``total_pages_in_document`` and
        ``pages_extracted``; or an error payload

    """
    try:
        with _open_source(input_data.source, config) as doc:
            total_pages = doc.page_count
            page_numbers = resolve_page_range(input_data.page_range, total_pages)

            pages = []
            for page_number in page_numbers:
                try:
                    text = doc.page_text(page_number)
                except PageExtractionError as e:
                    logger.warning(f"Text extraction failed on page {page_number}: {e.message}")
                    text = f"[Page {page_number} - Error extracting text: {e.message}]"
                pages.append({"page": page_number, "text": text})

            return {
                "pages": pages,
                "total_pages_in_document": total_pages,
                "pages_extracted": len(page_numbers),
            }
    except Exception as e:
        return _error_payload("Error extracting PDF text", e)


def search_pdf_impl(input_data: SearchPdfInput, config: MCPConfig) -> dict[str, Any]:
    """Implement search_pdf tool.

    Options are validated before the document is opened; the page range and
    pattern are validated before any page is scanned.

    Returns
    -------
    dict
        ``matches``, ``errors``, ``pagesScanned``, ``completed`` and, when the
        search stopped early, ``stoppedReason``; or an error payload

    """
    try:
        options = SearchOptions(
            page_range=input_data.page_range,
            context_chars=(
                input_data.context_chars if input_data.context_chars is not None else config.default_context_chars
            ),
            search_timeout_ms=(
                input_data.search_timeout
                if input_data.search_timeout is not None
                else config.default_search_timeout_ms
            ),
            max_results=input_data.max_results,
            max_pages_scanned=input_data.max_pages_scanned,
        )
        options.validate()

        with _open_source(input_data.source, config) as doc:
            page_numbers = resolve_page_range(options.page_range, doc.page_count)
            outcome = search_pages(
                doc.iter_pages(page_numbers),
                input_data.search_pattern,
                options.context_chars,
                options.search_timeout_ms,
                max_results=options.max_results,
                max_pages_scanned=options.max_pages_scanned,
            )

        logger.info(
            f"Search finished: {outcome.total_matches} matches on {len(outcome.matches)} pages, "
            f"{outcome.pages_scanned} pages scanned"
        )
        return outcome.to_dict()
    except Exception as e:
        return _error_payload("Error searching PDF", e)


def get_pdf_outline_impl(input_data: GetPdfOutlineInput, config: MCPConfig) -> dict[str, Any]:
    """Implement get_pdf_outline tool.

    Returns
    -------
    dict
        ``has_outline``, ``outline_items`` and ``summary``; or an error payload

    """
    try:
        max_depth = input_data.max_depth
        if max_depth is not None and not 1 <= max_depth <= MAX_OUTLINE_DEPTH:
            raise ValidationError(
                f"max_depth must be between 1 and {MAX_OUTLINE_DEPTH}, got {max_depth}",
                parameter_name="max_depth",
                parameter_value=max_depth,
            )

        with _open_source(input_data.source, config) as doc:
            return doc.outline(
                include_destinations=input_data.include_destinations,
                max_depth=max_depth,
                flatten=input_data.flatten_structure,
            )
    except Exception as e:
        return _error_payload("Error extracting PDF outline", e)


def download_pdf_impl(input_data: DownloadPdfInput, config: MCPConfig) -> dict[str, Any]:
    """Implement download_pdf tool.

    Returns
    -------
    dict
        ``{"success": True, "pdfData": <base64>, "metadata": {...}}`` where
        metadata adds ``originalUrl``, ``downloadedAt`` and ``filename`` to
        the document metadata; or ``{"success": False, "error": "..."}``

    """
    try:
        data = fetch_pdf(input_data.url, max_size_bytes=config.max_file_size)
        with PdfDocument.open(data, max_size=config.max_file_size) as doc:
            metadata = doc.metadata()
    except Exception as e:
        payload = _error_payload("Download failed", e)
        return {"success": False, **payload}

    metadata.update(
        originalUrl=input_data.url,
        downloadedAt=datetime.now(timezone.utc).isoformat(),
        filename=input_data.filename or filename_from_url(input_data.url) or DEFAULT_DOWNLOAD_FILENAME,
    )
    logger.info(f"Downloaded {len(data)} bytes from {input_data.url}")
    return {
        "success": True,
        "pdfData": base64.b64encode(data).decode("ascii"),
        "metadata": metadata,
    }
