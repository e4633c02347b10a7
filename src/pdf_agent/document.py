#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_agent/document.py
"""PDF document access backed by PyMuPDF.

This module is the search engine's document collaborator: it opens a PDF,
reports its page count, and hands out per-page text, metadata and outline.
All page numbers are 1-based.

Classes
-------
- PdfDocument: Context-managed wrapper around ``fitz.Document``

"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Iterator, Sequence

from pdf_agent.constants import DEPS_PDF, MAX_FILE_SIZE
from pdf_agent.core.search import PageRef, pages_from_source
from pdf_agent.exceptions import MalformedFileError, PageExtractionError, PasswordProtectedError, ValidationError
from pdf_agent.utils.decorators import requires_dependencies

if TYPE_CHECKING:
    import fitz

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"data:[^;,]*(;base64)?,(.*)", re.DOTALL)

_METADATA_FIELDS = {
    "title": "title",
    "author": "author",
    "subject": "subject",
    "keywords": "keywords",
    "creator": "creator",
    "producer": "producer",
}


def parse_pdf_date(date_str: str | None) -> str | None:
    """Convert a PDF date string (``D:YYYYMMDDHHmmSS...``) to ISO-8601.

    Returns None for empty input and the original string when it cannot be
    parsed.

    Examples
    --------
    >>> parse_pdf_date("D:20240131120000Z")
    '2024-01-31T12:00:00'
    >>> parse_pdf_date("")

    """
    if not date_str or not date_str.strip():
        return None

    raw = date_str.strip()
    digits = raw[2:] if raw.startswith("D:") else raw
    match = re.match(r"(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?", digits)
    if not match:
        return raw

    parts = [int(p) if p else default for p, default in zip(match.groups(), (0, 1, 1, 0, 0, 0))]
    try:
        return datetime(*parts).isoformat()
    except ValueError:
        logger.debug(f"Unparseable PDF date: {raw}")
        return raw


def decode_base64_pdf(data: str) -> bytes:
    """Decode base64 PDF data, accepting an optional ``data:`` URI prefix.

    Raises
    ------
    ValidationError
        If the data is not valid base64
    """
    payload = data.strip()
    uri = _DATA_URI_RE.match(payload)
    if uri:
        payload = uri.group(2)
    try:
        return base64.b64decode(re.sub(r"\s", "", payload), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(
            f"Invalid base64 PDF data: {e}", parameter_name="pdf_data", original_error=e
        ) from e


class PdfDocument:
    """An open PDF document.

    Use :meth:`open` or :meth:`open_base64` to construct, and close it with
    :meth:`close` or a ``with`` block.

    Parameters
    ----------
    doc : fitz.Document
        Opened PyMuPDF document
    file_size : int
        Size of the source in bytes
    name : str, optional
        File name or other label used in error messages

    """

    def __init__(self, doc: "fitz.Document", file_size: int, name: str | None = None):
        self._doc = doc
        self.file_size = file_size
        self.name = name

    @classmethod
    @requires_dependencies("pdf", DEPS_PDF)
    def open(
        cls, source: str | Path | bytes | IO[bytes], password: str | None = None, max_size: int = MAX_FILE_SIZE
    ) -> "PdfDocument":
        """Open a PDF from a path, raw bytes or a binary file object.

        Parameters
        ----------
        source : str, Path, bytes or IO[bytes]
            The PDF to open
        password : str, optional
            Password for encrypted documents
        max_size : int, default 100MB
            Largest accepted document size in bytes

        Raises
        ------
        ValidationError
            If the document is larger than ``max_size``
        MalformedFileError
            If PyMuPDF cannot open the data as a PDF
        PasswordProtectedError
            If the document is encrypted and no valid password was given

        """
        import fitz

        name: str | None = None
        if isinstance(source, (str, Path)):
            path = Path(source)
            name = str(path)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise MalformedFileError(f"Cannot read PDF file: {e}", file_path=name, original_error=e) from e
        elif isinstance(source, (bytes, bytearray)):
            data = bytes(source)
        else:
            data = source.read()

        if len(data) > max_size:
            raise ValidationError(
                f"PDF file too large: {len(data)} bytes (max: {max_size} bytes)",
                parameter_name="pdf_data",
                parameter_value=len(data),
            )

        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise MalformedFileError(f"Failed to open PDF document: {e}", file_path=name, original_error=e) from e

        if doc.is_encrypted:
            if not password or doc.authenticate(password) == 0:
                doc.close()
                message = (
                    "Failed to authenticate PDF with provided password"
                    if password
                    else "PDF document is password-protected"
                )
                raise PasswordProtectedError(message, filename=name)

        logger.debug(f"Opened PDF ({len(data)} bytes, {doc.page_count} pages)")
        return cls(doc, file_size=len(data), name=name)

    @classmethod
    def open_base64(cls, data: str, password: str | None = None, max_size: int = MAX_FILE_SIZE) -> "PdfDocument":
        """Open a PDF from base64 text or a ``data:`` URI."""
        return cls.open(decode_base64_pdf(data), password=password, max_size=max_size)

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._doc.close()

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def page_text(self, page_number: int) -> str:
        """Return the plain text of a 1-based page.

        Raises
        ------
        PageExtractionError
            If the page does not exist or PyMuPDF fails on it
        """
        if not 1 <= page_number <= self.page_count:
            raise PageExtractionError(
                page_number, message=f"Page {page_number} does not exist (document has {self.page_count} pages)"
            )
        try:
            return self._doc[page_number - 1].get_text("text")
        except Exception as e:
            raise PageExtractionError(page_number, original_error=e) from e

    def iter_pages(self, page_numbers: Sequence[int]) -> Iterator[PageRef]:
        """Yield lazily-extracted pages for the search engine."""
        return pages_from_source(page_numbers, self.page_text)

    def metadata(self) -> dict[str, Any]:
        """Return document metadata in the tool layer's JSON shape."""
        raw = self._doc.metadata or {}
        result: dict[str, Any] = {
            key: (raw.get(source_key) or None) for key, source_key in _METADATA_FIELDS.items()
        }
        result["creationDate"] = parse_pdf_date(raw.get("creationDate"))
        result["modificationDate"] = parse_pdf_date(raw.get("modDate"))
        result["pageCount"] = self.page_count
        result["fileSize"] = self.file_size
        return result

    def outline(
        self, include_destinations: bool = True, max_depth: int | None = None, flatten: bool = False
    ) -> dict[str, Any]:
        """Return the table of contents.

        Parameters
        ----------
        include_destinations : bool, default True
            Include the 1-based target page of each entry when it has one
        max_depth : int, optional
            Drop entries nested deeper than this level
        flatten : bool, default False
            Return entries as a flat list instead of a tree

        Returns
        -------
        dict
            ``has_outline``, ``outline_items`` and a ``summary`` with
            ``total_items``, ``max_depth`` and ``items_with_pages``

        """
        toc = self._doc.get_toc(simple=True)

        flat: list[dict[str, Any]] = []
        for level, title, page in toc:
            if max_depth is not None and level > max_depth:
                continue
            item: dict[str, Any] = {"title": title, "level": level}
            if include_destinations and page and page > 0:
                item["page"] = page
            flat.append(item)

        summary = {
            "total_items": len(flat),
            "max_depth": max((item["level"] for item in flat), default=0),
            "items_with_pages": sum(1 for item in flat if "page" in item),
        }
        items = flat if flatten else _nest_outline(flat)
        return {"has_outline": bool(flat), "outline_items": items, "summary": summary}


def _nest_outline(flat: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Nest a level-annotated list of entries into a tree via ``children``."""
    roots: list[dict[str, Any]] = []
    stack: list[dict[str, Any]] = []
    for entry in flat:
        node = dict(entry)
        while stack and stack[-1]["level"] >= node["level"]:
            stack.pop()
        if stack:
            stack[-1].setdefault("children", []).append(node)
        else:
            roots.append(node)
        stack.append(node)
    return roots
