#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_agent/core/page_range.py
"""Page range resolution.

A page range expression is a comma-separated list of segments. Each segment
is either a single 1-based page number (``"4"``) or a colon interval with
optional bounds (``"2:5"``, ``"3:"``, ``":7"``, ``":"``).

Start bounds are strict: a start past the last page is an error. End bounds
are lenient: an end past the last page is clamped to it.

Examples
--------
>>> resolve_page_range("1:3,2:4", 10)
[1, 2, 3, 4]
>>> resolve_page_range("8:", 10)
[8, 9, 10]
>>> resolve_page_range("1:100", 3)
[1, 2, 3]

"""

from __future__ import annotations

import logging
import re

from pdf_agent.exceptions import PageRangeError, RangeErrorReason, ValidationError

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")


def _parse_int(token: str) -> int | None:
    """Read the leading integer of a token, or None if there is none.

    Trailing garbage after the digits is ignored (``"3abc"`` reads as 3).
    """
    match = _LEADING_INT_RE.match(token)
    if match is None:
        return None
    return int(match.group(1))


def _resolve_segment(segment: str, total_pages: int) -> range:
    """Resolve one comma-separated segment into a range of page numbers."""
    if ":" not in segment:
        page = _parse_int(segment)
        if page is None or page < 1 or page > total_pages:
            raise PageRangeError(
                f"Invalid page number: {segment}. Must be between 1 and {total_pages}",
                reason=RangeErrorReason.INVALID_PAGE_NUMBER,
                segment=segment,
            )
        return range(page, page + 1)

    start_token, end_token = segment.split(":")[:2]
    start = 1
    end = total_pages

    if start_token.strip():
        parsed = _parse_int(start_token)
        if parsed is None or parsed < 1:
            raise PageRangeError(
                f"Invalid start page: {start_token}. Must be a positive integer",
                reason=RangeErrorReason.INVALID_START,
                segment=segment,
            )
        start = parsed

    if end_token.strip():
        parsed = _parse_int(end_token)
        if parsed is None or parsed < 1:
            raise PageRangeError(
                f"Invalid end page: {end_token}. Must be a positive integer",
                reason=RangeErrorReason.INVALID_END,
                segment=segment,
            )
        end = parsed

    if start > end:
        raise PageRangeError(
            f"Start page {start} cannot be greater than end page {end}",
            reason=RangeErrorReason.RANGE_INVERTED,
            segment=segment,
        )

    if start > total_pages:
        raise PageRangeError(
            f"Start page {start} exceeds total pages {total_pages}",
            reason=RangeErrorReason.RANGE_OUT_OF_BOUNDS,
            segment=segment,
        )

    return range(start, min(end, total_pages) + 1)


def resolve_page_range(expression: str, total_pages: int) -> list[int]:
    """Resolve a page range expression into ascending, unique page numbers.

    Parameters
    ----------
    expression : str
        Range expression such as ``"1:5"``, ``"2,4,6"`` or ``"3:"``
    total_pages : int
        Number of pages in the document (must be at least 1)

    Returns
    -------
    list[int]
        Sorted 1-based page numbers, each appearing once

    Raises
    ------
    PageRangeError
        If the expression is empty or any segment is invalid. The first bad
        segment aborts resolution; its text is included in the message.
    ValidationError
        If ``total_pages`` is less than 1

    """
    if total_pages < 1:
        raise ValidationError(
            f"Document must have at least one page, got {total_pages}",
            parameter_name="total_pages",
            parameter_value=total_pages,
        )

    stripped = expression.strip()
    if not stripped:
        raise PageRangeError(
            "Page range cannot be empty", reason=RangeErrorReason.EMPTY_RANGE, parameter_value=expression
        )

    segments = [seg.strip() for seg in stripped.split(",")]
    segments = [seg for seg in segments if seg]
    if not segments:
        raise PageRangeError(
            "Page range cannot be empty after parsing",
            reason=RangeErrorReason.EMPTY_RANGE,
            parameter_value=expression,
        )

    # Presence array indexed by page number; index 0 is unused
    selected = [False] * (total_pages + 1)

    for segment in segments:
        try:
            pages = _resolve_segment(segment, total_pages)
        except PageRangeError as e:
            raise PageRangeError(
                f"Invalid segment '{segment}': {e.message}",
                reason=e.reason,
                parameter_value=expression,
                segment=segment,
                original_error=e,
            ) from e
        for page in pages:
            selected[page] = True

    resolved = [page for page in range(1, total_pages + 1) if selected[page]]
    logger.debug(f"Resolved page range {expression!r} to {len(resolved)} of {total_pages} pages")
    return resolved
