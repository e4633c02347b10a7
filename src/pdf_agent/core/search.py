#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_agent/core/search.py
"""Bounded pattern search across page text.

Pages are scanned one at a time in the order given (callers pass them in
ascending page-number order). Each page gets its own wall-clock budget; a
page that runs out of time, or whose text cannot be extracted, is recorded
in ``SearchOutcome.errors`` and the scan moves on. The scan ends early when
the cumulative match count reaches ``max_results`` or the number of pages
visited reaches ``max_pages_scanned``. Both limits are checked only between
pages, so a page's matches are always reported in full.

Functions
---------
- scan_page_with_timeout: Enumerate matches on one page under a deadline
- extract_context: Cut a snippet around a match and re-base its offsets
- search_pages: Run a search over a sequence of pages

"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Sequence

from pdf_agent.constants import MAX_MATCHES_PER_PAGE, StoppedReason
from pdf_agent.core.pattern import CompiledPattern, compile_pattern
from pdf_agent.exceptions import SearchTimeoutError
from pdf_agent.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class PageRef:
    """A page number together with its text, or a loader for it.

    The loader runs on first access to :attr:`text`, so pages that are never
    scanned are never extracted. Errors raised by the loader surface as
    per-page errors in the search outcome.
    """

    __slots__ = ("page_number", "_text", "_loader")

    def __init__(self, page_number: int, text: str | None = None, loader: Callable[[], str] | None = None):
        if text is None and loader is None:
            raise ValueError("PageRef needs either text or a loader")
        self.page_number = page_number
        self._text = text
        self._loader = loader

    @property
    def text(self) -> str:
        if self._text is None:
            assert self._loader is not None
            self._text = self._loader()
        return self._text

    def __repr__(self) -> str:
        return f"PageRef(page_number={self.page_number})"


def pages_from_source(page_numbers: Sequence[int], page_text: Callable[[int], str]) -> Iterator[PageRef]:
    """Yield lazily-loaded page references for the given page numbers."""
    for page_number in page_numbers:
        yield PageRef(page_number, loader=lambda n=page_number: page_text(n))


@dataclass(frozen=True)
class Match:
    """A single match within a page's raw text."""

    start: int
    end: int
    text: str


@dataclass(frozen=True)
class Snippet:
    """A window of page text around a match.

    ``match_start`` and ``match_end`` are offsets into ``text``, not into
    the page.
    """

    text: str
    match_start: int
    match_end: int

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "matchStart": self.match_start, "matchEnd": self.match_end}


@dataclass(frozen=True)
class PageSearchResult:
    """Matches found on one page."""

    page: int
    match_count: int
    snippets: tuple[Snippet, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "matchCount": self.match_count,
            "snippets": [snippet.to_dict() for snippet in self.snippets],
        }


@dataclass(frozen=True)
class SearchOutcome:
    """Final result of a search invocation.

    Attributes
    ----------
    matches : tuple[PageSearchResult, ...]
        Per-page results in scan order, only for pages with matches
    errors : tuple[str, ...]
        Per-page and general error messages
    pages_scanned : int
        Number of pages visited, including pages that failed
    completed : bool
        True only when every page was visited without hitting a limit or a
        general failure
    stopped_reason : {"max_results", "max_pages"} or None
        The limit that ended the scan early, if any

    """

    matches: tuple[PageSearchResult, ...] = ()
    errors: tuple[str, ...] = ()
    pages_scanned: int = 0
    completed: bool = False
    stopped_reason: StoppedReason | None = None
    total_matches: int = field(default=0, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape used by the tool layer."""
        result: dict[str, Any] = {
            "matches": [page.to_dict() for page in self.matches],
            "errors": list(self.errors),
            "pagesScanned": self.pages_scanned,
            "completed": self.completed,
        }
        if self.stopped_reason is not None:
            result["stoppedReason"] = self.stopped_reason
        return result


def scan_page_with_timeout(
    text: str,
    pattern: CompiledPattern,
    timeout_ms: float,
    *,
    max_matches: int = MAX_MATCHES_PER_PAGE,
    clock: Clock = time.monotonic,
) -> list[Match]:
    """Enumerate non-overlapping matches in ``text`` under a deadline.

    The budget is enforced inside the regex engine, so a single search step
    that backtracks heavily is interrupted too. The injectable ``clock`` is
    also checked after every match and once enumeration ends. Enumeration
    stops once ``max_matches`` matches are collected.

    Parameters
    ----------
    text : str
        Full text of one page
    pattern : CompiledPattern
        Pattern from :func:`compile_pattern`
    timeout_ms : float
        Wall-clock budget for this page, in milliseconds
    max_matches : int, default 10000
        Cap on matches collected from the page
    clock : callable, default time.monotonic
        Source of the current time in seconds

    Returns
    -------
    list[Match]
        Matches in text order

    Raises
    ------
    SearchTimeoutError
        If the budget runs out before enumeration finishes. Matches found
        so far are discarded.

    """
    timeout_s = timeout_ms / 1000.0
    deadline = clock() + timeout_s
    matches: list[Match] = []

    # finditer steps past empty matches, so zero-width patterns terminate
    try:
        for found in pattern.finditer(text, timeout=timeout_s):
            matches.append(Match(start=found.start(), end=found.end(), text=found.group(0)))
            if len(matches) >= max_matches:
                logger.debug(f"Match cap of {max_matches} reached, stopping page scan")
                break
            if clock() > deadline:
                raise SearchTimeoutError(timeout_ms)
    except TimeoutError as e:
        raise SearchTimeoutError(timeout_ms) from e

    if clock() > deadline:
        raise SearchTimeoutError(timeout_ms)

    return matches


def extract_context(text: str, match_start: int, match_end: int, context_chars: int) -> Snippet:
    """Build a snippet of ``context_chars`` characters on each side of a match.

    The window is clamped to the text boundaries and the match offsets are
    re-expressed relative to the start of the window.

    Examples
    --------
    >>> extract_context("0123456789ABCDE", 7, 9, 5)
    Snippet(text='23456789ABCD', match_start=5, match_end=7)

    """
    window_start = max(0, match_start - context_chars)
    window_end = min(len(text), match_end + context_chars)
    return Snippet(
        text=text[window_start:window_end],
        match_start=match_start - window_start,
        match_end=match_end - window_start,
    )


def search_pages(
    pages: Iterable[PageRef],
    pattern: str | CompiledPattern,
    context_chars: int,
    timeout_ms: float,
    max_results: int | None = None,
    max_pages_scanned: int | None = None,
    *,
    clock: Clock = time.monotonic,
) -> SearchOutcome:
    """Search page text for a pattern with per-page budgets and early stops.

    Parameters
    ----------
    pages : iterable of PageRef
        Pages to scan, in ascending page-number order
    pattern : str or CompiledPattern
        Literal text, ``/body/flags`` regex, or an already compiled pattern
    context_chars : int
        Characters of context on each side of every match
    timeout_ms : float
        Per-page wall-clock budget in milliseconds
    max_results : int, optional
        Stop after the page on which the cumulative match count reaches this
    max_pages_scanned : int, optional
        Stop after this many pages have been visited
    clock : callable, default time.monotonic
        Source of the current time in seconds

    Returns
    -------
    SearchOutcome
        Results, errors and stop information

    Raises
    ------
    InvalidPatternError
        If ``pattern`` is a string that does not compile. Raised before any
        page is visited.

    """
    compiled = compile_pattern(pattern) if isinstance(pattern, str) else pattern

    matches: list[PageSearchResult] = []
    errors: list[str] = []
    total_matches = 0
    pages_scanned = 0

    def finish(completed: bool, stopped_reason: StoppedReason | None = None) -> SearchOutcome:
        return SearchOutcome(
            matches=tuple(matches),
            errors=tuple(errors),
            pages_scanned=pages_scanned,
            completed=completed,
            stopped_reason=stopped_reason,
            total_matches=total_matches,
        )

    with debug_timer(logger, "Page search"):
        try:
            for page in pages:
                pages_scanned += 1
                try:
                    text = page.text
                    page_matches = scan_page_with_timeout(text, compiled, timeout_ms, clock=clock)
                except Exception as e:
                    logger.warning(f"Search failed on page {page.page_number}: {e}")
                    errors.append(f"Page {page.page_number}: {e}")
                    page_matches = []

                if page_matches:
                    snippets = tuple(extract_context(text, m.start, m.end, context_chars) for m in page_matches)
                    matches.append(
                        PageSearchResult(page=page.page_number, match_count=len(page_matches), snippets=snippets)
                    )
                    total_matches += len(page_matches)
                    logger.debug(f"Page {page.page_number}: {len(page_matches)} matches")

                if max_results and total_matches >= max_results:
                    logger.debug(f"Stopping search: {total_matches} matches reached limit of {max_results}")
                    return finish(False, "max_results")

                if max_pages_scanned and pages_scanned >= max_pages_scanned:
                    logger.debug(f"Stopping search: scanned {pages_scanned} pages, limit {max_pages_scanned}")
                    return finish(False, "max_pages")

        except Exception as e:
            logger.error(f"Search aborted after {pages_scanned} pages: {e!r}")
            errors.append(f"General error: {e}")
            return finish(False)

    return finish(True)
