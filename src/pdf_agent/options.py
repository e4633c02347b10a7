#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for page search.

The engine in :mod:`pdf_agent.core.search` accepts raw numbers; this module
holds the user-facing defaults and bounds applied by the MCP tools and the
CLI before a search starts.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from pdf_agent.constants import (
    DEFAULT_CONTEXT_CHARS,
    DEFAULT_PAGE_RANGE,
    DEFAULT_SEARCH_TIMEOUT_MS,
    MAX_CONTEXT_CHARS,
    MAX_SEARCH_TIMEOUT_MS,
    MIN_CONTEXT_CHARS,
    MIN_SEARCH_TIMEOUT_MS,
)
from pdf_agent.exceptions import ValidationError


class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)  # type: ignore[type-var]


def _check_bounds(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValidationError(
            f"{name} must be between {low} and {high}, got {value}", parameter_name=name, parameter_value=value
        )


def _check_positive(name: str, value: int | None) -> None:
    if value is not None and value < 1:
        raise ValidationError(f"{name} must be at least 1, got {value}", parameter_name=name, parameter_value=value)


@dataclass(frozen=True)
class SearchOptions(CloneFrozenMixin):
    """Search limits used by the tool layer and the CLI."""

    page_range: str = field(
        default=DEFAULT_PAGE_RANGE,
        metadata={"help": "Pages to search, e.g. '1:5', '2,4,6', '3:'"},
    )
    context_chars: int = field(
        default=DEFAULT_CONTEXT_CHARS,
        metadata={"help": "Characters of context on each side of a match", "type": int},
    )
    search_timeout_ms: int = field(
        default=DEFAULT_SEARCH_TIMEOUT_MS,
        metadata={"help": "Per-page search budget in milliseconds", "type": int},
    )
    max_results: int | None = field(
        default=None,
        metadata={"help": "Stop after the page on which this many matches have been found", "type": int},
    )
    max_pages_scanned: int | None = field(
        default=None,
        metadata={"help": "Stop after visiting this many pages", "type": int},
    )

    def validate(self) -> None:
        """Check every option against its allowed range.

        Raises
        ------
        ValidationError
            If an option is out of range; ``parameter_name`` names it

        """
        _check_bounds("context_chars", self.context_chars, MIN_CONTEXT_CHARS, MAX_CONTEXT_CHARS)
        _check_bounds("search_timeout", self.search_timeout_ms, MIN_SEARCH_TIMEOUT_MS, MAX_SEARCH_TIMEOUT_MS)
        _check_positive("max_results", self.max_results)
        _check_positive("max_pages_scanned", self.max_pages_scanned)
