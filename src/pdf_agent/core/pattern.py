#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_agent/core/pattern.py
"""Search pattern compilation.

A search pattern is either literal text or a regular expression written in
``/body/flags`` form. The flavor is decided once, here, and the result is a
tagged value reused for every page of a search.

Flags
-----
- ``i`` case-insensitive
- ``m`` multi-line anchors
- ``s`` dot matches newline
- ``g``, ``u`` accepted for compatibility; iteration is always global and
  Python strings are always Unicode
- ``y`` (sticky) is not supported

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Union

import regex

from pdf_agent.constants import REGEX_WRAPPER_FLAGS
from pdf_agent.exceptions import InvalidPatternError

logger = logging.getLogger(__name__)

_WRAPPER_RE = regex.compile(rf"/(.+)/([{REGEX_WRAPPER_FLAGS}]*)")

_FLAG_MAP = {
    "i": regex.IGNORECASE,
    "m": regex.MULTILINE,
    "s": regex.DOTALL,
    "g": 0,
    "u": 0,
}


@dataclass(frozen=True)
class LiteralPattern:
    """Literal text matched case-insensitively with metacharacters escaped."""

    text: str
    regex: regex.Pattern[str]

    is_regex = False

    def finditer(self, text: str, timeout: float | None = None) -> Iterator[regex.Match[str]]:
        return self.regex.finditer(text, timeout=timeout)


@dataclass(frozen=True)
class RegexPattern:
    """User-supplied regular expression taken from ``/body/flags``."""

    body: str
    flags: str
    regex: regex.Pattern[str]

    is_regex = True

    def finditer(self, text: str, timeout: float | None = None) -> Iterator[regex.Match[str]]:
        return self.regex.finditer(text, timeout=timeout)


CompiledPattern = Union[LiteralPattern, RegexPattern]


def _translate_flags(flags: str, pattern: str) -> int:
    if len(set(flags)) != len(flags):
        raise InvalidPatternError(f"Invalid search pattern: duplicate flags in '{flags}'", pattern=pattern)

    re_flags = 0
    for flag in flags:
        if flag not in _FLAG_MAP:
            raise InvalidPatternError(f"Invalid search pattern: unsupported flag '{flag}'", pattern=pattern)
        re_flags |= _FLAG_MAP[flag]
    return re_flags


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a search pattern into a literal or regex variant.

    Parameters
    ----------
    pattern : str
        Literal text, or a regular expression wrapped as ``/body/flags``

    Returns
    -------
    CompiledPattern
        ``RegexPattern`` when the wrapper syntax is used, otherwise
        ``LiteralPattern``

    Raises
    ------
    InvalidPatternError
        If the pattern is empty, uses an unsupported flag, or the regular
        expression body does not compile

    Examples
    --------
    >>> compile_pattern("a.b").is_regex
    False
    >>> compile_pattern(r"/\\d+/g").is_regex
    True

    """
    if not pattern:
        raise InvalidPatternError("Invalid search pattern: pattern cannot be empty", pattern=pattern)

    wrapped = _WRAPPER_RE.fullmatch(pattern)
    if wrapped:
        body, flags = wrapped.group(1), wrapped.group(2)
        re_flags = _translate_flags(flags, pattern)
        try:
            compiled = regex.compile(body, re_flags)
        except regex.error as e:
            raise InvalidPatternError(f"Invalid search pattern: {e}", pattern=pattern, original_error=e) from e
        logger.debug(f"Compiled regex pattern {body!r} with flags {flags!r}")
        return RegexPattern(body=body, flags=flags, regex=compiled)

    compiled = regex.compile(regex.escape(pattern), regex.IGNORECASE)
    logger.debug(f"Compiled literal pattern {pattern!r}")
    return LiteralPattern(text=pattern, regex=compiled)
