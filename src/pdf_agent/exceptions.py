#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the pdf_agent package.

This module defines specialized exception classes for the error conditions
that can occur while resolving page ranges, compiling search patterns,
scanning page text and loading PDF documents.

Exception Hierarchy
-------------------
- PdfAgentError (base exception)

  - ValidationError (parameter/option validation)
    - PageRangeError (page range parsing errors, alias InvalidRangeError)
    - InvalidPatternError (search pattern compilation errors)

  - SearchTimeoutError (per-page search deadline exceeded)

  - FileError (file access and I/O)
    - MalformedFileError (corrupted/invalid file structure)
    - PageExtractionError (text extraction failed for one page)

  - PasswordProtectedError (encrypted documents)

  - SecurityError (security violations)
    - NetworkSecurityError (SSRF, network violations)

  - DependencyError (missing/incompatible packages)

"""

from enum import Enum
from typing import Any


class PdfAgentError(Exception):
    """Base exception class for all pdf_agent-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(PdfAgentError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class RangeErrorReason(str, Enum):
    """Tag describing why a page range expression was rejected."""

    EMPTY_RANGE = "empty_range"
    INVALID_PAGE_NUMBER = "invalid_page_number"
    INVALID_START = "invalid_start"
    INVALID_END = "invalid_end"
    RANGE_INVERTED = "range_inverted"
    RANGE_OUT_OF_BOUNDS = "range_out_of_bounds"


class PageRangeError(ValidationError):
    """Exception raised for invalid page range specifications.

    Parameters
    ----------
    message : str
        Description of the page range error
    reason : RangeErrorReason
        Tag identifying the failing check
    parameter_value : any, optional
        The invalid page range value
    segment : str, optional
        The comma-separated segment that failed, when known
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        reason: RangeErrorReason,
        parameter_value: Any = None,
        segment: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the page range error."""
        super().__init__(
            message, parameter_name="page_range", parameter_value=parameter_value, original_error=original_error
        )
        self.reason = reason
        self.segment = segment


InvalidRangeError = PageRangeError


class InvalidPatternError(ValidationError):
    """Exception raised when a search pattern cannot be compiled.

    Parameters
    ----------
    message : str
        Description of the compilation failure
    pattern : str, optional
        The pattern as supplied by the caller
    original_error : Exception, optional
        The underlying ``regex.error``, if any

    """

    def __init__(self, message: str, pattern: str | None = None, original_error: Exception | None = None):
        """Initialize the pattern error."""
        super().__init__(
            message, parameter_name="search_pattern", parameter_value=pattern, original_error=original_error
        )
        self.pattern = pattern


class SearchTimeoutError(PdfAgentError):
    """Exception raised when scanning a single page exceeds its time budget.

    Parameters
    ----------
    timeout_ms : float
        The budget that was exceeded, in milliseconds
    message : str, optional
        Custom error message

    """

    def __init__(self, timeout_ms: float, message: str | None = None):
        """Initialize the timeout error."""
        if message is None:
            message = f"Search operation timed out after {timeout_ms}ms"
        super().__init__(message)
        self.timeout_ms = timeout_ms


class FileError(PdfAgentError):
    """Base exception for file access and I/O errors.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the file that caused the error
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path details."""
        super().__init__(message, original_error)
        self.file_path = file_path


class MalformedFileError(FileError):
    """Exception raised when a document is corrupted or cannot be opened."""


class PageExtractionError(FileError):
    """Exception raised when the text of a single page cannot be extracted.

    Parameters
    ----------
    page_number : int
        1-based number of the failing page
    message : str, optional
        Custom error message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, page_number: int, message: str | None = None, original_error: Exception | None = None):
        """Initialize the page extraction error."""
        if message is None:
            message = f"Error extracting text from page {page_number}"
            if original_error is not None:
                message += f": {original_error}"
        super().__init__(message, original_error=original_error)
        self.page_number = page_number


class PasswordProtectedError(PdfAgentError):
    """Exception raised when a document is encrypted and cannot be read.

    Parameters
    ----------
    message : str, optional
        Custom error message
    filename : str, optional
        Name of the protected file

    """

    def __init__(self, message: str | None = None, filename: str | None = None):
        """Initialize the password error."""
        if message is None:
            message = "PDF document is password-protected"
        super().__init__(message)
        self.filename = filename


class SecurityError(PdfAgentError):
    """Base exception for security violations."""


class NetworkSecurityError(SecurityError):
    """Exception raised when a network security violation is detected.

    This includes SSRF attempts, blocked hosts, invalid URLs, oversized
    responses and disabled network access.
    """


class DependencyError(PdfAgentError):
    """Exception raised when required dependencies are not available.

    Parameters
    ----------
    feature_name : str
        Name of the feature requiring dependencies (e.g. "pdf", "network")
    missing_packages : list[tuple[str, str]]
        List of (package_name, version_spec) tuples for missing packages
    version_mismatches : list[tuple[str, str, str]], optional
        List of (package_name, required_version, installed_version) tuples
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_import_error : ImportError, optional
        The import failure that triggered this error

    """

    def __init__(
        self,
        feature_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        version_mismatches = version_mismatches or []
        self.original_import_error = original_import_error
        if message is None:
            message_parts = []

            if missing_packages:
                pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
                message_parts.append(f"{feature_name.upper()} support requires the following packages: {pkg_list}")

            if version_mismatches:
                mismatch_str = ", ".join(
                    f"'{name}' (requires {required}, but {installed} is installed)"
                    for name, required, installed in version_mismatches
                )
                message_parts.append(f"{feature_name.upper()} support has version mismatches: {mismatch_str}")

            message = "\n".join(message_parts)

            all_packages = missing_packages + [(name, req) for name, req, _ in version_mismatches]
            if all_packages:
                packages_str = " ".join(f'"{name}{spec}"' if spec else name for name, spec in all_packages)
                message += f"\nInstall with: pip install --upgrade {packages_str}"

        super().__init__(message)
        self.feature_name = feature_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches


__all__ = [
    "PdfAgentError",
    "ValidationError",
    "RangeErrorReason",
    "PageRangeError",
    "InvalidRangeError",
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
