#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_agent/utils/decorators.py
"""Utility decorators and context managers shared across pdf_agent.

PyMuPDF, httpx and fastmcp are optional at import time so that the search
engine can be used on plain strings without any of them installed. The
functions that need them are guarded with :func:`requires_dependencies`.

"""

from __future__ import annotations

import importlib
import logging
import time
from contextlib import contextmanager
from functools import wraps
from importlib import metadata
from typing import Any, Callable, Generator, List, Optional, Tuple

from pdf_agent.exceptions import DependencyError


def get_package_version(package_name: str) -> Optional[str]:
    """Return the installed version of a distribution, or None."""
    try:
        return metadata.version(package_name)
    except metadata.PackageNotFoundError:
        return None


def check_version_requirement(package_name: str, version_spec: str) -> Tuple[bool, Optional[str]]:
    """Check if an installed distribution meets a version requirement.

    Parameters
    ----------
    package_name : str
        Distribution name as used by pip (e.g. "pymupdf")
    version_spec : str
        Version specification (e.g. ">=1.26.4")

    Returns
    -------
    tuple
        (meets_requirement, installed_version)

    """
    installed_version = get_package_version(package_name)
    if not installed_version:
        return False, None

    from packaging import version
    from packaging.specifiers import SpecifierSet

    spec = SpecifierSet(version_spec)
    return version.parse(installed_version) in spec, installed_version


def ensure_dependencies(feature_name: str, packages: List[Tuple[str, str, str]]) -> None:
    """Import every package and check its version, raising on any problem.

    All packages are probed before raising so the error lists everything
    that needs installing at once.

    Parameters
    ----------
    feature_name : str
        Feature shown in the error message (e.g. "pdf", "network", "mcp")
    packages : list of tuple
        ``(install_name, import_name, version_spec)``; an empty spec accepts
        any installed version

    Raises
    ------
    DependencyError
        If a package cannot be imported or its version does not satisfy the spec

    """
    missing: List[Tuple[str, str]] = []
    mismatches: List[Tuple[str, str, str]] = []
    first_error: Optional[ImportError] = None

    for install_name, import_name, version_spec in packages:
        try:
            importlib.import_module(import_name)
        except ImportError as e:
            missing.append((install_name, version_spec))
            first_error = first_error or e
            continue

        if version_spec:
            ok, installed = check_version_requirement(install_name, version_spec)
            if not ok:
                mismatches.append((install_name, version_spec, installed or "unknown"))

    if missing or mismatches:
        raise DependencyError(
            feature_name=feature_name,
            missing_packages=missing,
            version_mismatches=mismatches,
            original_import_error=first_error,
        ) from first_error


def requires_dependencies(feature_name: str, packages: List[Tuple[str, str, str]]) -> Callable:
    """Run :func:`ensure_dependencies` before each call of the wrapped function.

    Examples
    --------
        >>> @requires_dependencies("pdf", [("pymupdf", "fitz", ">=1.26.4")])
        ... def open_pdf(path):
        ...     import fitz
        ...     return fitz.open(path)

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            ensure_dependencies(feature_name, packages)
            return func(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Log the elapsed time of a block at DEBUG level.

    Only measures time when the logger has DEBUG enabled.

        >>> with debug_timer(logger, "Search (12 pages)"):
        ...     outcome = search_pages(pages, pattern, 150, 10_000)
        ... # Logs: "Search (12 pages) completed in 0.04s"

    """
    if logger.isEnabledFor(logging.DEBUG):
        start_time = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{operation} completed in {elapsed:.2f}s")
    else:
        yield
