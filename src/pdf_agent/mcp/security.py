"""Read-path checks for the MCP server.

A tool may open a PDF by file path only when the fully resolved path (after
following symlinks and ``..``) is a regular file inside one of the configured
read directories.

Functions
---------
- prepare_allowlist_dirs: Resolve the configured read directories once at startup
- validate_read_path: Check a file path against the resolved directories

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import logging
from pathlib import Path

from pdf_agent.exceptions import SecurityError

logger = logging.getLogger(__name__)

_DENIED = "Read access denied"


class MCPSecurityError(SecurityError):
    """Raised when a path fails the read allowlist checks.

    Parameters
    ----------
    message : str
        Error message
    path : str, optional
        The path as the caller supplied it

    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


def _resolve_existing(path: str | Path) -> Path:
    # RuntimeError covers symlink loops on older Pythons
    try:
        return Path(path).expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise MCPSecurityError(f"{_DENIED}: path does not exist or cannot be resolved: {path}", path=str(path)) from e


def _inside_any(path: Path, directories: list[Path]) -> bool:
    return any(path == directory or directory in path.parents for directory in directories)


def prepare_allowlist_dirs(paths: list[str | Path] | None) -> list[Path] | None:
    """Resolve the read allowlist to canonical directories.

    Parameters
    ----------
    paths : list[str | Path] | None
        Configured directories, or None for no restriction

    Returns
    -------
    list[Path] | None
        Resolved directories, or None

    Raises
    ------
    MCPSecurityError
        If an entry does not exist or is not a directory

    """
    if paths is None:
        return None

    resolved_dirs: list[Path] = []
    for entry in paths:
        try:
            directory = Path(entry).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise MCPSecurityError(f"Invalid allowlist path: {entry} ({e})", path=str(entry)) from e
        if not directory.is_dir():
            raise MCPSecurityError(f"Allowlist path is not a directory: {entry}", path=str(entry))
        resolved_dirs.append(directory)
        logger.debug(f"Read allowlist entry: {directory}")

    return resolved_dirs


def validate_read_path(path: str | Path, read_allowlist_dirs: list[str | Path] | None) -> Path:
    """Return the resolved path of a PDF the tools are allowed to open.

    Parameters
    ----------
    path : str | Path
        Path supplied by the caller
    read_allowlist_dirs : list[str | Path] | None
        Allowed directories, or None to allow any readable file. Entries that
        are still strings are resolved here; unresolvable ones are skipped.

    Returns
    -------
    Path
        The resolved file path

    Raises
    ------
    MCPSecurityError
        If the path does not exist, is not a regular file, or resolves to a
        location outside every allowed directory

    """
    resolved = _resolve_existing(path)
    if not resolved.is_file():
        raise MCPSecurityError(f"{_DENIED}: path is not a file: {path}", path=str(path))

    if read_allowlist_dirs is None:
        return resolved

    directories: list[Path] = []
    for entry in read_allowlist_dirs:
        if isinstance(entry, Path):
            directories.append(entry)
            continue
        try:
            directories.append(Path(entry).resolve(strict=True))
        except (OSError, RuntimeError):
            logger.warning(f"Skipping unresolvable allowlist directory: {entry}")

    if not _inside_any(resolved, directories):
        logger.warning(f"Refused read outside allowlist: {resolved}")
        raise MCPSecurityError(f"{_DENIED}: path not in allowlist: {path}", path=str(path))

    logger.debug(f"Read path allowed: {resolved}")
    return resolved
