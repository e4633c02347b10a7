"""Configuration management for the MCP server.

This module handles configuration from environment variables and CLI arguments,
with CLI arguments taking precedence over environment variables.

All configuration is set at server startup and cannot be changed per-tool-call.

Classes
-------
- MCPConfig: Server configuration with security settings and search defaults

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import argparse
import logging
import os
from dataclasses import dataclass, fields
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import cast

from pdf_agent.constants import (
    DEFAULT_CONTEXT_CHARS,
    DEFAULT_SEARCH_TIMEOUT_MS,
    MAX_CONTEXT_CHARS,
    MAX_FILE_SIZE,
    MAX_SEARCH_TIMEOUT_MS,
    MIN_CONTEXT_CHARS,
    MIN_SEARCH_TIMEOUT_MS,
)
from pdf_agent.logging_utils import LOG_LEVELS
from pdf_agent.options import CloneFrozenMixin
from pdf_agent.utils.network_security import NETWORK_DISABLE_ENV

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MCPConfig(CloneFrozenMixin):
    """MCP server configuration.

    All settings are immutable after server startup.

    Attributes
    ----------
    read_allowlist : list[str | Path] | None
        Directories from which the tools may open PDF files by path.
        Initially strings from env/CLI, then resolved Path objects after
        prepare_allowlist_dirs. None allows any readable path.
    enable_download : bool
        Whether to register the download_pdf tool (default: True). The tool
        is only registered when network access is also allowed.
    disable_network : bool
        Whether to disable network access globally (default: True)
    default_context_chars : int
        Context characters used by search_pdf when the caller omits them
    default_search_timeout_ms : int
        Per-page search budget used by search_pdf when the caller omits it
    max_file_size : int
        Largest PDF accepted from any source, in bytes
    log_level : str
        Logging level (DEBUG|INFO|WARNING|ERROR|CRITICAL)

    """

    read_allowlist: list[str | Path] | None = None
    enable_download: bool = True
    disable_network: bool = True
    default_context_chars: int = DEFAULT_CONTEXT_CHARS
    default_search_timeout_ms: int = DEFAULT_SEARCH_TIMEOUT_MS
    max_file_size: int = MAX_FILE_SIZE
    log_level: str = "INFO"

    @property
    def download_enabled(self) -> bool:
        return self.enable_download and not self.disable_network

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises
        ------
        ValueError
            If configuration is invalid

        """
        if not MIN_CONTEXT_CHARS <= self.default_context_chars <= MAX_CONTEXT_CHARS:
            raise ValueError(
                f"Invalid context chars: {self.default_context_chars}. "
                f"Must be between {MIN_CONTEXT_CHARS} and {MAX_CONTEXT_CHARS}"
            )

        if not MIN_SEARCH_TIMEOUT_MS <= self.default_search_timeout_ms <= MAX_SEARCH_TIMEOUT_MS:
            raise ValueError(
                f"Invalid search timeout: {self.default_search_timeout_ms}. "
                f"Must be between {MIN_SEARCH_TIMEOUT_MS} and {MAX_SEARCH_TIMEOUT_MS} ms"
            )

        if self.max_file_size < 1:
            raise ValueError(f"Invalid max file size: {self.max_file_size}")

        _validate_log_level(self.log_level)


def _parse_semicolon_list(value: str | None) -> list[str] | None:
    """Parse semicolon-separated list from environment variable or CLI.

    Returns None if value was None or contains no entries.
    """
    if not value:
        return None

    parts = [p.strip() for p in value.split(";") if p.strip()]
    return parts if parts else None


def _str_to_bool(value: str | None, default: bool = False) -> bool:
    """Convert string to boolean ("true", "t", "1", "yes", "on" are True)."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "t", "on")


def _str_to_int(value: str | None, default: int, name: str) -> int:
    """Convert an environment value to int, naming the variable on failure.

    Raises
    ------
    ValueError
        If value is set but not an integer

    """
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as e:
        raise ValueError(f"Invalid integer for {name}: {value!r}") from e


def _validate_log_level(value: str | None, default: str = "INFO") -> str:
    """Validate and normalize log level string.

    Raises
    ------
    ValueError
        If value is not a valid log level

    """
    if value is None:
        return default

    normalized = value.upper().strip()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {value!r}. " f"Must be one of: {', '.join(LOG_LEVELS)}")

    return normalized


# (env var, MCPConfig field, default shown in --help)
_ENV_VARS: tuple[tuple[str, str, str], ...] = (
    ("PDF_AGENT_MCP_ALLOWED_READ_DIRS", "read_allowlist", "CWD"),
    ("PDF_AGENT_MCP_ENABLE_DOWNLOAD", "enable_download", "true, needs network"),
    (NETWORK_DISABLE_ENV, "disable_network", "true"),
    ("PDF_AGENT_MCP_CONTEXT_CHARS", "default_context_chars", str(DEFAULT_CONTEXT_CHARS)),
    ("PDF_AGENT_MCP_SEARCH_TIMEOUT", "default_search_timeout_ms", f"{DEFAULT_SEARCH_TIMEOUT_MS} ms"),
    ("PDF_AGENT_MCP_MAX_FILE_SIZE", "max_file_size", f"{MAX_FILE_SIZE} bytes"),
    ("PDF_AGENT_MCP_LOG_LEVEL", "log_level", "INFO"),
)

_FIELD_DEFAULTS = {f.name: f.default for f in fields(MCPConfig)}

# argparse dest -> MCPConfig field
_ARG_FIELDS = {
    "read_dirs": "read_allowlist",
    "enable_download": "enable_download",
    "disable_network": "disable_network",
    "context_chars": "default_context_chars",
    "search_timeout": "default_search_timeout_ms",
    "max_file_size": "max_file_size",
    "log_level": "log_level",
}


def _env_value(env_var: str, field_name: str) -> object:
    """Read one setting from the environment, converted to its field type."""
    raw = os.getenv(env_var)
    default = _FIELD_DEFAULTS[field_name]

    if field_name == "read_allowlist":
        # Default to CWD if no allowlist specified
        dirs = _parse_semicolon_list(raw) or [os.getcwd()]
        # Validated and converted to Path objects by prepare_allowlist_dirs
        return cast(list[str | Path], dirs)
    if field_name == "log_level":
        return _validate_log_level(raw, default=cast(str, default))
    if isinstance(default, bool):
        return _str_to_bool(raw, default=default)
    return _str_to_int(raw, cast(int, default), env_var)


def load_config_from_env() -> MCPConfig:
    """Load configuration from environment variables.

    Unset variables fall back to the :class:`MCPConfig` defaults, except the
    read allowlist which defaults to the current working directory.

    Raises
    ------
    ValueError
        If a numeric variable is not an integer or the log level is unknown

    """
    values = {field_name: _env_value(env_var, field_name) for env_var, field_name, _ in _ENV_VARS}
    return MCPConfig(**values)  # type: ignore[arg-type]


def _epilog() -> str:
    lines = ["Environment Variables:"]
    lines += [f"  {env_var:<33}(default: {shown})" for env_var, _, shown in _ENV_VARS]
    lines += [
        "",
        "Examples:",
        "  # Read PDFs from the current working directory",
        "  pdf-agent-mcp",
        "",
        "  # Read PDFs from two directories",
        '  pdf-agent-mcp --read-dirs "/home/user/papers;/home/user/reports"',
        "",
        "  # Also register the download_pdf tool",
        "  pdf-agent-mcp --allow-network",
    ]
    return "\n".join(lines)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser for MCP server CLI.

    Every option defaults to ``None`` so that :func:`load_config_from_args`
    can tell an omitted flag from an explicit one.
    """
    parser = argparse.ArgumentParser(
        prog="pdf-agent-mcp",
        description="MCP server for PDF metadata, text extraction and search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )

    try:
        version_string = f'pdf-agent-mcp {version("pdf-agent-mcp")}'
    except PackageNotFoundError:
        version_string = "pdf-agent-mcp (version unknown)"
    parser.add_argument("--version", action="version", version=version_string)

    parser.add_argument(
        "--read-dirs", metavar="PATHS", help="Semicolon-separated directories the tools may read PDFs from"
    )

    download = parser.add_mutually_exclusive_group()
    download.add_argument(
        "--enable-download",
        action="store_const",
        const=True,
        dest="enable_download",
        help="Register the download_pdf tool (requires --allow-network)",
    )
    download.add_argument(
        "--no-download", action="store_const", const=False, dest="enable_download", help="Never register download_pdf"
    )

    network = parser.add_mutually_exclusive_group()
    network.add_argument(
        "--allow-network", action="store_const", const=False, dest="disable_network", help="Allow network access"
    )
    network.add_argument(
        "--disable-network",
        action="store_const",
        const=True,
        dest="disable_network",
        help="Disable network access (the default)",
    )

    search = parser.add_argument_group("search defaults")
    search.add_argument("--context-chars", type=int, metavar="N", help="Characters of context around each match")
    search.add_argument("--search-timeout", type=int, metavar="MS", help="Per-page search budget in milliseconds")

    parser.add_argument("--max-file-size", type=int, metavar="BYTES", help="Largest accepted PDF in bytes")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive)")

    return parser


def load_config_from_args(args: argparse.Namespace) -> MCPConfig:
    """Load configuration from parsed CLI arguments, using env as fallback.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed CLI arguments

    Returns
    -------
    MCPConfig
        Merged configuration (CLI overrides env)

    """
    config = load_config_from_env()

    overrides: dict[str, object] = {}
    for dest, field_name in _ARG_FIELDS.items():
        value = getattr(args, dest, None)
        if value is None:
            continue
        if field_name == "read_allowlist":
            value = _parse_semicolon_list(value)
        elif field_name == "log_level":
            value = _validate_log_level(value)
        overrides[field_name] = value

    if overrides:
        logger.debug(f"CLI overrides: {', '.join(sorted(overrides))}")
        config = config.create_updated(**overrides)

    return config


def load_config(argv: list[str] | None = None) -> MCPConfig:
    """Load and validate configuration from CLI args and environment.

    Raises
    ------
    ValueError
        If configuration is invalid

    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    config = load_config_from_args(args)
    config.validate()

    return config
