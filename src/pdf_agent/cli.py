#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/pdf_agent/cli.py
"""Command line interface for pdf_agent.

Subcommands
-----------
- search: Find a literal or ``/regex/flags`` pattern and print context snippets
- text: Print the plain text of a page range
- info: Print document metadata and, optionally, its outline

Human-readable output is rendered with rich; ``search --json`` prints the same
payload the MCP ``search_pdf`` tool returns. Logging goes to stderr.
"""

import argparse
import json
import logging
import sys
from typing import Any

from pdf_agent import __version__
from pdf_agent.constants import DEFAULT_CONTEXT_CHARS, DEFAULT_PAGE_RANGE, DEFAULT_SEARCH_TIMEOUT_MS
from pdf_agent.core import resolve_page_range, search_pages
from pdf_agent.document import PdfDocument
from pdf_agent.exceptions import (
    DependencyError,
    FileError,
    PageExtractionError,
    PasswordProtectedError,
    PdfAgentError,
    SecurityError,
    ValidationError,
)
from pdf_agent.logging_utils import LOG_LEVELS, configure_logging
from pdf_agent.options import SearchOptions

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_DEPENDENCY_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4
EXIT_SECURITY_ERROR = 8
EXIT_PASSWORD_ERROR = 9


def _exit_code_for(error: PdfAgentError) -> int:
    """Map an exception to the process exit code."""
    if isinstance(error, DependencyError):
        return EXIT_DEPENDENCY_ERROR
    if isinstance(error, ValidationError):
        return EXIT_VALIDATION_ERROR
    if isinstance(error, PasswordProtectedError):
        return EXIT_PASSWORD_ERROR
    if isinstance(error, FileError):
        return EXIT_FILE_ERROR
    if isinstance(error, SecurityError):
        return EXIT_SECURITY_ERROR
    return EXIT_ERROR


def _console(stderr: bool = False) -> Any:
    from rich.console import Console

    return Console(stderr=stderr, highlight=False)


def _snippet_text(snippet: dict[str, Any]) -> Any:
    """Build a rich Text for a snippet with the match highlighted."""
    from rich.text import Text

    text = snippet["text"].replace("\n", " ")
    start, end = snippet["matchStart"], snippet["matchEnd"]
    rendered = Text("    ")
    rendered.append(text[:start])
    rendered.append(text[start:end], style="bold yellow")
    rendered.append(text[end:])
    return rendered


def _render_search_outcome(payload: dict[str, Any]) -> None:
    from rich.text import Text

    console = _console()
    if not payload["matches"]:
        console.print("No matches found.")

    total = 0
    for page in payload["matches"]:
        total += page["matchCount"]
        header = Text(f"Page {page['page']}", style="bold cyan")
        header.append(f"  ({page['matchCount']} matches)", style="dim")
        console.print(header)
        for snippet in page["snippets"]:
            console.print(_snippet_text(snippet))
        console.print()

    summary = f"{total} matches on {len(payload['matches'])} pages, {payload['pagesScanned']} pages scanned"
    if "stoppedReason" in payload:
        summary += f" (stopped: {payload['stoppedReason']})"
    elif not payload["completed"]:
        summary += " (incomplete)"
    console.print(Text(summary, style="dim"))

    if payload["errors"]:
        err_console = _console(stderr=True)
        for error in payload["errors"]:
            err_console.print(Text(f"Warning: {error}", style="red"))


def handle_search(args: argparse.Namespace) -> int:
    """Handle ``pdf-agent search``."""
    options = SearchOptions(
        page_range=args.pages,
        context_chars=args.context,
        search_timeout_ms=args.timeout,
        max_results=args.max_results,
        max_pages_scanned=args.max_pages,
    )
    options.validate()

    with PdfDocument.open(args.file) as doc:
        page_numbers = resolve_page_range(options.page_range, doc.page_count)
        outcome = search_pages(
            doc.iter_pages(page_numbers),
            args.pattern,
            options.context_chars,
            options.search_timeout_ms,
            max_results=options.max_results,
            max_pages_scanned=options.max_pages_scanned,
        )

    payload = outcome.to_dict()
    if args.json:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        _render_search_outcome(payload)
    return EXIT_SUCCESS


def handle_text(args: argparse.Namespace) -> int:
    """Handle ``pdf-agent text``."""
    from rich.text import Text

    console = _console()
    with PdfDocument.open(args.file) as doc:
        for page_number in resolve_page_range(args.pages, doc.page_count):
            console.rule(f"Page {page_number}")
            try:
                console.print(Text(doc.page_text(page_number)))
            except PageExtractionError as e:
                logger.warning(f"Skipping page {page_number}: {e.message}")
                console.print(Text(f"[Error extracting text: {e.message}]", style="red"))
    return EXIT_SUCCESS


def _outline_tree(items: list[dict[str, Any]], parent: Any) -> None:
    from rich.markup import escape

    for item in items:
        label = escape(item["title"])
        if "page" in item:
            label += f"  [dim](p. {item['page']})[/dim]"
        branch = parent.add(label)
        _outline_tree(item.get("children", []), branch)


def handle_info(args: argparse.Namespace) -> int:
    """Handle ``pdf-agent info``."""
    from rich.markup import escape
    from rich.table import Table
    from rich.tree import Tree

    console = _console()
    with PdfDocument.open(args.file) as doc:
        metadata = doc.metadata()
        outline = doc.outline() if args.outline else None

    table = Table(title=str(args.file), show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in metadata.items():
        table.add_row(key, escape("" if value is None else str(value)))
    console.print(table)

    if outline is not None:
        if not outline["has_outline"]:
            console.print("Document has no outline.")
        else:
            tree = Tree("Outline")
            _outline_tree(outline["outline_items"], tree)
            console.print(tree)
    return EXIT_SUCCESS


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for ``pdf-agent``."""
    parser = argparse.ArgumentParser(
        prog="pdf-agent",
        description="Inspect and search PDF documents.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"pdf-agent {__version__}")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, default="WARNING", help="Logging level for stderr output"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser(
        "search",
        help="Search a PDF for text or a /regex/flags pattern",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    search_parser.add_argument("file", help="PDF file to search")
    search_parser.add_argument("pattern", help="Literal text (case-insensitive) or /regex/flags")
    search_parser.add_argument("--pages", default=DEFAULT_PAGE_RANGE, help="Page range, e.g. '1:5', '2,4', '3:'")
    search_parser.add_argument(
        "--context", type=int, default=DEFAULT_CONTEXT_CHARS, help="Context characters around each match"
    )
    search_parser.add_argument(
        "--timeout", type=int, default=DEFAULT_SEARCH_TIMEOUT_MS, help="Per-page timeout in milliseconds"
    )
    search_parser.add_argument("--max-results", type=int, help="Stop once this many matches are found")
    search_parser.add_argument("--max-pages", type=int, help="Stop after scanning this many pages")
    search_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    search_parser.set_defaults(handler=handle_search)

    text_parser = subparsers.add_parser(
        "text", help="Print the text of a page range", formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    text_parser.add_argument("file", help="PDF file to read")
    text_parser.add_argument("--pages", default=DEFAULT_PAGE_RANGE, help="Page range, e.g. '1:5', '2,4', '3:'")
    text_parser.set_defaults(handler=handle_text)

    info_parser = subparsers.add_parser("info", help="Print document metadata")
    info_parser.add_argument("file", help="PDF file to inspect")
    info_parser.add_argument("--outline", action="store_true", help="Also print the document outline")
    info_parser.set_defaults(handler=handle_info)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the ``pdf-agent`` command line tool."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        return args.handler(args)
    except PdfAgentError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e.message}", file=sys.stderr)
        return _exit_code_for(e)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
