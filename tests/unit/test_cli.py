"""Unit tests for the pdf-agent command line tool."""

import json

import pytest

from pdf_agent.cli import (
    EXIT_DEPENDENCY_ERROR,
    EXIT_ERROR,
    EXIT_FILE_ERROR,
    EXIT_PASSWORD_ERROR,
    EXIT_SECURITY_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    _exit_code_for,
    create_parser,
    main,
)
from pdf_agent.exceptions import (
    DependencyError,
    InvalidPatternError,
    MalformedFileError,
    NetworkSecurityError,
    PasswordProtectedError,
    PdfAgentError,
)


@pytest.mark.unit
class TestCreateParser:
    """Tests for argument parsing."""

    def test_search_defaults(self):
        """Test the search subcommand defaults."""
        args = create_parser().parse_args(["search", "doc.pdf", "revenue"])

        assert args.command == "search"
        assert args.pages == "1:"
        assert args.context == 150
        assert args.timeout == 10000
        assert args.max_results is None
        assert args.max_pages is None
        assert args.json is False
        assert args.log_level == "WARNING"

    def test_log_level_case_insensitive(self):
        """Test that the log level is normalized."""
        args = create_parser().parse_args(["--log-level", "debug", "text", "doc.pdf"])
        assert args.log_level == "DEBUG"

    def test_subcommand_required(self):
        """Test that a subcommand must be given."""
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_version(self, capsys):
        """Test the version flag."""
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("pdf-agent ")


@pytest.mark.unit
class TestExitCodes:
    """Tests for error to exit code mapping."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (InvalidPatternError("bad"), EXIT_VALIDATION_ERROR),
            (MalformedFileError("bad"), EXIT_FILE_ERROR),
            (PasswordProtectedError(), EXIT_PASSWORD_ERROR),
            (NetworkSecurityError("blocked"), EXIT_SECURITY_ERROR),
            (DependencyError("mcp", [("fastmcp", ">=2.0.0")]), EXIT_DEPENDENCY_ERROR),
            (PdfAgentError("other"), EXIT_ERROR),
        ],
    )
    def test_exit_code_for(self, error, code):
        """Test each error family maps to its exit code."""
        assert _exit_code_for(error) == code


@pytest.mark.unit
class TestSearchCommand:
    """Tests for ``pdf-agent search``."""

    def test_json_output(self, search_pdf_path, capsys):
        """Test that --json prints the tool payload."""
        assert main(["search", str(search_pdf_path), "revenue", "--json"]) == EXIT_SUCCESS

        payload = json.loads(capsys.readouterr().out)
        assert payload["completed"] is True
        assert payload["pagesScanned"] == 5
        assert [m["page"] for m in payload["matches"]] == [1, 2, 4]

    def test_json_with_limits(self, search_pdf_path, capsys):
        """Test that limits are reported in the payload."""
        main(["search", str(search_pdf_path), "revenue", "--json", "--max-pages", "1"])

        payload = json.loads(capsys.readouterr().out)
        assert payload["completed"] is False
        assert payload["stoppedReason"] == "max_pages"

    def test_rendered_output(self, search_pdf_path, capsys):
        """Test the human-readable output."""
        assert main(["search", str(search_pdf_path), "/revenue/i", "--pages", "2"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Page 2" in out
        assert "(2 matches)" in out
        assert "2 matches on 1 pages, 1 pages scanned" in out

    def test_no_matches(self, search_pdf_path, capsys):
        """Test the message when nothing matches."""
        assert main(["search", str(search_pdf_path), "nonexistent phrase"]) == EXIT_SUCCESS
        assert "No matches found." in capsys.readouterr().out

    def test_stopped_summary(self, search_pdf_path, capsys):
        """Test that an early stop is shown in the summary."""
        main(["search", str(search_pdf_path), "revenue", "--max-results", "1"])
        assert "(stopped: max_results)" in capsys.readouterr().out

    def test_invalid_range(self, search_pdf_path, capsys):
        """Test that a bad range is a validation error."""
        assert main(["search", str(search_pdf_path), "x", "--pages", "7:9"]) == EXIT_VALIDATION_ERROR
        assert "Error: Invalid segment '7:9'" in capsys.readouterr().err

    def test_invalid_pattern(self, search_pdf_path, capsys):
        """Test that a malformed regex is a validation error."""
        assert main(["search", str(search_pdf_path), "/(unclosed/"]) == EXIT_VALIDATION_ERROR
        assert "Invalid search pattern" in capsys.readouterr().err

    def test_invalid_context(self, search_pdf_path):
        """Test that option bounds are enforced."""
        assert main(["search", str(search_pdf_path), "x", "--context", "5"]) == EXIT_VALIDATION_ERROR

    def test_missing_file(self, tmp_path, capsys):
        """Test that an unreadable file is a file error."""
        assert main(["search", str(tmp_path / "missing.pdf"), "x"]) == EXIT_FILE_ERROR
        assert "Cannot read PDF file" in capsys.readouterr().err

    def test_encrypted_file(self, encrypted_pdf_path, capsys):
        """Test that an encrypted file is a password error."""
        assert main(["search", str(encrypted_pdf_path), "x"]) == EXIT_PASSWORD_ERROR
        assert "password-protected" in capsys.readouterr().err


@pytest.mark.unit
class TestTextCommand:
    """Tests for ``pdf-agent text``."""

    def test_page_text(self, search_pdf_path, capsys):
        """Test that only the requested pages are printed."""
        assert main(["text", str(search_pdf_path), "--pages", "3,5"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Page 3" in out
        assert "Costs were flat." in out
        assert "finance@example.com" in out
        assert "Appendix A" not in out


@pytest.mark.unit
class TestInfoCommand:
    """Tests for ``pdf-agent info``."""

    def test_metadata_table(self, search_pdf_path, capsys):
        """Test the metadata table."""
        assert main(["info", str(search_pdf_path)]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Quarterly Report" in out
        assert "Finance Team" in out
        assert "pageCount" in out

    def test_outline_tree(self, outline_pdf_path, capsys):
        """Test the outline tree."""
        assert main(["info", str(outline_pdf_path), "--outline"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Outline" in out
        assert "Services" in out
        assert "(p. 2)" in out

    def test_no_outline(self, search_pdf_path, capsys):
        """Test the message for documents without bookmarks."""
        main(["info", str(search_pdf_path), "--outline"])
        assert "Document has no outline." in capsys.readouterr().out
