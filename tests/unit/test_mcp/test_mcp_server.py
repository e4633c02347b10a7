"""Unit tests for MCP server wiring."""

import os
from unittest.mock import MagicMock, patch

import pytest

from pdf_agent.exceptions import DependencyError
from pdf_agent.mcp import server
from pdf_agent.mcp.config import MCPConfig
from pdf_agent.mcp.schemas import DownloadPdfInput, GetPdfOutlineInput, SearchPdfInput
from pdf_agent.mcp.server import create_server, main


class _FakeMCP:
    """Stand-in for FastMCP that records registered tools."""

    def __init__(self, name):
        self.name = name
        self.tools = {}
        self.run = MagicMock()

    def tool(self, name):
        def decorator(func):
            self.tools[name] = func
            return func

        return decorator


def _impls():
    keys = ("metadata", "text", "search", "outline", "download")
    return {key: MagicMock(return_value={"tool": key}) for key in keys}


@pytest.fixture
def fake_fastmcp():
    """Replace FastMCP with a recording fake."""
    with patch("fastmcp.FastMCP", _FakeMCP):
        yield


@pytest.mark.usefixtures("fake_fastmcp")
class TestCreateServer:
    """Tests for tool registration."""

    def test_read_tools_registered(self):
        """Test that the four read tools are always available."""
        mcp = create_server(MCPConfig(), _impls())

        assert mcp.name == "pdf-agent"
        assert set(mcp.tools) == {"get_pdf_metadata", "get_pdf_text", "search_pdf", "get_pdf_outline"}

    def test_download_requires_network(self):
        """Test that download_pdf is registered only with network access."""
        assert "download_pdf" in create_server(MCPConfig(disable_network=False), _impls()).tools
        assert "download_pdf" not in create_server(
            MCPConfig(disable_network=False, enable_download=False), _impls()
        ).tools

    def test_search_wrapper_builds_input(self):
        """Test that tool arguments reach the implementation."""
        impls = _impls()
        config = MCPConfig()
        mcp = create_server(config, impls)

        result = mcp.tools["search_pdf"]("doc.pdf", "/rev\\w+/i", page_range="2:", max_results=3)

        assert result == {"tool": "search"}
        impls["search"].assert_called_once_with(
            SearchPdfInput(source="doc.pdf", search_pattern="/rev\\w+/i", page_range="2:", max_results=3), config
        )

    def test_outline_wrapper_defaults(self):
        """Test the outline tool defaults."""
        impls = _impls()
        config = MCPConfig()
        create_server(config, impls).tools["get_pdf_outline"]("doc.pdf")

        impls["outline"].assert_called_once_with(GetPdfOutlineInput(source="doc.pdf"), config)

    def test_download_wrapper(self):
        """Test that the download tool passes the URL through."""
        impls = _impls()
        config = MCPConfig(disable_network=False)
        create_server(config, impls).tools["download_pdf"]("https://example.com/a.pdf")

        impls["download"].assert_called_once_with(DownloadPdfInput(url="https://example.com/a.pdf"), config)


class TestCreateServerDependencies:
    """Tests for the fastmcp dependency check."""

    def test_missing_fastmcp(self, capsys):
        """Test that a missing fastmcp raises DependencyError with install help."""
        error = DependencyError("mcp", [("fastmcp", ">=2.0.0")])
        with patch.object(server, "ensure_dependencies", side_effect=error):
            with pytest.raises(DependencyError):
                create_server(MCPConfig(), _impls())
        assert "pip install --upgrade" in capsys.readouterr().err


class TestMain:
    """Tests for the server entry point."""

    def test_invalid_allowlist(self, tmp_path, monkeypatch):
        """Test that a missing allowlist directory aborts startup."""
        monkeypatch.delenv("PDF_AGENT_MCP_ALLOWED_READ_DIRS", raising=False)
        with patch.object(server, "create_server") as mock_create:
            assert main(["--read-dirs", str(tmp_path / "missing")]) == 1
        mock_create.assert_not_called()

    def test_invalid_option(self):
        """Test that an out-of-range option aborts startup."""
        with patch.object(server, "create_server") as mock_create:
            assert main(["--context-chars", "1"]) == 1
        mock_create.assert_not_called()

    def test_runs_server(self, tmp_path, monkeypatch):
        """Test a normal start with network disabled."""
        monkeypatch.setenv("PDF_AGENT_DISABLE_NETWORK", "false")
        fake = MagicMock()
        with patch.object(server, "create_server", return_value=fake) as mock_create:
            assert main(["--read-dirs", str(tmp_path), "--disable-network"]) == 0

        config, impls = mock_create.call_args.args
        assert config.read_allowlist == [tmp_path.resolve()]
        assert set(impls) == {"metadata", "text", "search", "outline", "download"}
        assert os.environ["PDF_AGENT_DISABLE_NETWORK"] == "true"
        fake.run.assert_called_once_with()

    def test_allow_network_clears_kill_switch(self, tmp_path, monkeypatch):
        """Test that --allow-network removes the global kill switch."""
        monkeypatch.setenv("PDF_AGENT_DISABLE_NETWORK", "true")
        with patch.object(server, "create_server", return_value=MagicMock()):
            assert main(["--read-dirs", str(tmp_path), "--allow-network"]) == 0
        assert "PDF_AGENT_DISABLE_NETWORK" not in os.environ
