"""Unit tests for logging setup."""

import io
import logging

import pytest

from pdf_agent.logging_utils import configure_logging, resolve_log_level


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    httpx_level = logging.getLogger("httpx").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


@pytest.mark.unit
class TestResolveLogLevel:
    """Tests for level name translation."""

    def test_names_and_numbers(self):
        """Test names in any case and numeric levels."""
        assert resolve_log_level("debug") == logging.DEBUG
        assert resolve_log_level(" Warning ") == logging.WARNING
        assert resolve_log_level(logging.ERROR) == logging.ERROR

    def test_unknown_name(self):
        """Test that unknown names fall back to INFO."""
        assert resolve_log_level("chatty") == logging.INFO


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for root logger configuration."""

    def test_single_handler(self):
        """Test that repeated calls do not stack handlers."""
        configure_logging("INFO", stream=io.StringIO())
        root = configure_logging("WARNING", stream=io.StringIO())

        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_plain_format(self):
        """Test the CLI message format."""
        stream = io.StringIO()
        configure_logging("INFO", stream=stream)

        logging.getLogger("pdf_agent.test").info("hello")

        assert stream.getvalue() == "INFO: hello\n"

    def test_trace_format(self):
        """Test that trace mode adds the logger name."""
        stream = io.StringIO()
        configure_logging("DEBUG", trace_mode=True, stream=stream)

        logging.getLogger("pdf_agent.test").debug("traced")

        assert "[DEBUG] [pdf_agent.test] traced" in stream.getvalue()

    def test_http_client_logs_quieted(self):
        """Test that HTTP client request logs are hidden unless debugging."""
        configure_logging("INFO", stream=io.StringIO())
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging("DEBUG", stream=io.StringIO())
        assert logging.getLogger("httpx").level == logging.DEBUG
