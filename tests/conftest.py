"""Pytest configuration and shared fixtures for the pdf_agent test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import os
from pathlib import Path

import pytest

# Configure Hypothesis for property-based testing
from hypothesis import Verbosity, settings

settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=50)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")


@pytest.fixture
def search_pdf_bytes() -> bytes:
    """Five-page report with metadata and known text on every page."""
    from fixtures.generators.pdf_test_fixtures import create_search_pdf_bytes

    return create_search_pdf_bytes()


@pytest.fixture
def search_pdf_path(tmp_path: Path, search_pdf_bytes: bytes) -> Path:
    """The five-page report written to a temporary file."""
    from fixtures.generators.pdf_test_fixtures import write_pdf

    return write_pdf(tmp_path / "report.pdf", search_pdf_bytes)


@pytest.fixture
def outline_pdf_path(tmp_path: Path) -> Path:
    """The five-page report with a three-level outline."""
    from fixtures.generators.pdf_test_fixtures import create_outline_pdf_bytes, write_pdf

    return write_pdf(tmp_path / "outline.pdf", create_outline_pdf_bytes())


@pytest.fixture
def encrypted_pdf_path(tmp_path: Path) -> Path:
    """A password-protected PDF (user password ``secret``)."""
    from fixtures.generators.pdf_test_fixtures import create_encrypted_pdf_bytes, write_pdf

    return write_pdf(tmp_path / "locked.pdf", create_encrypted_pdf_bytes())


@pytest.fixture
def no_network_env(monkeypatch):
    """Ensure the global network kill switch is not set."""
    monkeypatch.delenv("PDF_AGENT_DISABLE_NETWORK", raising=False)
