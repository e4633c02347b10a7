"""Unit tests for search pattern compilation."""

import pytest
import regex

from pdf_agent.core.pattern import LiteralPattern, RegexPattern, compile_pattern
from pdf_agent.exceptions import InvalidPatternError, ValidationError


def _found(pattern, text):
    return [m.group(0) for m in compile_pattern(pattern).finditer(text)]


@pytest.mark.unit
class TestLiteralPatterns:
    """Tests for plain-text patterns."""

    def test_literal_is_case_insensitive(self):
        """Test that literal text matches regardless of case."""
        assert _found("revenue", "Revenue and REVENUE and revenue") == ["Revenue", "REVENUE", "revenue"]

    def test_literal_escapes_metacharacters(self):
        """Test that regex metacharacters match themselves."""
        assert _found("a.b", "a.b axb") == ["a.b"]
        assert _found("(1+1)", "is (1+1) = 2") == ["(1+1)"]

    def test_literal_variant(self):
        """Test the compiled variant for literal text."""
        compiled = compile_pattern("total")
        assert isinstance(compiled, LiteralPattern)
        assert compiled.is_regex is False
        assert compiled.text == "total"

    def test_single_slash_is_literal(self):
        """Test that text without a closing slash is literal."""
        assert isinstance(compile_pattern("/etc"), LiteralPattern)
        assert _found("and/or", "this and/or that") == ["and/or"]

    def test_empty_wrapper_is_literal(self):
        """Test that '//' has no body and is searched literally."""
        assert isinstance(compile_pattern("//"), LiteralPattern)


@pytest.mark.unit
class TestRegexPatterns:
    """Tests for /body/flags patterns."""

    def test_regex_without_flags_is_case_sensitive(self):
        """Test that regexes without 'i' are case-sensitive."""
        assert _found("/Revenue/", "Revenue revenue") == ["Revenue"]

    def test_regex_i_flag(self):
        """Test the case-insensitive flag."""
        assert _found("/revenue/i", "Revenue REVENUE") == ["Revenue", "REVENUE"]

    def test_regex_variant(self):
        """Test the compiled variant for wrapped patterns."""
        compiled = compile_pattern(r"/\d+/gi")
        assert isinstance(compiled, RegexPattern)
        assert compiled.is_regex is True
        assert compiled.body == r"\d+"
        assert compiled.flags == "gi"
        assert compiled.regex.flags & regex.IGNORECASE

    def test_regex_m_flag(self):
        """Test multi-line anchors."""
        assert _found("/^b/m", "a\nb\nb") == ["b", "b"]
        assert _found("/^b/", "a\nb") == []

    def test_regex_s_flag(self):
        """Test dot matching newlines."""
        assert _found("/a.b/s", "a\nb") == ["a\nb"]
        assert _found("/a.b/", "a\nb") == []

    @pytest.mark.parametrize("flags", ["g", "u", "gu"])
    def test_compatibility_flags_accepted(self, flags):
        """Test that g and u are accepted and have no effect."""
        assert _found(f"/ab/{flags}", "ab AB ab") == ["ab", "ab"]

    def test_body_may_contain_slashes(self):
        """Test that the body extends to the last slash."""
        assert _found("/a/b/", "xa/by") == ["a/b"]

    def test_greedy_repetition_on_page_text(self):
        """Test a typical regex over page text."""
        assert _found(r"/\d+ percent/", "grew by 12 percent and 3 percent") == ["12 percent", "3 percent"]


@pytest.mark.unit
class TestPatternErrors:
    """Tests for pattern compilation failures."""

    def test_empty_pattern(self):
        """Test that an empty pattern is rejected."""
        with pytest.raises(InvalidPatternError, match="cannot be empty"):
            compile_pattern("")

    def test_invalid_regex_body(self):
        """Test that an uncompilable body raises with the pattern attached."""
        with pytest.raises(InvalidPatternError, match="Invalid search pattern") as exc_info:
            compile_pattern("/a(/")
        assert exc_info.value.pattern == "/a(/"
        assert isinstance(exc_info.value.original_error, regex.error)

    def test_sticky_flag_rejected(self):
        """Test that the unsupported y flag is rejected."""
        with pytest.raises(InvalidPatternError, match="unsupported flag 'y'"):
            compile_pattern("/abc/y")

    def test_duplicate_flags_rejected(self):
        """Test that repeated flags are rejected."""
        with pytest.raises(InvalidPatternError, match="duplicate flags"):
            compile_pattern("/abc/ii")

    def test_pattern_error_is_validation_error(self):
        """Test the exception hierarchy."""
        assert issubclass(InvalidPatternError, ValidationError)
