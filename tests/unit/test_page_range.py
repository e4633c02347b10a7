"""Unit tests for page range resolution."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pdf_agent.core.page_range import resolve_page_range
from pdf_agent.exceptions import InvalidRangeError, PageRangeError, RangeErrorReason, ValidationError


@pytest.mark.unit
class TestResolvePageRange:
    """Tests for valid page range expressions."""

    def test_single_page(self):
        """Test a single page number."""
        assert resolve_page_range("3", 10) == [3]

    def test_closed_range(self):
        """Test an inclusive start:end range."""
        assert resolve_page_range("1:5", 10) == [1, 2, 3, 4, 5]

    def test_open_end(self):
        """Test that an omitted end runs to the last page."""
        assert resolve_page_range("2:", 4) == [2, 3, 4]

    def test_open_start(self):
        """Test that an omitted start begins at page 1."""
        assert resolve_page_range(":3", 10) == [1, 2, 3]

    def test_bare_colon_selects_all(self):
        """Test that ':' selects every page."""
        assert resolve_page_range(":", 4) == [1, 2, 3, 4]

    def test_default_expression_selects_all(self):
        """Test the default '1:' expression."""
        assert resolve_page_range("1:", 3) == [1, 2, 3]

    def test_list_of_pages(self):
        """Test comma-separated pages."""
        assert resolve_page_range("1,3,5", 10) == [1, 3, 5]

    def test_mixed_segments_sorted_and_deduplicated(self):
        """Test overlapping segments give ascending unique pages."""
        assert resolve_page_range("5,1:3,2", 10) == [1, 2, 3, 5]

    def test_end_clamped_to_total_pages(self):
        """Test that an end past the document is clamped."""
        assert resolve_page_range("2:100", 5) == [2, 3, 4, 5]

    def test_whitespace_and_empty_segments_ignored(self):
        """Test surrounding whitespace and empty segments are skipped."""
        assert resolve_page_range(" 1 , , 3 ", 5) == [1, 3]

    def test_trailing_garbage_after_digits_ignored(self):
        """Test lenient integer parsing reads leading digits."""
        assert resolve_page_range("3abc", 5) == [3]

    def test_extra_colon_segments_ignored(self):
        """Test that only the first two colon-separated fields are used."""
        assert resolve_page_range("2:4:9", 10) == [2, 3, 4]


@pytest.mark.unit
class TestResolvePageRangeErrors:
    """Tests for invalid page range expressions."""

    @pytest.mark.parametrize("expression", ["", "   "])
    def test_empty_expression(self, expression):
        """Test that an empty expression is rejected."""
        with pytest.raises(PageRangeError, match="Page range cannot be empty") as exc_info:
            resolve_page_range(expression, 5)
        assert exc_info.value.reason is RangeErrorReason.EMPTY_RANGE

    def test_only_commas(self):
        """Test that an expression of only separators is rejected."""
        with pytest.raises(PageRangeError, match="empty after parsing") as exc_info:
            resolve_page_range(", ,", 5)
        assert exc_info.value.reason is RangeErrorReason.EMPTY_RANGE

    @pytest.mark.parametrize("segment", ["0", "6", "abc", "-1"])
    def test_invalid_single_page(self, segment):
        """Test out-of-range or non-numeric single pages."""
        with pytest.raises(PageRangeError) as exc_info:
            resolve_page_range(segment, 5)
        error = exc_info.value
        assert error.reason is RangeErrorReason.INVALID_PAGE_NUMBER
        assert error.segment == segment
        assert f"Invalid segment '{segment}'" in error.message
        assert "Must be between 1 and 5" in error.message

    @pytest.mark.parametrize("segment", ["\u0663", "\uff13", "\u0663:5"])
    def test_non_ascii_digits_rejected(self, segment):
        """Test that only ASCII digits are read as page numbers."""
        with pytest.raises(PageRangeError) as exc_info:
            resolve_page_range(segment, 5)
        assert exc_info.value.reason in (RangeErrorReason.INVALID_PAGE_NUMBER, RangeErrorReason.INVALID_START)

    def test_invalid_start(self):
        """Test a non-positive start page."""
        with pytest.raises(PageRangeError, match="Invalid start page") as exc_info:
            resolve_page_range("0:3", 5)
        assert exc_info.value.reason is RangeErrorReason.INVALID_START

    def test_invalid_end(self):
        """Test a non-numeric end page."""
        with pytest.raises(PageRangeError, match="Invalid end page") as exc_info:
            resolve_page_range("1:x", 5)
        assert exc_info.value.reason is RangeErrorReason.INVALID_END

    def test_inverted_range(self):
        """Test a start greater than the end."""
        with pytest.raises(PageRangeError, match="Start page 5 cannot be greater than end page 2") as exc_info:
            resolve_page_range("5:2", 10)
        assert exc_info.value.reason is RangeErrorReason.RANGE_INVERTED

    def test_start_beyond_document(self):
        """Test a range that starts after the last page."""
        with pytest.raises(PageRangeError, match="exceeds total pages 5") as exc_info:
            resolve_page_range("6:10", 5)
        assert exc_info.value.reason is RangeErrorReason.RANGE_OUT_OF_BOUNDS

    def test_first_bad_segment_aborts(self):
        """Test that valid segments do not rescue a later invalid one."""
        with pytest.raises(PageRangeError, match="Invalid segment '9'"):
            resolve_page_range("1:2,9,3", 5)

    def test_zero_total_pages(self):
        """Test that a document without pages is rejected."""
        with pytest.raises(ValidationError, match="at least one page"):
            resolve_page_range("1:", 0)

    def test_range_error_is_validation_error(self):
        """Test the exception hierarchy and alias."""
        assert InvalidRangeError is PageRangeError
        assert issubclass(PageRangeError, ValidationError)


@pytest.mark.unit
class TestResolvePageRangeProperties:
    """Property-based tests for page range resolution."""

    @given(
        total=st.integers(min_value=1, max_value=200),
        segments=st.lists(
            st.tuples(st.integers(min_value=1, max_value=200), st.integers(min_value=0, max_value=50)),
            min_size=1,
            max_size=8,
        ),
    )
    def test_result_sorted_unique_and_in_bounds(self, total, segments):
        """Test that any accepted expression yields sorted, unique, in-bounds pages."""
        expression = ",".join(f"{start}:{start + length}" for start, length in segments)
        try:
            pages = resolve_page_range(expression, total)
        except PageRangeError:
            return
        assert pages == sorted(set(pages))
        assert all(1 <= page <= total for page in pages)

    @given(total=st.integers(min_value=1, max_value=500))
    def test_full_range_matches_page_count(self, total):
        """Test that '1:' selects exactly every page."""
        assert resolve_page_range("1:", total) == list(range(1, total + 1))

    @given(total=st.integers(min_value=1, max_value=100), page=st.integers(min_value=1, max_value=100))
    def test_single_page_in_bounds(self, total, page):
        """Test a lone page is accepted exactly when it exists."""
        if page <= total:
            assert resolve_page_range(str(page), total) == [page]
        else:
            with pytest.raises(PageRangeError):
                resolve_page_range(str(page), total)
