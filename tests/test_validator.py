"""
Tests for path and filename validation.
"""

from explorer.errors import Reason
from explorer.sanitizer import Mode
from explorer.validator import check, is_valid


def test_valid_path():
    """Test a normal relative path."""
    assert check("reports/2024/q3.pdf", Mode.PATH) is None


def test_valid_name():
    """Test a normal filename."""
    assert check("q3-report_v2.pdf", Mode.NAME) is None


def test_spaces_allowed_in_both_modes():
    """Test that literal spaces are accepted for paths and names."""
    assert is_valid("Q3 report.pdf", Mode.NAME)
    assert is_valid("annual reports/Q3 report.pdf", Mode.PATH)


def test_slash_refused_in_name_mode():
    """Test that a filename may not contain "/"."""
    assert check("dir/a.txt", Mode.NAME) is Reason.INVALID_CHARACTERS
    assert check("dir/a.txt", Mode.PATH) is None


def test_empty_refused():
    """Test empty and None input."""
    assert check("", Mode.PATH) is Reason.EMPTY
    assert check(None, Mode.NAME) is Reason.EMPTY


def test_length_limit():
    """Test the maximum length boundary."""
    assert check("a" * 500, Mode.NAME) is None
    assert check("a" * 501, Mode.NAME) is Reason.TOO_LONG
    assert check("a" * 11, Mode.NAME, max_length=10) is Reason.TOO_LONG


def test_non_ascii_refused():
    """Test that non-ASCII letters are refused."""
    assert check("café.txt", Mode.NAME) is Reason.INVALID_CHARACTERS


def test_other_whitespace_refused():
    """Test that tabs and newlines are refused."""
    assert not is_valid("a\tb.txt", Mode.NAME)
    assert not is_valid("a\nb.txt", Mode.PATH)


def test_encoded_traversal_refused():
    """Test that percent-encoded input is refused."""
    assert check("%2e%2e%2f", Mode.PATH) is Reason.INVALID_CHARACTERS


def test_leftover_parent_sequence_refused():
    """Test that ".." is refused even if the sanitizer was skipped."""
    assert check("a/../b", Mode.PATH) is Reason.INVALID_CHARACTERS
    assert check("..", Mode.NAME) is Reason.INVALID_CHARACTERS


def test_backslash_refused():
    """Test that backslashes never validate."""
    assert not is_valid("a\\b", Mode.PATH)
    assert not is_valid("a\\b", Mode.NAME)
