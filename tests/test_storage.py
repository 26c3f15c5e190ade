"""
Tests for filesystem primitives.

Tests cover:
- Exclusive create and its failure modes
- No partial files after a failed write
- stat_entry classification
"""

import os

import pytest

from explorer.errors import Reason, Rejected
from explorer.storage import EntryKind, create_exclusive, stat_entry

# ============================================================================
# EXCLUSIVE CREATE
# ============================================================================


def test_create_exclusive_writes_chunks(tmp_path):
    """Test a normal write."""
    target = tmp_path / "a.txt"

    written = create_exclusive(target, [b"hello ", b"world"])

    assert written == 11
    assert target.read_bytes() == b"hello world"


def test_create_exclusive_refuses_existing(tmp_path):
    """Test that an existing file is never overwritten."""
    target = tmp_path / "a.txt"
    target.write_bytes(b"original")

    result = create_exclusive(target, [b"intruder"])

    assert isinstance(result, Rejected)
    assert result.reason is Reason.ALREADY_EXISTS
    assert target.read_bytes() == b"original"


def test_create_exclusive_size_limit(tmp_path):
    """Test that an oversized stream leaves nothing behind."""
    target = tmp_path / "big.bin"

    result = create_exclusive(target, [b"x" * 6, b"x" * 6], max_bytes=10)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.FILE_TOO_LARGE
    assert not target.exists()


def test_create_exclusive_exact_limit(tmp_path):
    """Test that exactly max_bytes is accepted."""
    target = tmp_path / "fit.bin"

    assert create_exclusive(target, [b"x" * 10], max_bytes=10) == 10


def test_create_exclusive_stream_error_reraised(tmp_path):
    """Test that a failing upload stream propagates and cleans up."""
    target = tmp_path / "broken.txt"

    def chunks():
        yield b"partial"
        raise ConnectionResetError("client went away")

    with pytest.raises(ConnectionResetError):
        create_exclusive(target, chunks())

    assert not target.exists()


def test_create_exclusive_missing_parent(tmp_path):
    """Test that an unwritable destination is a storage error."""
    result = create_exclusive(tmp_path / "nope" / "a.txt", [b"x"])

    assert isinstance(result, Rejected)
    assert result.reason is Reason.STORAGE_ERROR
    assert result.detail == "ENOENT"


# ============================================================================
# STAT
# ============================================================================


def test_stat_entry_kinds(tmp_path):
    """Test file and directory classification."""
    (tmp_path / "d").mkdir()
    (tmp_path / "f.txt").write_bytes(b"abc")

    assert stat_entry(tmp_path / "d").kind is EntryKind.DIRECTORY
    info = stat_entry(tmp_path / "f.txt")
    assert info.kind is EntryKind.FILE
    assert info.size == 3


def test_stat_entry_missing(tmp_path):
    """Test that a vanished entry is None."""
    assert stat_entry(tmp_path / "gone") is None


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="fifos unavailable")
def test_stat_entry_special_file(tmp_path):
    """Test that fifos are OTHER."""
    os.mkfifo(tmp_path / "pipe")
    assert stat_entry(tmp_path / "pipe").kind is EntryKind.OTHER
