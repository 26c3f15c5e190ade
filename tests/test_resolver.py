"""
Tests for resolving untrusted paths under the storage root.

Tests cover:
- Download (read) resolution and its failure reasons
- Directory resolution for listing and uploads
- Confinement soundness over hostile inputs
- Relative path round trip
"""

import os

import pytest

from explorer.confinement import StoragePath, is_within
from explorer.errors import ErrorKind, Reason, Rejected
from explorer.policy import PolicyConfig
from explorer.resolver import (
    clean_path,
    is_blank,
    resolve_directory,
    resolve_for_read,
    resolve_for_write_dir,
)

POLICY = PolicyConfig()


@pytest.fixture
def root(tmp_path):
    """
    Tree:
        public/
            docs/
            a/b/c.txt
            report.pdf
            malware.exe
            Makefile
        secret.txt   (outside the root)
    """
    base = tmp_path / "public"
    (base / "docs").mkdir(parents=True)
    (base / "a" / "b").mkdir(parents=True)
    (base / "a" / "b" / "c.txt").write_text("c")
    (base / "report.pdf").write_bytes(b"%PDF-1.4")
    (base / "malware.exe").write_bytes(b"MZ\x90\x00")
    (base / "Makefile").write_text("all:")
    (tmp_path / "secret.txt").write_text("secret")
    return base


# ============================================================================
# READ RESOLUTION
# ============================================================================


def test_read_round_trip(root):
    """Test that a nested file resolves back to the same relative path."""
    result = resolve_for_read(root, "a/b/c.txt", POLICY)

    assert isinstance(result, StoragePath)
    assert result.relative == "a/b/c.txt"


def test_read_normalizes_backslashes(root):
    """Test that Windows-style separators are accepted."""
    result = resolve_for_read(root, "a\\b\\c.txt", POLICY)

    assert isinstance(result, StoragePath)
    assert result.relative == "a/b/c.txt"


def test_read_etc_passwd_is_outside_root(root):
    """Test the classic traversal probe."""
    result = resolve_for_read(root, "../../etc/passwd", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.OUTSIDE_ROOT
    assert result.kind is ErrorKind.CONFINEMENT


def test_read_sibling_secret_is_outside_root(root):
    """Test that a file next to the root cannot be read."""
    result = resolve_for_read(root, "../secret.txt", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.OUTSIDE_ROOT


def test_read_type_not_allowed(root):
    """Test that an existing file with a refused extension is refused."""
    result = resolve_for_read(root, "malware.exe", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.TYPE_NOT_ALLOWED
    assert result.kind is ErrorKind.POLICY


def test_read_no_extension(root):
    """Test that a file without extension is refused."""
    result = resolve_for_read(root, "Makefile", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.TYPE_NOT_ALLOWED


def test_read_directory_is_not_a_file(root):
    """Test that a directory cannot be downloaded."""
    result = resolve_for_read(root, "docs", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.NOT_A_FILE
    assert result.kind is ErrorKind.TYPE_MISMATCH


def test_read_missing_file(root):
    """Test that a missing file is NOT_FOUND."""
    result = resolve_for_read(root, "missing.pdf", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.NOT_FOUND


def test_read_input_errors(root):
    """Test that each validation stage reports its own reason."""
    assert resolve_for_read(root, "", POLICY).reason is Reason.EMPTY
    assert resolve_for_read(root, "..", POLICY).reason is Reason.EMPTY
    assert resolve_for_read(root, "a" * 501, POLICY).reason is Reason.TOO_LONG
    assert resolve_for_read(root, "café.pdf", POLICY).reason is Reason.INVALID_CHARACTERS
    assert resolve_for_read(root, "%2e%2e%2fsecret.txt", POLICY).reason is Reason.INVALID_CHARACTERS


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_read_symlink_escape(tmp_path, root):
    """Test that an allowed-looking symlink to an outside file is refused."""
    (root / "innocent.txt").symlink_to(tmp_path / "secret.txt")

    result = resolve_for_read(root, "innocent.txt", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.OUTSIDE_ROOT


# ============================================================================
# DIRECTORY RESOLUTION
# ============================================================================


def test_write_dir_existing(root):
    """Test that an existing directory resolves."""
    result = resolve_for_write_dir(root, "a/b/", POLICY)

    assert isinstance(result, StoragePath)
    assert result.relative == "a/b"


def test_write_dir_file_is_not_a_directory(root):
    """Test that a file cannot be used as a directory."""
    result = resolve_for_write_dir(root, "report.pdf", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.NOT_A_DIRECTORY


def test_write_dir_missing(root):
    """Test that a missing directory is NOT_FOUND (creation is separate)."""
    result = resolve_for_write_dir(root, "new", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.NOT_FOUND
    assert not (root / "new").exists()


def test_write_dir_blank_is_empty(root):
    """Test that the strict variant refuses blank input."""
    result = resolve_for_write_dir(root, "", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.EMPTY


def test_resolve_directory_blank_is_root(root):
    """Test that listing with no path lists the root."""
    for raw in (None, "", "/", "  "):
        result = resolve_directory(root, raw, POLICY)
        assert isinstance(result, StoragePath), raw
        assert result.is_root


def test_resolve_directory_subfolder(root):
    """Test listing a subfolder."""
    result = resolve_directory(root, "docs", POLICY)

    assert isinstance(result, StoragePath)
    assert result.relative == "docs"


def test_resolve_directory_traversal(root):
    """Test that the listing entry point is confined too."""
    result = resolve_directory(root, "../../tmp", POLICY)

    # sanitized to "//tmp", an absolute path outside the root
    assert isinstance(result, Rejected)
    assert result.reason is Reason.OUTSIDE_ROOT


def test_resolve_directory_only_parents_is_empty(root):
    """Test that input made only of ".." sanitizes to nothing."""
    result = resolve_directory(root, "../..", POLICY)

    assert isinstance(result, Rejected)
    assert result.reason is Reason.EMPTY


def test_is_blank():
    """Test blank detection."""
    assert is_blank(None)
    assert is_blank(" / ")
    assert not is_blank("docs")


def test_clean_path_trims_trailing_slash():
    """Test that "docs/" and "docs" are the same."""
    assert clean_path("docs/", POLICY) == "docs"
    assert clean_path("docs///", POLICY) == "docs"


# ============================================================================
# CONFINEMENT SOUNDNESS
# ============================================================================

HOSTILE_INPUTS = [
    "../../etc/passwd",
    "..\\..\\etc\\passwd",
    "%2e%2e%2fetc%2fpasswd",
    "/etc/passwd",
    "//etc/passwd",
    "....//....//etc/passwd",
    "..././..././etc/passwd",
    ".<.>/.<.>/etc/passwd",
    "a/b/../../../../etc/passwd",
    "\\\\server\\share\\x.txt",
    "a/\x00../../secret.txt",
    "../secret.txt",
    "./../secret.txt",
    ".../secret.txt",
]


@pytest.mark.parametrize("raw", HOSTILE_INPUTS)
def test_hostile_inputs_never_escape(root, raw):
    """Test that no hostile input yields a path outside the root."""
    for resolve in (resolve_for_read, resolve_for_write_dir, resolve_directory):
        result = resolve(root, raw, POLICY)
        if isinstance(result, StoragePath):
            assert is_within(root.resolve(), result.path)
        else:
            assert isinstance(result, Rejected)
