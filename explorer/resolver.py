"""
Resolve untrusted client paths under a storage root.

Pipeline (each stage short-circuits with its own Reason):
1. sanitize (Mode.PATH)       -> strip dangerous characters and ".."
2. trim trailing "/"          -> "docs/" and "docs" name the same directory
3. validate (Mode.PATH)       -> EMPTY, TOO_LONG, INVALID_CHARACTERS
4. confine                    -> OUTSIDE_ROOT, NOT_FOUND
5. kind / extension checks    -> NOT_A_FILE, TYPE_NOT_ALLOWED, NOT_A_DIRECTORY

Used by both the download flow (resolve_for_read) and the listing/upload
flows (resolve_directory, resolve_for_write_dir).
"""

from __future__ import annotations

import os

from .confinement import StoragePath, confine
from .errors import Reason, Rejected
from .policy import PolicyConfig
from .sanitizer import Mode, sanitize
from .validator import check


def clean_path(raw: str | None, policy: PolicyConfig) -> str | Rejected:
    """Stages 1-3: the sanitized, trimmed, validated path or why it was refused."""
    cleaned = sanitize(raw, Mode.PATH).rstrip("/")
    reason = check(cleaned, Mode.PATH, policy.max_name_length)
    if reason is not None:
        return Rejected(reason)
    return cleaned


def is_blank(raw: str | None) -> bool:
    """True for input that names the root itself ("", "/", "  ")."""
    return not (raw or "").strip().strip("/")


def resolve_for_read(root: str | os.PathLike, raw: str | None, policy: PolicyConfig) -> StoragePath | Rejected:
    """
    Resolve a file a client wants to download.

    Args:
        root: Storage root
        raw: Decoded URL path or form value, e.g. "reports/2024/q3.pdf"
        policy: Process policy

    Returns:
        StoragePath of an existing, allowed regular file, or Rejected
    """
    cleaned = clean_path(raw, policy)
    if isinstance(cleaned, Rejected):
        return cleaned

    confined = confine(root, cleaned)
    if isinstance(confined, Rejected):
        return confined

    if not confined.path.is_file():
        return Rejected(Reason.NOT_A_FILE)
    if not policy.extensions.is_allowed(confined.path.name):
        return Rejected(Reason.TYPE_NOT_ALLOWED)
    return confined


def resolve_for_write_dir(root: str | os.PathLike, raw: str | None, policy: PolicyConfig) -> StoragePath | Rejected:
    """
    Resolve an existing directory named by the client.

    Returns:
        StoragePath of an existing directory, or Rejected
    """
    cleaned = clean_path(raw, policy)
    if isinstance(cleaned, Rejected):
        return cleaned

    confined = confine(root, cleaned)
    if isinstance(confined, Rejected):
        return confined

    if not confined.path.is_dir():
        return Rejected(Reason.NOT_A_DIRECTORY)
    return confined


def resolve_directory(root: str | os.PathLike, raw: str | None, policy: PolicyConfig) -> StoragePath | Rejected:
    """Like resolve_for_write_dir(), but blank input means the root itself."""
    if is_blank(raw):
        return confine(root, "")
    return resolve_for_write_dir(root, raw, policy)
