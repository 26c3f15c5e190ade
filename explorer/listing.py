"""
Directory listing with per-entry policy filtering.

Design decisions:
- Non-recursive: one call lists the immediate children of one directory
- Directories are always shown; files only when their name passes the
  NAME validator and the extension allow-list
- Per-entry failures drop the entry, never the listing: a child deleted
  between listdir() and stat() simply does not appear
- Symlinked children whose target escapes the root are dropped, since
  resolve_for_read() would refuse them anyway
- Bounded fan-out: stats run on a small thread pool, results keep
  enumeration order (no sorting, callers sort if they need to)

The only wholesale failure is the enumeration of the directory itself,
returned as ListError.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone

from .confinement import StoragePath, is_within
from .errors import ListError
from .policy import PolicyConfig, extension_of
from .sanitizer import Mode, sanitize
from .storage import EntryKind, list_children, resolve_canonical, stat_entry
from .validator import is_valid

logger = logging.getLogger(__name__)

NO_EXTENSION = "FILE"


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One child of a listed directory.

    size_bytes, modified_at and extension are None for directories.
    """

    name: str
    relative_path: str
    kind: EntryKind
    size_bytes: int | None = None
    modified_at: datetime | None = None
    extension: str | None = None

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


def join_relative(parent: str, name: str) -> str:
    """Join a parent relative path and a child name with "/"."""
    return f"{parent}/{name}" if parent else name


def _file_is_listable(name: str, policy: PolicyConfig) -> bool:
    cleaned = sanitize(name, Mode.NAME)
    return is_valid(cleaned, Mode.NAME, policy.max_name_length) and policy.extensions.is_allowed(cleaned)


def _escapes_root(child: str, root) -> bool:
    if not os.path.islink(child):
        return False
    try:
        target = resolve_canonical(child)
    except (OSError, RuntimeError):
        return True
    return not is_within(root, target)


def _build_entry(directory: StoragePath, name: str, policy: PolicyConfig) -> DirectoryEntry | None:
    child = os.path.join(directory.path, name)
    info = stat_entry(child)
    if info is None or info.kind is EntryKind.OTHER:
        return None
    if _escapes_root(child, directory.root):
        return None

    relative = join_relative(directory.relative, name)
    if info.kind is EntryKind.DIRECTORY:
        return DirectoryEntry(name=name, relative_path=relative, kind=EntryKind.DIRECTORY)

    if not _file_is_listable(name, policy):
        return None
    ext = extension_of(name)
    return DirectoryEntry(
        name=name,
        relative_path=relative,
        kind=EntryKind.FILE,
        size_bytes=info.size,
        modified_at=datetime.fromtimestamp(info.mtime, tz=timezone.utc),
        extension=ext.upper() if ext else NO_EXTENSION,
    )


def list_directory(directory: StoragePath, policy: PolicyConfig) -> list[DirectoryEntry] | ListError:
    """
    List the immediate children of a confined directory.

    Args:
        directory: Confined directory (from resolve_directory)
        policy: Process policy (extension allow-list, name length, pool size)

    Returns:
        Entries in enumeration order, or ListError if the directory
        itself could not be read
    """
    try:
        names = list_children(directory.path)
    except OSError as e:
        logger.warning(
            "Directory enumeration failed",
            extra={"error_code": "LIST_ERROR", "errno": e.errno},
        )
        return ListError(detail=type(e).__name__)

    if policy.listing_workers <= 1 or len(names) <= 1:
        built = [_build_entry(directory, n, policy) for n in names]
    else:
        workers = min(policy.listing_workers, len(names))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="listing") as pool:
            built = list(pool.map(lambda n: _build_entry(directory, n, policy), names))

    entries = [e for e in built if e is not None]
    logger.debug(
        "Listed directory",
        extra={"total": len(names), "shown": len(entries)},
    )
    return entries
