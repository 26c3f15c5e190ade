"""
Filesystem primitives used by the listing and upload flows.

Design decisions:
- stat_entry() folds every per-entry failure into None: a child that vanished
  or became unreadable is simply not there
- create_exclusive() opens with "xb" (O_CREAT | O_EXCL): a concurrent writer
  that picked the same name fails with ALREADY_EXISTS instead of overwriting
- A failed write never leaves a partial file behind

Limitations:
- No locking, no retries; callers decide how to react to ALREADY_EXISTS
"""

from __future__ import annotations

import errno
import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from .errors import Reason, Rejected

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class EntryStat:
    """Subset of stat() the core cares about."""

    kind: EntryKind
    size: int
    mtime: float


def _errno_name(e: OSError) -> str:
    return errno.errorcode.get(e.errno or 0, type(e).__name__)


def stat_entry(path: str | os.PathLike) -> EntryStat | None:
    """
    Stat *path*, following symlinks.

    Returns:
        EntryStat, or None if the entry is gone or cannot be stat'ed
    """
    try:
        st = os.stat(path)
    except (OSError, ValueError):
        return None
    if stat.S_ISDIR(st.st_mode):
        kind = EntryKind.DIRECTORY
    elif stat.S_ISREG(st.st_mode):
        kind = EntryKind.FILE
    else:
        kind = EntryKind.OTHER
    return EntryStat(kind=kind, size=st.st_size, mtime=st.st_mtime)


def list_children(path: str | os.PathLike) -> list[str]:
    """Names of the immediate children of *path*. Raises OSError."""
    return os.listdir(path)


def resolve_canonical(path: str | os.PathLike) -> Path:
    """Absolute path with symlinks resolved. Raises OSError if missing."""
    return Path(path).resolve(strict=True)


def _discard(path: str | os.PathLike) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning(
            "Could not remove partial upload",
            extra={"error_code": "PARTIAL_CLEANUP_ERROR"},
        )


def create_exclusive(
    path: str | os.PathLike,
    chunks: Iterable[bytes],
    max_bytes: int | None = None,
) -> int | Rejected:
    """
    Create *path* and write *chunks* into it, failing if it already exists.

    Args:
        path: Destination; must not exist yet
        chunks: Byte chunks of the upload stream
        max_bytes: Abort with FILE_TOO_LARGE once more than this was received

    Returns:
        Number of bytes written, or Rejected (ALREADY_EXISTS, FILE_TOO_LARGE,
        STORAGE_ERROR). On failure the destination does not exist afterwards.
    """
    try:
        fh = open(path, "xb")
    except FileExistsError:
        return Rejected(Reason.ALREADY_EXISTS)
    except OSError as e:
        return Rejected(Reason.STORAGE_ERROR, _errno_name(e))

    written = 0
    failure: Rejected | None = None
    try:
        with fh:
            for chunk in chunks:
                written += len(chunk)
                if max_bytes is not None and written > max_bytes:
                    failure = Rejected(Reason.FILE_TOO_LARGE)
                    break
                fh.write(chunk)
    except OSError as e:
        failure = Rejected(Reason.STORAGE_ERROR, _errno_name(e))
    except BaseException:
        _discard(path)
        raise

    if failure is not None:
        _discard(path)
        return failure
    return written
