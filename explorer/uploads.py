"""
Upload flow: confined target directory, reserved name, exclusive write.

Order of operations:
1. Sanitize the client filename (Mode.NAME), validate it, check its extension
2. Confine the target directory, creating it if missing (explicit step)
3. Reserve a collision-free name (naming.reserve)
4. Write with O_EXCL (storage.create_exclusive), bounded by max_upload_bytes

Design decisions:
- Steps 3-4 are retried together a few times (tenacity) when the write loses
  the check-then-create race to a concurrent upload of the same name
- A failed upload never leaves a file behind; a created directory stays
- The raw filename and directory field are never logged
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random

from .confinement import StoragePath, confine
from .errors import Reason, Rejected
from .naming import reserve_destination
from .policy import PolicyConfig
from .resolver import clean_path, is_blank
from .sanitizer import Mode, sanitize
from .storage import create_exclusive
from .validator import check

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
CONFLICT_ATTEMPTS = 3


class NameConflict(Exception):
    """The reserved name was taken before the exclusive create."""


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a stored upload."""

    final_name: str
    relative_path: str
    size_bytes: int


def iter_chunks(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a binary stream in chunks until EOF."""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


def ensure_upload_directory(root: str | os.PathLike, raw_dir: str | None, policy: PolicyConfig) -> StoragePath | Rejected:
    """
    Confine the client's target directory and create it if missing.

    Args:
        root: Upload root
        raw_dir: Optional target-directory form field ("" means the root)
        policy: Process policy

    Returns:
        StoragePath of an existing directory inside the root, or Rejected
    """
    if is_blank(raw_dir):
        return confine(root, "")

    cleaned = clean_path(raw_dir, policy)
    if isinstance(cleaned, Rejected):
        return cleaned

    planned = confine(root, cleaned, must_exist=False)
    if isinstance(planned, Rejected):
        return planned
    if planned.path.exists() and not planned.path.is_dir():
        return Rejected(Reason.NOT_A_DIRECTORY)

    try:
        planned.path.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError):
        return Rejected(Reason.NOT_A_DIRECTORY)
    except OSError as e:
        logger.warning(
            "Could not create upload directory",
            extra={"error_code": "MKDIR_ERROR", "errno": e.errno},
        )
        return Rejected(Reason.STORAGE_ERROR, type(e).__name__)

    # Resolve again: the directory now exists and may have been swapped
    created = confine(root, cleaned)
    if isinstance(created, Rejected):
        return created
    if not created.path.is_dir():
        return Rejected(Reason.NOT_A_DIRECTORY)
    return created


@retry(
    retry=retry_if_exception_type(NameConflict),
    stop=stop_after_attempt(CONFLICT_ATTEMPTS),
    wait=wait_random(min=0, max=0.05),
    reraise=True,
)
def _reserve_and_write(
    directory: StoragePath,
    name: str,
    chunks: Iterable[bytes],
    policy: PolicyConfig,
) -> UploadResult | Rejected:
    destination = reserve_destination(directory, name, policy)
    if isinstance(destination, Rejected):
        return destination

    written = create_exclusive(destination.path, chunks, policy.max_upload_bytes)
    if isinstance(written, Rejected):
        if written.reason is Reason.ALREADY_EXISTS:
            raise NameConflict(destination.final_name)
        return written

    return UploadResult(
        final_name=destination.final_name,
        relative_path=destination.relative_path,
        size_bytes=written,
    )


def save_upload(
    root: str | os.PathLike,
    raw_dir: str | None,
    client_filename: str | None,
    chunks: Iterable[bytes],
    policy: PolicyConfig,
) -> UploadResult | Rejected:
    """
    Store one uploaded file under *root*.

    Args:
        root: Upload root
        raw_dir: Target-directory form field, may be blank
        client_filename: Filename as sent by the client
        chunks: Upload body as byte chunks (see iter_chunks)
        policy: Process policy

    Returns:
        UploadResult, or Rejected. ALREADY_EXISTS means the name kept
        colliding with concurrent uploads and the caller may retry.
    """
    name = sanitize(client_filename, Mode.NAME)
    reason = check(name, Mode.NAME, policy.max_name_length)
    if reason is not None:
        return Rejected(reason)
    if not policy.extensions.is_allowed(name):
        return Rejected(Reason.TYPE_NOT_ALLOWED)

    directory = ensure_upload_directory(root, raw_dir, policy)
    if isinstance(directory, Rejected):
        return directory

    try:
        result = _reserve_and_write(directory, name, chunks, policy)
    except NameConflict:
        logger.warning(
            "Upload name kept colliding",
            extra={"error_code": "UPLOAD_CONFLICT", "attempts": CONFLICT_ATTEMPTS},
        )
        return Rejected(Reason.ALREADY_EXISTS)

    if isinstance(result, UploadResult):
        logger.info(
            "Stored upload",
            extra={"size_bytes": result.size_bytes, "renamed": result.final_name != name},
        )
    return result
