"""
Collision-free names for uploaded files.

Design decisions:
- Deterministic suffixing: "report.pdf" -> "report_1.pdf" -> "report_2.pdf"
- The suffix goes before the last extension only ("a.tar.gz" -> "a.tar_1.gz")
- Bounded: after max_suffix_attempts the upload is refused with
  NAME_EXHAUSTED instead of probing forever
- Reserve, don't create: this module never touches the filesystem except
  for existence checks

Race (check-then-create):
- Two uploads of the same name can both see "free" here. The write in
  storage.create_exclusive() uses O_EXCL, so the second one fails with
  ALREADY_EXISTS instead of overwriting; uploads.py retries the pair.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .confinement import StoragePath
from .errors import Reason, Rejected
from .policy import PolicyConfig
from .sanitizer import Mode, sanitize
from .validator import check


@dataclass(frozen=True)
class UploadDestination:
    """Confined directory plus the collision-resolved file name."""

    directory: StoragePath
    final_name: str

    @property
    def path(self) -> Path:
        return self.directory.path / self.final_name

    @property
    def relative_path(self) -> str:
        parent = self.directory.relative
        return f"{parent}/{self.final_name}" if parent else self.final_name


def split_name(name: str) -> tuple[str, str]:
    """
    Split a filename at its last dot.

    Returns:
        (stem, ext) where ext keeps its dot, e.g. ("report", ".pdf")
    """
    idx = name.rfind(".")
    if idx <= 0:
        return name, ""
    return name[:idx], name[idx:]


def _taken(directory: StoragePath, name: str) -> bool:
    # lexists: a dangling symlink would still make O_EXCL fail
    return os.path.lexists(directory.path / name)


def reserve(directory: StoragePath, client_name: str, policy: PolicyConfig) -> str | Rejected:
    """
    Pick a free file name in *directory*.

    Args:
        directory: Confined upload directory
        client_name: Filename already sanitized in Mode.NAME
        policy: Process policy

    Returns:
        The final file name, or Rejected (INVALID_NAME, TYPE_NOT_ALLOWED,
        TOO_LONG, NAME_EXHAUSTED)
    """
    if sanitize(client_name, Mode.NAME) != client_name:
        return Rejected(Reason.INVALID_NAME, "unsanitized")
    if check(client_name, Mode.NAME, policy.max_name_length) is not None:
        return Rejected(Reason.INVALID_NAME)
    if not policy.extensions.is_allowed(client_name):
        return Rejected(Reason.TYPE_NOT_ALLOWED)

    if not _taken(directory, client_name):
        return client_name

    stem, ext = split_name(client_name)
    for n in range(1, policy.max_suffix_attempts + 1):
        candidate = f"{stem}_{n}{ext}"
        if len(candidate) > policy.max_name_length:
            return Rejected(Reason.TOO_LONG, "suffixed")
        if not _taken(directory, candidate):
            return candidate

    return Rejected(Reason.NAME_EXHAUSTED)


def reserve_destination(directory: StoragePath, client_name: str, policy: PolicyConfig) -> UploadDestination | Rejected:
    """reserve(), wrapped with its directory."""
    name = reserve(directory, client_name, policy)
    if isinstance(name, Rejected):
        return name
    return UploadDestination(directory=directory, final_name=name)
