"""
Confinement of client paths under a storage root.

This is the authoritative traversal defense. It does not trust the sanitizer:
the candidate is joined to the root, resolved by the operating system
(symlinks, "." and ".." collapsed) and the resulting absolute path must equal
the root or start with the root followed by a separator.

StoragePath values are only produced here. Any other construction raises
TypeError, so holding a StoragePath means confinement already succeeded.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import Reason, Rejected

_CONFINED = object()


@dataclass(frozen=True)
class StoragePath:
    """
    An absolute, resolved path known to be inside *root*.

    Attributes:
        path: Resolved absolute path
        root: Resolved absolute storage root
    """

    path: Path
    root: Path
    _key: object = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._key is not _CONFINED:
            raise TypeError("StoragePath can only be created by confine()")

    @property
    def relative(self) -> str:
        """POSIX path relative to the root, "" for the root itself."""
        rel = self.path.relative_to(self.root).as_posix()
        return "" if rel == "." else rel

    @property
    def is_root(self) -> bool:
        return self.path == self.root

    def __fspath__(self) -> str:
        return os.fspath(self.path)


def is_within(root: Path, target: Path) -> bool:
    """String-level containment check on two already resolved paths."""
    root_s = str(root)
    target_s = str(target)
    return target_s == root_s or target_s.startswith(root_s.rstrip(os.sep) + os.sep)


def confine(root: str | os.PathLike, candidate: str | None, *, must_exist: bool = True) -> StoragePath | Rejected:
    """
    Resolve *candidate* under *root* and prove it stays inside.

    Args:
        root: Storage root directory (must exist)
        candidate: Path relative to the root; an absolute candidate is taken as
            absolute (and therefore refused unless it points inside the root)
        must_exist: Refuse with NOT_FOUND when the resolved path is missing.
            Upload directories are confined with must_exist=False before creation.

    Returns:
        StoragePath on success, otherwise Rejected with OUTSIDE_ROOT, NOT_FOUND,
        INVALID_CHARACTERS (embedded NUL) or STORAGE_ERROR
    """
    try:
        root_path = Path(root).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        return Rejected(Reason.STORAGE_ERROR, f"root:{type(e).__name__}")
    if not root_path.is_dir():
        return Rejected(Reason.STORAGE_ERROR, "root:not_a_directory")

    relative = candidate or ""
    try:
        target = (root_path / relative).resolve()
    except ValueError:
        return Rejected(Reason.INVALID_CHARACTERS, "nul")
    except (OSError, RuntimeError) as e:
        # symlink loops raise here on some interpreters
        return Rejected(Reason.STORAGE_ERROR, type(e).__name__)

    if not is_within(root_path, target):
        return Rejected(Reason.OUTSIDE_ROOT)

    if must_exist:
        try:
            exists = target.exists()
        except OSError as e:
            return Rejected(Reason.STORAGE_ERROR, type(e).__name__)
        if not exists:
            return Rejected(Reason.NOT_FOUND)

    return StoragePath(path=target, root=root_path, _key=_CONFINED)
