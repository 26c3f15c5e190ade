"""
Rejection values returned by the path and listing core.

Design decisions:
- Errors are values: every core operation returns a result or a Rejected,
  callers branch with isinstance() and map the kind to their own response
- Reason codes are stable strings (safe to log and to show)
- ErrorKind groups reasons the way callers react to them

Kinds:
- INPUT: malformed client input (empty, too long, bad characters, too large)
- POLICY: extension not on the allow-list
- CONFINEMENT: resolved path escaped the root, log as an attack signal
- NOT_FOUND: nothing at the resolved location
- TYPE_MISMATCH: exists but is the wrong kind (file vs directory)
- STORAGE: I/O failure, or an exclusive create that lost a race
- NAME_EXHAUSTION: no free "_n" suffix within the attempt cap
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    INPUT = "input"
    POLICY = "policy"
    CONFINEMENT = "confinement"
    NOT_FOUND = "not_found"
    TYPE_MISMATCH = "type_mismatch"
    STORAGE = "storage"
    NAME_EXHAUSTION = "name_exhaustion"


class Reason(str, Enum):
    EMPTY = "empty"
    TOO_LONG = "too_long"
    INVALID_CHARACTERS = "invalid_characters"
    INVALID_NAME = "invalid_name"
    FILE_TOO_LARGE = "file_too_large"
    TYPE_NOT_ALLOWED = "type_not_allowed"
    OUTSIDE_ROOT = "outside_root"
    NOT_FOUND = "not_found"
    NOT_A_FILE = "not_a_file"
    NOT_A_DIRECTORY = "not_a_directory"
    STORAGE_ERROR = "storage_error"
    ALREADY_EXISTS = "already_exists"
    NAME_EXHAUSTED = "name_exhausted"

    @property
    def kind(self) -> ErrorKind:
        return _KIND_BY_REASON[self]


_KIND_BY_REASON = {
    Reason.EMPTY: ErrorKind.INPUT,
    Reason.TOO_LONG: ErrorKind.INPUT,
    Reason.INVALID_CHARACTERS: ErrorKind.INPUT,
    Reason.INVALID_NAME: ErrorKind.INPUT,
    Reason.FILE_TOO_LARGE: ErrorKind.INPUT,
    Reason.TYPE_NOT_ALLOWED: ErrorKind.POLICY,
    Reason.OUTSIDE_ROOT: ErrorKind.CONFINEMENT,
    Reason.NOT_FOUND: ErrorKind.NOT_FOUND,
    Reason.NOT_A_FILE: ErrorKind.TYPE_MISMATCH,
    Reason.NOT_A_DIRECTORY: ErrorKind.TYPE_MISMATCH,
    Reason.STORAGE_ERROR: ErrorKind.STORAGE,
    Reason.ALREADY_EXISTS: ErrorKind.STORAGE,
    Reason.NAME_EXHAUSTED: ErrorKind.NAME_EXHAUSTION,
}

# User-facing wording
_MESSAGES = {
    Reason.EMPTY: "Invalid path",
    Reason.TOO_LONG: "Invalid path",
    Reason.INVALID_CHARACTERS: "Invalid path",
    Reason.INVALID_NAME: "Invalid file type or name",
    Reason.FILE_TOO_LARGE: "File too large",
    Reason.TYPE_NOT_ALLOWED: "File type not allowed",
    Reason.OUTSIDE_ROOT: "Access denied",
    Reason.NOT_FOUND: "Not found",
    Reason.NOT_A_FILE: "Not a file",
    Reason.NOT_A_DIRECTORY: "Path is not a directory",
    Reason.STORAGE_ERROR: "Storage error",
    Reason.ALREADY_EXISTS: "A file with that name was just created, please retry",
    Reason.NAME_EXHAUSTED: "Too many files with that name",
}


@dataclass(frozen=True)
class Rejected:
    """
    A refused request.

    Attributes:
        reason: Machine-readable reason code
        detail: Optional internal detail (errno name, stage); never the raw input
    """

    reason: Reason
    detail: str = ""

    @property
    def kind(self) -> ErrorKind:
        return self.reason.kind

    @property
    def is_attack_signal(self) -> bool:
        """True when the caller should log this as a potential traversal attempt."""
        return self.kind is ErrorKind.CONFINEMENT

    @property
    def message(self) -> str:
        return _MESSAGES[self.reason]


@dataclass(frozen=True)
class ListError(Rejected):
    """Enumeration of a directory failed as a whole."""

    reason: Reason = Reason.STORAGE_ERROR
