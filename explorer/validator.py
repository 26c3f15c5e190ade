"""
Syntactic validation of sanitized paths and filenames.

Rules:
- Only ASCII letters, digits, ".", "_", "-" and space
- Mode.PATH additionally allows "/" between directory components
- Mode.NAME refuses "/" outright (a filename is one component)
- Empty strings and strings longer than max_length are refused
- A leftover ".." is refused even though the sanitizer removes it

Space policy: a literal space is accepted in both modes ("Q3 report.pdf").
Tabs, newlines and other whitespace are control characters and never get here.
"""

from __future__ import annotations

import re

from .errors import Reason
from .sanitizer import Mode

_PATH_CHARS = re.compile(r"[A-Za-z0-9._\- /]+")
_NAME_CHARS = re.compile(r"[A-Za-z0-9._\- ]+")

DEFAULT_MAX_LENGTH = 500


def check(name: str | None, mode: Mode = Mode.PATH, max_length: int = DEFAULT_MAX_LENGTH) -> Reason | None:
    """
    Validate a sanitized path or filename.

    Args:
        name: Output of sanitize()
        mode: Mode.PATH or Mode.NAME
        max_length: Maximum accepted length

    Returns:
        None when valid, otherwise the Reason it was refused
    """
    if not name:
        return Reason.EMPTY
    if len(name) > max_length:
        return Reason.TOO_LONG
    pattern = _NAME_CHARS if mode is Mode.NAME else _PATH_CHARS
    if not pattern.fullmatch(name) or ".." in name:
        return Reason.INVALID_CHARACTERS
    return None


def is_valid(name: str | None, mode: Mode = Mode.PATH, max_length: int = DEFAULT_MAX_LENGTH) -> bool:
    """Return True if *name* passes check()."""
    return check(name, mode, max_length) is None
