"""
Path and filename sanitization.

Design decisions:
- Strip, don't escape: dangerous characters are removed, not replaced
- Two explicit modes instead of two copies of the same regex:
  PATH keeps "/" (directory separators) and turns "\\" into "/"
  NAME drops "\\" and leaves "/" in place so the validator refuses it
- ".." removal runs last, after stripping, so removed characters can never
  glue two dots back together

SECURITY:
- This is defense-in-depth layer 1
- Layer 2 is the character whitelist in validator.py
- Layer 3 (authoritative) is canonical path resolution in confinement.py
"""

from __future__ import annotations

import re
from enum import Enum


class Mode(str, Enum):
    """Which kind of client string is being handled."""

    PATH = "path"
    NAME = "name"


_CONTROL_CHARS = r"\x00-\x1f"
_PATH_STRIP = re.compile(rf'[<>:"|?*{_CONTROL_CHARS}]')
_NAME_STRIP = re.compile(rf'[<>:"\\|?*{_CONTROL_CHARS}]')


def sanitize(raw: str | None, mode: Mode = Mode.PATH) -> str:
    """
    Remove dangerous characters and parent-directory sequences.

    Never fails and performs no I/O. The result is a fixed point:
    sanitize(sanitize(s, m), m) == sanitize(s, m).

    Args:
        raw: Untrusted string (URL path segment, form field, filename)
        mode: Mode.PATH for directory paths, Mode.NAME for bare filenames

    Returns:
        Sanitized string, possibly empty
    """
    s = raw or ""
    if mode is Mode.NAME:
        s = _NAME_STRIP.sub("", s)
    else:
        s = _PATH_STRIP.sub("", s).replace("\\", "/")
    return s.replace("..", "")
