"""
Extension allow-list and process-wide validation policy.

Design decisions:
- Whitelist approach: only listed extensions are served or stored
- Extension only: no content sniffing, the filename decides
- Built once at startup from Settings and passed explicitly to every call,
  never read from a module global during a request

Extension rules:
- The extension is the text after the last dot of the final path component
- Compared lowercase, so "PHOTO.JPG" and "photo.jpg" behave the same
- ".env", "notes." and "README" have no extension and are refused
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .settings import DEFAULT_EXTENSIONS, Settings


def extension_of(name: str) -> str:
    """
    Extract the lowercase extension of the last path component.

    Args:
        name: Filename or slash-separated relative path

    Returns:
        Extension without the dot, or "" when there is none
    """
    base = (name or "").rsplit("/", 1)[-1]
    idx = base.rfind(".")
    if idx <= 0 or idx == len(base) - 1:
        return ""
    return base[idx + 1:].lower()


@dataclass(frozen=True)
class ExtensionPolicy:
    """Immutable set of allowed extensions (lowercase, no leading dot)."""

    allowed: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_EXTENSIONS))

    @classmethod
    def from_iterable(cls, extensions: Iterable[str]) -> ExtensionPolicy:
        cleaned = (e.strip().lstrip(".").lower() for e in extensions)
        return cls(frozenset(e for e in cleaned if e))

    def is_allowed(self, name: str) -> bool:
        ext = extension_of(name)
        return bool(ext) and ext in self.allowed


@dataclass(frozen=True)
class PolicyConfig:
    """
    Read-only policy shared by all requests.

    Attributes:
        extensions: Extension allow-list
        max_name_length: Longest accepted path or filename
        max_upload_bytes: Largest accepted upload
        max_suffix_attempts: Collision suffixes tried before NAME_EXHAUSTED
        listing_workers: Pool size for listing stats (<= 1 means sequential)
    """

    extensions: ExtensionPolicy = field(default_factory=ExtensionPolicy)
    max_name_length: int = 500
    max_upload_bytes: int = 100 * 1024 * 1024
    max_suffix_attempts: int = 1000
    listing_workers: int = 8


def build_policy(settings: Settings) -> PolicyConfig:
    """Build the process policy from application settings."""
    return PolicyConfig(
        extensions=ExtensionPolicy.from_iterable(settings.allowed_extensions),
        max_name_length=settings.max_name_length,
        max_upload_bytes=settings.max_upload_bytes,
        max_suffix_attempts=settings.max_suffix_attempts,
        listing_workers=settings.listing_workers,
    )
