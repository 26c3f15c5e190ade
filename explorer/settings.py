"""
Centralized configuration for the file explorer.

Design decisions:
- Frozen dataclass: immutable after creation, no request can change policy
- Environment variables: 12-factor app compliance, easy deployment configuration
- Sensible defaults: works out of the box for development

Key parameters explained:

Storage:
- storage_dir: Root that is browsed and downloaded from (data/public)
- upload_dir: Root that uploads are written into (data/uploads)
  Kept separate so freshly uploaded files are never served before review

Validation:
- max_name_length=500: Longest path or filename accepted from a client
- allowed_extensions: Extension allow-list, everything else is refused
- max_suffix_attempts=1000: Cap on "_n" suffixes tried for a colliding upload

Uploads:
- max_upload_mb=100: Hard limit enforced while the stream is written

Listing:
- listing_workers=8: Bounded fan-out for per-entry stat calls

Rate limiting (per session, 15 minute window):
- browse=100, download=20, upload=10 requests
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
STORAGE_DIR = Path(os.getenv("STORAGE_DIR", str(DATA_DIR / "public")))
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(DATA_DIR / "uploads")))

DATA_DIR.mkdir(parents=True, exist_ok=True)
STORAGE_DIR.mkdir(parents=True, exist_ok=True)
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

DEFAULT_EXTENSIONS = (
    "pdf", "txt", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    "jpg", "jpeg", "png", "gif", "bmp", "webp",
    "mp4", "mp3", "wav", "avi", "mov",
    "zip", "rar", "7z", "tar", "gz",
    "json", "xml", "csv", "html", "css", "js",
)


def _env_bool(name: str, default: bool) -> bool:
    """Parse boolean from environment variable."""
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    v = os.getenv(name)
    if v is None:
        return default
    return int(v)


def _env_extensions(name: str, default: tuple[str, ...]) -> frozenset[str]:
    """Parse a comma separated extension list ("pdf, .TXT") from environment."""
    v = os.getenv(name)
    if v is None:
        return frozenset(default)
    parts = (p.strip().lstrip(".").lower() for p in v.split(","))
    return frozenset(p for p in parts if p)


@dataclass(frozen=True)
class Settings:
    """
    Application settings.

    All settings can be overridden via environment variables.

    Attributes:
        storage_dir: Directory exposed for browsing and downloads
        upload_dir: Directory uploads are written under
        allowed_extensions: Lowercase extensions (no dot) that may be served or stored
        max_name_length: Maximum accepted length of a client path or filename
        max_upload_mb: Maximum size of one uploaded file
        max_suffix_attempts: Collision suffixes tried before giving up
        listing_workers: Thread pool size for listing stats (<= 1 means sequential)
        rate_limit_window_seconds: Window shared by all rate limit rules
        rate_limit_browse: Directory listings allowed per window
        rate_limit_download: Downloads allowed per window
        rate_limit_upload: Uploads allowed per window
        show_rejection_reasons: Show rejection reason codes in the UI
    """

    storage_dir: Path = STORAGE_DIR
    upload_dir: Path = UPLOAD_DIR

    allowed_extensions: frozenset[str] = field(
        default_factory=lambda: _env_extensions("ALLOWED_EXTENSIONS", DEFAULT_EXTENSIONS)
    )
    max_name_length: int = _env_int("MAX_NAME_LENGTH", 500)
    max_upload_mb: int = _env_int("MAX_UPLOAD_MB", 100)
    max_suffix_attempts: int = _env_int("MAX_SUFFIX_ATTEMPTS", 1000)

    listing_workers: int = _env_int("LISTING_WORKERS", 8)

    # Rate limiting (one shared 15 minute window)
    rate_limit_window_seconds: int = _env_int("RATE_LIMIT_WINDOW_SECONDS", 15 * 60)
    rate_limit_browse: int = _env_int("RATE_LIMIT_BROWSE", 100)
    rate_limit_download: int = _env_int("RATE_LIMIT_DOWNLOAD", 20)
    rate_limit_upload: int = _env_int("RATE_LIMIT_UPLOAD", 10)

    show_rejection_reasons: bool = _env_bool("SHOW_REJECTION_REASONS", True)

    @property
    def max_upload_bytes(self) -> int:
        """Upload limit in bytes."""
        return self.max_upload_mb * 1024 * 1024


settings = Settings()
