"""
Pure helpers for rendering a directory listing.

Nothing here touches the filesystem or produces HTML; the Streamlit pages
combine these with DirectoryEntry values.
"""

from __future__ import annotations

from typing import Iterable

from .listing import DirectoryEntry
from .policy import PolicyConfig, extension_of
from .resolver import clean_path

FOLDER_ICON = "📁"
DEFAULT_ICON = "📁"

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")

_ICONS = {
    "pdf": "📄",
    "zip": "🗜️",
    "txt": "📝",
    "doc": "📄",
    "docx": "📄",
    "xls": "📊",
    "xlsx": "📊",
    "ppt": "📊",
    "pptx": "📊",
    "jpg": "🖼️",
    "jpeg": "🖼️",
    "png": "🖼️",
    "gif": "🖼️",
    "mp4": "🎥",
    "mp3": "🎵",
    "wav": "🎵",
    "js": "📜",
    "html": "🌐",
    "css": "🎨",
    "json": "📋",
}


def format_file_size(size: int) -> str:
    """
    Human readable size, base 1024, at most two decimals.

    Examples: 0 -> "0 Bytes", 1536 -> "1.5 KB", 500000 -> "488.28 KB"
    """
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    i = 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[i]}"


def icon_for(name: str) -> str:
    """Emoji for a file name, by extension."""
    return _ICONS.get(extension_of(name), DEFAULT_ICON)


def breadcrumbs(relative: str) -> list[tuple[str, str]]:
    """
    Navigation trail for a relative directory path.

    "a/b" -> [("Home", ""), ("a", "a"), ("b", "a/b")]
    """
    trail = [("Home", "")]
    current = ""
    for part in (p for p in (relative or "").split("/") if p):
        current = f"{current}/{part}" if current else part
        trail.append((part, current))
    return trail


def parent_of(relative: str) -> str:
    """Relative path of the parent directory ("" at the top level)."""
    parts = [p for p in (relative or "").split("/") if p]
    return "/".join(parts[:-1])


def split_entries(entries: Iterable[DirectoryEntry]) -> tuple[list[DirectoryEntry], list[DirectoryEntry]]:
    """Separate folders from files, keeping the order within each group."""
    folders: list[DirectoryEntry] = []
    files: list[DirectoryEntry] = []
    for entry in entries:
        (folders if entry.is_directory else files).append(entry)
    return folders, files


def total_size(entries: Iterable[DirectoryEntry]) -> int:
    """Sum of file sizes; directories count as 0."""
    return sum(e.size_bytes or 0 for e in entries if not e.is_directory)


def is_addressable(relative_path: str, policy: PolicyConfig) -> bool:
    """
    True when *relative_path* survives the resolver's cleaning unchanged.

    Listed names are filtered after sanitizing, so "a:b.pdf" can be listed
    while a request for it would be cleaned into "ab.pdf". Such entries must
    be shown without a link or download button.
    """
    return clean_path(relative_path, policy) == relative_path
