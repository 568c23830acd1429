"""Content-type lookup, extension helpers and byte formatting."""

from typing import Dict, Tuple

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: Dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
    "ico": "image/x-icon",
}

IMAGE_EXTENSIONS: Tuple[str, ...] = tuple(CONTENT_TYPES)

# Formats the compression service accepts
COMPRESSIBLE_EXTENSIONS: Tuple[str, ...] = ("png", "jpg", "jpeg", "webp")


def content_type(extension: str) -> str:
    """Resolve the MIME type for a file extension."""
    return CONTENT_TYPES.get(extension.lower().lstrip("."), DEFAULT_CONTENT_TYPE)


def extract_extension(filename: str) -> str:
    """
    Return the lowercased extension of a filename without the dot.

    Dotfiles such as ``.png`` have no extension, matching how path
    libraries treat them. Returns an empty string when there is none.
    """
    basename = filename.replace("\\", "/").rsplit("/", 1)[-1]
    stem, dot, ext = basename.rpartition(".")
    if not dot or not stem:
        return ""
    return ext.lower()


def is_image_file(filename: str) -> bool:
    return extract_extension(filename) in IMAGE_EXTENSIONS


def is_compressible(extension: str) -> bool:
    return extension.lower().lstrip(".") in COMPRESSIBLE_EXTENSIONS


def pretty_bytes(num_bytes: int) -> str:
    """Format a byte count as B, KB, MB or GB."""
    units = ["B", "KB", "MB", "GB"]
    unit_index = 0
    value = float(num_bytes)

    while value >= 1024 and unit_index < len(units) - 1:
        value /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(value)} {units[unit_index]}"
    return f"{value:.2f} {units[unit_index]}"


def savings_percent(before: int, after: int) -> str:
    """Percentage of bytes saved, with one decimal."""
    if before == 0:
        return "0%"
    savings = (before - after) / before * 100
    return f"{savings:.1f}%"
