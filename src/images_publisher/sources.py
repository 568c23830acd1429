"""Readers that turn local files into ``ImageItem`` objects."""

import io
import os
from typing import Iterable, List, Optional
from urllib.parse import unquote

from PIL import Image, UnidentifiedImageError

from .core import ImageItem, extract_extension, get_logger, is_image_file

FILE_URL_PREFIX = "file://"


def normalize_path(raw_path: str) -> str:
    """Decode a clipboard-style path and strip any ``file://`` prefix."""
    path = unquote(str(raw_path))
    if path.startswith(FILE_URL_PREFIX):
        path = path[len(FILE_URL_PREFIX):]
    return path


def sniff_extension(data: bytes) -> str:
    """Detect the image format from content, or return an empty string."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return (image.format or "").lower()
    except (UnidentifiedImageError, OSError):
        return ""


def read_image_file(raw_path: str) -> Optional[ImageItem]:
    """
    Read one image file into an ``ImageItem``.

    The extension comes from the filename, then from the content, and
    falls back to ``png``.

    Returns:
        The item, or None when the file is missing, unreadable or empty.
    """
    logger = get_logger("sources")
    path = normalize_path(raw_path)

    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        logger.debug(f"Cannot read {path}: {exc}")
        return None

    if not data:
        logger.debug(f"Skipping empty file {path}")
        return None

    filename = os.path.basename(path)
    extension = extract_extension(filename) or sniff_extension(data) or "png"

    return ImageItem(
        source_identifier=path,
        data=data,
        filename_hint=filename,
        extension=extension,
    )


def select_image_files(paths: Iterable[str]) -> List[str]:
    """Keep only paths with a supported image extension, in order."""
    return [path for path in (normalize_path(p) for p in paths) if is_image_file(path)]


def load_selection(paths: Iterable[str]) -> List[ImageItem]:
    """Read every selected image file, dropping the unreadable ones."""
    logger = get_logger("sources")
    items = []
    for path in select_image_files(paths):
        item = read_image_file(path)
        if item is None:
            logger.warning(f"Skipping unreadable image {path}")
            continue
        items.append(item)
    return items
