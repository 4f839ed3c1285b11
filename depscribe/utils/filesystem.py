"""
Filesystem utilities for depscribe.

Manifest and lock-file text is the only I/O depscribe performs. These helpers
read it with a size limit, locate sibling files relative to a manifest, and
normalize every failure to :class:`FileOperationError`.
"""

from __future__ import annotations

import os
import asyncio
from pathlib import Path
from typing import Optional, Union

from depscribe.utils.logger import get_logger
from depscribe.exceptions import FileOperationError
from depscribe.constants import MAX_FILE_SIZE

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Validate that ``path`` is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file with an optional size limit.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.

    Raises:
        FileOperationError: The file is missing, too large or unreadable.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except Exception as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


async def read_local_file(file_path: PathLike) -> Optional[str]:
    """Read a file without blocking the event loop.

    Missing files yield ``None`` quietly; any other read failure is logged
    and also yields ``None`` so the caller can skip that file.
    """
    if not Path(file_path).exists():
        logger.debug("File does not exist: %s", file_path)
        return None

    try:
        return await asyncio.to_thread(safe_read_file, file_path)
    except FileOperationError as exc:
        logger.warning("Could not read %s: %s", file_path, exc)
        return None


def local_file_exists(file_path: PathLike) -> bool:
    """Return True if ``file_path`` is an existing regular file."""
    return Path(file_path).is_file()


def get_sibling_file_name(file_path: PathLike, sibling: str) -> str:
    """Return the path of ``sibling`` relative to the directory of ``file_path``.

    ``sibling`` may climb out of the directory (``../ProjectSettings/x``);
    the result is normalized but not resolved against the filesystem.

    Example::

        >>> get_sibling_file_name("Packages/manifest.json", "packages-lock.json")
        'Packages/packages-lock.json'
    """
    parent = os.path.dirname(str(file_path))
    return os.path.normpath(os.path.join(parent, sibling))


def cache_key_for(file_path: PathLike) -> str:
    """Return the resolved absolute path used to key per-file caches."""
    return str(Path(file_path).expanduser().resolve(strict=False))
