"""Filesystem helpers for atomic, owner-only writes."""

from __future__ import annotations

import contextlib
import os
from pathlib import Path

PRIVATE_FILE_MODE = 0o600


def atomic_write_text(path: Path, data: str, *, mode: int | None = None) -> None:
    """Write *data* to a sibling temp file, fsync, then rename over *path*.

    When *mode* is given the temp file is created with it, so the final file
    never exists with looser permissions.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    fd = os.open(tmp_path, flags, mode if mode is not None else 0o666)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())

    if mode is not None:
        set_file_mode(tmp_path, mode)
    os.replace(tmp_path, path)
    _fsync_directory(path.parent)


def set_file_mode(path: Path, mode: int = PRIVATE_FILE_MODE) -> None:
    """chmod *path*; unsupported filesystems are ignored."""
    with contextlib.suppress(OSError):
        os.chmod(path, mode)


def _fsync_directory(path: Path) -> None:
    try:
        fd = os.open(path, os.O_DIRECTORY)
    except OSError:
        return
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
