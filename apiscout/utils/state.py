"""Storage directory resolution."""

from __future__ import annotations

import os
from pathlib import Path

STORAGE_DIR_ENV = "API_SCOUT_STORAGE_DIR"
DEFAULT_STORAGE_DIRNAME = ".api-scout"
DATA_FILENAME = "data.json"


def resolve_storage_dir(storage_dir: str | Path | None = None) -> Path:
    """Pick the storage directory.

    Precedence: explicit argument, then ``API_SCOUT_STORAGE_DIR``, then
    ``~/.api-scout``.
    """
    if storage_dir is not None:
        return Path(storage_dir).expanduser()
    from_env = os.environ.get(STORAGE_DIR_ENV)
    if from_env:
        return Path(from_env).expanduser()
    return Path.home() / DEFAULT_STORAGE_DIRNAME
