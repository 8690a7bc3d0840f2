"""php.ini ``opcache.preload`` directive for a generated preload script.

The directive needs an absolute path.  Either pass the absolute directory the
project will live in (``path``), or let the real path of ``filename`` be used.
"""

from __future__ import annotations

import os

from opcache_preload.core.config import DEFAULT_FILENAME

_SEPARATORS = "/\\"


def preload_path(filename: str = DEFAULT_FILENAME, path: str | None = None) -> str:
    """Absolute path to write into ``opcache.preload``.

    Raises
    ------
    FileNotFoundError
        If *path* is not given and *filename* does not exist.
    """
    if path is None:
        if not os.path.isfile(filename):
            raise FileNotFoundError(f"preload file not found: {filename}")
        return os.path.realpath(filename)
    return f"{path.rstrip(_SEPARATORS)}{os.sep}{filename.lstrip(_SEPARATORS)}"


def ini_directive(filename: str = DEFAULT_FILENAME, path: str | None = None) -> str:
    return f"opcache.preload={preload_path(filename, path)}"
