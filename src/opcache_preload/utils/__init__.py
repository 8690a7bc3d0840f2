"""Shared utilities for opcache_preload."""

from opcache_preload.utils.exit_codes import ExitCode
from opcache_preload.utils.json_norm import stable_json_dump, stable_json_dumps

__all__ = [
    "ExitCode",
    "stable_json_dump",
    "stable_json_dumps",
]
