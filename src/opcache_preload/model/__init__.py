"""Enums shared across the loader, the generator and the CLI."""

from __future__ import annotations

from enum import Enum


class ProjectType(str, Enum):
    """Supported project layouts, each with its own table of preload roots."""

    LAMINAS = "laminas"
    LAMINAS_API_TOOLS = "laminas-api-tools"
    MEZZIO = "mezzio"


class SkipReason(str, Enum):
    """Why a candidate path was not submitted for compilation."""

    EXTENSION = "extension"
    SYMBOL = "symbol"
    PATH = "path"
    MISSING = "missing"
    UNREADABLE = "unreadable"
    COMPILE_FAILED = "compile_failed"
