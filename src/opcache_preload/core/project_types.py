"""Project types — which directories a given framework layout preloads.

Each type owns its full table; no type inherits another's roots.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from opcache_preload.model import ProjectType

_logger = logging.getLogger(__name__)

_APP_ROOTS: dict[ProjectType, tuple[str, ...]] = {
    ProjectType.LAMINAS: ("config/", "module/", "public/index.php"),
    ProjectType.LAMINAS_API_TOOLS: ("config/", "module/", "public/index.php"),
    ProjectType.MEZZIO: ("config/", "src/", "public/index.php"),
}

_VENDOR_ROOTS: dict[ProjectType, tuple[str, ...]] = {
    ProjectType.LAMINAS: ("vendor/laminas/",),
    ProjectType.LAMINAS_API_TOOLS: ("vendor/laminas-api-tools/", "vendor/laminas/"),
    ProjectType.MEZZIO: ("vendor/laminas/", "vendor/mezzio/"),
}

# composer package → project type, most specific first
_MARKER_PACKAGES: tuple[tuple[str, ProjectType], ...] = (
    ("laminas-api-tools/api-tools", ProjectType.LAMINAS_API_TOOLS),
    ("mezzio/mezzio", ProjectType.MEZZIO),
    ("laminas/laminas-mvc", ProjectType.LAMINAS),
)

_DIGITS_RE = re.compile(r"(\d+)")


def valid_types() -> list[str]:
    return [t.value for t in ProjectType]


def parse_project_type(value: str | None) -> ProjectType | None:
    """Map a CLI/config string to a :class:`ProjectType`.

    Raises
    ------
    ValueError
        If *value* names no known type.
    """
    if value is None:
        return None
    try:
        return ProjectType(value)
    except ValueError:
        raise ValueError(
            f"Invalid project type {value!r}; must be one of [{', '.join(valid_types())}]"
        ) from None


def natural_key(value: str) -> list[str | int]:
    """Sort key comparing digit runs numerically (``v2`` before ``v10``)."""
    parts = _DIGITS_RE.split(value)
    return [int(part) if i % 2 else part for i, part in enumerate(parts)]


def roots_for(
    project_type: ProjectType | None, *, include_vendors: bool = True
) -> list[str]:
    """Root paths (relative to the project root) preloaded for *project_type*."""
    if project_type is None:
        return []
    roots = list(_APP_ROOTS[project_type])
    if include_vendors:
        roots.extend(_VENDOR_ROOTS[project_type])
    return sorted(roots, key=natural_key)


def detect_project_type(project_root: str | Path) -> ProjectType | None:
    """Guess the project type from the ``require`` section of composer.json."""
    composer_json = Path(project_root) / "composer.json"
    if not composer_json.is_file():
        return None
    try:
        data = json.loads(composer_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _logger.warning("Cannot read %s: %s", composer_json, exc)
        return None

    require = data.get("require") if isinstance(data, dict) else None
    if not isinstance(require, dict):
        return None
    for package, project_type in _MARKER_PACKAGES:
        if package in require:
            _logger.debug("Detected %s project from %s", project_type.value, package)
            return project_type
    return None
