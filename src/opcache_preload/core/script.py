"""Render the opcache preload script consumed by ``opcache.preload``.

The script lists every file the loader accepted and hands each one to
``opcache_compile_file()``.  Files inside the project root are written
relative to ``__DIR__`` (``..`` segments included when the script lives in a
subdirectory) so the project can be moved as a whole; only files outside the
project are written as absolute paths.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

from opcache_preload import __version__

_TEMPLATE = """\
<?php

/**
 * opcache preload script generated by opcache-preload {version}.
 *
 * Regenerate with `opcache-preload generate` instead of editing by hand.
 *
{summary}
 */

declare(strict_types=1);

$files = [
{files}
];

foreach ($files as $file) {{
    opcache_compile_file($file);
}}
"""


class PreloadTargetError(ValueError):
    """The preload script would be written outside the project root."""


def resolve_target(project_root: Path, filename: str) -> Path:
    """Absolute location of the preload script.

    Raises
    ------
    PreloadTargetError
        If *filename* resolves outside *project_root*.
    """
    root = project_root.resolve()
    target = (root / filename).resolve()
    if not target.is_relative_to(root):
        raise PreloadTargetError(
            f"preload file {filename!r} is not inside the project root {root}; "
            "a preload file can only be generated for the current project"
        )
    return target


def php_string(value: str) -> str:
    """Quote *value* as a PHP single-quoted string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def php_path_expr(path: str, script_dir: Path, project_root: Path | None = None) -> str:
    """PHP expression for *path* as seen from a script living in *script_dir*.

    *project_root* (default: *script_dir*) bounds which files are written
    relative to ``__DIR__``.
    """
    absolute = Path(path).resolve()
    anchor = project_root if project_root is not None else script_dir
    if absolute.is_relative_to(anchor):
        rel = Path(os.path.relpath(absolute, script_dir)).as_posix()
        return f"__DIR__ . {php_string('/' + rel)}"
    return php_string(os.fspath(absolute))


def _comment_list(title: str, values: Sequence[str]) -> list[str]:
    lines = [f" * {title}:"]
    if not values:
        lines.append(" *   (none)")
    for value in values:
        # keep the docblock closed only where we close it
        safe = value.replace("*/", "*\\/")
        lines.append(f" *   - {safe}")
    return lines


def render_preload_script(
    files: Iterable[str],
    *,
    script_dir: Path,
    project_root: Path | None = None,
    roots: Sequence[str] = (),
    ignore_paths: Sequence[str] = (),
    ignore_symbols: Sequence[str] = (),
) -> str:
    """Build the PHP source of a preload script for *files*."""
    summary = (
        _comment_list("Roots", roots)
        + _comment_list("Ignored paths", ignore_paths)
        + _comment_list("Ignored symbols", ignore_symbols)
    )
    entries = [f"    {php_path_expr(f, script_dir, project_root)}," for f in files]
    return _TEMPLATE.format(
        version=__version__,
        summary="\n".join(summary),
        files="\n".join(entries),
    )
