"""
opcache_preload.api
===================

Programmatic entrypoints for generating opcache preload files.

Goals:
  - No argparse / CLI dependencies
  - Schema-validated, JSON-friendly reports

Usage::

    from opcache_preload.api import generate_preload_file, preload_report

    result = generate_preload_file("/srv/app", PreloadConfig(project_type=ProjectType.MEZZIO))
    report = preload_report(["/srv/app/src"], project_root="/srv/app")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterable

from opcache_preload.contracts.load import validate_instance
from opcache_preload.core.config import PreloadConfig
from opcache_preload.core.ini import ini_directive, preload_path
from opcache_preload.core.loader import CompileFn, LogSink, PathLoader
from opcache_preload.core.project_types import detect_project_type, roots_for
from opcache_preload.core.script import render_preload_script, resolve_target
from opcache_preload.model.report import GenerateResult

__all__ = [
    "generate_preload_file",
    "ini_directive",
    "preload_path",
    "preload_report",
]

_logger = logging.getLogger(__name__)

_SEPARATORS = ("/", "\\")


def _to_path(p: str | Path | None) -> Path:
    if p is None:
        return Path.cwd()
    return p if isinstance(p, Path) else Path(p)


def _absolute_root(project_root: Path, path: str) -> str:
    """Anchor a relative root at *project_root* and normalise it.

    Classmap entries are normalised absolute paths and symbol matching is an
    exact string lookup, so ``./lib`` or ``lib/../src`` must be collapsed
    first.  A trailing separator is kept.
    """
    trailing = path.endswith(_SEPARATORS)
    if not os.path.isabs(path):
        path = f"{project_root.as_posix()}/{path}"
    normalised = os.path.normpath(path)
    if trailing and not normalised.endswith(os.sep):
        normalised += os.sep
    return normalised


# ── generate_preload_file ───────────────────────────────────────────


def generate_preload_file(
    project_root: str | Path | None = None,
    config: PreloadConfig | None = None,
    *,
    sink: LogSink | None = None,
    compile_file: CompileFn | None = None,
) -> GenerateResult:
    """Discover the project's preloadable files and write the preload script.

    Parameters
    ----------
    project_root:
        The PHP project (holding ``vendor/composer``). Defaults to cwd.
    config:
        What to preload; defaults to ``PreloadConfig.discover(project_root)``.
        When it names no project type, one is detected from composer.json.

    Returns
    -------
    ``GenerateResult`` with the written target and the loader's report.

    Raises
    ------
    PreloadTargetError
        If ``config.filename`` lies outside the project root.
    ManifestError
        If the composer classmap is missing or malformed.
    """
    root = _to_path(project_root).resolve()
    cfg = config if config is not None else PreloadConfig.discover(root)
    target = resolve_target(root, cfg.filename)

    project_type = cfg.project_type
    if project_type is None:
        project_type = detect_project_type(root)
    if project_type is None and not cfg.paths:
        _logger.warning("No project type and no paths configured; preload file will be empty")

    roots = [
        _absolute_root(root, p)
        for p in [*roots_for(project_type, include_vendors=cfg.vendors), *cfg.paths]
    ]

    loader = PathLoader(root, *roots, sink=sink, compile_file=compile_file)
    loader.add_ignored_symbols(*cfg.ignore_symbols)
    loader.add_ignored_paths(*cfg.ignore_paths, os.fspath(target))
    loader.load()

    script = render_preload_script(
        loader.report.files,
        script_dir=target.parent,
        project_root=root,
        roots=roots,
        ignore_paths=loader.ignored_paths,
        ignore_symbols=loader.ignored_symbols,
    )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(script, encoding="utf-8")
    _logger.info("Wrote %s (%d files)", target, loader.count)

    return GenerateResult(target=target, roots=tuple(roots), report=loader.report)


# ── preload_report ──────────────────────────────────────────────────


def preload_report(
    roots: Iterable[str],
    *,
    project_root: str | Path | None = None,
    ignore_paths: Iterable[str] = (),
    ignore_symbols: Iterable[str] = (),
    sink: LogSink | None = None,
) -> dict[str, Any]:
    """Run the loader over *roots* without writing anything.

    Relative *roots* are anchored at *project_root* (default: cwd), so the
    transcript always names absolute paths.

    Returns a ``preload_report_v1`` dict validated against its schema.
    """
    root = _to_path(project_root).resolve()
    anchored = [_absolute_root(root, r) for r in roots]
    loader = PathLoader(root, *anchored, sink=sink)
    loader.add_ignored_paths(*ignore_paths).add_ignored_symbols(*ignore_symbols)
    loader.load()

    report = loader.report.to_dict()
    validate_instance(report, "preload_report.schema.json")
    return report
