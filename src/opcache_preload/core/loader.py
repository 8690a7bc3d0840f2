"""PathLoader — walk preload roots and submit PHP sources to a compile primitive.

Usage::

    loader = PathLoader("/srv/app", "/srv/app/src", "/srv/app/config")
    loader.add_ignored_symbols("App\\Debug\\").add_ignored_paths("config/autoload/local.php")
    count = loader.load()

Every candidate file runs through the filter chain in this order, stopping at
the first match:

1. extension — only ``.php`` and ``.phtml`` files are considered
2. symbol — files whose classmap symbol starts with an ignored prefix
3. path — files equal to, or containing, an ignored path string

Path matching is a plain substring test: ignoring ``"src"`` also drops
``resource/Foo.php``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable

from opcache_preload.core.classmap import ClassIndex, load_class_index
from opcache_preload.model import SkipReason
from opcache_preload.model.report import PreloadReport

_logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = (".php", ".phtml")

# Namespace of the PHP preloader package (phly/opcache-preload); a vendored
# copy of it is never preloaded.
SELF_SYMBOL = "Phly\\OpcachePreload\\"

_SEPARATORS = "/\\"

LogSink = Callable[[str], None]
CompileFn = Callable[[str], None]


class CompileError(RuntimeError):
    """Raised by a compile primitive that could not ingest a file."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"could not compile {path}{detail}")


def discard(path: str) -> None:
    """Compile primitive that accepts every file and does nothing with it."""


class PathLoader:
    """Recursive preload file discovery with symbol and path exclusions.

    Parameters
    ----------
    project_root:
        Directory holding ``vendor/composer/autoload_classmap.php``.
        Defaults to the current working directory.
    *roots:
        Initial files or directories to traverse.
    sink:
        Receives one line per preloaded file and one summary line.
        Defaults to this module's logger at INFO.
    compile_file:
        The compile primitive; raise :class:`CompileError` to reject a file.
    class_index:
        Prebuilt index; when given the classmap is not read.

    Raises
    ------
    ManifestError
        If *class_index* is not given and the classmap is missing or malformed.
    """

    def __init__(
        self,
        project_root: str | Path | None = None,
        *roots: str,
        sink: LogSink | None = None,
        compile_file: CompileFn | None = None,
        class_index: ClassIndex | None = None,
    ) -> None:
        self._class_index = (
            class_index if class_index is not None else load_class_index(project_root)
        )
        self._ignored_symbols: list[str] = [SELF_SYMBOL]
        self._ignored_paths: list[str] = []
        self._roots: list[str] = list(roots)
        self._sink: LogSink = sink if sink is not None else _logger.info
        self._compile_file: CompileFn = compile_file if compile_file is not None else discard
        self._report = PreloadReport()

    # ── configuration ───────────────────────────────────────────────

    def add_ignored_symbols(self, *names: str) -> PathLoader:
        self._ignored_symbols.extend(names)
        return self

    def add_ignored_paths(self, *paths: str) -> PathLoader:
        self._ignored_paths.extend(paths)
        return self

    def add_roots(self, *paths: str) -> PathLoader:
        self._roots.extend(paths)
        return self

    @property
    def ignored_symbols(self) -> tuple[str, ...]:
        return tuple(self._ignored_symbols)

    @property
    def ignored_paths(self) -> tuple[str, ...]:
        return tuple(self._ignored_paths)

    @property
    def roots(self) -> tuple[str, ...]:
        return tuple(self._roots)

    @property
    def class_index(self) -> ClassIndex:
        return self._class_index

    # ── run state ───────────────────────────────────────────────────

    @property
    def report(self) -> PreloadReport:
        """State of the most recent :meth:`load` call."""
        return self._report

    @property
    def count(self) -> int:
        return self._report.count

    # ── traversal ───────────────────────────────────────────────────

    def load(self) -> int:
        """Traverse every root, submit matching files and emit the summary line.

        Returns the number of files submitted.
        """
        self._report = PreloadReport()
        for root in self._roots:
            self._load_path(root)
        self._sink(f"Preloaded {self._report.count} paths")
        return self._report.count

    def _load_path(self, path: str) -> None:
        if os.path.isdir(path):
            self._load_dir(path)
            return
        if not os.path.exists(path):
            _logger.warning("Preload path does not exist: %s", path)
            self._report.skip(SkipReason.MISSING)
            return
        self._load_file(path)

    def _load_dir(self, path: str) -> None:
        path = path.rstrip(_SEPARATORS)
        try:
            with os.scandir(path) as entries:
                names = [entry.name for entry in entries]
        except OSError as exc:
            _logger.warning("Cannot read directory %s: %s", path, exc)
            self._report.skip(SkipReason.UNREADABLE)
            return

        for name in names:
            self._load_path(f"{path}/{name}")

    def _load_file(self, path: str) -> None:
        reason = self.skip_reason(path)
        if reason is not None:
            _logger.debug("Skipping %s (%s)", path, reason.value)
            self._report.skip(reason)
            return

        try:
            self._compile_file(path)
        except CompileError as exc:
            _logger.warning("%s", exc)
            self._report.skip(SkipReason.COMPILE_FAILED)
            return

        self._report.add(path)
        self._sink(f"Preloaded '{path}'")

    # ── filter chain ────────────────────────────────────────────────

    def skip_reason(self, path: str) -> SkipReason | None:
        """Return why *path* would be skipped, or ``None`` if it would be preloaded."""
        if not path.endswith(SOURCE_EXTENSIONS):
            return SkipReason.EXTENSION
        if self._is_ignored_symbol(path):
            return SkipReason.SYMBOL
        if self._is_ignored_path(path):
            return SkipReason.PATH
        return None

    def _is_ignored_symbol(self, path: str) -> bool:
        symbol = self._class_index.symbol_for(path)
        if symbol is None:
            return False
        return _has_prefix(symbol, self._ignored_symbols)

    def _is_ignored_path(self, path: str) -> bool:
        if path in self._ignored_paths:
            return True
        return any(ignore in path for ignore in self._ignored_paths)


def _has_prefix(value: str, prefixes: Iterable[str]) -> bool:
    return any(value.startswith(prefix) for prefix in prefixes)
