"""ClassIndex — composer's classmap, inverted to answer "which class lives here?".

Composer writes ``vendor/composer/autoload_classmap.php`` as a PHP script that
returns an array of ``'Symbol\\Name' => $baseDir . '/path/File.php'`` entries.
The file is parsed statically here; it is never executed.

Supported value forms:

    $vendorDir . '/relative/path.php'   # <root>/vendor + path
    $baseDir . '/relative/path.php'     # <root> + path
    '/absolute/path.php'                # literal

Both ``return array( ... );`` and ``return [ ... ];`` are accepted.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import jsonschema

from opcache_preload.contracts.load import validate_instance, validation_message

_logger = logging.getLogger(__name__)

CLASSMAP_RELATIVE_PATH = Path("vendor") / "composer" / "autoload_classmap.php"

_RETURN_RE = re.compile(r"\breturn\s+(array\s*\(|\[)")
_ENTRY_RE = re.compile(
    r"""'(?P<symbol>(?:[^'\\]|\\.)*)'\s*=>\s*"""
    r"""(?:\$(?P<base>vendorDir|baseDir)\s*\.\s*)?"""
    r"""'(?P<path>(?:[^'\\]|\\.)*)'\s*,?"""
)
_WS_RE = re.compile(r"\s*")
_ESCAPE_RE = re.compile(r"\\([\\'])")


class ManifestError(RuntimeError):
    """The classmap is unreadable or malformed; no traversal may proceed."""


class ManifestNotFoundError(ManifestError, FileNotFoundError):
    """The classmap does not exist under the project root."""


def _unescape(literal: str) -> str:
    """Decode a PHP single-quoted string body."""
    return _ESCAPE_RE.sub(r"\1", literal)


def parse_classmap(text: str, *, vendor_dir: str, base_dir: str) -> dict[str, str]:
    """Parse the body of ``autoload_classmap.php`` into ``{symbol: path}``.

    Raises
    ------
    ManifestError
        If no returned array is found or an entry cannot be parsed.
    """
    opener = _RETURN_RE.search(text)
    if opener is None:
        raise ManifestError("classmap does not return an array")
    closer = "]" if opener.group(1) == "[" else ")"

    prefixes = {"vendorDir": vendor_dir, "baseDir": base_dir}
    classmap: dict[str, str] = {}
    pos = opener.end()
    while True:
        pos = _WS_RE.match(text, pos).end()
        if pos >= len(text):
            raise ManifestError("classmap array is not terminated")
        if text.startswith(closer, pos):
            break
        m = _ENTRY_RE.match(text, pos)
        if m is None:
            line = text.count("\n", 0, pos) + 1
            raise ManifestError(f"unparseable classmap entry at line {line}")
        path = _unescape(m.group("path"))
        if m.group("base"):
            path = prefixes[m.group("base")] + path
        # Later duplicates replace earlier ones, as in a PHP array literal.
        classmap[_unescape(m.group("symbol"))] = path
        pos = m.end()
    return classmap


class ClassIndex:
    """Immutable reverse map: file path → symbol name."""

    __slots__ = ("_symbols", "source")

    def __init__(self, symbols: Mapping[str, str], source: Path | None = None) -> None:
        self._symbols = MappingProxyType(dict(symbols))
        self.source = source

    @classmethod
    def from_classmap(
        cls, classmap: Mapping[str, str], source: Path | None = None
    ) -> ClassIndex:
        """Invert a ``{symbol: path}`` classmap; the last symbol for a path wins."""
        return cls({path: symbol for symbol, path in classmap.items()}, source)

    def symbol_for(self, path: str) -> str | None:
        return self._symbols.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"ClassIndex({len(self)} entries, source={self.source!r})"


def classmap_path(project_root: str | Path | None = None) -> Path:
    """Location of composer's classmap under *project_root* (default: cwd)."""
    root = Path(project_root) if project_root else Path.cwd()
    return root / CLASSMAP_RELATIVE_PATH


def load_class_index(project_root: str | Path | None = None) -> ClassIndex:
    """Build the ClassIndex for *project_root*.

    Raises
    ------
    ManifestNotFoundError
        If ``vendor/composer/autoload_classmap.php`` does not exist.
    ManifestError
        If the classmap cannot be read, parsed or validated.
    """
    manifest = classmap_path(project_root)
    if not manifest.is_file():
        raise ManifestNotFoundError(f"composer classmap not found: {manifest}")

    try:
        text = manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"cannot read composer classmap {manifest}: {exc}") from exc

    vendor_dir = manifest.resolve().parent.parent
    try:
        classmap = parse_classmap(
            text,
            vendor_dir=str(vendor_dir),
            base_dir=str(vendor_dir.parent),
        )
    except ManifestError as exc:
        raise ManifestError(f"{manifest}: {exc}") from exc

    try:
        validate_instance(classmap, "classmap.schema.json")
    except jsonschema.ValidationError as exc:
        raise ManifestError(f"{manifest}: {validation_message(exc)}") from exc

    _logger.debug("Loaded %d classmap entries from %s", len(classmap), manifest)
    return ClassIndex.from_classmap(classmap, source=manifest)
