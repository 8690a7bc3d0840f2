"""PreloadReport — the run state of a single ``PathLoader.load()`` pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import SkipReason

REPORT_SCHEMA_VERSION = "preload_report_v1"


@dataclass(slots=True)
class PreloadReport:
    """Submitted files, in submission order, plus skip counters.

    ``count`` is the number the summary line reports; it always equals
    ``len(files)``.
    """

    files: list[str] = field(default_factory=list)
    skipped: dict[SkipReason, int] = field(
        default_factory=lambda: {reason: 0 for reason in SkipReason},
    )

    @property
    def count(self) -> int:
        return len(self.files)

    def add(self, path: str) -> None:
        self.files.append(path)

    def skip(self, reason: SkipReason) -> None:
        self.skipped[reason] += 1

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Produce the report JSON matching ``preload_report.schema.json``."""
        return {
            "schema_version": REPORT_SCHEMA_VERSION,
            "count": self.count,
            "files": list(self.files),
            "skipped": {reason.value: n for reason, n in self.skipped.items()},
        }


@dataclass(frozen=True, slots=True)
class GenerateResult:
    """Outcome of writing a preload script."""

    target: Path
    roots: tuple[str, ...]
    report: PreloadReport

    def to_dict(self) -> dict[str, Any]:
        d = self.report.to_dict()
        d["target"] = self.target.as_posix()
        d["roots"] = list(self.roots)
        return d
