"""Exit code contract tests — enforce stable CLI exit semantics.

Code  Meaning
----  -------
  0   Success — preload file written / directive printed
  1   Violation — preload file would land outside the project root
  2   Error — usage error, missing classmap, invalid config or type
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from opcache_preload.utils.exit_codes import ExitCode

REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURE = REPO_ROOT / "tests" / "fixtures" / "project"


def _run(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    env = {**os.environ}
    env["PYTHONPATH"] = str(REPO_ROOT / "src") + (
        os.pathsep + env["PYTHONPATH"] if env.get("PYTHONPATH") else ""
    )
    return subprocess.run(
        [sys.executable, "-m", "opcache_preload", *args],
        capture_output=True,
        text=True,
        env=env,
        cwd=cwd,
    )


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    work = tmp_path / "project"
    shutil.copytree(FIXTURE, work)
    return work


def test_exit_code_values_are_frozen():
    assert [int(c) for c in ExitCode] == [0, 1, 2]


# ── generate ────────────────────────────────────────────────────────

class TestGenerateExitCodes:
    """generate: 0 = written, 1 = target outside project, 2 = error."""

    def test_generate_in_project_returns_0(self, project: Path) -> None:
        r = _run("generate", cwd=project)
        assert r.returncode == 0, r.stderr
        assert (project / "preload.php").is_file()

    def test_generate_outside_project_returns_1(self, project: Path) -> None:
        r = _run("generate", "-f", "../../preload.php", cwd=project)
        assert r.returncode == 1, r.stdout + "\n" + r.stderr

    def test_generate_unknown_type_returns_2(self, project: Path) -> None:
        r = _run("generate", "-p", "drupal", cwd=project)
        assert r.returncode == 2, r.stdout + "\n" + r.stderr

    def test_generate_without_classmap_returns_2(self, tmp_path: Path) -> None:
        r = _run("generate", "-p", "laminas", cwd=tmp_path)
        assert r.returncode == 2, r.stdout + "\n" + r.stderr


# ── ini ─────────────────────────────────────────────────────────────

class TestIniExitCodes:
    def test_ini_with_path_returns_0(self, tmp_path: Path) -> None:
        r = _run("ini", "-p", "/srv/app", cwd=tmp_path)
        assert r.returncode == 0, r.stderr
        assert r.stdout.startswith("opcache.preload=")

    def test_ini_missing_file_returns_2(self, tmp_path: Path) -> None:
        r = _run("ini", cwd=tmp_path)
        assert r.returncode == 2, r.stdout


def test_unknown_subcommand_returns_2() -> None:
    r = _run("frobnicate")
    assert r.returncode == 2
