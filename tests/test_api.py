"""Tests for opcache_preload.api — programmatic entrypoints."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import pytest

from opcache_preload.api import generate_preload_file, preload_report
from opcache_preload.contracts.load import validate_instance
from opcache_preload.core.classmap import ManifestNotFoundError
from opcache_preload.core.config import PreloadConfig
from opcache_preload.core.script import PreloadTargetError
from opcache_preload.model import ProjectType, SkipReason

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "project"


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    work = tmp_path / "project"
    shutil.copytree(FIXTURE, work)
    return work.resolve()


def _sources(root: Path, rel: str) -> set[str]:
    base = root / rel
    if base.is_file():
        return {base.as_posix()}
    return {
        p.as_posix()
        for p in base.rglob("*")
        if p.is_file() and p.suffix in (".php", ".phtml")
    }


class TestGeneratePreloadFile:
    def test_detects_mezzio_and_writes_script(self, project: Path):
        result = generate_preload_file(project, PreloadConfig())

        expected = (
            _sources(project, "src")
            | _sources(project, "config")
            | _sources(project, "vendor/laminas")
            | _sources(project, "public/index.php")
        )
        assert result.target == project / "preload.php"
        assert set(result.report.files) == expected
        # vendor/mezzio/ is part of the mezzio table but absent here
        assert result.report.skipped[SkipReason.MISSING] == 1

        script = result.target.read_text(encoding="utf-8")
        assert "__DIR__ . '/src/Api/ApiHandler.php'," in script
        assert "__DIR__ . '/public/index.php'," in script
        assert "bin/console.php" not in script

    def test_roots_are_anchored_at_project(self, project: Path):
        result = generate_preload_file(project, PreloadConfig(vendors=False))
        assert result.roots == (
            f"{project.as_posix()}/config/",
            f"{project.as_posix()}/public/index.php",
            f"{project.as_posix()}/src/",
        )

    def test_ignores_and_extra_paths(self, project: Path):
        cfg = PreloadConfig(
            project_type=ProjectType.MEZZIO,
            vendors=False,
            paths=["bin/"],
            ignore_paths=["config/autoload/local.php"],
            ignore_symbols=["Api\\"],
        )
        result = generate_preload_file(project, cfg)
        files = set(result.report.files)
        assert (project / "bin" / "console.php").as_posix() in files
        assert (project / "config" / "autoload" / "local.php").as_posix() not in files
        assert not any("/src/Api/" in f for f in files)
        assert result.report.skipped[SkipReason.SYMBOL] == 2

    def test_extra_paths_are_normalised(self, project: Path):
        cfg = PreloadConfig(
            project_type=ProjectType.MEZZIO,
            vendors=False,
            paths=["./bin/", "lib/../src/Api"],
            ignore_symbols=["Api\\ApiHandler"],
        )
        result = generate_preload_file(project, cfg)
        assert f"{project.as_posix()}/bin/" in result.roots
        assert f"{project.as_posix()}/src/Api" in result.roots
        assert not any("/./" in r or "/../" in r for r in result.roots)

        files = result.report.files
        assert f"{project.as_posix()}/bin/console.php" in files
        assert not any(f.endswith("/ApiHandler.php") for f in files)
        # once through src/ and once through src/Api
        assert result.report.skipped[SkipReason.SYMBOL] == 2

    def test_script_never_preloads_itself(self, project: Path):
        cfg = PreloadConfig(filename="bin/preload.php", paths=["bin/"])
        first = generate_preload_file(project, cfg)
        second = generate_preload_file(project, cfg)
        assert set(first.report.files) == set(second.report.files)
        assert (project / "bin" / "preload.php").as_posix() not in second.report.files
        assert second.report.skipped[SkipReason.PATH] == 1

    def test_reads_project_config_when_none_given(self, project: Path):
        (project / ".opcache-preload.yaml").write_text(
            "filename: build/preload.php\nno_vendors: true\n"
        )
        result = generate_preload_file(project)
        assert result.target == project / "build" / "preload.php"
        assert result.target.is_file()
        assert not any("/vendor/" in f for f in result.report.files)

        script = result.target.read_text(encoding="utf-8")
        assert "__DIR__ . '/../src/Api/ApiHandler.php'," in script
        assert project.as_posix() not in script.split("$files = [", 1)[1]

    def test_target_outside_project_is_rejected(self, project: Path):
        with pytest.raises(PreloadTargetError):
            generate_preload_file(project, PreloadConfig(filename="../preload.php"))
        assert not (project.parent / "preload.php").exists()

    def test_missing_classmap_is_fatal(self, project: Path):
        os.remove(project / "vendor" / "composer" / "autoload_classmap.php")
        with pytest.raises(ManifestNotFoundError):
            generate_preload_file(project, PreloadConfig())
        assert not (project / "preload.php").exists()

    def test_result_serialises_to_report_schema(self, project: Path):
        result = generate_preload_file(project, PreloadConfig())
        validate_instance(result.to_dict(), "preload_report.schema.json")


class TestPreloadReport:
    def test_schema_valid_report(self):
        lines: list[str] = []
        report = preload_report(
            [f"{FIXTURE.as_posix()}/src"],
            project_root=FIXTURE,
            ignore_symbols=["App\\"],
            sink=lines.append,
        )
        assert report["schema_version"] == "preload_report_v1"
        assert report["count"] == 3
        assert report["skipped"]["symbol"] == 2
        assert report["skipped"]["extension"] == 1
        assert lines[-1] == "Preloaded 3 paths"

    def test_relative_roots_are_anchored_at_project(self, monkeypatch):
        monkeypatch.chdir(FIXTURE / "public")
        report = preload_report(
            ["src/Api/"],
            project_root=FIXTURE,
            ignore_symbols=["Api\\ApiHandler"],
        )
        assert report["files"] == [f"{FIXTURE.as_posix()}/src/Api/ConfigProvider.php"]
        assert report["skipped"]["symbol"] == 1
