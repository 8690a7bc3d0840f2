"""Tests for the opcache.preload php.ini directive."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from opcache_preload.core.ini import ini_directive, preload_path


class TestPreloadPath:
    def test_prefix_path(self):
        assert preload_path("preload.php", "/srv/app") == f"/srv/app{os.sep}preload.php"

    def test_strips_separators_at_the_join(self):
        assert preload_path("/build/preload.php", "/srv/app//") == (
            f"/srv/app{os.sep}build/preload.php"
        )

    def test_realpath_of_existing_file(self, tmp_path: Path, monkeypatch):
        (tmp_path / "preload.php").write_text("<?php\n")
        monkeypatch.chdir(tmp_path)
        assert preload_path() == os.path.realpath(tmp_path / "preload.php")

    def test_missing_file_without_prefix(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(FileNotFoundError, match="preload.php"):
            preload_path()


def test_ini_directive_format():
    assert ini_directive("preload.php", "/srv/app") == (
        f"opcache.preload=/srv/app{os.sep}preload.php"
    )
