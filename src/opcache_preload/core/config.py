"""Preload configuration dataclass and its optional YAML project file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import jsonschema
import yaml

from opcache_preload.contracts.load import validate_instance, validation_message
from opcache_preload.core.project_types import parse_project_type
from opcache_preload.model import ProjectType

DEFAULT_FILENAME = "preload.php"

CONFIG_FILENAMES = (".opcache-preload.yaml", ".opcache-preload.yml")


class ConfigError(ValueError):
    """The project config file is unreadable or does not match its schema."""


@dataclass
class PreloadConfig:
    """What to preload and where to write the preload script.

    Can be loaded from ``.opcache-preload.yaml`` or constructed programmatically.
    """

    filename: str = DEFAULT_FILENAME
    project_type: ProjectType | None = None
    vendors: bool = True
    paths: list[str] = field(default_factory=list)
    ignore_paths: list[str] = field(default_factory=list)
    ignore_symbols: list[str] = field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: Path) -> PreloadConfig:
        """Load configuration from a YAML file.

        Raises
        ------
        ConfigError
            If the file cannot be read or parsed, or fails schema validation.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"cannot load {path}: {exc}") from exc

        if data is None:
            data = {}
        try:
            validate_instance(data, "preload_config.schema.json")
        except jsonschema.ValidationError as exc:
            raise ConfigError(f"{path}: {validation_message(exc)}") from exc

        return cls(
            filename=data.get("filename", DEFAULT_FILENAME),
            project_type=parse_project_type(data.get("project_type")),
            vendors=not data.get("no_vendors", False),
            paths=list(data.get("paths", [])),
            ignore_paths=list(data.get("ignore_paths", [])),
            ignore_symbols=list(data.get("ignore_symbols", [])),
        )

    @classmethod
    def discover(cls, root: Path) -> PreloadConfig:
        """Load the first project config file found in *root*, else defaults."""
        for name in CONFIG_FILENAMES:
            candidate = root / name
            if candidate.is_file():
                return cls.from_yaml(candidate)
        return cls()
