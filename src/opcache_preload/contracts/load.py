"""Load bundled JSON schemas and validate instances against them.

Usage::

    from opcache_preload.contracts.load import validate_instance

    validate_instance(report.to_dict(), "preload_report.schema.json")
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema

SCHEMA_DIR = "data/schemas"


def _schema_path(name: str) -> Path:
    """Resolve a bundled schema.

    Priority:
    1. ``src/opcache_preload/data/schemas/`` relative to this file
    2. pip-installed package data via importlib.resources
    """
    canonical = Path(__file__).resolve().parents[1] / SCHEMA_DIR / name
    if canonical.exists():
        return canonical

    with resources.as_file(
        resources.files("opcache_preload") / SCHEMA_DIR / name
    ) as p:
        return p


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled JSON schema by filename."""
    path = _schema_path(name)
    return json.loads(path.read_text(encoding="utf-8"))


def validate_instance(instance: Any, schema_name: str) -> None:
    """Validate *instance* against the named schema.

    Raises ``jsonschema.ValidationError`` on failure.
    """
    schema = load_schema(schema_name)
    jsonschema.validate(instance=instance, schema=schema)


def validation_message(exc: jsonschema.ValidationError) -> str:
    """One-line description of a validation failure, including its location."""
    location = "/".join(str(part) for part in exc.absolute_path)
    if not location:
        return exc.message
    return f"{location}: {exc.message}"
