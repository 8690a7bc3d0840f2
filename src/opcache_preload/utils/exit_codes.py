"""Centralized exit-code contract for all CLI commands.

Code  Meaning
----  -------
  0   Success — preload file written, directive or transcript printed
  1   Violation — requested preload target rejected (outside the project)
  2   Error — usage error, missing/malformed classmap or config, missing file
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    VIOLATION = 1
    ERROR = 2
