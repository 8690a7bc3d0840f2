"""opcache_preload — discover PHP sources and generate opcache preload files."""

__all__ = [
    "__version__",
    "PathLoader",
    "generate_preload_file",
    "ini_directive",
    "preload_report",
]
__version__ = "0.1.0"

from opcache_preload.api import (  # noqa: E402, F401
    generate_preload_file,
    ini_directive,
    preload_report,
)
from opcache_preload.core.loader import PathLoader  # noqa: E402, F401
