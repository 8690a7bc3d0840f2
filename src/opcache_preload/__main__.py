"""CLI entry-point for opcache_preload.

Usage:
    python -m opcache_preload generate [-f preload.php] [-p mezzio] [--no-vendors]
    python -m opcache_preload generate --include lib/ --ignore-path config/autoload/local.php
    python -m opcache_preload ini [-f preload.php] [-p /srv/app]
    python -m opcache_preload load <root> [<root> ...] [--ignore-symbol 'App\\Debug\\'] [--json]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from opcache_preload import __version__
from opcache_preload.api import generate_preload_file, preload_report
from opcache_preload.core.classmap import ManifestError
from opcache_preload.core.config import DEFAULT_FILENAME, ConfigError, PreloadConfig
from opcache_preload.core.ini import ini_directive
from opcache_preload.core.project_types import parse_project_type, valid_types
from opcache_preload.core.script import PreloadTargetError
from opcache_preload.utils.exit_codes import ExitCode
from opcache_preload.utils.json_norm import stable_json_dump

_GENERATE_HELP = """\
Generate an opcache preload file for your project. By default it writes
"preload.php" in the root of your project; override this with --filename.

The project type decides which directories are preloaded. Without
--project-type it is detected from composer.json (one of: {types}).
Use --no-vendors to skip vendor directories.
"""

_INI_HELP = """\
Print the php.ini opcache.preload directive for a generated preload file,
typically as:

    opcache-preload ini >> path/to/php.ini

The directive needs an absolute path. Pass --path to prefix the --filename
(relative to the project root) with the directory the project is deployed to;
otherwise the real path of --filename is used.
"""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_ignore_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--ignore-path",
        dest="ignore_paths",
        action="append",
        default=[],
        metavar="PATH",
        help="Skip files equal to or containing PATH (repeatable).",
    )
    p.add_argument(
        "--ignore-symbol",
        dest="ignore_symbols",
        action="append",
        default=[],
        metavar="NAME",
        help="Skip class files whose class name starts with NAME (repeatable).",
    )


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="PHP project root holding vendor/composer (default: current directory).",
    )
    p.add_argument(
        "--json",
        dest="json_out",
        action="store_true",
        default=False,
        help="Print the preload report JSON to stdout.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log skipped files and other diagnostics to stderr.",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="opcache-preload",
        description="Generate opcache preload files for PHP projects.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = p.add_subparsers(dest="command")

    # ── generate ────────────────────────────────────────────────────
    gen_p = sub.add_parser(
        "generate",
        help="Generate an opcache preload file for your project.",
        description=_GENERATE_HELP.format(types=", ".join(valid_types())),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    gen_p.add_argument(
        "-f",
        "--filename",
        default=None,
        help=f"Preload file to write, relative to the project root (default: {DEFAULT_FILENAME}).",
    )
    gen_p.add_argument(
        "-p",
        "--project-type",
        dest="project_type",
        default=None,
        help=f"Project type; one of: {', '.join(valid_types())}.",
    )
    gen_p.add_argument(
        "--no-vendors",
        dest="no_vendors",
        action="store_true",
        default=False,
        help="Do not add vendor directories to the preloaded paths.",
    )
    gen_p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: .opcache-preload.yaml in the project root).",
    )
    gen_p.add_argument(
        "--include",
        dest="include",
        action="append",
        default=[],
        metavar="PATH",
        help="Additional file or directory to preload (repeatable).",
    )
    _add_ignore_arguments(gen_p)
    _add_common_arguments(gen_p)

    # ── ini ─────────────────────────────────────────────────────────
    ini_p = sub.add_parser(
        "ini",
        help="Print the php.ini directive enabling the preload file.",
        description=_INI_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ini_p.add_argument(
        "-f",
        "--filename",
        default=DEFAULT_FILENAME,
        help="Preload filename.",
    )
    ini_p.add_argument(
        "-p",
        "--path",
        default=None,
        help="Absolute path to prefix to the preload filename.",
    )

    # ── load (dry run) ──────────────────────────────────────────────
    load_p = sub.add_parser(
        "load",
        help="List the files a set of roots would preload, without writing anything.",
    )
    load_p.add_argument(
        "roots",
        nargs="+",
        metavar="ROOT",
        help="File or directory to traverse.",
    )
    _add_ignore_arguments(load_p)
    _add_common_arguments(load_p)

    return p


def _resolve_config(args: argparse.Namespace, root: Path) -> PreloadConfig:
    """Merge the YAML config with command-line flags (flags win, lists extend)."""
    cfg = PreloadConfig.from_yaml(args.config) if args.config else PreloadConfig.discover(root)
    if args.filename is not None:
        cfg.filename = args.filename
    if args.project_type is not None:
        cfg.project_type = parse_project_type(args.project_type)
    if args.no_vendors:
        cfg.vendors = False
    cfg.paths.extend(args.include)
    cfg.ignore_paths.extend(args.ignore_paths)
    cfg.ignore_symbols.extend(args.ignore_symbols)
    return cfg


def _handle_generate(args: argparse.Namespace) -> int:
    """Dispatch ``opcache-preload generate``."""
    root: Path = (args.project_root or Path.cwd()).resolve()
    if not root.is_dir():
        print(f"error: project root does not exist: {root}", file=sys.stderr)
        return ExitCode.ERROR

    try:
        cfg = _resolve_config(args, root)
        result = generate_preload_file(root, cfg)
    except PreloadTargetError as e:
        print(f"error: {e}", file=sys.stderr)
        return ExitCode.VIOLATION
    except (ConfigError, ManifestError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return ExitCode.ERROR

    if args.json_out:
        stable_json_dump(result.to_dict(), sys.stdout)
        return ExitCode.SUCCESS

    print(f'Created opcache preload file "{result.target}" ({result.report.count} files)')
    print("Add the following line to your php.ini to enable it:")
    print(f"    {ini_directive(str(result.target))}")
    print("You can print this line again with: opcache-preload ini")
    return ExitCode.SUCCESS


def _handle_ini(args: argparse.Namespace) -> int:
    """Dispatch ``opcache-preload ini``."""
    try:
        print(ini_directive(args.filename, args.path))
    except FileNotFoundError as e:
        print(f"error: {e}; pass --path or generate the file first", file=sys.stderr)
        return ExitCode.ERROR
    return ExitCode.SUCCESS


def _handle_load(args: argparse.Namespace) -> int:
    """Dispatch ``opcache-preload load``."""
    sink = None if args.json_out else print
    try:
        report = preload_report(
            args.roots,
            project_root=args.project_root,
            ignore_paths=args.ignore_paths,
            ignore_symbols=args.ignore_symbols,
            sink=sink,
        )
    except ManifestError as e:
        print(f"error: {e}", file=sys.stderr)
        return ExitCode.ERROR

    if args.json_out:
        stable_json_dump(report, sys.stdout)
    return ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Entry-point — returns an exit code (see ``utils.exit_codes``)."""
    args = _build_parser().parse_args(argv)
    _configure_logging(getattr(args, "verbose", False))

    if args.command == "generate":
        return _handle_generate(args)

    if args.command == "ini":
        return _handle_ini(args)

    if args.command == "load":
        return _handle_load(args)

    print("error: use 'generate', 'ini' or 'load'.", file=sys.stderr)
    return ExitCode.ERROR


if __name__ == "__main__":
    raise SystemExit(main())
