#!/usr/bin/env python3
"""aspect_weaver/main.py: CLI entry-point for the aspect weaver.

Usage examples
--------------
    # Weave every pointcut of ./Aspect.toml into the current project
    aspect-weaver run

    # Same thing; ``run`` is the default command
    aspect-weaver -v

    # Show the records of one analysis artifact
    aspect-weaver parse target/debug/main.RUST_ASPECT_OUTPUT.txt --format json

    # Apply one existing artifact with an ad-hoc advice template
    aspect-weaver weave target/debug/main.RUST_ASPECT_OUTPUT.txt --advice '/*hit*/$'

Exit codes
----------
    0   Success.
    1   A weaving error aborted the run (configuration, analysis, artifact,
        position or filesystem error).
    2   Usage error.

The module doubles as ``python -m aspect_weaver`` via the companion
``aspect_weaver/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence, TextIO

from termcolor import colored

from aspect_weaver import __version__
from aspect_weaver.analysis import ArtifactList, CommandAnalysis
from aspect_weaver.config import CONFIG_FILENAME, Pointcut, find_project_root, load_config
from aspect_weaver.errors import WeaveError
from aspect_weaver.orchestrator import Orchestrator
from aspect_weaver.report import load_report
from aspect_weaver.snapshot import source_snapshot
from aspect_weaver.template import PLACEHOLDER

_log = logging.getLogger("aspect_weaver")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``aspect_weaver`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("aspect_weaver")
    root.setLevel(level)
    if not any(getattr(h, "_aspect_weaver", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        handler._aspect_weaver = True  # type: ignore[attr-defined]
        root.addHandler(handler)


def _paint(text: str, color: Optional[str], use_color: bool, bold: bool = False) -> str:
    if not use_color:
        return text
    return colored(text, color, attrs=["bold"] if bold else None)


def _status(message: str, use_color: bool, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stderr
    stream.write(_paint(message, "green", use_color, bold=True) + "\n")


def _report_error(exc: WeaveError, use_color: bool, stream: Optional[TextIO] = None) -> None:
    """Print *exc* as ``error[AW-NNNN]: message`` with an optional help line."""
    stream = stream or sys.stderr
    head = _paint(f"error[{exc.code}]", "red", use_color, bold=True)
    stream.write(f"{head}: {exc.message}\n")
    if exc.hint:
        prefix = _paint("help", "cyan", use_color, bold=True)
        stream.write(f"  = {prefix}: {exc.hint}\n")
    stream.flush()


# ===========================================================================
# Commands
# ===========================================================================

def cmd_run(args: argparse.Namespace) -> int:
    """Weave every configured pointcut into the project."""
    root = find_project_root(args.root)
    config = load_config(root, args.config)
    settings = config.settings

    _status(f"=== Aspect weaving: {config.name} ===", args.color)
    orchestrator = Orchestrator(
        root,
        CommandAnalysis.from_settings(root, settings),
        placeholder=settings.placeholder,
    )
    with source_snapshot(root, settings.source_dir) as snap:
        summary = orchestrator.run(config.pointcuts)

    _status(f"woven {summary}; output in {snap.modified}", args.color)
    return EXIT_OK


def cmd_parse(args: argparse.Namespace) -> int:
    """Print the records of one artifact."""
    report = load_report(args.artifact)
    out = sys.stdout
    if args.format == "json":
        payload = {
            name: [record.to_dict() for record in matches]
            for name, matches in report.items()
        }
        out.write(json.dumps(payload, indent=2) + "\n")
        return EXIT_OK

    for name, matches in report.items():
        out.write(f"{name}: {len(matches)} match(es)\n")
        for record in matches:
            out.write(f"  {record.start}-{record.end} src={record.matched_text!r}")
            if record.captured_args:
                out.write(f" args={record.captured_args!r}")
            out.write("\n")
    return EXIT_OK


def cmd_weave(args: argparse.Namespace) -> int:
    """Apply one existing artifact with an ad-hoc advice template."""
    root = Path(args.root).resolve() if args.root else Path.cwd()
    artifact = Path(args.artifact)
    orchestrator = Orchestrator(
        root,
        ArtifactList([artifact]),
        placeholder=args.placeholder,
        keep_artifacts=args.keep_artifact,
    )
    summary = orchestrator.run([Pointcut(condition=str(artifact), advice=args.advice)])
    _status(f"woven {summary}", args.color)
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser with subcommands."""

    parser = argparse.ArgumentParser(
        prog="aspect-weaver",
        description=(
            "Weave advice templates into source files at the locations an\n"
            "external analysis pass reports for each pointcut."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              aspect-weaver run
              aspect-weaver parse target/debug/x.RUST_ASPECT_OUTPUT.txt -f json
              aspect-weaver weave target/debug/x.RUST_ASPECT_OUTPUT.txt --advice '/*X*/$'
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    parser.add_argument(
        "--no-color",
        dest="color",
        action="store_false",
        help="Disable coloured status and error lines.",
    )
    parser.set_defaults(func=cmd_run, root=None, config=CONFIG_FILENAME)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- run ---------------------------------------------------------------
    p_run = subparsers.add_parser(
        "run",
        help="Weave all pointcuts of the project configuration (default).",
        description=(
            "Snapshot the source tree, run the analysis pass and weave the "
            "advice of every pointcut in order, then restore the original "
            "tree and keep the woven one aside."
        ),
    )
    p_run.add_argument(
        "--root",
        metavar="DIR",
        default=None,
        help="Project root (default: current directory).",
    )
    p_run.add_argument(
        "-c", "--config",
        metavar="FILE",
        default=CONFIG_FILENAME,
        help=f"Configuration file name inside the root (default: {CONFIG_FILENAME}).",
    )
    p_run.set_defaults(func=cmd_run)

    # --- parse -------------------------------------------------------------
    p_parse = subparsers.add_parser(
        "parse",
        help="Parse an analysis artifact and print its records.",
    )
    p_parse.add_argument("artifact", metavar="ARTIFACT", help="Artifact file.")
    p_parse.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text).",
    )
    p_parse.set_defaults(func=cmd_parse)

    # --- weave -------------------------------------------------------------
    p_weave = subparsers.add_parser(
        "weave",
        help="Apply one existing artifact with an advice template.",
        description=(
            "Weave the matches of ARTIFACT in place, without running the "
            "analysis pass and without snapshotting the source tree."
        ),
    )
    p_weave.add_argument("artifact", metavar="ARTIFACT", help="Artifact file.")
    p_weave.add_argument(
        "-a", "--advice",
        required=True,
        metavar="TEMPLATE",
        help="Advice template to insert at every match.",
    )
    p_weave.add_argument(
        "--root",
        metavar="DIR",
        default=None,
        help="Directory that reported paths are relative to (default: cwd).",
    )
    p_weave.add_argument(
        "--placeholder",
        default=PLACEHOLDER,
        metavar="CHAR",
        help=f"Matched-text placeholder (default: {PLACEHOLDER!r}).",
    )
    p_weave.add_argument(
        "--keep-artifact",
        action="store_true",
        help="Do not delete the artifact after weaving.",
    )
    p_weave.set_defaults(func=cmd_weave)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the aspect-weaver CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_USAGE

    _configure_logging(args.verbose)

    try:
        return args.func(args)
    except WeaveError as exc:
        _log.debug("aborting run", exc_info=True)
        _report_error(exc, args.color)
        return EXIT_ERROR
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
