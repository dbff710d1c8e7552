"""aspect_weaver: splice advice into source files at analysed locations.

This package rewrites source files by inserting expanded advice templates
at the locations an external analysis pass reports for each pointcut.

Submodules
----------
position
    ``Position`` and the line/column ↔ offset mapping.

report
    Parser for analysis artifacts: ``MatchRecord``, ``MatchSet``,
    ``parse_report``.

template
    Advice template expansion (captured arguments and the ``$``
    placeholder).

weaver
    Descending-order splicing of one pointcut's matches into a file.

config
    ``Aspect.toml`` loading and project root detection.

analysis
    The external analysis runner and artifact discovery.

snapshot
    Save/restore of the source tree around a run.

orchestrator
    Sequential per-pointcut driver.

main
    CLI entry-point with subcommands: ``run``, ``parse``, ``weave``.

Usage
-----
Command-line::

    aspect-weaver run
    python -m aspect_weaver parse target/debug/x.RUST_ASPECT_OUTPUT.txt

Programmatic::

    from aspect_weaver.config import Pointcut
    from aspect_weaver.report import parse_report
    from aspect_weaver.weaver import weave

    for name, matches in parse_report(artifact_text).items():
        new_text = weave(old_text, matches, Pointcut("...", "/*X*/$"))
"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "analysis",
    "config",
    "errors",
    "main",
    "orchestrator",
    "position",
    "report",
    "snapshot",
    "template",
    "weaver",
]
