"""
aspect_weaver.weaver
====================

Splices expanded advice into source text.

All matches of one pass were measured against the same (pre-weave) text.
Applying them from the greatest start position down keeps that true: every
splice happens after all the matches still waiting, so their offsets in the
working buffer are unchanged.

Public API
----------
    weave         - rewrite a text for one pointcut's matches
    weave_file    - same, reading and overwriting a file on disk
    read_source   - read a source file (UTF-8, line endings untouched)
    write_source  - write a source file (UTF-8, line endings untouched)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from aspect_weaver.config import Pointcut
from aspect_weaver.errors import FilesystemError, OverlappingMatchError
from aspect_weaver.position import resolve_offset
from aspect_weaver.report import MatchRecord, MatchSet
from aspect_weaver.template import PLACEHOLDER, expand

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def read_source(path: PathLike) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FilesystemError("read", path, exc) from exc


def write_source(path: PathLike, text: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
    except OSError as exc:
        raise FilesystemError("write", path, exc) from exc


def weave(
    text: str,
    matches: MatchSet,
    pointcut: Pointcut,
    *,
    placeholder: str = PLACEHOLDER,
    source: Optional[str] = None,
) -> str:
    """Return *text* with the advice of *pointcut* spliced in at *matches*.

    *matches* is not consumed.  An empty match set returns *text* unchanged.

    Raises
    ------
    PositionNotFound
        A match position does not exist in the working buffer.
    OverlappingMatchError
        A match ends after the start of a match already applied.
    """
    buffer = text
    previous: Optional[MatchRecord] = None
    for record in matches.ordered():
        if previous is not None and record.end > previous.start:
            raise OverlappingMatchError(
                f"{record.source_file}: match {record.start}-{record.end} "
                f"overlaps match {previous.start}-{previous.end}"
            )
        lo = resolve_offset(buffer, record.start, source=source)
        hi = resolve_offset(buffer, record.end, source=source)
        advice = expand(pointcut.advice, record, placeholder)
        logger.debug(
            "%s: replace [%s, %s) %r -> %r",
            source or record.source_file, record.start, record.end,
            buffer[lo:hi], advice,
        )
        buffer = buffer[:lo] + advice + buffer[hi:]
        previous = record
    return buffer


def weave_file(
    path: PathLike,
    matches: MatchSet,
    pointcut: Pointcut,
    *,
    placeholder: str = PLACEHOLDER,
) -> None:
    """Weave the file at *path* in place."""
    original = read_source(path)
    updated = weave(original, matches, pointcut, placeholder=placeholder, source=str(path))
    write_source(path, updated)
    logger.info("wove %d match(es) into %s", len(matches), path)


__all__ = ["weave", "weave_file", "read_source", "write_source"]
