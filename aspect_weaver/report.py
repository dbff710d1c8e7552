"""
aspect_weaver.report
====================

Parser for the match reports written by the analysis pass.

A report ("artifact") is plain text holding zero or more record blocks.  Each
block starts at the marker ``Found {`` and runs to the next marker or to the
end of the text; anything before the first marker is ignored.  Inside a block:

* the first ``<file>:<line>:<col>: <endLine>:<endCol>`` location is the
  header naming the matched range;
* the first line containing ``src:`` holds the verbatim matched source;
* every ``key: value`` line after the line containing ``args:`` is a named
  capture.

A typical block::

    Found {
        span: src/main.rs:12:5: 12:24 (#0),
        src: "println!(\"hi\")",
        args: {
            "NAME": "hi",
        },
    }

Field values are trimmed of surrounding spaces, double quotes and commas, and
every backslash is deleted.  Nothing else is unescaped.

Public API
----------
    MatchRecord     - one reported match
    MatchSet        - the matches of one file, popped greatest-start first
    parse_record    - parse one record block
    parse_report    - parse a whole artifact into {file: MatchSet}
    load_report     - read (lossy UTF-8) and parse an artifact file
"""

from __future__ import annotations

import heapq
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from aspect_weaver.errors import ArtifactParseError, FilesystemError
from aspect_weaver.position import Position

logger = logging.getLogger(__name__)

RECORD_MARKER = "Found {"
SRC_MARKER = "src:"
ARGS_MARKER = "args:"

_FIELD_TRIM = ' ",'
_KEY_TRIM = ' "'


# ---------------------------------------------------------------------------
# Header grammar
# ---------------------------------------------------------------------------

HEADER_GRAMMAR = Grammar(r'''
    header      = location ":" gap end
    location    = path ":" number ":" number
    end         = number ":" number

    path        = ~r"[^\s]+?(?=:[0-9]+:[0-9]+:\s)"
    number      = ~r"[0-9]+"
    gap         = ~r"\s+"
''')


class _HeaderVisitor(NodeVisitor):
    """Turns a ``header`` parse tree into ``(path, l1, c1, l2, c2)``."""

    def visit_header(self, node, visited_children):
        (path, line, column), _, _, (end_line, end_column) = visited_children
        return path, line, column, end_line, end_column

    def visit_location(self, node, visited_children):
        path, _, line, _, column = visited_children
        return path, line, column

    def visit_end(self, node, visited_children):
        line, _, column = visited_children
        return line, column

    def visit_path(self, node, visited_children):
        return node.text

    def visit_number(self, node, visited_children):
        return int(node.text)

    def generic_visit(self, node, visited_children):
        return visited_children or node


_TOKEN_START = re.compile(r"\S+")


def _find_header(block: str) -> Optional[Tuple[str, int, int, int, int]]:
    """Return the first header found in *block*, or ``None``.

    A header can only start at the beginning of a whitespace-delimited
    token, so each token start is tried in turn.
    """
    visitor = _HeaderVisitor()
    for token in _TOKEN_START.finditer(block):
        try:
            node = HEADER_GRAMMAR.match(block, pos=token.start())
        except ParseError:
            continue
        return visitor.visit(node)
    return None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MatchRecord:
    """One location reported by the analysis pass.

    ``start <= end`` always holds; ``captured_args`` keeps report order.
    """

    source_file: str
    matched_text: str
    start: Position
    end: Position
    captured_args: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ArtifactParseError(
                f"match in {self.source_file} ends ({self.end}) "
                f"before it starts ({self.start})"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.source_file,
            "start": [self.start.line, self.start.column],
            "end": [self.end.line, self.end.column],
            "src": self.matched_text,
            "args": dict(self.captured_args),
        }


class MatchSet:
    """Matches of one file, retrieved in descending ``start`` order.

    Records with equal starts come out in the order they were pushed.
    """

    def __init__(self, records: Optional[List[MatchRecord]] = None) -> None:
        self._heap: List[Tuple[int, int, int, MatchRecord]] = []
        self._counter = 0
        for record in records or ():
            self.push(record)

    def push(self, record: MatchRecord) -> None:
        entry = (-record.start.line, -record.start.column, self._counter, record)
        self._counter += 1
        heapq.heappush(self._heap, entry)

    def pop(self) -> MatchRecord:
        """Remove and return the record with the greatest start."""
        if not self._heap:
            raise IndexError("pop from an empty MatchSet")
        return heapq.heappop(self._heap)[-1]

    def ordered(self) -> List[MatchRecord]:
        """All records in pop order, without consuming them."""
        return [entry[-1] for entry in sorted(self._heap)]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __iter__(self) -> Iterator[MatchRecord]:
        return iter(self.ordered())

    def __repr__(self) -> str:
        return f"MatchSet({len(self)} records)"


def _clean_value(raw: str) -> str:
    return raw.strip(_FIELD_TRIM).replace("\\", "")


def _lines(block: str) -> List[str]:
    return [line.rstrip("\r") for line in block.split("\n")]


def parse_record(block: str, *, index: Optional[int] = None) -> MatchRecord:
    """Parse a single record block.

    Raises
    ------
    ArtifactParseError
        When the block carries no location header.
    """
    header = _find_header(block)
    lines = _lines(block)
    if header is None:
        raise ArtifactParseError(
            "no '<file>:<line>:<col>: <line>:<col>' header",
            block_index=index,
            excerpt=lines[0].strip() if lines else "",
        )
    path, line, column, end_line, end_column = header
    try:
        start = Position(line, column)
        end = Position(end_line, end_column)
    except ValueError as exc:
        raise ArtifactParseError(str(exc), block_index=index) from exc

    matched_text = ""
    for text in lines:
        if SRC_MARKER in text:
            matched_text = _clean_value(text.split(":", 1)[1])
            break

    args: Dict[str, str] = {}
    in_args = False
    for text in lines:
        if ARGS_MARKER in text:
            in_args = True
            continue
        if not in_args:
            continue
        key, sep, value = text.partition(":")
        if sep:
            args[key.strip(_KEY_TRIM)] = _clean_value(value)

    return MatchRecord(
        source_file=path,
        matched_text=matched_text,
        start=start,
        end=end,
        captured_args=args,
    )


def parse_report(text: str) -> Dict[str, MatchSet]:
    """Parse every record block of *text*, grouped by source file."""
    bounds = [m.start() for m in re.finditer(re.escape(RECORD_MARKER), text)]
    bounds.append(len(text))

    result: Dict[str, MatchSet] = {}
    for index, (lo, hi) in enumerate(zip(bounds, bounds[1:])):
        record = parse_record(text[lo:hi], index=index)
        result.setdefault(record.source_file, MatchSet()).push(record)
    logger.debug(
        "parsed %d record(s) for %d file(s)",
        sum(len(s) for s in result.values()),
        len(result),
    )
    return result


def load_report(path: Union[str, Path]) -> Dict[str, MatchSet]:
    """Read an artifact from disk (lossy UTF-8) and parse it."""
    path = Path(path)
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        raise FilesystemError("read", path, exc) from exc
    return parse_report(raw.decode("utf-8", errors="replace"))


__all__ = [
    "RECORD_MARKER",
    "HEADER_GRAMMAR",
    "MatchRecord",
    "MatchSet",
    "parse_record",
    "parse_report",
    "load_report",
]
