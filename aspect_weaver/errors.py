# aspect_weaver/errors.py
"""
Error types for the aspect weaver.

Every failure in a weaving run is fatal: the first error anywhere aborts the
run, and the command-line front end is the single place that reports it.
The classes below only carry enough structure for that report to be useful.

Error Hierarchy:
────────────────
    WeaveError (base)
    ├── ConfigError              - Aspect.toml missing/invalid, no project root
    ├── ExternalAnalysisError    - analysis command failed / produced nothing
    ├── ArtifactParseError       - a record block does not match the grammar
    │   └── OverlappingMatchError- two matches in one file overlap
    ├── PositionNotFound         - a reported line/column is not in the file
    └── FilesystemError          - read/write/copy/move/delete failure

Error Codes:
────────────
Each class has a code ``AW-NNNN``:
  - 1000-1999: Configuration
  - 2000-2999: External analysis
  - 3000-3999: Artifact parsing
  - 4000-4999: Weaving
  - 5000-5999: Filesystem
"""

from __future__ import annotations

from enum import Enum, unique
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Union


@unique
class ErrorPhase(Enum):
    """Pipeline phase in which an error was raised."""

    CONFIG = "config"
    ANALYSIS = "analysis"
    PARSE = "parse"
    WEAVE = "weave"
    FILESYSTEM = "filesystem"


class WeaveError(Exception):
    """Base class of every aspect-weaver error."""

    code: ClassVar[str] = "AW-0000"
    phase: ClassVar[ErrorPhase] = ErrorPhase.WEAVE

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable view of the error."""
        result: Dict[str, Any] = {
            "code": self.code,
            "phase": self.phase.value,
            "kind": type(self).__name__,
            "message": self.message,
        }
        if self.hint:
            result["hint"] = self.hint
        return result


class ConfigError(WeaveError):
    """Configuration is missing or unparsable, or no project root was found."""

    code = "AW-1001"
    phase = ErrorPhase.CONFIG


class ExternalAnalysisError(WeaveError):
    """The external analysis pass failed or produced no artifacts."""

    code = "AW-2001"
    phase = ErrorPhase.ANALYSIS


class ArtifactParseError(WeaveError):
    """A record block in an analysis artifact does not match the grammar."""

    code = "AW-3001"
    phase = ErrorPhase.PARSE

    def __init__(
        self,
        message: str,
        *,
        block_index: Optional[int] = None,
        excerpt: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        if block_index is not None:
            message = f"record #{block_index}: {message}"
        if excerpt:
            message = f"{message} (near {excerpt!r})"
        super().__init__(message, hint=hint)
        self.block_index = block_index
        self.excerpt = excerpt


class OverlappingMatchError(ArtifactParseError):
    """Two match ranges reported for the same file overlap."""

    code = "AW-3002"


class PositionNotFound(WeaveError):
    """A (line, column) pair does not name a character of the text."""

    code = "AW-4001"
    phase = ErrorPhase.WEAVE

    def __init__(self, line: int, column: int, *, source: Optional[str] = None) -> None:
        where = f" in {source}" if source else ""
        super().__init__(
            f"line {line} column {column} is not found{where}",
            hint="the analysis pass and the weaver may disagree on tab width, "
                 "encoding or line endings",
        )
        self.line = line
        self.column = column
        self.source = source


class FilesystemError(WeaveError):
    """Wraps an ``OSError`` raised while touching the project tree."""

    code = "AW-5001"
    phase = ErrorPhase.FILESYSTEM

    def __init__(
        self,
        action: str,
        path: Union[str, Path],
        cause: Optional[BaseException] = None,
    ) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{action} failed for {path}{detail}")
        self.action = action
        self.path = Path(path)
        self.cause = cause


__all__ = [
    "ErrorPhase",
    "WeaveError",
    "ConfigError",
    "ExternalAnalysisError",
    "ArtifactParseError",
    "OverlappingMatchError",
    "PositionNotFound",
    "FilesystemError",
]
