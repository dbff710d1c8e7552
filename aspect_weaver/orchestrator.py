"""
aspect_weaver.orchestrator
==========================

Drives a weaving run, one pointcut at a time.

For every pointcut, in configuration order:

1. ask the analysis runner for the artifacts of the pointcut's condition;
2. parse each artifact and weave every file it names, reading the file fresh
   from disk so that later pointcuts see the output of earlier ones;
3. delete the consumed artifact (best effort).

The first error anywhere propagates to the caller; nothing is rolled back
here.  Restoring the source tree is the job of :mod:`aspect_weaver.snapshot`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

from aspect_weaver.analysis import AnalysisRunner
from aspect_weaver.config import Pointcut
from aspect_weaver.report import load_report
from aspect_weaver.template import PLACEHOLDER
from aspect_weaver.weaver import weave_file

logger = logging.getLogger(__name__)


@dataclass
class WeaveSummary:
    pointcuts: int = 0
    artifacts: int = 0
    files: int = 0
    matches: int = 0

    def __str__(self) -> str:
        return (
            f"{self.pointcuts} pointcut(s), {self.artifacts} artifact(s), "
            f"{self.matches} match(es) in {self.files} file(s)"
        )


def discard_artifact(path: Path) -> None:
    """Remove a consumed artifact; failure is only logged."""
    try:
        path.unlink()
    except OSError as exc:
        logger.warning("could not remove artifact %s: %s", path, exc)


class Orchestrator:
    """Runs pointcuts against the project at *root*."""

    def __init__(
        self,
        root: Union[str, Path],
        analysis: AnalysisRunner,
        *,
        placeholder: str = PLACEHOLDER,
        keep_artifacts: bool = False,
    ) -> None:
        self.root = Path(root)
        self.analysis = analysis
        self.placeholder = placeholder
        self.keep_artifacts = keep_artifacts

    def resolve(self, source_file: str) -> Path:
        """Reported paths are relative to the project root unless absolute."""
        path = Path(source_file)
        return path if path.is_absolute() else self.root / path

    def apply_artifact(self, artifact: Path, pointcut: Pointcut, summary: WeaveSummary) -> None:
        for source_file, matches in load_report(artifact).items():
            weave_file(
                self.resolve(source_file),
                matches,
                pointcut,
                placeholder=self.placeholder,
            )
            summary.files += 1
            summary.matches += len(matches)
        summary.artifacts += 1

    def run_pointcut(self, pointcut: Pointcut, summary: WeaveSummary) -> None:
        logger.info("pointcut %r", pointcut.condition)
        for artifact in self.analysis.run(pointcut.condition):
            logger.info("consuming %s", artifact)
            self.apply_artifact(artifact, pointcut, summary)
            if not self.keep_artifacts:
                discard_artifact(artifact)
        summary.pointcuts += 1

    def run(self, pointcuts: Iterable[Pointcut]) -> WeaveSummary:
        summary = WeaveSummary()
        for pointcut in pointcuts:
            self.run_pointcut(pointcut, summary)
        return summary


__all__ = ["Orchestrator", "WeaveSummary", "discard_artifact"]
