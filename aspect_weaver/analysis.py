"""
aspect_weaver.analysis
======================

The external analysis pass.

The weaver does not decide where advice goes.  For each pointcut an external
tool (by default an instrumented ``cargo rustc``) is run with the pointcut's
condition; it leaves one or more report files ("artifacts") somewhere under
the build directory.  This module runs that tool and finds the artifacts.

Anything implementing :class:`AnalysisRunner` can stand in for the tool,
which is how the tests drive the orchestrator.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Protocol, Sequence, Union, runtime_checkable

from aspect_weaver.config import DEFAULT_COMMAND, WeaverSettings
from aspect_weaver.errors import ExternalAnalysisError, FilesystemError

logger = logging.getLogger(__name__)

CONDITION_FIELD = "{condition}"


@runtime_checkable
class AnalysisRunner(Protocol):
    """Runs the analysis for one condition and returns its artifact paths."""

    def run(self, condition: str) -> List[Path]:
        ...


def find_artifacts(directory: Union[str, Path], suffix: str) -> List[Path]:
    """Return every file under *directory* whose name ends with *suffix*.

    A missing directory yields an empty list.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []
    found: List[Path] = []
    try:
        for dirpath, _dirnames, filenames in os.walk(directory, onerror=_raise):
            for name in filenames:
                if name.endswith(suffix):
                    found.append(Path(dirpath) / name)
    except OSError as exc:
        raise FilesystemError("scan", directory, exc) from exc
    return sorted(found)


def _raise(exc: OSError) -> None:
    raise exc


def render_command(command: Sequence[str], condition: str) -> List[str]:
    """Fill ``{condition}`` into every argument of *command*."""
    return [arg.replace(CONDITION_FIELD, condition) for arg in command]


class ArtifactList:
    """Hands out artifacts that already exist, whatever the condition."""

    def __init__(self, artifacts: Sequence[Union[str, Path]]) -> None:
        self.artifacts = [Path(p) for p in artifacts]

    def run(self, condition: str) -> List[Path]:
        missing = [p for p in self.artifacts if not p.is_file()]
        if missing:
            raise ExternalAnalysisError(
                "artifact not found: " + ", ".join(str(p) for p in missing)
            )
        return list(self.artifacts)


class CommandAnalysis:
    """Runs an external command per condition, then collects its artifacts."""

    def __init__(
        self,
        root: Union[str, Path],
        command: Sequence[str] = DEFAULT_COMMAND,
        build_dir: str = "target",
        artifact_suffix: str = "RUST_ASPECT_OUTPUT.txt",
    ) -> None:
        self.root = Path(root)
        self.command = tuple(command)
        self.build_dir = self.root / build_dir
        self.artifact_suffix = artifact_suffix

    @classmethod
    def from_settings(cls, root: Union[str, Path], settings: WeaverSettings) -> "CommandAnalysis":
        return cls(
            root,
            command=settings.command,
            build_dir=settings.build_dir,
            artifact_suffix=settings.artifact_suffix,
        )

    def run(self, condition: str) -> List[Path]:
        argv = render_command(self.command, condition)
        logger.info("running analysis: %s", " ".join(argv))
        try:
            completed = subprocess.run(argv, cwd=self.root, check=False)
        except OSError as exc:
            raise ExternalAnalysisError(
                f"failed to execute {argv[0]!r}: {exc}"
            ) from exc
        # The analyser still reports matches when the woven code fails to build.
        if completed.returncode != 0:
            logger.warning(
                "analysis command exited with status %d for condition %r",
                completed.returncode,
                condition,
            )

        artifacts = find_artifacts(self.build_dir, self.artifact_suffix)
        if not artifacts:
            raise ExternalAnalysisError(
                f"no '*{self.artifact_suffix}' artifacts under {self.build_dir} "
                f"for condition {condition!r}"
            )
        logger.info("found %d artifact(s)", len(artifacts))
        return artifacts


__all__ = ["AnalysisRunner", "ArtifactList", "CommandAnalysis", "find_artifacts", "render_command"]
