"""
aspect_weaver.snapshot
======================

Keeps the live source tree untouched across a weaving run.

On entry the source directory is copied aside to ``<src>-saved``.  On exit,
whether the run succeeded or not, the (possibly partly) woven directory is
moved to ``<src>-modified`` and the saved copy is moved back into place.

Typical usage::

    with source_snapshot(root, "src") as snap:
        orchestrator.run(config.pointcuts)
    print("woven sources in", snap.modified)
"""

from __future__ import annotations

import logging
import shutil
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Union

from aspect_weaver.errors import FilesystemError

logger = logging.getLogger(__name__)

SAVED_SUFFIX = "-saved"
MODIFIED_SUFFIX = "-modified"


@dataclass(frozen=True)
class Snapshot:
    source: Path
    saved: Path
    modified: Path


def _remove_tree(path: Path) -> None:
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise FilesystemError("remove", path, exc) from exc


def _move(src: Path, dst: Path) -> None:
    try:
        shutil.move(str(src), str(dst))
    except OSError as exc:
        raise FilesystemError(f"move to {dst}", src, exc) from exc


def take_snapshot(root: Union[str, Path], source_dir: str = "src") -> Snapshot:
    """Copy ``<root>/<source_dir>`` aside, replacing a stale copy."""
    root = Path(root)
    snap = Snapshot(
        source=root / source_dir,
        saved=root / f"{source_dir}{SAVED_SUFFIX}",
        modified=root / f"{source_dir}{MODIFIED_SUFFIX}",
    )
    _remove_tree(snap.saved)
    try:
        shutil.copytree(snap.source, snap.saved)
    except OSError as exc:
        raise FilesystemError(f"copy to {snap.saved}", snap.source, exc) from exc
    logger.info("saved %s to %s", snap.source, snap.saved)
    return snap


def restore_snapshot(snap: Snapshot) -> None:
    """Move the woven tree to ``modified`` and put the saved copy back."""
    _remove_tree(snap.modified)
    _move(snap.source, snap.modified)
    _move(snap.saved, snap.source)
    logger.info("restored %s; woven sources kept in %s", snap.source, snap.modified)


@contextmanager
def source_snapshot(root: Union[str, Path], source_dir: str = "src") -> Iterator[Snapshot]:
    """Snapshot the source tree for the duration of the ``with`` block."""
    snap = take_snapshot(root, source_dir)
    try:
        yield snap
    except BaseException as exc:
        try:
            restore_snapshot(snap)
        except FilesystemError:
            # shadowed by the restore error otherwise
            logger.error("run failed before the restore: %s", exc)
            raise
        raise
    restore_snapshot(snap)


__all__ = ["Snapshot", "take_snapshot", "restore_snapshot", "source_snapshot"]
