# tests/test_snapshot.py
"""
Tests for saving and restoring the source tree around a run.
"""

import shutil

import pytest

from aspect_weaver.errors import FilesystemError
from aspect_weaver.snapshot import source_snapshot, take_snapshot


def _tree(root):
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*")) if p.is_file()
    }


class TestSourceSnapshot:

    def test_original_restored_and_woven_kept_aside(self, project):
        before = _tree(project / "src")
        with source_snapshot(project) as snap:
            (project / "src" / "main.rs").write_text("woven\n", encoding="utf-8")
            assert snap.saved.is_dir()
        assert _tree(project / "src") == before
        assert (project / "src-modified" / "main.rs").read_text(encoding="utf-8") == "woven\n"
        assert not (project / "src-saved").exists()

    def test_restores_even_when_the_run_fails(self, project):
        before = _tree(project / "src")
        with pytest.raises(RuntimeError):
            with source_snapshot(project):
                (project / "src" / "main.rs").write_text("half", encoding="utf-8")
                (project / "src" / "new.rs").write_text("new", encoding="utf-8")
                raise RuntimeError("boom")
        assert _tree(project / "src") == before
        assert (project / "src-modified" / "new.rs").exists()

    def test_failed_restore_still_logs_the_run_error(self, project, caplog):
        with pytest.raises(FilesystemError):
            with source_snapshot(project) as snap:
                shutil.rmtree(snap.saved)
                raise RuntimeError("boom")
        assert "run failed before the restore: boom" in caplog.text

    def test_stale_copies_are_replaced(self, project):
        (project / "src-saved").mkdir()
        (project / "src-saved" / "stale.rs").write_text("old")
        (project / "src-modified").mkdir()
        (project / "src-modified" / "stale.rs").write_text("old")
        with source_snapshot(project):
            pass
        assert not (project / "src" / "stale.rs").exists()
        assert not (project / "src-modified" / "stale.rs").exists()
        assert (project / "src-modified" / "main.rs").exists()

    def test_nested_directories(self, project):
        (project / "src" / "net").mkdir()
        (project / "src" / "net" / "mod.rs").write_text("mod x;\n")
        before = _tree(project / "src")
        with source_snapshot(project):
            (project / "src" / "net" / "mod.rs").write_text("changed")
        assert _tree(project / "src") == before

    def test_custom_source_dir(self, project):
        (project / "lib").mkdir()
        (project / "lib" / "a.rs").write_text("a")
        with source_snapshot(project, "lib") as snap:
            assert snap.saved == project / "lib-saved"
        assert (project / "lib-modified" / "a.rs").exists()

    def test_missing_source_dir(self, tmp_path):
        with pytest.raises(FilesystemError):
            take_snapshot(tmp_path, "src")
