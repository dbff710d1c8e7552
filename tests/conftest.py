# tests/conftest.py
"""
Shared fixtures and helpers for the aspect-weaver test-suite.

Artifact text is built with :func:`make_block`, which renders a record the
way the analysis pass prints it::

    Found {
        span: src/main.rs:1:9: 1:9 (#0),
        src: "",
        args: {
            "NAME": "value",
        },
    }
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest


# ═══════════════════════════════════════════════════════════════════════
#  Artifact builders
# ═══════════════════════════════════════════════════════════════════════

def make_block(
    path: str,
    start: Tuple[int, int],
    end: Tuple[int, int],
    src: str = "",
    args: Optional[Dict[str, str]] = None,
) -> str:
    lines = [
        "Found {",
        f"    span: {path}:{start[0]}:{start[1]}: {end[0]}:{end[1]} (#0),",
        f'    src: "{src}",',
    ]
    if args is not None:
        lines.append("    args: {")
        for key, value in args.items():
            lines.append(f'        "{key}": "{value}",')
        lines.append("    },")
    lines.append("}")
    return "\n".join(lines) + "\n"


SAMPLE_ARTIFACT = (
    "compiling demo v0.1.0\n"
    + make_block("src/main.rs", (2, 5), (2, 19), src='println!(\\"hi\\")',
                 args={"MSG": "hi", "MACRO": "println"})
    + make_block("src/main.rs", (5, 1), (5, 4), src="foo")
    + make_block("src/lib.rs", (1, 1), (1, 1))
)


# ═══════════════════════════════════════════════════════════════════════
#  Fake analysis runner
# ═══════════════════════════════════════════════════════════════════════

class FakeAnalysis:
    """Stands in for the external analysis pass.

    *producers* maps a condition to a callable that receives the project
    root and returns the artifact text for that condition.  Each call writes
    the text under ``target/`` and returns its path, like the real tool.
    """

    def __init__(self, root: Path, producers: Dict[str, Callable[[Path], str]]):
        self.root = root
        self.producers = producers
        self.calls: List[str] = []

    def run(self, condition: str) -> List[Path]:
        self.calls.append(condition)
        text = self.producers[condition](self.root)
        out_dir = self.root / "target" / "debug"
        out_dir.mkdir(parents=True, exist_ok=True)
        artifact = out_dir / f"{len(self.calls)}.RUST_ASPECT_OUTPUT.txt"
        artifact.write_text(text, encoding="utf-8")
        return [artifact]


# ═══════════════════════════════════════════════════════════════════════
#  Fixtures
# ═══════════════════════════════════════════════════════════════════════

@pytest.fixture
def project(tmp_path):
    """A minimal project: manifest, Aspect.toml-less, one source file."""
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\n', encoding="utf-8")
    src = tmp_path / "src"
    src.mkdir()
    (src / "main.rs").write_text("fn f() {}\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def write_config(project):
    """Write ``Aspect.toml`` into the project and return its path."""
    def _write(text: str) -> Path:
        path = project / "Aspect.toml"
        path.write_text(text, encoding="utf-8")
        return path
    return _write
