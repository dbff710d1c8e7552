"""
aspect_weaver.config
====================

Loading of the pointcut configuration (``Aspect.toml``).

The file lives in the project root, next to the project manifest::

    name = "tracing"

    [[pointcuts]]
    condition = "call(std::fs::read)"
    advice = '{ log::debug!("read"); $ }'

    [[pointcuts]]
    condition = "fn_body(*::handle_*)"
    advice = "/*entered*/$"

    # optional
    [weaver]
    source_dir = "src"
    build_dir = "target"
    artifact_suffix = "RUST_ASPECT_OUTPUT.txt"
    placeholder = "$"
    command = ["cargo", "+AOP", "rustc", "--", "-Z", 'aop-inspect="{condition}"']

Pointcuts are kept in file order; they are woven strictly in that order.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib

from aspect_weaver.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "Aspect.toml"
PROJECT_MANIFEST = "Cargo.toml"

DEFAULT_COMMAND: Tuple[str, ...] = (
    "cargo", "+AOP", "rustc", "--", "-Z", 'aop-inspect="{condition}"',
)


@dataclass(frozen=True)
class Pointcut:
    """Where to look (opaque to the weaver) and what to insert there."""

    condition: str
    advice: str


@dataclass(frozen=True)
class WeaverSettings:
    source_dir: str = "src"
    build_dir: str = "target"
    artifact_suffix: str = "RUST_ASPECT_OUTPUT.txt"
    placeholder: str = "$"
    command: Tuple[str, ...] = DEFAULT_COMMAND


@dataclass(frozen=True)
class Config:
    name: str
    pointcuts: List[Pointcut]
    settings: WeaverSettings = field(default_factory=WeaverSettings)


def find_project_root(
    start: Optional[Union[str, Path]] = None,
    manifest: str = PROJECT_MANIFEST,
) -> Path:
    """Return *start* (default: cwd) if it holds the project manifest."""
    root = Path(start) if start is not None else Path(os.getcwd())
    root = root.resolve()
    if not (root / manifest).is_file():
        raise ConfigError(
            f"{root} does not look like a project root (no {manifest})",
            hint="run from the directory that holds the project manifest",
        )
    return root


def _require_str(table: Dict[str, Any], key: str, where: str) -> str:
    if key not in table:
        raise ConfigError(f"{where}: missing key '{key}'")
    value = table[key]
    if not isinstance(value, str):
        raise ConfigError(
            f"{where}: '{key}' must be a string, got {type(value).__name__}"
        )
    return value


def _parse_settings(table: Any) -> WeaverSettings:
    if table is None:
        return WeaverSettings()
    if not isinstance(table, dict):
        raise ConfigError("[weaver] must be a table")
    defaults = WeaverSettings()
    values: Dict[str, Any] = {}
    for key in ("source_dir", "build_dir", "artifact_suffix", "placeholder"):
        if key in table:
            values[key] = _require_str(table, key, "[weaver]")
    if "command" in table:
        command = table["command"]
        if (
            not isinstance(command, list)
            or not command
            or not all(isinstance(arg, str) for arg in command)
        ):
            raise ConfigError("[weaver]: 'command' must be a non-empty list of strings")
        values["command"] = tuple(command)
    unknown = set(table) - set(defaults.__dataclass_fields__)
    if unknown:
        logger.warning("ignoring unknown [weaver] key(s): %s", ", ".join(sorted(unknown)))
    return WeaverSettings(**values)


def parse_config(text: str, *, source: str = CONFIG_FILENAME) -> Config:
    """Parse configuration TOML *text*."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{source}: invalid TOML: {exc}") from exc

    name = _require_str(data, "name", source)
    raw_pointcuts = data.get("pointcuts", [])
    if not isinstance(raw_pointcuts, list):
        raise ConfigError(f"{source}: 'pointcuts' must be an array of tables")

    pointcuts: List[Pointcut] = []
    for index, entry in enumerate(raw_pointcuts):
        where = f"{source}: pointcuts[{index}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where} must be a table")
        pointcuts.append(
            Pointcut(
                condition=_require_str(entry, "condition", where),
                advice=_require_str(entry, "advice", where),
            )
        )

    return Config(
        name=name,
        pointcuts=pointcuts,
        settings=_parse_settings(data.get("weaver")),
    )


def load_config(root: Union[str, Path], filename: str = CONFIG_FILENAME) -> Config:
    """Read and parse ``<root>/<filename>``."""
    path = Path(root) / filename
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    config = parse_config(raw.decode("utf-8", errors="replace"), source=str(path))
    logger.info("loaded %s: system %r, %d pointcut(s)", path, config.name, len(config.pointcuts))
    return config


__all__ = [
    "CONFIG_FILENAME",
    "PROJECT_MANIFEST",
    "DEFAULT_COMMAND",
    "Pointcut",
    "WeaverSettings",
    "Config",
    "find_project_root",
    "parse_config",
    "load_config",
]
