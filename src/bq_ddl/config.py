"""TOML configuration loading and config file discovery."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from bq_ddl.dialect import BIGQUERY, Dialect, load_dialect

CONFIG_FILENAME = "bq_ddl.toml"


@dataclass(frozen=True)
class ProjectConfig:
    """GCP project configuration."""

    id: str = ""


@dataclass(frozen=True)
class RenderConfig:
    """Script rendering settings."""

    terminator: str = ";"
    type_table: str | None = None


@dataclass(frozen=True)
class DdlConfig:
    """Top-level configuration parsed from ``bq_ddl.toml``."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    render: RenderConfig = field(default_factory=RenderConfig)


def load_config(path: Path) -> DdlConfig:
    """Read and parse a ``bq_ddl.toml`` file.

    Both the ``[project]`` and ``[render]`` tables are optional.

    Args:
        path: Absolute or relative path to the TOML config file.

    Returns:
        Parsed ``DdlConfig``.

    Raises:
        FileNotFoundError: If *path* does not exist.
        KeyError: If ``[project]`` is present without an ``id``.
    """
    with path.open("rb") as fh:
        raw = tomllib.load(fh)

    project = ProjectConfig()
    if "project" in raw:
        project = ProjectConfig(id=raw["project"]["id"])

    render_raw = raw.get("render", {})
    render = RenderConfig(
        terminator=render_raw.get("terminator", ";"),
        type_table=render_raw.get("type_table"),
    )
    return DdlConfig(project=project, render=render)


def discover_config(start: Path | None = None) -> Path:
    """Walk from *start* upward looking for ``bq_ddl.toml``.

    Args:
        start: Directory to begin the search.  Defaults to the current
            working directory.

    Returns:
        Absolute path to the discovered config file.

    Raises:
        FileNotFoundError: If no ``bq_ddl.toml`` is found between *start*
            and the filesystem root.
    """
    current = (start or Path.cwd()).resolve()

    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

        parent = current.parent
        if parent == current:
            break
        current = parent

    msg = f"{CONFIG_FILENAME} not found (searched from {start or Path.cwd()})"
    raise FileNotFoundError(msg)


def resolve_dialect(config: DdlConfig, config_path: Path | None) -> Dialect:
    """Load the type table named in the config, if any.

    The ``type_table`` path is resolved relative to the config file's
    parent directory.

    Args:
        config: Parsed configuration.
        config_path: Path to the ``bq_ddl.toml`` that was loaded, or
            ``None`` when running on defaults.

    Returns:
        The configured ``Dialect``, or the built-in BigQuery one.
    """
    if not config.render.type_table:
        return BIGQUERY
    base = config_path.resolve().parent if config_path else Path.cwd()
    return load_dialect(base / config.render.type_table)
