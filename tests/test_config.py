"""Tests for ``bq_ddl.config``."""

from __future__ import annotations

from pathlib import Path

import pytest

from bq_ddl.config import (
    CONFIG_FILENAME,
    DdlConfig,
    discover_config,
    load_config,
    resolve_dialect,
)
from bq_ddl.dialect import BIGQUERY, TypeDescriptor, TypeShape

VALID_TOML = """\
[project]
id = "my-project"

[render]
terminator = ";;"
type_table = "types.toml"
"""

MINIMAL_TOML = """\
[project]
id = "proj"
"""

TYPES_TOML = """\
[types.VARCHAR]
keyword = "STRING"
shape = "length"
"""


class TestLoadConfig:
    """Tests for ``load_config``."""

    def test_valid_toml(self, tmp_path: Path) -> None:
        """Parse a well-formed config file."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text(VALID_TOML)
        config = load_config(cfg_path)

        assert config.project.id == "my-project"
        assert config.render.terminator == ";;"
        assert config.render.type_table == "types.toml"

    def test_missing_project_id(self, tmp_path: Path) -> None:
        """Raise ``KeyError`` when ``[project]`` has no ``id``."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text("[project]\nname = 'x'\n")

        with pytest.raises(KeyError):
            load_config(cfg_path)

    def test_render_defaults(self, tmp_path: Path) -> None:
        """Default the ``[render]`` table when omitted."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text(MINIMAL_TOML)
        config = load_config(cfg_path)

        assert config.render.terminator == ";"
        assert config.render.type_table is None

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields the defaults."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text("")

        assert load_config(cfg_path) == DdlConfig()


class TestDiscoverConfig:
    """Tests for ``discover_config``."""

    def test_finds_in_cwd(self, tmp_path: Path) -> None:
        """Discover config in the start directory."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text(VALID_TOML)

        found = discover_config(start=tmp_path)
        assert found == cfg_path.resolve()

    def test_walks_up_to_parent(self, tmp_path: Path) -> None:
        """Discover config in a parent directory."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text(VALID_TOML)
        child = tmp_path / "sub" / "deep"
        child.mkdir(parents=True)

        found = discover_config(start=child)
        assert found == cfg_path.resolve()

    def test_raises_when_absent(self, tmp_path: Path) -> None:
        """Raise ``FileNotFoundError`` when no config exists."""
        with pytest.raises(FileNotFoundError):
            discover_config(start=tmp_path)


class TestResolveDialect:
    """Tests for ``resolve_dialect``."""

    def test_builtin_without_type_table(self, tmp_path: Path) -> None:
        """Without a type table the built-in dialect is used."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text(MINIMAL_TOML)

        assert resolve_dialect(load_config(cfg_path), cfg_path) is BIGQUERY

    def test_relative_to_config(self, tmp_path: Path) -> None:
        """The type table path is relative to the config file."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text(VALID_TOML)
        (tmp_path / "types.toml").write_text(TYPES_TOML)

        dialect = resolve_dialect(load_config(cfg_path), cfg_path)
        assert dialect.lookup("VARCHAR") == TypeDescriptor("STRING", TypeShape.LENGTH)

    def test_missing_type_table(self, tmp_path: Path) -> None:
        """A type table that does not exist raises ``FileNotFoundError``."""
        cfg_path = tmp_path / CONFIG_FILENAME
        cfg_path.write_text(VALID_TOML)

        with pytest.raises(FileNotFoundError):
            resolve_dialect(load_config(cfg_path), cfg_path)
