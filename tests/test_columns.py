"""Tests for ``bq_ddl.columns`` and ``bq_ddl.dialect``."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bq_ddl.columns import (
    column_fragment,
    render_column,
    render_column_type,
    unsupported_columns,
)
from bq_ddl.dialect import (
    BIGQUERY,
    Dialect,
    TypeDescriptor,
    TypeShape,
    load_dialect,
)
from bq_ddl.resources import Column, ColumnMode


class TestRenderColumn:
    """Tests for ``render_column``."""

    def test_required_integer(self) -> None:
        """Legacy INTEGER maps to INT64 and REQUIRED adds NOT NULL."""
        column = Column("id", "INTEGER", ColumnMode.REQUIRED)
        assert render_column(column) == "id INT64 NOT NULL"

    def test_nullable_scalar(self) -> None:
        """Nullable scalars render the bare keyword."""
        assert render_column(Column("note", "STRING")) == "note STRING"

    def test_case_insensitive_tag(self) -> None:
        """Type tags are looked up case-insensitively."""
        assert render_column(Column("n", "int64")) == "n INT64"

    def test_string_length(self) -> None:
        """Length-parameterized types render their length."""
        assert render_column(Column("code", "STRING", length=10)) == "code STRING(10)"

    def test_numeric_precision_and_scale(self) -> None:
        """Precision types render precision and scale."""
        column = Column("amount", "NUMERIC", precision=10, scale=2)
        assert render_column(column) == "amount NUMERIC(10, 2)"

    def test_numeric_precision_only(self) -> None:
        """Scale is optional."""
        column = Column("amount", "BIGNUMERIC", precision=40)
        assert render_column(column) == "amount BIGNUMERIC(40)"

    def test_repeated_scalar(self) -> None:
        """REPEATED wraps the type in ARRAY."""
        column = Column("tags", "STRING", ColumnMode.REPEATED)
        assert render_column(column) == "tags ARRAY<STRING>"

    def test_array_items(self) -> None:
        """ARRAY columns render their element type."""
        column = Column("ids", "ARRAY", items=Column("", "INT64"))
        assert render_column(column) == "ids ARRAY<INT64>"

    def test_struct_fields(self) -> None:
        """Struct children are comma-separated inside STRUCT<...>."""
        column = Column(
            "rec",
            "STRUCT",
            fields=(Column("a", "INT64"), Column("b", "STRING")),
        )
        assert render_column(column) == "rec STRUCT<a INT64, b STRING>"

    def test_repeated_record(self) -> None:
        """A repeated RECORD becomes ARRAY<STRUCT<...>>."""
        column = Column(
            "rec",
            "RECORD",
            ColumnMode.REPEATED,
            fields=(Column("a", "INT64"),),
        )
        assert render_column(column) == "rec ARRAY<STRUCT<a INT64>>"

    def test_deactivated_struct_field(self) -> None:
        """Deactivated children move to the end and are commented inline."""
        column = Column(
            "rec",
            "STRUCT",
            fields=(
                Column("a", "INT64"),
                Column("b", "INT64", is_activated=False),
                Column("c", "INT64"),
            ),
        )
        assert render_column(column) == "rec STRUCT<a INT64, c INT64, /* b INT64 */>"

    def test_deactivated_struct_fields_live(self) -> None:
        """A deactivated struct does not comment its own fields."""
        column = Column(
            "rec",
            "STRUCT",
            fields=(Column("a", "INT64", is_activated=False),),
            is_activated=False,
        )
        assert render_column(column) == "rec STRUCT<a INT64>"
        assert column_fragment(column).render(is_part_of_line=True) == (
            "/* rec STRUCT<a INT64> */"
        )

    def test_nested_deactivated_field(self) -> None:
        """Only the outermost deactivated field is commented."""
        sub = Column(
            "sub",
            "STRUCT",
            fields=(Column("x", "INT64"), Column("y", "INT64", is_activated=False)),
            is_activated=False,
        )
        column = Column("rec", "STRUCT", fields=(Column("a", "INT64"), sub))
        assert render_column(column) == (
            "rec STRUCT<a INT64, /* sub STRUCT<x INT64, y INT64> */>"
        )

    def test_description_escaped(self) -> None:
        """Descriptions render as an escaped OPTIONS clause."""
        column = Column("note", "STRING", description="user's note")
        assert (
            render_column(column)
            == "note STRING OPTIONS(description='user\\'s note')"
        )

    def test_reserved_name_quoted(self) -> None:
        """Reserved column names are back-ticked."""
        assert render_column(Column("group", "STRING")) == "`group` STRING"

    def test_unsupported_type_marker(self, caplog: pytest.LogCaptureFixture) -> None:
        """Unknown tags render a marker and log a warning."""
        with caplog.at_level(logging.WARNING):
            rendered = render_column(Column("x", "FOO"))

        assert rendered == "x <unsupported type: FOO>"
        assert "Unsupported type 'FOO'" in caplog.text

    def test_missing_type_marker(self) -> None:
        """A missing tag renders an empty marker instead of raising."""
        assert render_column(Column("x", None)) == "x <unsupported type: >"

    def test_nested_fields_round_trip(self) -> None:
        """Each inner fragment equals the field rendered on its own."""
        fields = (
            Column("a", "INT64"),
            Column("b", "STRING", ColumnMode.REQUIRED),
            Column("c", "DATE"),
        )
        rendered = render_column(Column("rec", "RECORD", fields=fields))
        inner = rendered[len("rec STRUCT<") : -1].split(", ")

        assert len(inner) == len(fields)
        assert inner == [render_column(f) for f in fields]


class TestRenderColumnType:
    """Tests for ``render_column_type``."""

    def test_ignores_name_and_description(self) -> None:
        """Only type, mode and nested schema are rendered."""
        column = Column("n", "STRING", ColumnMode.REQUIRED, description="d")
        assert render_column_type(column) == "STRING NOT NULL"

    def test_repeated_struct(self) -> None:
        """Nested schema is kept."""
        column = Column(
            "r", "RECORD", ColumnMode.REPEATED, fields=(Column("x", "BOOL"),)
        )
        assert render_column_type(column) == "ARRAY<STRUCT<x BOOL>>"


class TestColumnFragment:
    """Tests for ``column_fragment``."""

    def test_carries_activation(self) -> None:
        """The fragment keeps the uncommented text and the flag."""
        fragment = column_fragment(Column("note", "STRING", is_activated=False))
        assert fragment.text == "note STRING"
        assert fragment.active is False


class TestUnsupportedColumns:
    """Tests for ``unsupported_columns``."""

    def test_nested_paths(self) -> None:
        """Unknown types are reported with dotted paths."""
        columns = [
            Column("ok", "STRING"),
            Column("a", "FOO"),
            Column("r", "RECORD", fields=(Column("b", "BAR"),)),
        ]
        assert unsupported_columns(columns) == ["a", "r.b"]

    def test_array_without_items(self) -> None:
        """An ARRAY without an element type is reported."""
        assert unsupported_columns([Column("arr", "ARRAY")]) == ["arr"]


class TestDialect:
    """Tests for the type tables and ``load_dialect``."""

    def test_default_type(self) -> None:
        """Generic JSON types map to logical tags."""
        assert BIGQUERY.get_default_type("number") == "NUMERIC"
        assert BIGQUERY.get_default_type("Object") == "STRUCT"
        assert BIGQUERY.get_default_type("unknown") is None

    def test_has_type(self) -> None:
        """Aliases count as known types."""
        assert BIGQUERY.has_type("record")
        assert not BIGQUERY.has_type("VARCHAR")
        assert not BIGQUERY.has_type(None)

    def test_type_descriptors_read_only(self) -> None:
        """The built-in table cannot be mutated."""
        descriptors = BIGQUERY.type_descriptors()
        with pytest.raises(TypeError):
            descriptors["NEW"] = TypeDescriptor("NEW")  # type: ignore[index]

    def test_substituted_dialect(self) -> None:
        """A different type table changes the rendering."""
        dialect = Dialect(types={"INTEGER": TypeDescriptor("NUMBER")})
        assert render_column(Column("id", "INTEGER"), dialect) == "id NUMBER"

    def test_load_dialect(self, tmp_path: Path) -> None:
        """TOML entries are merged over the base table."""
        path = tmp_path / "types.toml"
        path.write_text(
            '[types.VARCHAR]\nkeyword = "STRING"\nshape = "length"\n'
            '[default_types]\nnumber = "FLOAT64"\n'
        )
        dialect = load_dialect(path)

        assert dialect.lookup("varchar") == TypeDescriptor("STRING", TypeShape.LENGTH)
        assert dialect.lookup("INT64") == TypeDescriptor("INT64")
        assert dialect.get_default_type("number") == "FLOAT64"

    def test_load_dialect_bad_shape(self, tmp_path: Path) -> None:
        """Unknown shapes raise ``ValueError``."""
        path = tmp_path / "types.toml"
        path.write_text('[types.X]\nkeyword = "X"\nshape = "weird"\n')

        with pytest.raises(ValueError):
            load_dialect(path)
