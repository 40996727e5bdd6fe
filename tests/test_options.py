"""Tests for ``bq_ddl.options``."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from bq_ddl.options import (
    OptionValues,
    build_options,
    database_options,
    labels_literal,
    table_options,
    timestamp_literal,
    view_options,
)
from bq_ddl.resources import (
    Database,
    KeyRef,
    Label,
    PartitioningMode,
    PartitioningSpec,
    Table,
    TableType,
    View,
)

_LABEL_PAIR = re.compile(r"\('((?:[^'\\]|\\.)*)', '((?:[^'\\]|\\.)*)'\)")

DAY_PARTITIONED = PartitioningSpec(
    mode=PartitioningMode.TIME_UNIT_COLUMN,
    column=KeyRef("created_at"),
    filter_required=True,
    expiration_days=3,
)


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


class TestBuildOptions:
    """Tests for ``build_options``."""

    def test_all_empty(self) -> None:
        """No options render no clause at all."""
        assert build_options(OptionValues()) == ""

    def test_single_flag(self) -> None:
        """Boolean options render ``true``."""
        values = OptionValues(require_partition_filter=True)
        assert build_options(values) == "OPTIONS(require_partition_filter=true)"

    def test_fixed_order(self) -> None:
        """Keys follow the fixed order regardless of construction order."""
        values = OptionValues(
            labels=(Label("a", "b"),),
            kms_key_name="projects/p/keys/k",
            description="d",
            friendly_name="f",
        )
        assert build_options(values) == (
            "OPTIONS(friendly_name='f', description='d', "
            "kms_key_name='projects/p/keys/k', labels=[('a', 'b')])"
        )

    def test_false_and_empty_omitted(self) -> None:
        """Empty strings, ``None`` and ``False`` never produce a key."""
        values = OptionValues(
            description="",
            require_partition_filter=False,
            enable_refresh=False,
            partition_expiration_days=None,
            friendly_name="x",
        )
        rendered = build_options(values)

        assert rendered == "OPTIONS(friendly_name='x')"
        assert "description" not in rendered
        assert "require_partition_filter" not in rendered

    def test_numbers(self) -> None:
        """Whole floats render as integers, fractions as decimals."""
        assert build_options(OptionValues(default_table_expiration_days=7.0)) == (
            "OPTIONS(default_table_expiration_days=7)"
        )
        assert build_options(OptionValues(partition_expiration_days=0.5)) == (
            "OPTIONS(partition_expiration_days=0.5)"
        )

    def test_description_escaped(self) -> None:
        """String options are escaped."""
        values = OptionValues(description="it's")
        assert build_options(values) == "OPTIONS(description='it\\'s')"

    def test_expiration(self) -> None:
        """Expirations render as TIMESTAMP literals."""
        values = OptionValues(
            expiration_timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc)
        )
        assert build_options(values) == (
            "OPTIONS(expiration_timestamp=TIMESTAMP '2025-01-01 00:00:00 UTC')"
        )


class TestTimestampLiteral:
    """Tests for ``timestamp_literal``."""

    def test_converts_to_utc(self) -> None:
        """Aware datetimes are converted to UTC."""
        value = datetime(2025, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
        assert timestamp_literal(value) == "TIMESTAMP '2025-01-01 00:00:00 UTC'"

    def test_naive_is_utc(self) -> None:
        """Naive datetimes are taken as UTC."""
        value = datetime(2024, 6, 15, 12, 30, 5)
        assert timestamp_literal(value) == "TIMESTAMP '2024-06-15 12:30:05 UTC'"


class TestLabels:
    """Tests for ``labels_literal``."""

    def test_parse_back(self) -> None:
        """Parsing the literal recovers the original pairs."""
        labels = (
            Label("env", "prod"),
            Label("owner", "o'brien"),
            Label("path", "a\\b"),
        )
        literal = labels_literal(labels)
        parsed = {
            (_unescape(k), _unescape(v)) for k, v in _LABEL_PAIR.findall(literal)
        }

        assert literal.startswith("[") and literal.endswith("]")
        assert parsed == {(label.key, label.value) for label in labels}


class TestTableOptions:
    """Tests for ``table_options``."""

    def test_partitioned_table(self) -> None:
        """Partition options apply to partitioned native tables."""
        table = Table("t", partitioning=DAY_PARTITIONED)
        assert build_options(table_options(table)) == (
            "OPTIONS(partition_expiration_days=3, require_partition_filter=true)"
        )

    def test_external_table_drops_partition_options(self) -> None:
        """External tables never request a partition filter."""
        table = Table(
            "t",
            table_type=TableType.EXTERNAL,
            partitioning=DAY_PARTITIONED,
        )
        assert build_options(table_options(table)) == ""

    def test_unpartitioned_table(self) -> None:
        """A filter flag without partitioning is dropped."""
        table = Table("t", partitioning=PartitioningSpec(filter_required=True))
        assert table_options(table).require_partition_filter is False

    def test_table_fields(self) -> None:
        """Description, expiration, key and labels come from the table."""
        expiration = datetime(2030, 1, 1, tzinfo=timezone.utc)
        table = Table(
            "t",
            description="Orders",
            friendly_name="Orders table",
            expiration=expiration,
            encryption_key="k",
            default_rounding_mode="ROUND_HALF_EVEN",
            labels=(Label("env", "dev"),),
        )
        values = table_options(table)

        assert values.description == "Orders"
        assert values.friendly_name == "Orders table"
        assert values.expiration_timestamp == expiration
        assert values.kms_key_name == "k"
        assert values.default_rounding_mode == "ROUND_HALF_EVEN"
        assert values.labels == (Label("env", "dev"),)


class TestDatabaseAndViewOptions:
    """Tests for ``database_options`` and ``view_options``."""

    def test_database(self) -> None:
        """Datasets use the default_* option names."""
        database = Database("d", default_expiration_days=30, encryption_key="k")
        assert build_options(database_options(database)) == (
            "OPTIONS(default_table_expiration_days=30, default_kms_key_name='k')"
        )

    def test_logical_view_drops_refresh(self) -> None:
        """Refresh settings only apply to materialized views."""
        view = View("v", enable_refresh=True, refresh_interval_minutes=30)
        assert build_options(view_options(view)) == ""

    def test_materialized_view_refresh(self) -> None:
        """Materialized views render refresh settings."""
        view = View(
            "v", materialized=True, enable_refresh=True, refresh_interval_minutes=30
        )
        assert build_options(view_options(view)) == (
            "OPTIONS(enable_refresh=true, refresh_interval_minutes=30)"
        )
