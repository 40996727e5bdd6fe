"""Build the ``OPTIONS(...)`` clause of databases, tables and views."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from bq_ddl.names import quote_string
from bq_ddl.resources import Database, Label, PartitioningMode, Table, View


@dataclass(frozen=True)
class OptionValues:
    """Every option the builder recognizes.

    Strings and numbers are omitted when empty or ``None``; boolean
    options are omitted unless ``True``.
    """

    friendly_name: str = ""
    description: str = ""
    expiration_timestamp: datetime | None = None
    default_table_expiration_days: float | None = None
    partition_expiration_days: float | None = None
    default_rounding_mode: str = ""
    require_partition_filter: bool = False
    enable_refresh: bool = False
    refresh_interval_minutes: float | None = None
    kms_key_name: str = ""
    default_kms_key_name: str = ""
    labels: tuple[Label, ...] = ()


def timestamp_literal(value: datetime) -> str:
    """Render *value* as a ``TIMESTAMP`` literal in UTC.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return f"TIMESTAMP '{utc:%Y-%m-%d %H:%M:%S} UTC'"


def _number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def labels_literal(labels: Iterable[Label]) -> str:
    """Render labels as an array of ``(key, value)`` struct literals."""
    pairs = ", ".join(
        f"({quote_string(label.key)}, {quote_string(label.value)})"
        for label in labels
    )
    return f"[{pairs}]"


def _string(value: str) -> str | None:
    return quote_string(value) if value else None


def _optional_number(value: float | None) -> str | None:
    return _number(value) if value is not None else None


def _flag(value: bool) -> str | None:
    return "true" if value else None


# Fixed rendering order.  Each renderer returns None to omit the option.
_OPTIONS: tuple[tuple[str, Callable[[OptionValues], str | None]], ...] = (
    ("friendly_name", lambda o: _string(o.friendly_name)),
    ("description", lambda o: _string(o.description)),
    (
        "expiration_timestamp",
        lambda o: timestamp_literal(o.expiration_timestamp)
        if o.expiration_timestamp
        else None,
    ),
    (
        "default_table_expiration_days",
        lambda o: _optional_number(o.default_table_expiration_days),
    ),
    (
        "partition_expiration_days",
        lambda o: _optional_number(o.partition_expiration_days),
    ),
    ("default_rounding_mode", lambda o: _string(o.default_rounding_mode)),
    ("require_partition_filter", lambda o: _flag(o.require_partition_filter)),
    ("enable_refresh", lambda o: _flag(o.enable_refresh)),
    (
        "refresh_interval_minutes",
        lambda o: _optional_number(o.refresh_interval_minutes),
    ),
    ("kms_key_name", lambda o: _string(o.kms_key_name)),
    ("default_kms_key_name", lambda o: _string(o.default_kms_key_name)),
    ("labels", lambda o: labels_literal(o.labels) if o.labels else None),
)


def build_options(values: OptionValues) -> str:
    """Assemble the ``OPTIONS(...)`` clause.

    Args:
        values: Option values to render.

    Returns:
        ``OPTIONS(key=value, ...)`` in a fixed key order, or ``""`` when
        every option is omitted.
    """
    pairs = []
    for key, render in _OPTIONS:
        rendered = render(values)
        if rendered is not None:
            pairs.append(f"{key}={rendered}")
    if not pairs:
        return ""
    return f"OPTIONS({', '.join(pairs)})"


def table_options(table: Table) -> OptionValues:
    """Collect the options of *table*.

    Partition options only apply to partitioned, non-external tables;
    ``require_partition_filter`` is dropped otherwise even when set.
    """
    partitioned = (
        not table.is_external
        and table.partitioning.mode is not PartitioningMode.NONE
    )
    return OptionValues(
        friendly_name=table.friendly_name,
        description=table.description,
        expiration_timestamp=table.expiration,
        partition_expiration_days=(
            table.partitioning.expiration_days if partitioned else None
        ),
        default_rounding_mode=table.default_rounding_mode,
        require_partition_filter=partitioned and table.partitioning.filter_required,
        kms_key_name=table.encryption_key,
        labels=table.labels,
    )


def database_options(database: Database) -> OptionValues:
    """Collect the options of *database*."""
    return OptionValues(
        friendly_name=database.friendly_name,
        description=database.description,
        default_table_expiration_days=database.default_expiration_days,
        default_rounding_mode=database.default_rounding_mode,
        default_kms_key_name=database.encryption_key,
        labels=database.labels,
    )


def view_options(view: View) -> OptionValues:
    """Collect the options of *view*; refresh settings are materialized-only."""
    return OptionValues(
        friendly_name=view.friendly_name,
        description=view.description,
        expiration_timestamp=view.expiration,
        enable_refresh=view.materialized and view.enable_refresh,
        refresh_interval_minutes=(
            view.refresh_interval_minutes if view.materialized else None
        ),
        labels=view.labels,
    )
