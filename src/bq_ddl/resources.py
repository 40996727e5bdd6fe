"""Shared dataclasses for the logical schema model.

Every record is frozen: the renderers read them and never mutate them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime


class ColumnMode(enum.Enum):
    """BigQuery field mode."""

    NULLABLE = "NULLABLE"
    REQUIRED = "REQUIRED"
    REPEATED = "REPEATED"


class TableType(enum.Enum):
    """Kind of table being created."""

    NATIVE = "NATIVE"
    EXTERNAL = "EXTERNAL"


class PartitioningMode(enum.Enum):
    """How a table or materialized view is partitioned."""

    NONE = "NONE"
    TIME_UNIT_COLUMN = "TIME_UNIT_COLUMN"
    INGESTION_TIME = "INGESTION_TIME"
    INTEGER_RANGE = "INTEGER_RANGE"


class TimeUnit(enum.Enum):
    """Granularity of time-based partitioning."""

    HOUR = "HOUR"
    DAY = "DAY"
    MONTH = "MONTH"
    YEAR = "YEAR"


@dataclass(frozen=True)
class KeyRef:
    """Reference to a column used by partitioning or clustering."""

    name: str
    is_activated: bool = True


@dataclass(frozen=True)
class Label:
    """A single ``(key, value)`` label pair."""

    key: str
    value: str


@dataclass(frozen=True)
class Column:
    """Represents a column (or a nested struct field).

    ``fields`` holds the children of a ``STRUCT``/``RECORD`` column and
    ``items`` the element definition of an ``ARRAY`` column.
    """

    name: str
    type: str | None
    mode: ColumnMode = ColumnMode.NULLABLE
    fields: tuple[Column, ...] = ()
    items: Column | None = None
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    description: str = ""
    is_activated: bool = True


@dataclass(frozen=True)
class PartitioningSpec:
    """Partitioning settings of a table or materialized view."""

    mode: PartitioningMode = PartitioningMode.NONE
    column: KeyRef | None = None
    time_unit: TimeUnit = TimeUnit.DAY
    range_start: int | None = None
    range_end: int | None = None
    range_interval: int | None = None
    filter_required: bool = False
    expiration_days: float | None = None


NO_PARTITIONING = PartitioningSpec()


@dataclass(frozen=True)
class Database:
    """Represents a BigQuery dataset (``SCHEMA`` in DDL)."""

    name: str
    project_id: str = ""
    friendly_name: str = ""
    description: str = ""
    default_expiration_days: float | None = None
    encryption_key: str = ""
    default_rounding_mode: str = ""
    labels: tuple[Label, ...] = ()
    if_not_exists: bool = False
    is_activated: bool = True


@dataclass(frozen=True)
class Table:
    """Represents a table definition."""

    name: str
    columns: tuple[Column, ...] = ()
    description: str = ""
    friendly_name: str = ""
    or_replace: bool = False
    if_not_exists: bool = False
    temporary: bool = False
    table_type: TableType = TableType.NATIVE
    partitioning: PartitioningSpec = NO_PARTITIONING
    clustering: tuple[KeyRef, ...] = ()
    expiration: datetime | None = None
    encryption_key: str = ""
    default_rounding_mode: str = ""
    labels: tuple[Label, ...] = ()
    is_activated: bool = True

    @property
    def is_external(self) -> bool:
        return self.table_type is TableType.EXTERNAL


@dataclass(frozen=True)
class ViewKey:
    """A ``source_table.source_column AS alias`` reference of a view."""

    name: str
    table_name: str = ""
    alias: str = ""


@dataclass(frozen=True)
class View:
    """Represents a logical or materialized view."""

    name: str
    materialized: bool = False
    or_replace: bool = False
    if_not_exists: bool = False
    select_statement: str = ""
    keys: tuple[ViewKey, ...] = ()
    partitioning: PartitioningSpec = NO_PARTITIONING
    clustering: tuple[KeyRef, ...] = ()
    refresh_interval_minutes: float | None = None
    enable_refresh: bool = False
    description: str = ""
    friendly_name: str = ""
    expiration: datetime | None = None
    labels: tuple[Label, ...] = ()
    is_activated: bool = True


class ChangeOperation(enum.Enum):
    """Schema change kinds understood by the delta renderer."""

    CREATE_DATABASE = "create_database"
    DROP_DATABASE = "drop_database"
    ALTER_DATABASE = "alter_database"
    CREATE_TABLE = "create_table"
    DROP_TABLE = "drop_table"
    ALTER_TABLE_OPTIONS = "alter_table_options"
    ADD_COLUMN = "add_column"
    DROP_COLUMN = "drop_column"
    ALTER_COLUMN_TYPE = "alter_column_type"
    ALTER_COLUMN_DROP_NOT_NULL = "alter_column_drop_not_null"
    ALTER_COLUMN_OPTIONS = "alter_column_options"
    CREATE_VIEW = "create_view"
    DROP_VIEW = "drop_view"
    ALTER_VIEW = "alter_view"


@dataclass(frozen=True)
class Change:
    """An already-classified schema change.

    Only the fields relevant to ``operation`` are read; the rest keep
    their defaults.
    """

    operation: ChangeOperation
    database: Database
    table: Table | None = None
    view: View | None = None
    column: Column | None = None
    object_name: str = ""
    column_name: str = ""
    description: str = ""
