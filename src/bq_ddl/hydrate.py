"""Build the typed schema records from raw documents.

Two inputs are understood:

* a JSON schema document (``databases`` holding ``tables`` and ``views``,
  or a ``changes`` list for alter scripts), keyed in snake_case;
* a BigQuery REST table resource, as printed by
  ``bq show --format=json``, read offline through
  ``google.cloud.bigquery.Table.from_api_repr``.

Unknown keys are ignored (and logged at debug level); a missing ``name``
raises ``KeyError`` and an unknown enum value raises ``ValueError``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from google.cloud import bigquery

from bq_ddl.dialect import BIGQUERY, Dialect
from bq_ddl.resources import (
    Change,
    ChangeOperation,
    Column,
    ColumnMode,
    Database,
    KeyRef,
    Label,
    PartitioningMode,
    PartitioningSpec,
    Table,
    TableType,
    TimeUnit,
    View,
    ViewKey,
)

logger = logging.getLogger(__name__)

_MS_PER_DAY = 86_400_000

_COLUMN_KEYS = frozenset(
    {
        "name", "type", "json_type", "mode", "fields", "items", "length",
        "precision", "scale", "description", "is_activated",
    }
)
_TABLE_KEYS = frozenset(
    {
        "name", "columns", "description", "friendly_name", "or_replace",
        "if_not_exists", "temporary", "table_type", "partitioning",
        "clustering", "expiration", "encryption_key", "default_rounding_mode",
        "labels", "is_activated",
    }
)
_VIEW_KEYS = frozenset(
    {
        "name", "materialized", "or_replace", "if_not_exists",
        "select_statement", "keys", "partitioning", "clustering",
        "refresh_interval_minutes", "enable_refresh", "description",
        "friendly_name", "expiration", "labels", "is_activated",
    }
)
_DATABASE_KEYS = frozenset(
    {
        "name", "project_id", "friendly_name", "description",
        "default_expiration_days", "encryption_key", "default_rounding_mode",
        "labels", "if_not_exists", "is_activated", "tables", "views",
    }
)

_COLUMN_OPERATIONS = frozenset(
    {
        ChangeOperation.ADD_COLUMN,
        ChangeOperation.DROP_COLUMN,
        ChangeOperation.ALTER_COLUMN_TYPE,
        ChangeOperation.ALTER_COLUMN_DROP_NOT_NULL,
        ChangeOperation.ALTER_COLUMN_OPTIONS,
    }
)


def _report_unknown(raw: Mapping[str, Any], known: frozenset[str], kind: str) -> None:
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.debug("Ignoring unknown %s keys: %s", kind, ", ".join(unknown))


def load_document(path: Path) -> dict[str, Any]:
    """Read a JSON document from *path*.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is not valid JSON or not a JSON object.
    """
    with path.open(encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        msg = f"{path} must contain a JSON object, got {type(raw).__name__}"
        raise ValueError(msg)
    return raw


def parse_expiration(value: Any) -> datetime | None:
    """Parse an expiration given as epoch milliseconds, ISO-8601 or datetime.

    Returns:
        An aware UTC ``datetime``, or ``None`` for empty values.
    """
    if value in (None, "", 0):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) or str(value).isdigit():
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def labels_from_raw(raw: Any) -> tuple[Label, ...]:
    """Accept labels as a mapping or a list of ``{"key", "value"}`` items."""
    if not raw:
        return ()
    if isinstance(raw, Mapping):
        return tuple(Label(str(k), str(v)) for k, v in raw.items())
    return tuple(Label(str(item["key"]), str(item.get("value", ""))) for item in raw)


def key_ref_from_raw(raw: Any) -> KeyRef:
    if isinstance(raw, str):
        return KeyRef(raw)
    return KeyRef(raw["name"], raw.get("is_activated", True))


def _key_refs(raw: Iterable[Any] | None) -> tuple[KeyRef, ...]:
    return tuple(key_ref_from_raw(item) for item in raw or ())


def column_from_dict(raw: Mapping[str, Any], dialect: Dialect = BIGQUERY) -> Column:
    """Build a ``Column`` from a document entry.

    When ``type`` is absent, a generic ``json_type`` (``string``,
    ``number``, ``object`` ...) is mapped through the dialect's default
    type table.
    """
    _report_unknown(raw, _COLUMN_KEYS, "column")
    type_tag = raw.get("type")
    if not type_tag and raw.get("json_type"):
        type_tag = dialect.get_default_type(raw["json_type"])

    items = raw.get("items")
    return Column(
        name=raw["name"],
        type=type_tag,
        mode=ColumnMode(str(raw.get("mode") or "NULLABLE").upper()),
        fields=tuple(
            column_from_dict(f, dialect) for f in raw.get("fields") or ()
        ),
        items=column_from_dict({"name": "", **items}, dialect) if items else None,
        length=raw.get("length"),
        precision=raw.get("precision"),
        scale=raw.get("scale"),
        description=raw.get("description") or "",
        is_activated=raw.get("is_activated", True),
    )


def partitioning_from_dict(raw: Mapping[str, Any] | None) -> PartitioningSpec:
    if not raw:
        return PartitioningSpec()
    range_raw = raw.get("range") or {}
    column = raw.get("column")
    return PartitioningSpec(
        mode=PartitioningMode(str(raw.get("mode") or "NONE").upper()),
        column=key_ref_from_raw(column) if column else None,
        time_unit=TimeUnit(str(raw.get("time_unit") or "DAY").upper()),
        range_start=range_raw.get("start"),
        range_end=range_raw.get("end"),
        range_interval=range_raw.get("interval"),
        filter_required=bool(raw.get("filter_required", False)),
        expiration_days=raw.get("expiration_days"),
    )


def table_from_dict(raw: Mapping[str, Any], dialect: Dialect = BIGQUERY) -> Table:
    """Build a ``Table`` from a document entry."""
    _report_unknown(raw, _TABLE_KEYS, "table")
    return Table(
        name=raw["name"],
        columns=tuple(
            column_from_dict(c, dialect) for c in raw.get("columns") or ()
        ),
        description=raw.get("description") or "",
        friendly_name=raw.get("friendly_name") or "",
        or_replace=bool(raw.get("or_replace", False)),
        if_not_exists=bool(raw.get("if_not_exists", False)),
        temporary=bool(raw.get("temporary", False)),
        table_type=TableType(str(raw.get("table_type") or "NATIVE").upper()),
        partitioning=partitioning_from_dict(raw.get("partitioning")),
        clustering=_key_refs(raw.get("clustering")),
        expiration=parse_expiration(raw.get("expiration")),
        encryption_key=raw.get("encryption_key") or "",
        default_rounding_mode=raw.get("default_rounding_mode") or "",
        labels=labels_from_raw(raw.get("labels")),
        is_activated=raw.get("is_activated", True),
    )


def view_from_dict(raw: Mapping[str, Any]) -> View:
    """Build a ``View`` from a document entry."""
    _report_unknown(raw, _VIEW_KEYS, "view")
    keys = tuple(
        ViewKey(
            name=key["name"],
            table_name=key.get("table_name", ""),
            alias=key.get("alias", ""),
        )
        for key in raw.get("keys") or ()
    )
    return View(
        name=raw["name"],
        materialized=bool(raw.get("materialized", False)),
        or_replace=bool(raw.get("or_replace", False)),
        if_not_exists=bool(raw.get("if_not_exists", False)),
        select_statement=raw.get("select_statement") or "",
        keys=keys,
        partitioning=partitioning_from_dict(raw.get("partitioning")),
        clustering=_key_refs(raw.get("clustering")),
        refresh_interval_minutes=raw.get("refresh_interval_minutes"),
        enable_refresh=bool(raw.get("enable_refresh", False)),
        description=raw.get("description") or "",
        friendly_name=raw.get("friendly_name") or "",
        expiration=parse_expiration(raw.get("expiration")),
        labels=labels_from_raw(raw.get("labels")),
        is_activated=raw.get("is_activated", True),
    )


def database_from_dict(raw: Mapping[str, Any], project_id: str = "") -> Database:
    """Build a ``Database``; *project_id* applies when the entry has none."""
    _report_unknown(raw, _DATABASE_KEYS, "database")
    return Database(
        name=raw["name"],
        project_id=raw.get("project_id") or project_id,
        friendly_name=raw.get("friendly_name") or "",
        description=raw.get("description") or "",
        default_expiration_days=raw.get("default_expiration_days"),
        encryption_key=raw.get("encryption_key") or "",
        default_rounding_mode=raw.get("default_rounding_mode") or "",
        labels=labels_from_raw(raw.get("labels")),
        if_not_exists=bool(raw.get("if_not_exists", False)),
        is_activated=raw.get("is_activated", True),
    )


def change_from_dict(
    raw: Mapping[str, Any],
    database: Database,
    dialect: Dialect = BIGQUERY,
) -> Change:
    """Build a ``Change``; an entry-level ``database`` overrides *database*.

    Raises:
        KeyError: If ``operation`` is missing, or a column-level change
            names no table or no column.
        ValueError: If ``operation`` is unknown.
    """
    if raw.get("database"):
        database = database_from_dict(raw["database"], database.project_id)
    operation = ChangeOperation(str(raw["operation"]).lower())
    column = raw.get("column")
    table = raw.get("table")
    view = raw.get("view")
    object_name = raw.get("object_name") or (table or view or {}).get("name", "")
    column_name = raw.get("column_name") or (column or {}).get("name", "")

    if operation in _COLUMN_OPERATIONS and not (object_name and column_name):
        msg = f"Change '{operation.value}' needs a table and a column name"
        raise KeyError(msg)

    return Change(
        operation=operation,
        database=database,
        table=table_from_dict(table, dialect) if table else None,
        view=view_from_dict(view) if view else None,
        column=column_from_dict(column, dialect) if column else None,
        object_name=object_name,
        column_name=column_name,
        description=raw.get("description") or "",
    )


def changes_from_document(
    document: Mapping[str, Any],
    project_id: str = "",
    dialect: Dialect = BIGQUERY,
) -> list[Change]:
    """Build every change of an alter document."""
    database = database_from_dict(
        document.get("database") or {"name": ""},
        document.get("project_id") or project_id,
    )
    return [change_from_dict(c, database, dialect) for c in document["changes"]]


# ---------------------------------------------------------------------------
# BigQuery REST resources
# ---------------------------------------------------------------------------


def column_from_schema_field(field: bigquery.SchemaField) -> Column:
    """Convert a ``SchemaField`` (with nested fields) to a ``Column``."""
    return Column(
        name=field.name,
        type=field.field_type,
        mode=ColumnMode((field.mode or "NULLABLE").upper()),
        fields=tuple(column_from_schema_field(f) for f in field.fields),
        length=field.max_length,
        precision=field.precision,
        scale=field.scale,
        description=field.description or "",
    )


def _partitioning_from_table(table: bigquery.Table) -> PartitioningSpec:
    filter_required = bool(table.require_partition_filter)

    time_partitioning = table.time_partitioning
    if time_partitioning is not None:
        expiration_ms = time_partitioning.expiration_ms
        return PartitioningSpec(
            mode=(
                PartitioningMode.TIME_UNIT_COLUMN
                if time_partitioning.field
                else PartitioningMode.INGESTION_TIME
            ),
            column=KeyRef(time_partitioning.field) if time_partitioning.field else None,
            time_unit=TimeUnit(time_partitioning.type_ or "DAY"),
            filter_required=filter_required,
            expiration_days=expiration_ms / _MS_PER_DAY if expiration_ms else None,
        )

    range_partitioning = table.range_partitioning
    if range_partitioning is not None and range_partitioning.field:
        bounds = range_partitioning.range_
        return PartitioningSpec(
            mode=PartitioningMode.INTEGER_RANGE,
            column=KeyRef(range_partitioning.field),
            range_start=bounds.start,
            range_end=bounds.end,
            range_interval=bounds.interval,
            filter_required=filter_required,
        )

    return PartitioningSpec()


def database_from_resource(resource: Mapping[str, Any]) -> Database:
    """Build the owning ``Database`` of a table resource."""
    table = bigquery.Table.from_api_repr(dict(resource))
    return Database(name=table.dataset_id, project_id=table.project)


def table_from_resource(resource: Mapping[str, Any]) -> Table:
    """Build a ``Table`` from a BigQuery REST table resource.

    Args:
        resource: The table resource (``tableReference``, ``schema``,
            ``timePartitioning`` ...).

    Returns:
        The table definition, external when the resource type is
        ``EXTERNAL``.
    """
    table = bigquery.Table.from_api_repr(dict(resource))
    encryption = table.encryption_configuration
    labels = table.labels or {}
    return Table(
        name=table.table_id,
        columns=tuple(column_from_schema_field(f) for f in table.schema),
        description=table.description or "",
        friendly_name=table.friendly_name or "",
        table_type=(
            TableType.EXTERNAL if table.table_type == "EXTERNAL" else TableType.NATIVE
        ),
        partitioning=_partitioning_from_table(table),
        clustering=tuple(KeyRef(name) for name in table.clustering_fields or ()),
        expiration=table.expires,
        encryption_key=encryption.kms_key_name if encryption else "",
        labels=tuple(Label(k, v) for k, v in labels.items()),
    )


def view_from_resource(resource: Mapping[str, Any]) -> View:
    """Build a ``View`` from a ``VIEW`` or ``MATERIALIZED_VIEW`` resource."""
    table = bigquery.Table.from_api_repr(dict(resource))
    labels = table.labels or {}
    materialized = table.table_type == "MATERIALIZED_VIEW"

    partitioning = PartitioningSpec()
    refresh_minutes = None
    if materialized:
        partitioning = _partitioning_from_table(table)
    if materialized and table.mview_refresh_interval is not None:
        refresh_minutes = table.mview_refresh_interval.total_seconds() / 60

    return View(
        name=table.table_id,
        materialized=materialized,
        select_statement=(table.mview_query if materialized else table.view_query)
        or "",
        partitioning=partitioning,
        clustering=tuple(KeyRef(name) for name in table.clustering_fields or ()),
        refresh_interval_minutes=refresh_minutes,
        enable_refresh=bool(materialized and table.mview_enable_refresh),
        description=table.description or "",
        friendly_name=table.friendly_name or "",
        expiration=table.expires,
        labels=tuple(Label(k, v) for k, v in labels.items()),
    )


def is_view_resource(resource: Mapping[str, Any]) -> bool:
    return resource.get("type") in ("VIEW", "MATERIALIZED_VIEW")
