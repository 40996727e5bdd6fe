"""Render ``PARTITION BY`` and ``CLUSTER BY`` clauses."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from bq_ddl.activation import comment_if_deactivated
from bq_ddl.names import quote_identifier
from bq_ddl.resources import KeyRef, PartitioningMode, PartitioningSpec, TimeUnit

logger = logging.getLogger(__name__)


def render_partitioning(spec: PartitioningSpec) -> str:
    """Build the ``PARTITION BY`` clause for *spec*.

    Args:
        spec: Partitioning settings.

    Returns:
        The clause, or ``""`` when partitioning is off or the fields the
        chosen mode needs are missing.
    """
    mode = spec.mode

    if mode is PartitioningMode.TIME_UNIT_COLUMN:
        if spec.column is None or not spec.column.name:
            logger.debug("Time-unit partitioning without a column, skipped")
            return ""
        column = quote_identifier(spec.column.name)
        return f"PARTITION BY {spec.time_unit.value}({column})"

    if mode is PartitioningMode.INGESTION_TIME:
        if spec.time_unit is TimeUnit.DAY:
            return "PARTITION BY _PARTITIONDATE"
        return f"PARTITION BY {spec.time_unit.value}(_PARTITIONTIME)"

    if mode is PartitioningMode.INTEGER_RANGE:
        bounds = (spec.range_start, spec.range_end, spec.range_interval)
        if spec.column is None or not spec.column.name or None in bounds:
            logger.debug("Integer-range partitioning is incomplete, skipped")
            return ""
        column = quote_identifier(spec.column.name)
        start, end, interval = bounds
        return (
            f"PARTITION BY RANGE_BUCKET({column}, "
            f"GENERATE_ARRAY({start}, {end}, {interval}))"
        )

    return ""


def is_activated_partition(spec: PartitioningSpec) -> bool:
    """Whether the partitioning clause renders live.

    Column-based modes follow the activation of the referenced column;
    ingestion-time partitioning and no partitioning are always active.
    """
    if spec.mode in (
        PartitioningMode.TIME_UNIT_COLUMN,
        PartitioningMode.INTEGER_RANGE,
    ):
        return spec.column is None or spec.column.is_activated
    return True


def render_clustering(keys: Sequence[KeyRef], is_activated: bool = True) -> str:
    """Build the ``CLUSTER BY`` clause.

    Args:
        keys: Clustering columns in order.
        is_activated: Activation of the owning statement.  When the
            statement itself is deactivated it gets commented as a whole,
            so every key renders live here.

    Returns:
        The clause, with deactivated keys commented out, or ``""`` for
        an empty key list.
    """
    if not keys:
        return ""

    if not is_activated:
        names = ", ".join(quote_identifier(k.name) for k in keys)
        return f"CLUSTER BY {names}"

    active = ", ".join(quote_identifier(k.name) for k in keys if k.is_activated)
    inactive = ", ".join(
        quote_identifier(k.name) for k in keys if not k.is_activated
    )
    if active and inactive:
        inline = comment_if_deactivated(f", {inactive}", False, is_part_of_line=True)
        return f"CLUSTER BY {active} {inline}"
    if active:
        return f"CLUSTER BY {active}"
    return comment_if_deactivated(f"CLUSTER BY {inactive}", is_activated=False)
