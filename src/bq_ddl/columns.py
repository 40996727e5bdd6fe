"""Column type rendering.

Maps a ``Column`` to its GoogleSQL column definition using the type
table of a ``Dialect``.  Unknown type tags never raise: a visible marker
takes the place of the type so the rest of the statement still renders.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bq_ddl.activation import Fragment, join_fragments
from bq_ddl.dialect import BIGQUERY, Dialect, TypeShape
from bq_ddl.names import quote_identifier, quote_string
from bq_ddl.resources import Column, ColumnMode

logger = logging.getLogger(__name__)

UNSUPPORTED_TYPE_MARKER = "<unsupported type: {tag}>"


def unsupported_type_marker(tag: str | None) -> str:
    return UNSUPPORTED_TYPE_MARKER.format(tag=tag or "")


def _base_type(column: Column, dialect: Dialect, in_comment: bool) -> str:
    """Render the bare type of *column*, ignoring its mode.

    *in_comment* is set when an enclosing column is already commented
    out; its children then render live, since block comments do not nest.
    """
    descriptor = dialect.lookup(column.type)
    if descriptor is None:
        logger.warning(
            "Unsupported type '%s' for column '%s'", column.type, column.name
        )
        return unsupported_type_marker(column.type)

    if descriptor.shape is TypeShape.LENGTH and column.length:
        return f"{descriptor.keyword}({column.length})"

    if descriptor.shape is TypeShape.PRECISION and column.precision:
        if column.scale is not None:
            return f"{descriptor.keyword}({column.precision}, {column.scale})"
        return f"{descriptor.keyword}({column.precision})"

    if descriptor.shape is TypeShape.STRUCT:
        inner = join_fragments(
            (_fragment(child, dialect, in_comment) for child in column.fields), ", "
        )
        return f"{descriptor.keyword}<{inner}>"

    if descriptor.shape is TypeShape.ARRAY:
        if column.items is None:
            logger.warning("Array column '%s' has no element type", column.name)
            element = unsupported_type_marker(None)
        else:
            # Element mode is ignored: arrays cannot hold NULLs or arrays.
            element = _base_type(column.items, dialect, in_comment)
        return f"{descriptor.keyword}<{element}>"

    return descriptor.keyword


def _column_type(column: Column, dialect: Dialect, in_comment: bool) -> str:
    rendered = _base_type(column, dialect, in_comment)
    descriptor = dialect.lookup(column.type)
    is_array = descriptor is not None and descriptor.shape is TypeShape.ARRAY

    if column.mode is ColumnMode.REPEATED and not is_array:
        return f"ARRAY<{rendered}>"
    if column.mode is ColumnMode.REQUIRED:
        return f"{rendered} NOT NULL"
    return rendered


def _column(column: Column, dialect: Dialect, in_comment: bool) -> str:
    in_comment = in_comment or not column.is_activated
    name = quote_identifier(column.name)
    text = f"{name} {_column_type(column, dialect, in_comment)}"
    if column.description:
        text += f" OPTIONS(description={quote_string(column.description)})"
    return text


def _fragment(column: Column, dialect: Dialect, in_comment: bool) -> Fragment:
    return Fragment(
        _column(column, dialect, in_comment), in_comment or column.is_activated
    )


def render_column_type(column: Column, dialect: Dialect = BIGQUERY) -> str:
    """Render the type of *column* including its mode.

    ``REPEATED`` wraps the type in ``ARRAY<...>``; ``REQUIRED`` appends
    ``NOT NULL``.  Only ``type``, ``mode`` and the nested schema are read.

    Args:
        column: Column definition.
        dialect: Type tables to use.

    Returns:
        The type text, e.g. ``ARRAY<STRUCT<a INT64>>`` or ``INT64 NOT NULL``.
    """
    return _column_type(column, dialect, not column.is_activated)


def render_column(column: Column, dialect: Dialect = BIGQUERY) -> str:
    """Render a full column definition.

    Deactivated struct fields are commented inline, unless *column* is
    deactivated itself: the caller comments it as a whole, so its fields
    render live.

    Args:
        column: Column definition.
        dialect: Type tables to use.

    Returns:
        ``name TYPE[ NOT NULL][ OPTIONS(description='...')]``.
    """
    return _column(column, dialect, in_comment=False)


def column_fragment(column: Column, dialect: Dialect = BIGQUERY) -> Fragment:
    """Render *column* and keep its activation flag alongside the text."""
    return _fragment(column, dialect, in_comment=False)


def unsupported_columns(
    columns: Iterable[Column],
    dialect: Dialect = BIGQUERY,
    prefix: str = "",
) -> list[str]:
    """List dotted paths of columns whose type tag is not in the type table.

    Nested struct fields and array elements are searched too.
    """
    found: list[str] = []
    for column in columns:
        path = f"{prefix}{column.name}"
        descriptor = dialect.lookup(column.type)
        if descriptor is None:
            found.append(path)
            continue
        if descriptor.shape is TypeShape.STRUCT:
            found.extend(unsupported_columns(column.fields, dialect, f"{path}."))
        elif descriptor.shape is TypeShape.ARRAY:
            if column.items is None:
                found.append(path)
            else:
                found.extend(
                    unsupported_columns([column.items], dialect, f"{path}.")
                )
    return found
