"""ALTER/DROP statements for already-classified schema changes.

Nothing here computes a diff: the caller decides which change applies
and passes the minimal data needed to render it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bq_ddl import statements, templates
from bq_ddl.activation import comment_if_deactivated
from bq_ddl.columns import render_column, render_column_type
from bq_ddl.dialect import BIGQUERY, Dialect
from bq_ddl.names import full_name, quote_identifier, quote_string
from bq_ddl.options import (
    build_options,
    database_options,
    table_options,
    view_options,
)
from bq_ddl.resources import (
    Change,
    ChangeOperation,
    Column,
    Database,
    Table,
    View,
)

logger = logging.getLogger(__name__)


def alter_database(database: Database) -> str:
    """Render ``ALTER SCHEMA ... SET OPTIONS``, or ``""`` with no options."""
    options = build_options(database_options(database))
    if not options:
        logger.debug("No options to alter for dataset '%s'", database.name)
        return ""
    return templates.fill_template(
        templates.ALTER_DATABASE,
        {"name": full_name(database.project_id, database.name), "options": options},
    )


def alter_table_options(table: Table, database: Database | None = None) -> str:
    """Render ``ALTER TABLE ... SET OPTIONS``, or ``""`` with no options.

    External tables never get ``require_partition_filter``.
    """
    options = build_options(table_options(table))
    if not options:
        logger.debug("No options to alter for table '%s'", table.name)
        return ""
    return templates.fill_template(
        templates.ALTER_TABLE_OPTIONS,
        {"name": statements.qualified_name(database, table.name), "options": options},
    )


def alter_view(view: View, database: Database | None = None) -> str:
    """Render ``ALTER [MATERIALIZED] VIEW ... SET OPTIONS``."""
    options = build_options(view_options(view))
    if not options:
        logger.debug("No options to alter for view '%s'", view.name)
        return ""
    return templates.fill_template(
        templates.ALTER_VIEW,
        {
            "materialized": "MATERIALIZED" if view.materialized else "",
            "name": statements.qualified_name(database, view.name),
            "options": options,
        },
    )


def add_column(
    table_name: str,
    column: Column,
    database: Database | None = None,
    dialect: Dialect = BIGQUERY,
) -> str:
    """Render ``ALTER TABLE ... ADD COLUMN``.

    A deactivated column renders as a commented-out statement.
    """
    statement = templates.fill_template(
        templates.ADD_COLUMN,
        {
            "table_name": statements.qualified_name(database, table_name),
            "column": render_column(column, dialect),
        },
    )
    return comment_if_deactivated(statement, column.is_activated)


def drop_column(
    column_name: str,
    table_name: str,
    database: Database | None = None,
) -> str:
    return templates.fill_template(
        templates.DROP_COLUMN,
        {
            "table_name": statements.qualified_name(database, table_name),
            "column_name": quote_identifier(column_name),
        },
    )


def alter_column_type(
    table_name: str,
    column: Column,
    dialect: Dialect = BIGQUERY,
) -> str:
    """Render ``ALTER COLUMN ... SET DATA TYPE``.

    *table_name* is inserted verbatim.  Only the type, mode and nested
    schema of *column* are used.
    """
    return templates.fill_template(
        templates.ALTER_COLUMN_TYPE,
        {
            "table_name": table_name,
            "column_name": quote_identifier(column.name),
            "type": render_column_type(column, dialect),
        },
    )


def alter_column_drop_not_null(table_name: str, column_name: str) -> str:
    return templates.fill_template(
        templates.ALTER_COLUMN_DROP_NOT_NULL,
        {"table_name": table_name, "column_name": quote_identifier(column_name)},
    )


def alter_column_options(table_name: str, column_name: str, description: str) -> str:
    """Render ``ALTER COLUMN ... SET OPTIONS(description=...)``.

    *table_name* is inserted verbatim.  An empty description clears the
    option with ``NULL``.
    """
    return templates.fill_template(
        templates.ALTER_COLUMN_OPTIONS,
        {
            "table_name": table_name,
            "column_name": quote_identifier(column_name),
            "description": quote_string(description) if description else "NULL",
        },
    )


def render_change(change: Change, dialect: Dialect = BIGQUERY) -> str:
    """Render the statement for one classified change.

    Args:
        change: The change; only the fields its operation needs are read.
        dialect: Type tables for column rendering.

    Returns:
        The statement, or ``""`` when the change carries nothing to render.
    """
    op = change.operation
    db = change.database
    qualified = statements.qualified_name(db, change.object_name)

    if op is ChangeOperation.CREATE_DATABASE:
        return statements.create_database(db)
    if op is ChangeOperation.DROP_DATABASE:
        return statements.drop_database(db.name, db.project_id)
    if op is ChangeOperation.ALTER_DATABASE:
        return alter_database(db)

    if op is ChangeOperation.CREATE_TABLE and change.table is not None:
        return statements.create_table(change.table, db, dialect)
    if op is ChangeOperation.DROP_TABLE:
        return statements.drop_table(change.object_name, db.name, db.project_id)
    if op is ChangeOperation.ALTER_TABLE_OPTIONS and change.table is not None:
        return alter_table_options(change.table, db)

    if op is ChangeOperation.ADD_COLUMN and change.column is not None:
        return add_column(change.object_name, change.column, db, dialect)
    if op is ChangeOperation.DROP_COLUMN:
        return drop_column(change.column_name, change.object_name, db)
    if op is ChangeOperation.ALTER_COLUMN_TYPE and change.column is not None:
        return alter_column_type(qualified, change.column, dialect)
    if op is ChangeOperation.ALTER_COLUMN_DROP_NOT_NULL:
        return alter_column_drop_not_null(qualified, change.column_name)
    if op is ChangeOperation.ALTER_COLUMN_OPTIONS:
        return alter_column_options(
            qualified, change.column_name, change.description
        )

    if op is ChangeOperation.CREATE_VIEW and change.view is not None:
        return statements.create_view(change.view, db)
    if op is ChangeOperation.DROP_VIEW:
        materialized = change.view is not None and change.view.materialized
        return statements.drop_view(
            change.object_name, db.name, db.project_id, materialized=materialized
        )
    if op is ChangeOperation.ALTER_VIEW and change.view is not None:
        return alter_view(change.view, db)

    logger.warning("Change '%s' is missing its definition, skipped", op.value)
    return ""


def render_changes(changes: Iterable[Change], dialect: Dialect = BIGQUERY) -> list[str]:
    """Render every change, dropping the ones that produce no statement."""
    rendered = (render_change(change, dialect) for change in changes)
    return [statement for statement in rendered if statement]
