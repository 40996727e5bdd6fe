"""Assemble CREATE and DROP statements from rendered fragments.

Each function is a pure function of its arguments: fragments are
rendered by the leaf modules and placed into a template from
``bq_ddl.templates``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from bq_ddl import templates
from bq_ddl.activation import Fragment, comment_if_deactivated, join_fragments
from bq_ddl.columns import column_fragment
from bq_ddl.dialect import BIGQUERY, Dialect
from bq_ddl.names import full_name, quote_identifier
from bq_ddl.options import (
    build_options,
    database_options,
    table_options,
    view_options,
)
from bq_ddl.partitioning import (
    is_activated_partition,
    render_clustering,
    render_partitioning,
)
from bq_ddl.resources import Database, PartitioningSpec, Table, View, ViewKey

logger = logging.getLogger(__name__)


def _flag(enabled: bool, keyword: str) -> str:
    return keyword if enabled else ""


def qualified_name(database: Database | None, name: str) -> str:
    """Qualify *name* with the project and dataset of *database*."""
    if database is None:
        return full_name(None, None, name)
    return full_name(database.project_id, database.name, name)


def _partition_clause(spec: PartitioningSpec) -> str:
    return Fragment(render_partitioning(spec), is_activated_partition(spec)).render()


def create_database(database: Database) -> str:
    """Render ``CREATE SCHEMA`` for *database*."""
    statement = templates.fill_template(
        templates.CREATE_DATABASE,
        {
            "name": full_name(database.project_id, database.name),
            "if_not_exists": _flag(database.if_not_exists, "IF NOT EXISTS"),
            "options": build_options(database_options(database)),
        },
    )
    return comment_if_deactivated(statement, database.is_activated)


def drop_database(database_name: str, project_id: str = "") -> str:
    return templates.fill_template(
        templates.DROP_DATABASE, {"name": full_name(project_id, database_name)}
    )


def create_table(
    table: Table,
    database: Database | None = None,
    dialect: Dialect = BIGQUERY,
) -> str:
    """Render ``CREATE TABLE`` for *table*.

    Activated columns come first, deactivated ones follow as inline
    comments.  External tables get neither partitioning nor clustering.
    A deactivated table is commented out as a whole.

    Args:
        table: Table definition.
        database: Owning dataset, used to qualify the table name.
        dialect: Type tables for column rendering.

    Returns:
        The statement text without a terminator.
    """
    columns = join_fragments(
        (column_fragment(column, dialect) for column in table.columns), ",\n"
    )

    if table.is_external:
        partitions = clustering = ""
    else:
        partitions = _partition_clause(table.partitioning)
        clustering = render_clustering(table.clustering, table.is_activated)

    statement = templates.fill_template(
        templates.CREATE_TABLE,
        {
            "or_replace": _flag(table.or_replace, "OR REPLACE"),
            "temporary": _flag(table.temporary, "TEMPORARY"),
            "external": _flag(table.is_external, "EXTERNAL"),
            "if_not_exists": _flag(table.if_not_exists, "IF NOT EXISTS"),
            "name": qualified_name(database, table.name),
            "columns": columns,
            "partitions": partitions,
            "clustering": clustering,
            "options": build_options(table_options(table)),
        },
    )
    return comment_if_deactivated(statement, table.is_activated)


def drop_table(table_name: str, database_name: str = "", project_id: str = "") -> str:
    return templates.fill_template(
        templates.DROP_TABLE,
        {"name": full_name(project_id, database_name, table_name)},
    )


def _key_expression(key: ViewKey) -> str:
    column = quote_identifier(key.name)
    if key.table_name:
        column = f"{quote_identifier(key.table_name)}.{column}"
    if key.alias:
        column += f" AS {quote_identifier(key.alias)}"
    return column


def generate_view_select_statement(
    keys: Sequence[ViewKey],
    database: Database | None = None,
) -> str:
    """Synthesize a ``SELECT`` from view key references.

    Source tables are listed once each, in order of first use, and
    qualified with the project and dataset of *database*.

    Returns:
        The select statement, or ``""`` when there are no keys.
    """
    if not keys:
        return ""
    columns = ", ".join(_key_expression(key) for key in keys)
    tables = list(dict.fromkeys(key.table_name for key in keys if key.table_name))
    if not tables:
        return f"SELECT {columns}"
    sources = ", ".join(qualified_name(database, table) for table in tables)
    return f"SELECT {columns} FROM {sources}"


def create_view(view: View, database: Database | None = None) -> str:
    """Render ``CREATE [MATERIALIZED] VIEW`` for *view*.

    The alias column list is only rendered for logical views, and
    partitioning/clustering only for materialized ones.  ``OR REPLACE``
    is not rendered for materialized views.

    Args:
        view: View definition.
        database: Owning dataset, used to qualify names.

    Returns:
        The statement text without a terminator.
    """
    select_statement = view.select_statement.strip()
    if not select_statement:
        select_statement = generate_view_select_statement(view.keys, database)
    if not select_statement:
        logger.warning("View '%s' has no select statement", view.name)

    if view.materialized:
        columns = ""
        partitions = _partition_clause(view.partitioning)
        clustering = render_clustering(view.clustering, view.is_activated)
    else:
        columns = ", ".join(quote_identifier(k.alias or k.name) for k in view.keys)
        partitions = clustering = ""

    statement = templates.fill_template(
        templates.CREATE_VIEW,
        {
            "or_replace": _flag(
                view.or_replace and not view.materialized, "OR REPLACE"
            ),
            "materialized": _flag(view.materialized, "MATERIALIZED"),
            "if_not_exists": _flag(view.if_not_exists, "IF NOT EXISTS"),
            "name": qualified_name(database, view.name),
            "columns": columns,
            "partitions": partitions,
            "clustering": clustering,
            "options": build_options(view_options(view)),
            "select_statement": select_statement,
        },
    )
    return comment_if_deactivated(statement, view.is_activated)


def drop_view(
    view_name: str,
    database_name: str = "",
    project_id: str = "",
    materialized: bool = False,
) -> str:
    return templates.fill_template(
        templates.DROP_VIEW,
        {
            "materialized": _flag(materialized, "MATERIALIZED"),
            "name": full_name(project_id, database_name, view_name),
        },
    )
