"""Generate orchestrator: render whole documents into statement lists.

Datasets are emitted first, then their tables, then their views, so a
script can run top to bottom.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from bq_ddl import hydrate
from bq_ddl.columns import unsupported_columns
from bq_ddl.delta import render_changes
from bq_ddl.dialect import BIGQUERY, Dialect
from bq_ddl.statements import create_database, create_table, create_view

logger = logging.getLogger(__name__)


def render_database(
    raw: Mapping[str, Any],
    project_id: str = "",
    dialect: Dialect = BIGQUERY,
) -> list[str]:
    """Render a dataset entry and everything it contains.

    Args:
        raw: Dataset entry of a schema document.
        project_id: Project used when the entry names none.
        dialect: Type tables for column rendering.

    Returns:
        ``CREATE SCHEMA`` followed by its tables and views.
    """
    database = hydrate.database_from_dict(raw, project_id)
    logger.info("Rendering dataset '%s'", database.name)
    statements = [create_database(database)]

    for table_raw in raw.get("tables") or ():
        table = hydrate.table_from_dict(table_raw, dialect)
        for path in unsupported_columns(table.columns, dialect):
            logger.warning("Table '%s' column '%s' has no DDL type", table.name, path)
        logger.debug("Rendering table %s", table.name)
        statements.append(create_table(table, database, dialect))

    for view_raw in raw.get("views") or ():
        view = hydrate.view_from_dict(view_raw)
        logger.debug("Rendering view %s", view.name)
        statements.append(create_view(view, database))

    return statements


def render_document(
    document: Mapping[str, Any],
    project_id: str = "",
    dialect: Dialect = BIGQUERY,
) -> list[str]:
    """Render every dataset of a schema document.

    The document's own ``project_id`` wins over *project_id*.
    """
    project = document.get("project_id") or project_id
    statements: list[str] = []
    for raw in document.get("databases") or ():
        statements.extend(render_database(raw, project, dialect))
    return statements


def render_resource(
    resource: Mapping[str, Any],
    dialect: Dialect = BIGQUERY,
) -> list[str]:
    """Render the CREATE statement of a BigQuery REST table resource."""
    database = hydrate.database_from_resource(resource)
    if hydrate.is_view_resource(resource):
        return [create_view(hydrate.view_from_resource(resource), database)]
    table = hydrate.table_from_resource(resource)
    return [create_table(table, database, dialect)]


def render_alter_document(
    document: Mapping[str, Any],
    project_id: str = "",
    dialect: Dialect = BIGQUERY,
) -> list[str]:
    """Render the ``changes`` list of an alter document."""
    changes = hydrate.changes_from_document(document, project_id, dialect)
    logger.info("Rendering %d change(s)", len(changes))
    return render_changes(changes, dialect)
