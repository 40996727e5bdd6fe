"""Identifier and string-literal quoting for BigQuery GoogleSQL."""

from __future__ import annotations

import re

_PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# GoogleSQL reserved keywords; a column named after one must be back-ticked.
RESERVED_KEYWORDS = frozenset(
    {
        "ALL", "AND", "ANY", "ARRAY", "AS", "ASC", "ASSERT_ROWS_MODIFIED",
        "AT", "BETWEEN", "BY", "CASE", "CAST", "COLLATE", "CONTAINS",
        "CREATE", "CROSS", "CUBE", "CURRENT", "DEFAULT", "DEFINE", "DESC",
        "DISTINCT", "ELSE", "END", "ENUM", "ESCAPE", "EXCEPT", "EXCLUDE",
        "EXISTS", "EXTRACT", "FALSE", "FETCH", "FOLLOWING", "FOR", "FROM",
        "FULL", "GROUP", "GROUPING", "GROUPS", "HASH", "HAVING", "IF",
        "IGNORE", "IN", "INNER", "INTERSECT", "INTERVAL", "INTO", "IS",
        "JOIN", "LATERAL", "LEFT", "LIKE", "LIMIT", "LOOKUP", "MERGE",
        "NATURAL", "NEW", "NO", "NOT", "NULL", "NULLS", "OF", "ON", "OR",
        "ORDER", "OUTER", "OVER", "PARTITION", "PRECEDING", "PROTO",
        "QUALIFY", "RANGE", "RECURSIVE", "RESPECT", "RIGHT", "ROLLUP",
        "ROWS", "SELECT", "SET", "SOME", "STRUCT", "TABLESAMPLE", "THEN",
        "TO", "TREAT", "TRUE", "UNBOUNDED", "UNION", "UNNEST", "USING",
        "WHEN", "WHERE", "WINDOW", "WITH", "WITHIN",
    }
)


def escape_quotes(text: str) -> str:
    """Escape *text* for use inside a single-quoted string literal.

    Backslashes, single quotes and line breaks are backslash-escaped.

    Args:
        text: Free text supplied by the caller.

    Returns:
        The escaped text, without surrounding quotes.
    """
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def quote_string(text: str) -> str:
    """Return *text* as a single-quoted GoogleSQL string literal."""
    return f"'{escape_quotes(text)}'"


def _delimit(segment: str) -> str:
    return "`" + segment.replace("\\", "\\\\").replace("`", "\\`") + "`"


def full_name(
    project_id: str | None,
    database_name: str | None,
    object_name: str | None = None,
) -> str:
    """Build a fully qualified, back-tick delimited name.

    Each present segment is delimited on its own, so
    ``full_name("p", "d", "t")`` gives ``` `p`.`d`.`t` ```.  Empty or
    missing segments are skipped without leaving a stray ``.``.

    Args:
        project_id: GCP project ID, may be empty.
        database_name: Dataset name, may be empty.
        object_name: Table or view name, may be empty (for dataset names).

    Returns:
        The qualified name, or ``""`` when every segment is empty.
    """
    segments = [s for s in (project_id, database_name, object_name) if s]
    return ".".join(_delimit(s) for s in segments)


def quote_identifier(name: str) -> str:
    """Quote a column identifier only when GoogleSQL requires it."""
    if _PLAIN_IDENTIFIER.match(name) and name.upper() not in RESERVED_KEYWORDS:
        return name
    return _delimit(name)
