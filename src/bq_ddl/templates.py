"""DDL statement templates and slot filling.

A template holds ``{slot}`` markers.  Text in ``[...]`` is an optional
segment: it is dropped together with its punctuation when any slot
inside it renders empty, so omitted clauses leave no orphan keywords or
blank lines behind.  Statements carry no terminator; ``render_script``
adds it.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

_TOKEN = re.compile(r"\[([^\[\]]*)\]|\{(\w+)\}")
_SLOT = re.compile(r"\{(\w+)\}")

CREATE_DATABASE = "CREATE SCHEMA[ {if_not_exists}] {name}[\n{options}]"
DROP_DATABASE = "DROP SCHEMA IF EXISTS {name}"
ALTER_DATABASE = "ALTER SCHEMA {name} SET {options}"

CREATE_TABLE = (
    "CREATE[ {or_replace}][ {temporary}][ {external}] TABLE[ {if_not_exists}]"
    " {name} ({columns})[\n{partitions}][\n{clustering}][\n{options}]"
)
DROP_TABLE = "DROP TABLE IF EXISTS {name}"
ALTER_TABLE_OPTIONS = "ALTER TABLE {name} SET {options}"

ADD_COLUMN = "ALTER TABLE {table_name} ADD COLUMN IF NOT EXISTS {column}"
DROP_COLUMN = "ALTER TABLE {table_name} DROP COLUMN IF EXISTS {column_name}"
ALTER_COLUMN_TYPE = (
    "ALTER TABLE {table_name} ALTER COLUMN {column_name} SET DATA TYPE {type}"
)
ALTER_COLUMN_DROP_NOT_NULL = (
    "ALTER TABLE {table_name} ALTER COLUMN {column_name} DROP NOT NULL"
)
ALTER_COLUMN_OPTIONS = (
    "ALTER TABLE {table_name} ALTER COLUMN {column_name}"
    " SET OPTIONS(description={description})"
)

CREATE_VIEW = (
    "CREATE[ {or_replace}][ {materialized}] VIEW[ {if_not_exists}] {name}"
    "[ ({columns})][\n{partitions}][\n{clustering}][\n{options}]"
    "[\nAS {select_statement}]"
)
DROP_VIEW = "DROP[ {materialized}] VIEW IF EXISTS {name}"
ALTER_VIEW = "ALTER[ {materialized}] VIEW {name} SET {options}"


def fill_template(template: str, slots: Mapping[str, str]) -> str:
    """Substitute *slots* into *template*.

    Slot values are inserted verbatim and never re-scanned, so they may
    contain brackets or braces.

    Args:
        template: Template text.
        slots: Rendered fragment per slot name.

    Returns:
        The filled statement.

    Raises:
        KeyError: If the template names a slot missing from *slots*.
    """

    def fill_slot(match: re.Match[str]) -> str:
        return slots[match.group(1)]

    def fill_token(match: re.Match[str]) -> str:
        optional, slot = match.groups()
        if slot is not None:
            return slots[slot]
        if not all(slots[name] for name in _SLOT.findall(optional)):
            return ""
        return _SLOT.sub(fill_slot, optional)

    return _TOKEN.sub(fill_token, template)
