"""Type tables for the BigQuery dialect.

Two read-only tables drive column rendering: the logical type table
(tag -> syntax descriptor) and the default type table (generic
JSON-schema type -> logical tag).  Renderers receive them through a
``Dialect`` argument, so an alternate table can be substituted with
``load_dialect``.
"""

from __future__ import annotations

import enum
import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)


class TypeShape(enum.Enum):
    """Syntax shape of a logical type."""

    SCALAR = "scalar"
    LENGTH = "length"
    PRECISION = "precision"
    STRUCT = "struct"
    ARRAY = "array"


@dataclass(frozen=True)
class TypeDescriptor:
    """How one logical type tag is written in DDL."""

    keyword: str
    shape: TypeShape = TypeShape.SCALAR


_TYPES: dict[str, TypeDescriptor] = {
    "STRING": TypeDescriptor("STRING", TypeShape.LENGTH),
    "BYTES": TypeDescriptor("BYTES", TypeShape.LENGTH),
    "INT64": TypeDescriptor("INT64"),
    "NUMERIC": TypeDescriptor("NUMERIC", TypeShape.PRECISION),
    "BIGNUMERIC": TypeDescriptor("BIGNUMERIC", TypeShape.PRECISION),
    "FLOAT64": TypeDescriptor("FLOAT64"),
    "BOOL": TypeDescriptor("BOOL"),
    "TIMESTAMP": TypeDescriptor("TIMESTAMP"),
    "DATE": TypeDescriptor("DATE"),
    "TIME": TypeDescriptor("TIME"),
    "DATETIME": TypeDescriptor("DATETIME"),
    "INTERVAL": TypeDescriptor("INTERVAL"),
    "GEOGRAPHY": TypeDescriptor("GEOGRAPHY"),
    "JSON": TypeDescriptor("JSON"),
    "STRUCT": TypeDescriptor("STRUCT", TypeShape.STRUCT),
    "ARRAY": TypeDescriptor("ARRAY", TypeShape.ARRAY),
}

# Legacy SQL and REST API names.
_ALIASES = {
    "INTEGER": "INT64",
    "INT": "INT64",
    "FLOAT": "FLOAT64",
    "BOOLEAN": "BOOL",
    "RECORD": "STRUCT",
    "DECIMAL": "NUMERIC",
    "BIGDECIMAL": "BIGNUMERIC",
}
for _alias, _target in _ALIASES.items():
    _TYPES[_alias] = _TYPES[_target]

BIGQUERY_TYPES: Mapping[str, TypeDescriptor] = MappingProxyType(_TYPES)

BIGQUERY_DEFAULT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "string": "STRING",
        "number": "NUMERIC",
        "integer": "INT64",
        "boolean": "BOOL",
        "object": "STRUCT",
        "array": "ARRAY",
        "null": "STRING",
    }
)


@dataclass(frozen=True)
class Dialect:
    """The type and default-type tables used by the renderers."""

    types: Mapping[str, TypeDescriptor] = field(
        default_factory=lambda: BIGQUERY_TYPES
    )
    default_types: Mapping[str, str] = field(
        default_factory=lambda: BIGQUERY_DEFAULT_TYPES
    )

    def lookup(self, tag: str | None) -> TypeDescriptor | None:
        """Return the descriptor for *tag* (case-insensitive), or ``None``."""
        if not tag:
            return None
        return self.types.get(tag.strip().upper())

    def has_type(self, tag: str | None) -> bool:
        return self.lookup(tag) is not None

    def get_default_type(self, json_type: str) -> str | None:
        """Map a generic JSON-schema type to a logical tag."""
        return self.default_types.get(json_type.lower())

    def type_descriptors(self) -> Mapping[str, TypeDescriptor]:
        return self.types


BIGQUERY = Dialect()


def load_dialect(path: Path, base: Dialect = BIGQUERY) -> Dialect:
    """Read a TOML type table and merge it over *base*.

    The file holds one ``[types.<TAG>]`` table per entry with a
    ``keyword`` and an optional ``shape`` (``scalar``, ``length``,
    ``precision``, ``struct`` or ``array``), and an optional
    ``[default_types]`` table mapping JSON-schema types to tags.

    Args:
        path: Path to the TOML file.
        base: Dialect whose tables are extended.

    Returns:
        A new ``Dialect``.

    Raises:
        FileNotFoundError: If *path* does not exist.
        KeyError: If an entry has no ``keyword``.
        ValueError: If an entry names an unknown ``shape``.
    """
    with path.open("rb") as fh:
        raw = tomllib.load(fh)

    types = dict(base.types)
    for tag, entry in raw.get("types", {}).items():
        types[tag.upper()] = TypeDescriptor(
            keyword=entry["keyword"],
            shape=TypeShape(entry.get("shape", "scalar")),
        )

    default_types = dict(base.default_types)
    default_types.update(
        {k.lower(): v for k, v in raw.get("default_types", {}).items()}
    )

    logger.debug("Loaded %d type entries from %s", len(types), path)
    return Dialect(
        types=MappingProxyType(types),
        default_types=MappingProxyType(default_types),
    )
