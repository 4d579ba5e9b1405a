"""Database column type to Go field type mapping."""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

STRING_TYPE: Final = "string"
TIME_TYPE: Final = "time.Time"
TIME_IMPORT: Final = "time"

# MySQL DATA_TYPE spellings.
_MYSQL_TYPES: Final[dict[str, str]] = {
    "int": "int",
    "integer": "int",
    "tinyint": "int8",
    "smallint": "int16",
    "mediumint": "int32",
    "bigint": "int64",
    "int unsigned": "int64",
    "integer unsigned": "int64",
    "tinyint unsigned": "int64",
    "smallint unsigned": "int64",
    "mediumint unsigned": "int64",
    "bigint unsigned": "int64",
    "bit": "int64",
    "float": "float64",
    "double": "float64",
    "decimal": "float64",
    "binary": STRING_TYPE,
    "varbinary": STRING_TYPE,
    "enum": STRING_TYPE,
    "set": STRING_TYPE,
    "varchar": STRING_TYPE,
    "char": STRING_TYPE,
    "tinytext": STRING_TYPE,
    "mediumtext": STRING_TYPE,
    "text": STRING_TYPE,
    "longtext": STRING_TYPE,
    "blob": STRING_TYPE,
    "tinyblob": STRING_TYPE,
    "mediumblob": STRING_TYPE,
    "longblob": STRING_TYPE,
    "bool": "bool",
    "date": TIME_TYPE,
    "datetime": TIME_TYPE,
    "timestamp": TIME_TYPE,
    "time": TIME_TYPE,
}

# PostgreSQL information_schema.data_type spellings of the same families.
_POSTGRES_TYPES: Final[dict[str, str]] = {
    "character varying": STRING_TYPE,
    "character": STRING_TYPE,
    "bytea": STRING_TYPE,
    "double precision": "float64",
    "real": "float64",
    "numeric": "float64",
    "boolean": "bool",
    "timestamp without time zone": TIME_TYPE,
    "timestamp with time zone": TIME_TYPE,
    "time without time zone": TIME_TYPE,
    "time with time zone": TIME_TYPE,
}

GO_TYPES: Final[Mapping[str, str]] = MappingProxyType(
    {**_MYSQL_TYPES, **_POSTGRES_TYPES}
)


def map_type(data_type: str) -> str:
    """Return the Go field type for a database type name.

    Unknown names fall back to ``string``.
    """
    return GO_TYPES.get(data_type.strip().lower(), STRING_TYPE)
