"""Database helpers for pg-dbstruct."""

from pg_dbstruct.db.connection import DatabaseConnectionError, connect_readonly
from pg_dbstruct.db.introspect import (
    Column,
    PostgresSchemaSource,
    SchemaQueryError,
    SchemaSource,
    fetch_schema,
)

__all__ = [
    "Column",
    "DatabaseConnectionError",
    "PostgresSchemaSource",
    "SchemaQueryError",
    "SchemaSource",
    "connect_readonly",
    "fetch_schema",
]
