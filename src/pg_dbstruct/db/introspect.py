"""Column metadata retrieval grouped by table."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

import psycopg

from pg_dbstruct.db.connection import connect_readonly
from pg_dbstruct.db.queries import COLUMNS_QUERY

logger = logging.getLogger(__name__)


class SchemaQueryError(RuntimeError):
    """Raised when the column metadata query fails."""


@dataclass(frozen=True)
class Column:
    name: str
    data_type: str
    nullable: bool
    table: str
    comment: str = ""


class SchemaSource(ABC):
    """Anything able to list column metadata for the current schema."""

    @abstractmethod
    def fetch_columns(self, tables: Sequence[str]) -> list[Column]:
        """Return columns ordered by table name, optionally filtered by table."""

    def close(self) -> None:
        """Release any resources held by the source."""

    def __enter__(self) -> SchemaSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PostgresSchemaSource(SchemaSource):
    """Read columns from ``information_schema`` over a lazy connection."""

    def __init__(self, dsn: str, db_schema: str | None = None) -> None:
        self.dsn = dsn
        self.db_schema = db_schema
        self._conn: psycopg.Connection | None = None

    def _connection(self) -> psycopg.Connection:
        if self._conn is None:
            self._conn = connect_readonly(self.dsn)
        return self._conn

    def fetch_columns(self, tables: Sequence[str]) -> list[Column]:
        conn = self._connection()
        params = {"schema": self.db_schema, "tables": list(tables) or None}
        try:
            with conn.cursor() as cur:
                cur.execute(COLUMNS_QUERY, params)
                rows = cur.fetchall()
        except psycopg.Error as exc:
            raise SchemaQueryError(f"Column metadata query failed: {exc}") from exc

        return [
            Column(
                name=name,
                data_type=data_type,
                nullable=is_nullable == "YES",
                table=table_name,
                comment=comment or "",
            )
            for name, data_type, is_nullable, table_name, comment in rows
        ]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def fetch_schema(
    source: SchemaSource, tables: Sequence[str] = ()
) -> dict[str, list[Column]]:
    """Fetch columns and group them by table.

    Keys are sorted by table name and columns keep the order the source
    returned them in. With a non-empty ``tables`` allow-list the result
    never holds a table outside it.
    """
    allowed = set(tables)
    grouped: dict[str, list[Column]] = {}
    for column in source.fetch_columns(list(tables)):
        if allowed and column.table not in allowed:
            continue
        grouped.setdefault(column.table, []).append(column)

    missing = [name for name in tables if name not in grouped]
    if missing:
        logger.warning("Requested tables not found: %s", ", ".join(missing))

    logger.info(
        "Fetched %d column(s) across %d table(s)",
        sum(len(columns) for columns in grouped.values()),
        len(grouped),
    )
    return {name: grouped[name] for name in sorted(grouped)}
