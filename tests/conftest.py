"""Shared pytest fixtures for pg-dbstruct tests."""

from __future__ import annotations

from typing import Sequence

import pytest

from pg_dbstruct.db.introspect import Column, SchemaSource


class FakeSchemaSource(SchemaSource):
    """In-memory source that mimics the catalog query's filtering."""

    def __init__(self, columns: Sequence[Column]) -> None:
        self.columns = list(columns)
        self.calls: list[list[str]] = []
        self.closed = False

    def fetch_columns(self, tables: Sequence[str]) -> list[Column]:
        self.calls.append(list(tables))
        rows = [c for c in self.columns if not tables or c.table in tables]
        return sorted(rows, key=lambda c: c.table)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def user_group_columns():
    return [
        Column(name="id", data_type="bigint", nullable=False, table="user_group"),
        Column(
            name="user_name",
            data_type="varchar",
            nullable=True,
            table="user_group",
            comment="display name",
        ),
        Column(
            name="created_at", data_type="datetime", nullable=False, table="user_group"
        ),
    ]


@pytest.fixture
def sample_columns(user_group_columns):
    return [
        Column(name="id", data_type="int", nullable=False, table="player_info"),
        Column(name="score", data_type="double", nullable=True, table="player_info"),
        *user_group_columns,
        Column(name="id", data_type="bigint", nullable=False, table="audit_log"),
        Column(name="logged_at", data_type="timestamp", nullable=False, table="audit_log"),
    ]


@pytest.fixture
def fake_source(sample_columns):
    return FakeSchemaSource(sample_columns)
