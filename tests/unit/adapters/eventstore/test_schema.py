"""Unit tests for the stream table definition and its DDL per dialect."""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateIndex, CreateTable

from streamstore.adapters.db.dialects import DialectName
from streamstore.adapters.eventstore.naming import physical_table_name
from streamstore.adapters.eventstore.schema import (
    concurrency_index_name,
    replay_index_name,
    stream_table,
)

PHYSICAL = physical_table_name("orders")


def _ddl(dialect_name: DialectName, dialect) -> tuple[str, dict[str, str]]:
    table = stream_table(PHYSICAL, dialect_name)
    create = str(CreateTable(table).compile(dialect=dialect))
    indexes = {
        index.name: str(CreateIndex(index).compile(dialect=dialect))
        for index in table.indexes
    }
    return create, indexes


def test_columns():
    table = stream_table(PHYSICAL, DialectName.SQLITE)
    assert [c.name for c in table.columns] == [
        "no",
        "event_id",
        "event_name",
        "payload",
        "metadata",
        "created_at",
    ]
    assert table.c.no.primary_key
    assert all(not c.nullable for c in table.columns)


def test_index_names_fit_postgres_identifier_limit():
    assert len(concurrency_index_name(PHYSICAL)) <= 63
    assert len(replay_index_name(PHYSICAL)) <= 63
    assert len(f"ck_{PHYSICAL}_aggregate_version") <= 63


def test_rejects_non_physical_names():
    with pytest.raises(ValueError):
        stream_table("orders", DialectName.POSTGRES)


def test_postgres_ddl():
    create, indexes = _ddl(DialectName.POSTGRES, postgresql.dialect())

    assert f'CREATE TABLE "{PHYSICAL}"' in create
    assert "GENERATED BY DEFAULT AS IDENTITY (START WITH 1)" in create
    assert "metadata JSONB NOT NULL" in create
    assert "created_at TIMESTAMP WITH TIME ZONE NOT NULL" in create
    assert f"CONSTRAINT uq_{PHYSICAL}_event_id UNIQUE (event_id)" in create
    assert (
        f"CONSTRAINT ck_{PHYSICAL}_aggregate_version"
        " CHECK ((metadata->>'_aggregate_version') IS NOT NULL)"
    ) in create

    concurrency = indexes[concurrency_index_name(PHYSICAL)]
    assert concurrency.startswith("CREATE UNIQUE INDEX")
    assert (
        "((metadata->>'_aggregate_type'), (metadata->>'_aggregate_id'),"
        " (metadata->>'_aggregate_version'))"
    ) in concurrency

    replay = indexes[replay_index_name(PHYSICAL)]
    assert replay.startswith("CREATE INDEX")
    assert "(metadata->>'_aggregate_id'), " in replay


def test_sqlite_ddl():
    create, indexes = _ddl(DialectName.SQLITE, sqlite.dialect())

    assert "no INTEGER NOT NULL" in create
    assert (
        f"CONSTRAINT ck_{PHYSICAL}_aggregate_type"
        " CHECK ((json_extract(metadata, '$.\"_aggregate_type\"')) IS NOT NULL)"
    ) in create
    assert "(json_extract(metadata, '$.\"_aggregate_version\"'))" in indexes[
        concurrency_index_name(PHYSICAL)
    ]
