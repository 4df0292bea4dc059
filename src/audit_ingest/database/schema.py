#!/usr/bin/env python3
"""
Table definitions for both stores.

Statements are idempotent (IF NOT EXISTS) so bootstrapping an existing
database is a no-op. Altering existing tables is out of scope.
"""

import logging
from typing import Dict

import psycopg
from psycopg import sql

from ..exceptions import DatabaseOperationError

logger = logging.getLogger(__name__)

RELATIONAL_SCHEMA: Dict[str, str] = {
    "runs": """
    CREATE TABLE IF NOT EXISTS runs (
        run_id TEXT PRIMARY KEY,
        browser TEXT NOT NULL DEFAULT '',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "advice": """
    CREATE TABLE IF NOT EXISTS advice (
        run_id TEXT NOT NULL,
        url TEXT NOT NULL,
        group_name TEXT NOT NULL,
        category_name TEXT NOT NULL,
        advice_id TEXT NOT NULL,
        score DOUBLE PRECISION,
        title TEXT NOT NULL DEFAULT '',
        description TEXT NOT NULL DEFAULT '',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        PRIMARY KEY (run_id, group_name, category_name, advice_id)
    )
    """,
    "category_scores": """
    CREATE TABLE IF NOT EXISTS category_scores (
        run_id TEXT PRIMARY KEY,
        performance_score DOUBLE PRECISION,
        privacy_score DOUBLE PRECISION,
        bestpractice_score DOUBLE PRECISION,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "content_breakdown": """
    CREATE TABLE IF NOT EXISTS content_breakdown (
        run_id TEXT NOT NULL,
        url TEXT NOT NULL,
        group_name TEXT NOT NULL,
        browser TEXT NOT NULL DEFAULT '',
        content_type TEXT NOT NULL,
        requests INTEGER,
        content_size BIGINT,
        transfer_size BIGINT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        PRIMARY KEY (run_id, group_name, content_type)
    )
    """,
}

POINTS_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS {table} (
        id BIGSERIAL PRIMARY KEY,
        measurement TEXT NOT NULL,
        tags JSONB NOT NULL,
        fields JSONB NOT NULL,
        recorded_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS {index} ON {table} ((tags->>'test_id'), measurement, recorded_at DESC)
    """,
]


def create_relational_schema(connection_manager) -> int:
    """
    Create the relational tables in one transaction.

    Returns:
        Number of statements executed

    Raises:
        DatabaseOperationError: Naming the table whose statement failed
    """
    with connection_manager.transaction() as cursor:
        for table, statement in RELATIONAL_SCHEMA.items():
            try:
                cursor.execute(statement)
            except psycopg.Error as e:
                logger.error(f"Failed to create table {table}: {e}")
                raise DatabaseOperationError("create", table, e)
    logger.info(f"Relational schema ensured ({len(RELATIONAL_SCHEMA)} tables)")
    return len(RELATIONAL_SCHEMA)


def create_points_schema(connection_manager, table: str = "metric_points") -> int:
    """Create the append-only points table. Returns number of statements executed."""
    with connection_manager.transaction() as cursor:
        for statement in POINTS_SCHEMA:
            try:
                cursor.execute(sql.SQL(statement).format(
                    table=sql.Identifier(table),
                    index=sql.Identifier(f"{table}_test_id_idx")
                ))
            except psycopg.Error as e:
                logger.error(f"Failed to create point table {table}: {e}")
                raise DatabaseOperationError("create", table, e)
    logger.info(f"Point store schema ensured (table {table})")
    return len(POINTS_SCHEMA)
