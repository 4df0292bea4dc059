#!/usr/bin/env python3
"""
Point Database Service

Append-only time-series store for visual metrics and media pointers.
Each point is one row holding its tag set and fields as JSONB; reads
expand a point into one flat record per field.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List

from psycopg import sql
from psycopg.types.json import Jsonb

from .sinks import AppendSink
from ..models.records import FlatRecord, Point

logger = logging.getLogger(__name__)


class PointService(AppendSink):
    """Service for append-only point operations."""

    def __init__(self, connection_manager, table: str = "metric_points"):
        """
        Initialize point service.

        Args:
            connection_manager: Database connection manager instance
            table: Points table name
        """
        self.connection_manager = connection_manager
        self.table = table

    def write_points(self, points: Iterable[Point]) -> int:
        """
        Write points one by one, logging and skipping failures.

        Args:
            points: Points to append

        Returns:
            Number of points written
        """
        query = sql.SQL("""
            INSERT INTO {table} (measurement, tags, fields, recorded_at)
            VALUES (%s, %s, %s, %s)
        """).format(table=sql.Identifier(self.table))

        written = 0
        failed = 0
        for point in points:
            try:
                with self.connection_manager.get_cursor() as cursor:
                    cursor.execute(query, (
                        point.measurement,
                        Jsonb(point.tags),
                        Jsonb(point.fields),
                        point.time or datetime.now(timezone.utc)
                    ))
                written += 1
            except Exception as e:
                failed += 1
                logger.error(f"Failed to write {point.measurement} point {point.tags}: {e}")

        if failed:
            logger.warning(f"Wrote {written} points, {failed} failed")
        else:
            logger.debug(f"Wrote {written} points")
        return written

    def query_points(self, run_id: str, measurement: str) -> List[FlatRecord]:
        """
        Read a run's points for one measurement, newest first.

        Args:
            run_id: Run identifier (the test_id tag)
            measurement: Measurement name

        Returns:
            One flat record per stored field
        """
        query = sql.SQL("""
            SELECT measurement, tags, fields, recorded_at
            FROM {table}
            WHERE tags->>'test_id' = %s
            AND measurement = %s
            ORDER BY recorded_at DESC, id DESC
        """).format(table=sql.Identifier(self.table))

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(query, (run_id, measurement))
                rows = cursor.fetchall()

        except Exception as e:
            logger.error(f"Failed to query {measurement} points for run {run_id}: {e}")
            raise

        records = []
        for row in rows:
            point = Point(
                measurement=row['measurement'],
                tags=row['tags'],
                fields=row['fields'],
                time=row['recorded_at']
            )
            records.extend(point.to_records())
        return records

    def count_points(self) -> int:
        query = sql.SQL("SELECT COUNT(*) as count FROM {table}").format(table=sql.Identifier(self.table))
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(query)
                result = cursor.fetchone()
                return result['count'] if result else 0

        except Exception as e:
            logger.error(f"Failed to count points: {e}")
            raise
