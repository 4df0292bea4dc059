#!/usr/bin/env python3
"""
Run Database Service

Handles database operations related to test run metadata.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from ..models.run import Run

logger = logging.getLogger(__name__)


class RunService:
    """Service for run metadata database operations."""

    def __init__(self, connection_manager):
        """
        Initialize run service.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

    def upsert_run(self, run: Run) -> None:
        """
        Insert run metadata, or refresh browser and timestamp if it exists.

        Args:
            run: Run to record
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO runs (run_id, browser, created_at)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (run_id)
                    DO UPDATE SET browser = EXCLUDED.browser,
                                  created_at = EXCLUDED.created_at
                """, (run.run_id, run.browser, datetime.now(timezone.utc)))

            logger.debug(f"Upserted run {run.run_id}")

        except Exception as e:
            logger.error(f"Failed to upsert run {run.run_id}: {e}")
            raise

    def get_run(self, run_id: str) -> Optional[Dict[str, Any]]:
        """
        Get run metadata by ID.

        Args:
            run_id: Run identifier

        Returns:
            Run row or None if not found
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT run_id, browser, created_at
                    FROM runs
                    WHERE run_id = %s
                """, (run_id,))

                result = cursor.fetchone()
                return dict(result) if result else None

        except Exception as e:
            logger.error(f"Failed to get run {run_id}: {e}")
            raise

    def list_runs(self, limit: int = 100) -> List[Dict[str, Any]]:
        """
        List runs, newest first.

        Args:
            limit: Maximum number of runs

        Returns:
            List of run rows
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT run_id, browser, created_at
                    FROM runs
                    ORDER BY created_at DESC
                    LIMIT %s
                """, (limit,))

                return [dict(row) for row in cursor.fetchall()]

        except Exception as e:
            logger.error(f"Failed to list runs: {e}")
            raise

    def count_runs(self) -> int:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("SELECT COUNT(*) as count FROM runs")
                result = cursor.fetchone()
                return result['count'] if result else 0

        except Exception as e:
            logger.error(f"Failed to count runs: {e}")
            raise
