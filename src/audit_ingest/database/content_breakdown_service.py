#!/usr/bin/env python3
"""
Content Breakdown Database Service

Handles database operations for per content type request and size counters.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any

from ..models.content import ContentTypeBreakdown

logger = logging.getLogger(__name__)


class ContentBreakdownService:
    """Service for content breakdown database operations."""

    def __init__(self, connection_manager):
        """
        Initialize content breakdown service.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

    def upsert_content_breakdown(self, row: ContentTypeBreakdown) -> None:
        """
        Insert a content type row or overwrite its counters.

        Args:
            row: Content breakdown row; absent counters are stored as NULL
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO content_breakdown (
                        run_id, url, group_name, browser, content_type,
                        requests, content_size, transfer_size, created_at
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (run_id, group_name, content_type)
                    DO UPDATE SET requests = EXCLUDED.requests,
                                  content_size = EXCLUDED.content_size,
                                  transfer_size = EXCLUDED.transfer_size,
                                  created_at = EXCLUDED.created_at
                """, (
                    row.run_id,
                    row.url,
                    row.group,
                    row.browser,
                    row.content_type,
                    row.requests,
                    row.content_size,
                    row.transfer_size,
                    datetime.now(timezone.utc)
                ))

        except Exception as e:
            logger.error(f"Failed to upsert content breakdown {row.content_type} for run {row.run_id}: {e}")
            raise

    def get_content_breakdown_rows(self, run_id: str) -> List[Dict[str, Any]]:
        """
        Get content breakdown rows for a run, ordered by content type.

        Args:
            run_id: Run identifier

        Returns:
            List of content breakdown rows
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT run_id, url, group_name, browser, content_type,
                           requests, content_size, transfer_size, created_at
                    FROM content_breakdown
                    WHERE run_id = %s
                    ORDER BY content_type, group_name
                """, (run_id,))

                return [dict(row) for row in cursor.fetchall()]

        except Exception as e:
            logger.error(f"Failed to get content breakdown for run {run_id}: {e}")
            raise
