#!/usr/bin/env python3
"""
Advice Database Service

Handles database operations for advice items and per-run category scores.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from ..models.advice import AdviceItem, CategoryScores

logger = logging.getLogger(__name__)


class AdviceService:
    """Service for advice-related database operations."""

    def __init__(self, connection_manager):
        """
        Initialize advice service.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

    def upsert_advice(self, item: AdviceItem) -> None:
        """
        Insert an advice item or overwrite its score, title and description.

        Identity columns (run_id, group_name, category_name, advice_id) are
        never updated.

        Args:
            item: Advice item to store
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO advice (
                        run_id, url, group_name, category_name, advice_id,
                        score, title, description, created_at
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (run_id, group_name, category_name, advice_id)
                    DO UPDATE SET score = EXCLUDED.score,
                                  title = EXCLUDED.title,
                                  description = EXCLUDED.description,
                                  created_at = EXCLUDED.created_at
                """, (
                    item.run_id,
                    item.url,
                    item.group,
                    item.category,
                    item.advice_id,
                    item.score,
                    item.title,
                    item.description,
                    datetime.now(timezone.utc)
                ))

        except Exception as e:
            logger.error(f"Failed to upsert advice {item.advice_id} for run {item.run_id}: {e}")
            raise

    def get_advice_rows(self, run_id: str) -> List[Dict[str, Any]]:
        """
        Get all advice rows for a run, newest first.

        Args:
            run_id: Run identifier

        Returns:
            List of advice rows
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT run_id, url, group_name, category_name, advice_id,
                           score, title, description, created_at
                    FROM advice
                    WHERE run_id = %s
                    ORDER BY created_at DESC, group_name, advice_id
                """, (run_id,))

                return [dict(row) for row in cursor.fetchall()]

        except Exception as e:
            logger.error(f"Failed to get advice for run {run_id}: {e}")
            raise

    def upsert_category_scores(self, scores: CategoryScores) -> None:
        """
        Store the three category scores of a run, one row per run.

        A None score keeps whatever the row already holds, so a page
        without a category never erases that category from another page.

        Args:
            scores: Category scores; None leaves the stored value
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO category_scores (
                        run_id, performance_score, privacy_score, bestpractice_score, created_at
                    ) VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (run_id)
                    DO UPDATE SET performance_score = COALESCE(EXCLUDED.performance_score, category_scores.performance_score),
                                  privacy_score = COALESCE(EXCLUDED.privacy_score, category_scores.privacy_score),
                                  bestpractice_score = COALESCE(EXCLUDED.bestpractice_score, category_scores.bestpractice_score),
                                  created_at = EXCLUDED.created_at
                """, (
                    scores.run_id,
                    scores.performance,
                    scores.privacy,
                    scores.bestpractice,
                    datetime.now(timezone.utc)
                ))

            logger.debug(
                f"Saved category scores for {scores.run_id}: performance={scores.performance}, "
                f"privacy={scores.privacy}, bestpractice={scores.bestpractice}"
            )

        except Exception as e:
            logger.error(f"Failed to upsert category scores for run {scores.run_id}: {e}")
            raise

    def get_category_scores(self, run_id: str) -> Optional[CategoryScores]:
        """
        Get category scores for a run.

        Args:
            run_id: Run identifier

        Returns:
            CategoryScores or None if the run has none stored
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT run_id, performance_score, privacy_score, bestpractice_score
                    FROM category_scores
                    WHERE run_id = %s
                """, (run_id,))

                result = cursor.fetchone()
                return CategoryScores.from_row(result) if result else None

        except Exception as e:
            logger.error(f"Failed to get category scores for run {run_id}: {e}")
            raise

    def count_advice(self, run_id: Optional[str] = None) -> int:
        try:
            with self.connection_manager.get_cursor() as cursor:
                if run_id is not None:
                    cursor.execute("SELECT COUNT(*) as count FROM advice WHERE run_id = %s", (run_id,))
                else:
                    cursor.execute("SELECT COUNT(*) as count FROM advice")
                result = cursor.fetchone()
                return result['count'] if result else 0

        except Exception as e:
            logger.error(f"Failed to count advice: {e}")
            raise
