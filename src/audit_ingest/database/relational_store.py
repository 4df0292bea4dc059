#!/usr/bin/env python3
"""
Relational Store

Composes the per-table services behind the UpsertSink interface.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from .sinks import UpsertSink
from .run_service import RunService
from .advice_service import AdviceService
from .content_breakdown_service import ContentBreakdownService
from ..models.advice import AdviceItem, CategoryScores
from ..models.content import ContentTypeBreakdown
from ..models.run import Run

logger = logging.getLogger(__name__)


class RelationalStore(UpsertSink):
    """
    Unified relational interface using modular services.

    Every write is an upsert on the row's natural identity, so replaying
    the same run converges to the same stored state.
    """

    def __init__(self, connection_manager):
        """
        Initialize relational store.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

        self.runs = RunService(self.connection_manager)
        self.advice = AdviceService(self.connection_manager)
        self.content = ContentBreakdownService(self.connection_manager)

    # Run operations

    def upsert_run(self, run: Run) -> None:
        self.runs.upsert_run(run)

    def get_run(self, run_id: str) -> Optional[Dict[str, Any]]:
        return self.runs.get_run(run_id)

    def list_runs(self, limit: int = 100) -> List[Dict[str, Any]]:
        return self.runs.list_runs(limit)

    # Advice operations

    def upsert_advice(self, item: AdviceItem) -> None:
        self.advice.upsert_advice(item)

    def get_advice_rows(self, run_id: str) -> List[Dict[str, Any]]:
        return self.advice.get_advice_rows(run_id)

    def upsert_category_scores(self, scores: CategoryScores) -> None:
        self.advice.upsert_category_scores(scores)

    def get_category_scores(self, run_id: str) -> Optional[CategoryScores]:
        return self.advice.get_category_scores(run_id)

    # Content breakdown operations

    def upsert_content_breakdown(self, row: ContentTypeBreakdown) -> None:
        self.content.upsert_content_breakdown(row)

    def get_content_breakdown_rows(self, run_id: str) -> List[Dict[str, Any]]:
        return self.content.get_content_breakdown_rows(run_id)

    # Health check

    def health_check(self) -> Dict[str, Any]:
        """Check database connection and return status with table counts."""
        try:
            health_info = self.connection_manager.health_check()

            if not health_info.get('connected', False):
                return health_info

            tables_info = {}

            try:
                tables_info['runs'] = {'count': self.runs.count_runs()}
            except Exception as e:
                logger.warning(f"Could not get run stats: {e}")
                tables_info['runs'] = {'error': str(e)}

            try:
                tables_info['advice'] = {'count': self.advice.count_advice()}
            except Exception as e:
                logger.warning(f"Could not get advice stats: {e}")
                tables_info['advice'] = {'error': str(e)}

            health_info['tables'] = tables_info
            return health_info

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                'connected': False,
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }

    def close(self):
        """Close database connection."""
        self.connection_manager.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
