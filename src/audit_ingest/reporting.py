#!/usr/bin/env python3
"""
Report Service

Read side of the pipeline: pulls flat records from a FlatRecordSource and
folds them with the transformers into the per-run report views.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .database.sinks import UpsertSink
from .extraction.classifier import CategoryClassifier
from .reconstruction import FlatRecordSource
from . import transformers

logger = logging.getLogger(__name__)


class ReportService:
    """Builds report views for stored runs."""

    def __init__(self, source: FlatRecordSource, upsert_sink: UpsertSink,
                 classifier: Optional[CategoryClassifier] = None):
        """
        Initialize report service.

        Args:
            source: Flat record source (relational or time-series)
            upsert_sink: Relational store, for run metadata and category scores
            classifier: Advice category lookup
        """
        self.source = source
        self.upsert_sink = upsert_sink
        self.classifier = classifier or CategoryClassifier()

    def advice(self, run_id: str) -> Dict[str, Dict[str, Any]]:
        records = self.source.advice_records(run_id)
        logger.debug(f"Loaded {len(records)} advice records for {run_id}")
        return transformers.aggregate_advice(records, self.classifier)

    def performance(self, run_id: str) -> Dict[str, Optional[float]]:
        metrics = transformers.select_performance_metrics(self.source.performance_records(run_id))
        missing = transformers.get_missing_metrics(metrics)
        if missing:
            logger.debug(f"Run {run_id} has no value for: {', '.join(missing)}")
        return metrics

    def content_breakdown(self, run_id: str) -> Dict[str, Any]:
        return transformers.aggregate_content_breakdown(self.source.content_breakdown_records(run_id))

    def media(self, run_id: str) -> Dict[str, Optional[str]]:
        return transformers.extract_media(self.source.media_records(run_id))

    def category_scores(self, run_id: str) -> Dict[str, Any]:
        """Stored category scores with N/A for anything missing."""
        return transformers.format_category_scores(self.upsert_sink.get_category_scores(run_id))

    def list_runs(self, limit: int = 100) -> List[Dict[str, Any]]:
        return self.upsert_sink.list_runs(limit)

    def compare(self, run_ids: Iterable[str]) -> Dict[str, Dict[str, Optional[float]]]:
        """
        Performance metrics side by side for several runs.

        Args:
            run_ids: Runs to compare, in display order

        Returns:
            {run_id: {metric name: value or None}}
        """
        comparison = {}
        for run_id in run_ids:
            comparison[run_id] = self.performance(run_id)
            if not transformers.is_valid_metrics(comparison[run_id]):
                logger.warning(f"No performance metrics stored for run {run_id}")
        return comparison
