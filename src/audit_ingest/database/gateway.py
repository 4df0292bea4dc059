#!/usr/bin/env python3
"""
Persistence Gateway

Single write boundary of the pipeline. Routes normalized records to the
append sink (visual metrics, media pointers) or the upsert sink (run,
advice, category scores, content breakdown).

Writes are best effort per item: one failed upsert or point is logged and
counted, and the remaining items are still written. The two sinks are
independent, so a failing store never blocks the other one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from .sinks import AppendSink, UpsertSink
from ..models.advice import AdviceItem, CategoryScores
from ..models.content import ContentTypeBreakdown
from ..models.metrics import MetricRecord, MediaAsset, VISUAL_METRICS_MEASUREMENT, MEDIA_ASSETS_MEASUREMENT
from ..models.records import Point
from ..models.run import Run

logger = logging.getLogger(__name__)


@dataclass
class WriteOutcome:
    """Counts of written and failed items for one kind of write."""
    written: int = 0
    failed: int = 0

    def merge(self, other: 'WriteOutcome') -> 'WriteOutcome':
        self.written += other.written
        self.failed += other.failed
        return self

    @property
    def total(self) -> int:
        return self.written + self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {'written': self.written, 'failed': self.failed}


class PersistenceGateway:
    """Routes records to their store with per-item failure isolation."""

    def __init__(self, upsert_sink: UpsertSink, append_sink: AppendSink):
        """
        Initialize gateway.

        Args:
            upsert_sink: Relational store
            append_sink: Time-series point store
        """
        self.upsert_sink = upsert_sink
        self.append_sink = append_sink

    # Append sink

    def _write_points(self, points: List[Point], kind: str) -> WriteOutcome:
        if not points:
            return WriteOutcome()
        try:
            written = self.append_sink.write_points(points)
        except Exception as e:
            logger.error(f"Error writing {kind} points: {e}")
            written = 0
        return WriteOutcome(written=written, failed=len(points) - written)

    def write_metrics(self, metrics: Iterable[MetricRecord]) -> WriteOutcome:
        """Append one visualMetrics point per metric."""
        points = [
            Point(
                measurement=VISUAL_METRICS_MEASUREMENT,
                tags=metric.tags(),
                fields={'value': metric.value}
            )
            for metric in metrics
        ]
        return self._write_points(points, VISUAL_METRICS_MEASUREMENT)

    def write_media_asset(self, asset: MediaAsset) -> WriteOutcome:
        """Append the media pointer point for a page."""
        fields = asset.fields()
        if not fields:
            return WriteOutcome()
        logger.debug(f"Writing media assets for {asset.url}")
        point = Point(measurement=MEDIA_ASSETS_MEASUREMENT, tags=asset.tags(), fields=fields)
        return self._write_points([point], MEDIA_ASSETS_MEASUREMENT)

    # Upsert sink

    def save_run(self, run: Run) -> WriteOutcome:
        """Upsert run metadata."""
        try:
            self.upsert_sink.upsert_run(run)
            logger.debug(f"Saved run metadata: {run.run_id}")
            return WriteOutcome(written=1)
        except Exception as e:
            logger.error(f"Error saving run metadata {run.run_id}: {e}")
            return WriteOutcome(failed=1)

    def save_advice_items(self, items: Iterable[AdviceItem]) -> WriteOutcome:
        """Upsert advice items one by one."""
        outcome = WriteOutcome()
        for item in items:
            try:
                self.upsert_sink.upsert_advice(item)
                outcome.written += 1
            except Exception as e:
                outcome.failed += 1
                logger.error(f"Error writing advice {item.advice_id} ({item.category}) for {item.group}: {e}")
        return outcome

    def save_category_scores(self, scores: CategoryScores) -> WriteOutcome:
        """
        Upsert a run's category scores.

        A document without any category score writes nothing. Categories
        missing from a partial document keep the scores stored from other
        pages of the same run.
        """
        if scores.is_empty():
            logger.debug(f"No category scores to save for {scores.run_id}")
            return WriteOutcome()
        try:
            self.upsert_sink.upsert_category_scores(scores)
            return WriteOutcome(written=1)
        except Exception as e:
            logger.error(f"Error saving category scores for {scores.run_id}: {e}")
            return WriteOutcome(failed=1)

    def save_advisory(self, extraction) -> Tuple[WriteOutcome, WriteOutcome]:
        """
        Persist everything extracted from one advice document.

        Args:
            extraction: AdvisoryExtraction

        Returns:
            (advice outcome, category score outcome); the advice outcome
            covers both the items and the category pseudo rows
        """
        advice_outcome = self.save_advice_items(extraction.items)
        advice_outcome.merge(self.save_advice_items(extraction.category_score_items()))
        scores_outcome = self.save_category_scores(extraction.category_scores)
        return advice_outcome, scores_outcome

    def save_content_breakdown(self, rows: Iterable[ContentTypeBreakdown]) -> WriteOutcome:
        """Upsert content breakdown rows one by one."""
        outcome = WriteOutcome()
        for row in rows:
            try:
                self.upsert_sink.upsert_content_breakdown(row)
                outcome.written += 1
            except Exception as e:
                outcome.failed += 1
                logger.error(f"Error writing content breakdown {row.content_type} for {row.group}: {e}")
        return outcome
