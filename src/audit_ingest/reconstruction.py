#!/usr/bin/env python3
"""
Flat record reconstruction.

Relational rows hold several fields per row; a time-series store hands
back one record per field. RecordReconstructor re-expands relational rows
into that per-field shape so the transformers downstream read either store
the same way. FlatRecordSource is the narrow read interface they consume.

Ingestion writes advice and content breakdown to the relational store only.
TimeSeriesRecordSource still queries coach_advice and pagexray points, for
point stores filled by other writers, and warns when a run has none.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .database.sinks import AppendSink, UpsertSink
from .exceptions import ReconstructionError
from .models.advice import ADVICE_MEASUREMENT
from .models.content import CONTENT_MEASUREMENT
from .models.metrics import VISUAL_METRICS_MEASUREMENT, MEDIA_ASSETS_MEASUREMENT
from .models.records import FlatRecord, is_known_field

logger = logging.getLogger(__name__)

# (field discriminator, column) pairs, in emission order
CONTENT_FIELD_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ('requests', 'requests'),
    ('contentSize', 'content_size'),
    ('transferSize', 'transfer_size'),
)

ADVICE_FIELD_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ('score', 'score'),
    ('title', 'title'),
    ('description', 'description'),
)


class RecordReconstructor:
    """Expands relational rows into per-field flat records."""

    def _expand(self, measurement: str, tags: Dict[str, str], row: Dict[str, Any],
                field_columns: Iterable[Tuple[str, str]]) -> List[FlatRecord]:
        records = []
        for field_name, column in field_columns:
            value = row.get(column)
            # A time-series store has no point for a field that was never written
            if value is None:
                continue
            records.append(self._record(measurement, field_name, value, tags, row.get('created_at')))
        return records

    @staticmethod
    def _record(measurement: str, field_name: str, value: Any, tags: Dict[str, str], time) -> FlatRecord:
        if not is_known_field(measurement, field_name):
            raise ReconstructionError(measurement, field_name)
        return FlatRecord(
            measurement=measurement,
            field=field_name,
            value=value,
            tags=dict(tags),
            time=time
        )

    def reconstruct_content_breakdown(self, rows: Iterable[Dict[str, Any]]) -> List[FlatRecord]:
        """
        Expand content_breakdown rows.

        Each row yields up to three records (requests, contentSize,
        transferSize) sharing the tags test_id, url, group, browser and
        contentType.
        """
        records = []
        for row in rows:
            tags = {
                'test_id': row['run_id'],
                'url': row['url'],
                'group': row['group_name'],
                'browser': row.get('browser') or '',
                'contentType': row['content_type'],
            }
            records.extend(self._expand(CONTENT_MEASUREMENT, tags, row, CONTENT_FIELD_COLUMNS))
        return records

    def reconstruct_advice(self, rows: Iterable[Dict[str, Any]]) -> List[FlatRecord]:
        """
        Expand advice rows.

        Each row yields score, title and description records sharing the
        tags test_id, url, group, category_name and adviceId.
        """
        records = []
        for row in rows:
            tags = {
                'test_id': row['run_id'],
                'url': row['url'],
                'group': row['group_name'],
                'category_name': row['category_name'],
                'adviceId': row['advice_id'],
            }
            records.extend(self._expand(ADVICE_MEASUREMENT, tags, row, ADVICE_FIELD_COLUMNS))
        return records

    def reconstruct(self, rows: Iterable[Dict[str, Any]], measurement: str) -> List[FlatRecord]:
        """Dispatch on the measurement the rows belong to."""
        if measurement == CONTENT_MEASUREMENT:
            return self.reconstruct_content_breakdown(rows)
        if measurement == ADVICE_MEASUREMENT:
            return self.reconstruct_advice(rows)
        raise ValueError(f"No relational representation for measurement {measurement}")


class FlatRecordSource(ABC):
    """Store-agnostic source of flat records for one run."""

    @abstractmethod
    def advice_records(self, run_id: str) -> List[FlatRecord]:
        pass

    @abstractmethod
    def performance_records(self, run_id: str) -> List[FlatRecord]:
        pass

    @abstractmethod
    def content_breakdown_records(self, run_id: str) -> List[FlatRecord]:
        pass

    @abstractmethod
    def media_records(self, run_id: str) -> List[FlatRecord]:
        pass


class TimeSeriesRecordSource(FlatRecordSource):
    """Reads every measurement from the append-only point store."""

    def __init__(self, append_sink: AppendSink):
        self.append_sink = append_sink

    def _relational_only(self, run_id: str, measurement: str) -> List[FlatRecord]:
        records = self.append_sink.query_points(run_id, measurement)
        if not records:
            logger.warning(
                f"No {measurement} points for run {run_id}; ingestion stores {measurement} "
                f"in the relational store only, read it with the relational source"
            )
        return records

    def advice_records(self, run_id: str) -> List[FlatRecord]:
        return self._relational_only(run_id, ADVICE_MEASUREMENT)

    def performance_records(self, run_id: str) -> List[FlatRecord]:
        return self.append_sink.query_points(run_id, VISUAL_METRICS_MEASUREMENT)

    def content_breakdown_records(self, run_id: str) -> List[FlatRecord]:
        return self._relational_only(run_id, CONTENT_MEASUREMENT)

    def media_records(self, run_id: str) -> List[FlatRecord]:
        return self.append_sink.query_points(run_id, MEDIA_ASSETS_MEASUREMENT)


class RelationalRecordSource(FlatRecordSource):
    """
    Reads advice and content breakdown from the relational store.

    Visual metrics and media pointers only live in the point store; they
    are read from append_sink when one is given.
    """

    def __init__(self, upsert_sink: UpsertSink, append_sink: Optional[AppendSink] = None,
                 reconstructor: Optional[RecordReconstructor] = None):
        self.upsert_sink = upsert_sink
        self.append_sink = append_sink
        self.reconstructor = reconstructor or RecordReconstructor()

    def advice_records(self, run_id: str) -> List[FlatRecord]:
        rows = self.upsert_sink.get_advice_rows(run_id)
        logger.debug(f"Reconstructing {len(rows)} advice rows for {run_id}")
        return self.reconstructor.reconstruct_advice(rows)

    def content_breakdown_records(self, run_id: str) -> List[FlatRecord]:
        rows = self.upsert_sink.get_content_breakdown_rows(run_id)
        logger.debug(f"Reconstructing {len(rows)} content breakdown rows for {run_id}")
        return self.reconstructor.reconstruct_content_breakdown(rows)

    def performance_records(self, run_id: str) -> List[FlatRecord]:
        if self.append_sink is None:
            return []
        return self.append_sink.query_points(run_id, VISUAL_METRICS_MEASUREMENT)

    def media_records(self, run_id: str) -> List[FlatRecord]:
        if self.append_sink is None:
            return []
        return self.append_sink.query_points(run_id, MEDIA_ASSETS_MEASUREMENT)
