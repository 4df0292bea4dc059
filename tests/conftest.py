import json
import sys
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from audit_ingest.database.sinks import AppendSink, UpsertSink  # noqa: E402
from audit_ingest.models.advice import AdviceItem, CategoryScores  # noqa: E402
from audit_ingest.models.content import ContentTypeBreakdown  # noqa: E402
from audit_ingest.models.records import FlatRecord, Point  # noqa: E402
from audit_ingest.models.run import Run  # noqa: E402


class _Clock:
    """Strictly increasing timestamps so newest-first ordering is deterministic."""

    def __init__(self) -> None:
        self._now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


class InMemoryUpsertSink(UpsertSink):
    """Relational store double keyed on the same identities as the real tables."""

    def __init__(self) -> None:
        self.clock = _Clock()
        self.runs: Dict[str, Dict[str, Any]] = {}
        self.advice: Dict[Tuple[str, str, str, str], Dict[str, Any]] = {}
        self.scores: Dict[str, Dict[str, Any]] = {}
        self.content: Dict[Tuple[str, str, str], Dict[str, Any]] = {}
        self.fail_advice_ids: Set[str] = set()
        self.fail_runs = False

    def upsert_run(self, run: Run) -> None:
        if self.fail_runs:
            raise RuntimeError("runs table unavailable")
        self.runs[run.run_id] = {'run_id': run.run_id, 'browser': run.browser, 'created_at': self.clock.tick()}

    def get_run(self, run_id: str) -> Optional[Dict[str, Any]]:
        return self.runs.get(run_id)

    def list_runs(self, limit: int = 100) -> List[Dict[str, Any]]:
        return sorted(self.runs.values(), key=lambda row: row['created_at'], reverse=True)[:limit]

    def upsert_advice(self, item: AdviceItem) -> None:
        if item.advice_id in self.fail_advice_ids:
            raise RuntimeError(f"cannot write {item.advice_id}")
        self.advice[item.identity] = {
            'run_id': item.run_id,
            'url': item.url,
            'group_name': item.group,
            'category_name': item.category,
            'advice_id': item.advice_id,
            'score': item.score,
            'title': item.title,
            'description': item.description,
            'created_at': self.clock.tick(),
        }

    def get_advice_rows(self, run_id: str) -> List[Dict[str, Any]]:
        rows = [dict(row) for row in self.advice.values() if row['run_id'] == run_id]
        return sorted(rows, key=lambda row: row['created_at'], reverse=True)

    def upsert_category_scores(self, scores: CategoryScores) -> None:
        row = self.scores.setdefault(scores.run_id, {
            'run_id': scores.run_id,
            'performance_score': None,
            'privacy_score': None,
            'bestpractice_score': None,
        })
        # None keeps the stored score, like COALESCE in the real upsert
        for column, score in (
            ('performance_score', scores.performance),
            ('privacy_score', scores.privacy),
            ('bestpractice_score', scores.bestpractice),
        ):
            if score is not None:
                row[column] = score

    def get_category_scores(self, run_id: str) -> Optional[CategoryScores]:
        row = self.scores.get(run_id)
        return CategoryScores.from_row(row) if row else None

    def upsert_content_breakdown(self, row: ContentTypeBreakdown) -> None:
        self.content[row.identity] = {
            'run_id': row.run_id,
            'url': row.url,
            'group_name': row.group,
            'browser': row.browser,
            'content_type': row.content_type,
            'requests': row.requests,
            'content_size': row.content_size,
            'transfer_size': row.transfer_size,
            'created_at': self.clock.tick(),
        }

    def get_content_breakdown_rows(self, run_id: str) -> List[Dict[str, Any]]:
        rows = [dict(row) for row in self.content.values() if row['run_id'] == run_id]
        return sorted(rows, key=lambda row: (row['content_type'], row['group_name']))

    def snapshot(self) -> Dict[str, Any]:
        """Stored state without timestamps, for idempotence comparisons."""
        def strip(rows):
            return {key: {k: v for k, v in row.items() if k != 'created_at'} for key, row in rows.items()}
        return {
            'runs': strip(self.runs),
            'advice': strip(self.advice),
            'scores': strip(self.scores),
            'content': strip(self.content),
        }


class InMemoryAppendSink(AppendSink):
    """Append-only point store double; reads return newest points first."""

    def __init__(self) -> None:
        self.clock = _Clock()
        self.points: List[Point] = []
        self.fail = False

    def write_points(self, points: Iterable[Point]) -> int:
        if self.fail:
            raise RuntimeError("point store unavailable")
        written = 0
        for point in points:
            self.points.append(Point(
                measurement=point.measurement,
                tags=dict(point.tags),
                fields=dict(point.fields),
                time=point.time or self.clock.tick()
            ))
            written += 1
        return written

    def query_points(self, run_id: str, measurement: str) -> List[FlatRecord]:
        records = []
        for point in reversed(self.points):
            if point.measurement == measurement and point.tags.get('test_id') == run_id:
                records.extend(point.to_records())
        return records

    def of_measurement(self, measurement: str) -> List[Point]:
        return [point for point in self.points if point.measurement == measurement]


class RecordingCursor:
    def __init__(self, fetchone_result=None, fetchall_result=None) -> None:
        self.fetchone_result = fetchone_result
        self.fetchall_result = fetchall_result or []
        self.executed: List[Tuple[Any, Any]] = []

    def execute(self, query, params=None) -> None:
        self.executed.append((query, params))

    def fetchone(self):
        return self.fetchone_result

    def fetchall(self):
        return self.fetchall_result


class RecordingConnectionManager:
    """Stands in for ConnectionManager; every cursor is the same RecordingCursor."""

    def __init__(self, cursor: Optional[RecordingCursor] = None, error: Optional[Exception] = None) -> None:
        self.cursor = cursor or RecordingCursor()
        self.error = error
        self.closed = False

    @contextmanager
    def get_cursor(self):
        if self.error is not None:
            raise self.error
        yield self.cursor

    @contextmanager
    def transaction(self):
        if self.error is not None:
            raise self.error
        yield self.cursor

    def health_check(self) -> Dict[str, Any]:
        return {'connected': self.error is None, 'name': 'recording'}

    def close(self) -> None:
        self.closed = True


def sample_timing_document(url: str = "https://example.com/") -> Dict[str, Any]:
    return {
        'info': {'url': url},
        'visualMetrics': {
            'FirstVisualChange': {'median': 500, 'mean': 520, 'max': 700},
            'SpeedIndex': {'median': 1200, 'mean': 1250},
            'LastVisualChange': 2000,
        },
        'timings': {
            'firstPaint': 300,
            'ttfb': {'median': 80},
            'pageTimings': {'domInteractiveTime': 900, 'pageLoadTime': 1500},
        },
        'googleWebVitals': {
            'firstContentfulPaint': {'median': 350},
            'largestContentfulPaint': {'median': 1400},
            'totalBlockingTime': {'median': 30},
        },
        'fullyLoaded': 2500,
    }


def sample_advisory_document(url: str = "https://example.com/") -> Dict[str, Any]:
    return {
        'url': url,
        'advice': {
            'performance': {
                'score': 85,
                'adviceList': {
                    'avoidRenderBlocking': {'score': 70, 'title': 'Avoid render blocking', 'description': 'Inline critical CSS'},
                    'imageSize': {'score': 100, 'title': 'Image size', 'description': ''},
                },
            },
            'privacy': {
                'score': 60,
                'adviceList': {
                    'https': {'score': 100, 'title': 'Serve over HTTPS', 'description': 'Always use HTTPS'},
                },
            },
            'bestpractice': {
                'score': 90,
                'adviceList': {
                    'pageTitle': {'score': 90, 'title': 'Page title', 'description': 'Keep it short'},
                },
            },
        },
    }


def sample_content_document(url: str = "https://example.com/") -> Dict[str, Any]:
    return {
        'url': url,
        'contentTypes': {
            'image': {'requests': 12, 'contentSize': 4096, 'transferSize': 2048},
            'javascript': {'requests': {'median': 5}, 'contentSize': {'median': 30000}, 'transferSize': 9000},
            'font': {'requests': 0, 'contentSize': 0, 'transferSize': 0},
        },
    }


def write_page(results_dir: Path, run_id: str, group: str,
               timing: Optional[Any] = None, advisory: Optional[Any] = None,
               content: Optional[Any] = None, raw: Optional[Dict[str, str]] = None) -> Path:
    """Lay out one page folder the way the test harness writes it."""
    data_dir = results_dir / run_id / 'pages' / group / 'data'
    data_dir.mkdir(parents=True, exist_ok=True)
    for name, document in (
        ('browsertime.run-1.json', timing),
        ('coach.run-1.json', advisory),
        ('pagexray.run-1.json', content),
    ):
        if document is not None:
            (data_dir / name).write_text(json.dumps(document), encoding='utf-8')
    for name, text in (raw or {}).items():
        (data_dir / name).write_text(text, encoding='utf-8')
    return data_dir


@pytest.fixture
def upsert_sink() -> InMemoryUpsertSink:
    return InMemoryUpsertSink()


@pytest.fixture
def append_sink() -> InMemoryAppendSink:
    return InMemoryAppendSink()


@pytest.fixture
def recording_cursor() -> RecordingCursor:
    return RecordingCursor()


@pytest.fixture
def connection_manager(recording_cursor) -> RecordingConnectionManager:
    return RecordingConnectionManager(recording_cursor)


@pytest.fixture
def results_dir(tmp_path) -> Path:
    path = tmp_path / "results"
    path.mkdir()
    return path


@pytest.fixture
def timing_document() -> Dict[str, Any]:
    return sample_timing_document()


@pytest.fixture
def advisory_document() -> Dict[str, Any]:
    return sample_advisory_document()


@pytest.fixture
def content_document() -> Dict[str, Any]:
    return sample_content_document()


@pytest.fixture
def page_writer(results_dir):
    def _write(run_id: str, group: str, **documents) -> Path:
        return write_page(results_dir, run_id, group, **documents)

    return _write
