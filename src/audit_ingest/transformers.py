#!/usr/bin/env python3
"""
Flat record transformers.

Pure functions that fold per-field flat records into report shapes. They
read records from either store identically, since relational rows are
re-expanded into the same per-field shape first.

Records usually arrive newest first, so wherever several records carry
the same (id, field) the first one seen wins.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from .extraction.classifier import CategoryClassifier
from .models.advice import ADVICE_MEASUREMENT, CATEGORIES
from .models.content import CONTENT_MEASUREMENT
from .models.metrics import METRIC_NAMES, MEDIA_ASSETS_MEASUREMENT, VISUAL_METRICS_MEASUREMENT
from .models.records import FlatRecord

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


def _to_int(value: Any) -> int:
    """Coerce a stored score or counter to int; anything unusable is 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return 0
    return 0


def _of_measurement(records: Iterable[FlatRecord], measurement: str) -> List[FlatRecord]:
    return [record for record in records if record.measurement == measurement]


def empty_advice_report() -> Dict[str, Dict[str, Any]]:
    return {category: {'score': 0, 'adviceList': {}} for category in CATEGORIES}


def aggregate_advice(records: Iterable[FlatRecord],
                     classifier: Optional[CategoryClassifier] = None) -> Dict[str, Dict[str, Any]]:
    """
    Fold coach_advice records into the per-category advice report.

    Args:
        records: Flat coach_advice records
        classifier: Advice id to category mapping, defaults to the built-in map

    Returns:
        {category: {'score': int, 'adviceList': {id: {'advice', 'title', 'score'}}}}
        for all three categories
    """
    classifier = classifier or CategoryClassifier()
    report = empty_advice_report()

    collected: Dict[str, Dict[str, Any]] = {}
    for record in _of_measurement(records, ADVICE_MEASUREMENT):
        advice_id = record.tag('adviceId')
        if not advice_id:
            continue
        fields = collected.setdefault(advice_id, {})
        fields.setdefault(record.field, record.value)

    for advice_id, fields in collected.items():
        if CategoryClassifier.is_category(advice_id):
            report[advice_id]['score'] = _to_int(fields.get('score'))
            continue

        category = classifier.classify(advice_id)
        if category is None:
            logger.warning(f"No category found for adviceId: {advice_id}")
            continue

        report[category]['adviceList'][advice_id] = {
            'advice': fields.get('description') or '',
            'title': fields.get('title') or advice_id,
            'score': _to_int(fields.get('score'))
        }

    logger.debug(
        "Advice items: " + ", ".join(
            f"{category}={len(report[category]['adviceList'])}" for category in CATEGORIES
        )
    )
    return report


def select_performance_metrics(records: Iterable[FlatRecord]) -> Dict[str, Optional[float]]:
    """
    Pick one value per recognized metric name.

    An exact metricName match wins; otherwise a case-insensitive match is
    tried. A metric with no record is None, never zero.
    """
    candidates = [
        record for record in _of_measurement(records, VISUAL_METRICS_MEASUREMENT)
        if record.field == 'value'
    ]

    metrics: Dict[str, Optional[float]] = {}
    for name in METRIC_NAMES:
        match = next((r for r in candidates if r.tag('metricName') == name), None)
        if match is None:
            lowered = name.lower()
            match = next(
                (r for r in candidates if (r.tag('metricName') or '').lower() == lowered),
                None
            )
        metrics[name] = float(match.value) if match is not None and match.value is not None else None
    return metrics


def aggregate_content_breakdown(records: Iterable[FlatRecord]) -> Dict[str, Any]:
    """
    Fold pagexray records into per content type counters and totals.

    Types whose requests and content size are both zero are left out, even
    when a transfer size was recorded for them.
    """
    by_type: Dict[str, Dict[str, Any]] = {}
    for record in _of_measurement(records, CONTENT_MEASUREMENT):
        content_type = record.tag('contentType')
        if not content_type:
            continue
        by_type.setdefault(content_type, {}).setdefault(record.field, record.value)

    content_types = {}
    total_requests = 0
    total_size = 0
    for content_type, fields in by_type.items():
        requests = _to_int(fields.get('requests'))
        size = _to_int(fields.get('contentSize'))
        transfer_size = _to_int(fields.get('transferSize'))

        if requests <= 0 and size <= 0:
            continue

        content_types[content_type] = {
            'requests': requests,
            'size': size,
            'transferSize': transfer_size
        }
        total_requests += requests
        total_size += size

    return {
        'contentTypes': content_types,
        'totalRequests': total_requests,
        'totalSize': total_size
    }


def extract_media(records: Iterable[FlatRecord]) -> Dict[str, Optional[str]]:
    """First video and LCP screenshot pointer found, or None."""
    media = {'video': None, 'screenshot': None}
    for record in _of_measurement(records, MEDIA_ASSETS_MEASUREMENT):
        if record.field == 'video_path' and media['video'] is None:
            media['video'] = record.value
        elif record.field == 'lcp_screenshot_path' and media['screenshot'] is None:
            media['screenshot'] = record.value
    return media


def get_missing_metrics(metrics: Dict[str, Optional[float]]) -> List[str]:
    return [name for name, value in metrics.items() if value is None]


def is_valid_metrics(metrics: Optional[Dict[str, Optional[float]]]) -> bool:
    """True when at least one metric has a value."""
    if not isinstance(metrics, dict):
        return False
    return any(value is not None for value in metrics.values())


def format_metrics_for_display(metrics: Dict[str, Optional[float]]) -> Dict[str, Any]:
    formatted = {}
    for name, value in metrics.items():
        if name not in METRIC_NAMES:
            formatted[name] = value
        elif value is None:
            formatted[name] = NOT_AVAILABLE
        else:
            formatted[name] = f"{value:.0f} ms"
    return formatted


def format_category_scores(scores) -> Dict[str, Any]:
    """
    Render stored category scores, N/A for a missing category.

    Args:
        scores: CategoryScores or None when the run has no scores row
    """
    formatted = {}
    for category in CATEGORIES:
        value = scores.get(category) if scores is not None else None
        formatted[category] = NOT_AVAILABLE if value is None else value
    return formatted
