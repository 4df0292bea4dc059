#!/usr/bin/env python3
"""
Artifact Extractor

Walks the three raw per-page documents produced by a test run (timings and
visual metrics, advice, content breakdown) and emits normalized records.

Every walk follows the same rule: prefer a structured summary value, fall
back to a raw scalar, otherwise skip the field. A missing value is never
replaced by zero.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .classifier import CategoryClassifier
from .metric_resolver import resolve_summary, to_number
from ..models.advice import AdviceItem, CategoryScores, CATEGORIES
from ..models.content import ContentTypeBreakdown
from ..models.metrics import MetricRecord, MediaAsset, METRIC_NAMES
from ..models.run import UNKNOWN_URL

logger = logging.getLogger(__name__)

# Alternate locations probed, in order, for metrics missing from visualMetrics
SECONDARY_METRIC_PATHS: Dict[str, Tuple[Tuple[str, ...], ...]] = {
    'firstPaint': (
        ('timings', 'firstPaint'),
        ('timings', 'paintTiming', 'first-paint'),
    ),
    'firstContentfulPaint': (
        ('googleWebVitals', 'firstContentfulPaint'),
        ('timings', 'paintTiming', 'first-contentful-paint'),
    ),
    'largestContentfulPaint': (
        ('googleWebVitals', 'largestContentfulPaint'),
        ('timings', 'largestContentfulPaint', 'renderTime'),
    ),
    'ttfb': (
        ('timings', 'ttfb'),
        ('googleWebVitals', 'ttfb'),
    ),
    'domInteractive': (
        ('timings', 'pageTimings', 'domInteractiveTime'),
    ),
    'pageLoadTime': (
        ('timings', 'pageTimings', 'pageLoadTime'),
    ),
    'fullyLoaded': (
        ('fullyLoaded',),
        ('timings', 'fullyLoaded'),
    ),
    'TotalBlockingTime': (
        ('googleWebVitals', 'totalBlockingTime'),
        ('cpu', 'longTasks', 'totalBlockingTime'),
    ),
}

# Media is assumed to sit at run-conventional locations; files are not checked
VIDEO_RELATIVE_PATH = ('data', 'video', '1.mp4')
LCP_SCREENSHOT_RELATIVE_PATH = ('data', 'screenshots', '1', 'largestContentfulPaint.png')


def _dig(document: Any, path: Sequence[str]) -> Any:
    """Follow nested keys, returning None as soon as one is missing."""
    node = document
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def _to_count(node: Any) -> Optional[int]:
    value = resolve_summary(node)
    return int(round(value)) if value is not None else None


@dataclass
class TimingExtraction:
    """Metrics resolved from one timing document."""
    url: str
    metrics: List[MetricRecord] = field(default_factory=list)


@dataclass
class AdvisoryExtraction:
    """
    Accumulator for one advice document.

    Created per call and returned, so nothing carries over between runs.
    """
    run_id: str
    url: str
    group: str
    items: List[AdviceItem] = field(default_factory=list)
    category_scores: Optional[CategoryScores] = None
    dropped_ids: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.category_scores is None:
            self.category_scores = CategoryScores(run_id=self.run_id)

    def category_score_items(self) -> List[AdviceItem]:
        """
        Category scores rendered as pseudo advice rows.

        The advice id and title equal the category name; readers recognize
        them and fold them back into category scores.
        """
        return [
            AdviceItem(
                run_id=self.run_id,
                url=self.url,
                group=self.group,
                category=category,
                advice_id=category,
                score=self.category_scores.get(category),
                title=category,
                description=''
            )
            for category in CATEGORIES
            if self.category_scores.get(category) is not None
        ]


class ArtifactExtractor:
    """Normalizes raw artifact documents into records."""

    def __init__(self, classifier: Optional[CategoryClassifier] = None):
        """
        Initialize extractor.

        Args:
            classifier: Advice category lookup; defaults to the built-in map
        """
        self.classifier = classifier or CategoryClassifier()

    @staticmethod
    def resolve_url(document: Dict[str, Any], *paths: Sequence[str]) -> str:
        """Return the first string URL found along paths, else the unknown marker."""
        for path in paths:
            value = _dig(document, path)
            if isinstance(value, str) and value:
                return value
        return UNKNOWN_URL

    def extract_timing(self, document: Dict[str, Any], run_id: str, browser: str) -> TimingExtraction:
        """
        Extract the recognized timing metrics from a timing document.

        visualMetrics is the primary source. Metrics it does not resolve are
        looked up in SECONDARY_METRIC_PATHS, first hit wins.

        Args:
            document: Parsed timing document
            run_id: Run identifier
            browser: Browser label

        Returns:
            Resolved URL and one MetricRecord per resolved metric name
        """
        url = self.resolve_url(document, ('pageinfo', 'url'), ('info', 'url'), ('url',))
        extraction = TimingExtraction(url=url)
        visual_metrics = document.get('visualMetrics')
        if not isinstance(visual_metrics, dict):
            visual_metrics = {}

        for metric_name in METRIC_NAMES:
            value = resolve_summary(visual_metrics.get(metric_name))

            if value is None:
                for path in SECONDARY_METRIC_PATHS.get(metric_name, ()):
                    value = resolve_summary(_dig(document, path))
                    if value is not None:
                        logger.debug(f"{metric_name} resolved from {'.'.join(path)}")
                        break

            if value is None:
                continue

            extraction.metrics.append(MetricRecord(
                metric_name=metric_name,
                value=value,
                run_id=run_id,
                url=url,
                browser=browser
            ))

        logger.debug(f"Extracted {len(extraction.metrics)} timing metrics for {url}")
        return extraction

    def extract_advisory(self, document: Dict[str, Any], run_id: str, group: str) -> AdvisoryExtraction:
        """
        Extract advice items and category scores from an advice document.

        Args:
            document: Parsed advice document
            run_id: Run identifier
            group: Page folder name

        Returns:
            AdvisoryExtraction with classified items, category scores taken
            from the category nodes themselves, and any dropped advice ids
        """
        url = self.resolve_url(document, ('url',))
        extraction = AdvisoryExtraction(run_id=run_id, url=url, group=group)
        advice_root = document.get('advice')
        if not isinstance(advice_root, dict):
            logger.debug(f"No advice tree for {group}")
            return extraction

        for category_name, category in advice_root.items():
            if not isinstance(category, dict):
                continue

            if category_name in CATEGORIES:
                extraction.category_scores.set(category_name, to_number(category.get('score')))

            advice_list = category.get('adviceList')
            if not isinstance(advice_list, dict) or not advice_list:
                logger.debug(f"No adviceList for category {category_name}")
                continue

            for advice_id, advice in advice_list.items():
                item = self._build_advice_item(extraction, category_name, advice_id, advice)
                if item is not None:
                    extraction.items.append(item)

        logger.debug(
            f"Extracted {len(extraction.items)} advice items for {group}, "
            f"dropped {len(extraction.dropped_ids)}"
        )
        return extraction

    def _build_advice_item(self, extraction: AdvisoryExtraction, category_name: str,
                           advice_id: str, advice: Any) -> Optional[AdviceItem]:
        if not isinstance(advice, dict):
            return None

        score = to_number(advice.get('score'))
        if score is None:
            return None

        category = self.classifier.classify(advice_id)
        if category is None:
            logger.warning(f"No category found for adviceId {advice_id}, dropping it")
            extraction.dropped_ids.append(advice_id)
            return None

        if category != category_name:
            logger.info(f"adviceId {advice_id} listed under {category_name}, classified as {category}")

        description = advice.get('description')
        return AdviceItem(
            run_id=extraction.run_id,
            url=extraction.url,
            group=extraction.group,
            category=category,
            advice_id=advice_id,
            score=score,
            title=advice.get('title') or advice_id,
            description=str(description) if description else ''
        )

    def extract_content_breakdown(self, document: Dict[str, Any], run_id: str,
                                  group: str, browser: str) -> List[ContentTypeBreakdown]:
        """
        Extract per content type counters from a content breakdown document.

        Args:
            document: Parsed content breakdown document
            run_id: Run identifier
            group: Page folder name
            browser: Browser label

        Returns:
            One row per content type with at least one counter present
        """
        url = self.resolve_url(document, ('url',))
        content_types = document.get('contentTypes')
        if not isinstance(content_types, dict):
            logger.debug(f"No contentTypes for {group}")
            return []

        rows = []
        for content_type, data in content_types.items():
            if not isinstance(data, dict):
                continue

            row = ContentTypeBreakdown(
                run_id=run_id,
                url=url,
                group=group,
                browser=browser,
                content_type=content_type,
                requests=_to_count(data.get('requests')),
                content_size=_to_count(data.get('contentSize')),
                transfer_size=_to_count(data.get('transferSize'))
            )
            if not row.has_counters():
                logger.debug(f"No counters for content type {content_type} in {group}")
                continue
            rows.append(row)

        return rows

    def media_asset_for(self, run_id: str, url: str, group: str, browser: str = '') -> MediaAsset:
        """Media pointers for a page, derived from the folder convention."""
        page_root = PurePosixPath('pages', group)
        return MediaAsset(
            run_id=run_id,
            url=url,
            group=group,
            browser=browser,
            video_path=str(page_root.joinpath(*VIDEO_RELATIVE_PATH)),
            lcp_screenshot_path=str(page_root.joinpath(*LCP_SCREENSHOT_RELATIVE_PATH))
        )
