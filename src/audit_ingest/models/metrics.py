#!/usr/bin/env python3
"""
Timing and media data models.

Contains the append-only records written to the time-series store.
"""

from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass

VISUAL_METRICS_MEASUREMENT = "visualMetrics"
MEDIA_ASSETS_MEASUREMENT = "media_assets"

# Recognized timing/visual metric names, in display order
METRIC_NAMES: Tuple[str, ...] = (
    'firstPaint',
    'firstContentfulPaint',
    'largestContentfulPaint',
    'SpeedIndex',
    'ttfb',
    'domInteractive',
    'pageLoadTime',
    'fullyLoaded',
    'FirstVisualChange',
    'LastVisualChange',
    'TotalBlockingTime',
)


@dataclass
class MetricRecord:
    """A single timing/visual metric for one run and page."""
    metric_name: str
    value: float
    run_id: str
    url: str
    browser: str

    def __post_init__(self):
        if self.metric_name not in METRIC_NAMES:
            raise ValueError(f"Unrecognized metric name: {self.metric_name}")
        self.value = float(self.value)

    def tags(self) -> Dict[str, str]:
        return {
            'test_id': self.run_id,
            'url': self.url,
            'browser': self.browser,
            'metricName': self.metric_name
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metric_name': self.metric_name,
            'value': self.value,
            'run_id': self.run_id,
            'url': self.url,
            'browser': self.browser
        }


@dataclass
class MediaAsset:
    """Pointers to the recording and LCP screenshot for one run and page."""
    run_id: str
    url: str
    group: str
    browser: str = ''
    video_path: Optional[str] = None
    lcp_screenshot_path: Optional[str] = None

    def tags(self) -> Dict[str, str]:
        return {
            'test_id': self.run_id,
            'url': self.url,
            'group': self.group,
            'browser': self.browser
        }

    def fields(self) -> Dict[str, str]:
        """Non-empty path fields, keyed by their point field name."""
        fields = {}
        if self.video_path:
            fields['video_path'] = self.video_path
        if self.lcp_screenshot_path:
            fields['lcp_screenshot_path'] = self.lcp_screenshot_path
        return fields

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'url': self.url,
            'group': self.group,
            'browser': self.browser,
            'video_path': self.video_path,
            'lcp_screenshot_path': self.lcp_screenshot_path
        }
