#!/usr/bin/env python3
"""
Core data models for the audit results pipeline.

Contains all data structures used throughout the application.
"""

from .run import Run, PageContext, UNKNOWN_URL
from .metrics import MetricRecord, MediaAsset, METRIC_NAMES, VISUAL_METRICS_MEASUREMENT, MEDIA_ASSETS_MEASUREMENT
from .advice import AdviceItem, CategoryScores, CATEGORIES, ADVICE_MEASUREMENT
from .content import ContentTypeBreakdown, CONTENT_MEASUREMENT
from .records import FlatRecord, Point, MEASUREMENT_FIELDS, is_known_field

__all__ = [
    'Run', 'PageContext', 'UNKNOWN_URL',
    'MetricRecord', 'MediaAsset', 'METRIC_NAMES', 'VISUAL_METRICS_MEASUREMENT', 'MEDIA_ASSETS_MEASUREMENT',
    'AdviceItem', 'CategoryScores', 'CATEGORIES', 'ADVICE_MEASUREMENT',
    'ContentTypeBreakdown', 'CONTENT_MEASUREMENT',
    'FlatRecord', 'Point', 'MEASUREMENT_FIELDS', 'is_known_field'
]
