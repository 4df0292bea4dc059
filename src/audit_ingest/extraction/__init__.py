#!/usr/bin/env python3
"""
Extraction package.

Turns raw artifact documents into normalized records.
"""

from .metric_resolver import resolve, resolve_summary, FIELD_PRIORITY
from .classifier import CategoryClassifier, DEFAULT_ADVICE_CATEGORIES
from .artifact_extractor import ArtifactExtractor, AdvisoryExtraction, TimingExtraction

__all__ = [
    'resolve', 'resolve_summary', 'FIELD_PRIORITY',
    'CategoryClassifier', 'DEFAULT_ADVICE_CATEGORIES',
    'ArtifactExtractor', 'AdvisoryExtraction', 'TimingExtraction'
]
