#!/usr/bin/env python3
"""
Performance audit results pipeline.

Normalizes browser-test artifacts (timings, advice, content breakdown) into
flat records and persists them to a relational and a time-series store.
"""

__version__ = "1.0.0"
