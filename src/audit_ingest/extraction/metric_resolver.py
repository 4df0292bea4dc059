#!/usr/bin/env python3
"""
Metric value resolution.

Performance metrics can arrive as a statistical summary (median, mean, ...)
or as a bare number. These helpers pick the best available value under a
fixed priority and never turn a missing value into zero.
"""

import math
from typing import Any, Iterable, Optional, Tuple

# Highest priority first
FIELD_PRIORITY: Tuple[str, ...] = ('median', 'mean', 'value', 'max')


def to_number(value: Any) -> Optional[float]:
    """Return value as a float, or None when it is absent, NaN, too large or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def resolve(candidates: Iterable[Tuple[str, Any]]) -> Optional[float]:
    """
    Pick the best value from (field_name, value) candidates.

    Priority is median > mean > value > max regardless of input order.
    Unknown field names are ignored.

    Args:
        candidates: Ordered (field_name, value) pairs

    Returns:
        Resolved number, or None when no candidate holds a usable value
    """
    by_field = {}
    for field_name, value in candidates:
        number = to_number(value)
        if number is not None and field_name not in by_field:
            by_field[field_name] = number

    for field_name in FIELD_PRIORITY:
        if field_name in by_field:
            return by_field[field_name]
    return None


def resolve_summary(node: Any) -> Optional[float]:
    """Resolve a summary object via resolve(), or accept a bare scalar."""
    if isinstance(node, dict):
        return resolve((field_name, node.get(field_name)) for field_name in FIELD_PRIORITY)
    return to_number(node)
