#!/usr/bin/env python3
"""
Flat record and point models.

A flat record is the canonical interchange shape between persistence and
the consumer-side transformers: one tagged (measurement, field, value)
tuple. A point is what the append sink stores: one tag set with one or
more fields, expanding to one flat record per field when read back.
"""

from datetime import datetime
from typing import Dict, Any, List, Optional, FrozenSet
from dataclasses import dataclass, field as dataclass_field

from .advice import ADVICE_MEASUREMENT
from .content import CONTENT_MEASUREMENT
from .metrics import VISUAL_METRICS_MEASUREMENT, MEDIA_ASSETS_MEASUREMENT

# Field discriminators each measurement may carry
MEASUREMENT_FIELDS: Dict[str, FrozenSet[str]] = {
    VISUAL_METRICS_MEASUREMENT: frozenset({'value'}),
    MEDIA_ASSETS_MEASUREMENT: frozenset({'video_path', 'lcp_screenshot_path'}),
    ADVICE_MEASUREMENT: frozenset({'score', 'title', 'description'}),
    CONTENT_MEASUREMENT: frozenset({'requests', 'contentSize', 'transferSize'}),
}


def is_known_field(measurement: str, field_name: str) -> bool:
    return field_name in MEASUREMENT_FIELDS.get(measurement, frozenset())


@dataclass(frozen=True)
class FlatRecord:
    """One tagged field value, as a time-series store returns it."""
    measurement: str
    field: str
    value: Any
    tags: Dict[str, str] = dataclass_field(default_factory=dict, hash=False)
    time: Optional[datetime] = dataclass_field(default=None, compare=False)

    def tag(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.tags.get(name, default)

    def to_dict(self) -> Dict[str, Any]:
        """Render the wire shape: tags flattened beside the underscore columns."""
        record = dict(self.tags)
        record.update({
            '_measurement': self.measurement,
            '_field': self.field,
            '_value': self.value,
            '_time': self.time.isoformat() if self.time else None
        })
        return record


@dataclass
class Point:
    """A tagged multi-field point for the append-only store."""
    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, Any]
    time: Optional[datetime] = None

    def to_records(self) -> List[FlatRecord]:
        return [
            FlatRecord(
                measurement=self.measurement,
                field=field_name,
                value=value,
                tags=dict(self.tags),
                time=self.time
            )
            for field_name, value in self.fields.items()
        ]
