#!/usr/bin/env python3
"""
Content breakdown data model.
"""

from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass

CONTENT_MEASUREMENT = "pagexray"


@dataclass
class ContentTypeBreakdown:
    """
    Aggregate counters for one content type (image, script, ...) of a page.

    Identity is (run_id, group, content_type). Counters missing from the
    source artifact stay None rather than becoming zero.
    """
    run_id: str
    url: str
    group: str
    browser: str
    content_type: str
    requests: Optional[int] = None
    content_size: Optional[int] = None
    transfer_size: Optional[int] = None

    @property
    def identity(self) -> Tuple[str, str, str]:
        return (self.run_id, self.group, self.content_type)

    def has_counters(self) -> bool:
        return any(value is not None for value in (self.requests, self.content_size, self.transfer_size))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'url': self.url,
            'group': self.group,
            'browser': self.browser,
            'content_type': self.content_type,
            'requests': self.requests,
            'content_size': self.content_size,
            'transfer_size': self.transfer_size
        }
