#!/usr/bin/env python3
"""
Run data models.

Identify one test execution and the pages tested within it.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

UNKNOWN_URL = "unknown_url"


@dataclass
class Run:
    """One execution of the browser test harness."""
    run_id: str
    browser: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        self.run_id = self.run_id.strip()
        self.browser = (self.browser or "").strip()
        if not self.run_id:
            raise ValueError("run_id must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'browser': self.browser,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Run':
        """Create Run from a database row."""
        return cls(
            run_id=row['run_id'],
            browser=row.get('browser') or '',
            created_at=row.get('created_at') or datetime.now(timezone.utc)
        )


@dataclass
class PageContext:
    """
    One tested page within a run.

    Never persisted on its own; the group (page folder name) and URL are
    carried as tags on every record extracted for the page.
    """
    group: str
    url: str = UNKNOWN_URL
    data_dir: Optional[Path] = None
