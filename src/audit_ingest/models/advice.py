#!/usr/bin/env python3
"""
Advisory data models.

Represents scored advice findings and the per-run category roll-up.
"""

from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass

ADVICE_MEASUREMENT = "coach_advice"

PERFORMANCE = "performance"
PRIVACY = "privacy"
BEST_PRACTICE = "bestpractice"

# The only three roll-up buckets for advice items
CATEGORIES: Tuple[str, ...] = (PERFORMANCE, PRIVACY, BEST_PRACTICE)


@dataclass
class AdviceItem:
    """
    One advisory finding for a page of a run.

    Identity is (run_id, group, category, advice_id). The URL is carried
    along but is not part of the key.
    """
    run_id: str
    url: str
    group: str
    category: str
    advice_id: str
    score: float
    title: str = ""
    description: str = ""

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown advice category: {self.category}")
        if not self.title:
            self.title = self.advice_id
        if self.description is None:
            self.description = ""

    @property
    def identity(self) -> Tuple[str, str, str, str]:
        return (self.run_id, self.group, self.category, self.advice_id)

    @property
    def is_category_score(self) -> bool:
        """True for the pseudo item that carries a category's own score."""
        return self.advice_id == self.category

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'url': self.url,
            'group': self.group,
            'category': self.category,
            'advice_id': self.advice_id,
            'score': self.score,
            'title': self.title,
            'description': self.description
        }


@dataclass
class CategoryScores:
    """Category-level scores for one run. An absent category stays None."""
    run_id: str
    performance: Optional[float] = None
    privacy: Optional[float] = None
    bestpractice: Optional[float] = None

    def get(self, category: str) -> Optional[float]:
        if category not in CATEGORIES:
            raise KeyError(category)
        return getattr(self, category)

    def set(self, category: str, score: Optional[float]) -> None:
        if category not in CATEGORIES:
            raise KeyError(category)
        setattr(self, category, score)

    def is_empty(self) -> bool:
        return all(self.get(category) is None for category in CATEGORIES)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'performance': self.performance,
            'privacy': self.privacy,
            'bestpractice': self.bestpractice
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'CategoryScores':
        """Create CategoryScores from a category_scores row."""
        return cls(
            run_id=row['run_id'],
            performance=row.get('performance_score'),
            privacy=row.get('privacy_score'),
            bestpractice=row.get('bestpractice_score')
        )
