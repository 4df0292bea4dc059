#!/usr/bin/env python3
"""
Storage capability interfaces.

The pipeline only sees these two narrow contracts; how points and rows
travel to a store is up to the implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ..models.advice import AdviceItem, CategoryScores
from ..models.content import ContentTypeBreakdown
from ..models.records import FlatRecord, Point
from ..models.run import Run


class AppendSink(ABC):
    """Append-only point store. No identity, no upsert."""

    @abstractmethod
    def write_points(self, points: Iterable[Point]) -> int:
        """
        Write points best effort.

        A failure on one point is logged and does not stop the others.

        Returns:
            Number of points written
        """

    @abstractmethod
    def query_points(self, run_id: str, measurement: str) -> List[FlatRecord]:
        """Flat records (one per field) for a run and measurement, newest first."""


class UpsertSink(ABC):
    """Relational store keyed by natural composite identities."""

    @abstractmethod
    def upsert_run(self, run: Run) -> None:
        pass

    @abstractmethod
    def get_run(self, run_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def list_runs(self, limit: int = 100) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def upsert_advice(self, item: AdviceItem) -> None:
        pass

    @abstractmethod
    def get_advice_rows(self, run_id: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def upsert_category_scores(self, scores: CategoryScores) -> None:
        pass

    @abstractmethod
    def get_category_scores(self, run_id: str) -> Optional[CategoryScores]:
        pass

    @abstractmethod
    def upsert_content_breakdown(self, row: ContentTypeBreakdown) -> None:
        pass

    @abstractmethod
    def get_content_breakdown_rows(self, run_id: str) -> List[Dict[str, Any]]:
        pass
