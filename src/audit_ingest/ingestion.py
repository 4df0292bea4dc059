#!/usr/bin/env python3
"""
Results ingestion orchestration.

Walks a finished run's results folder page by page, hands each artifact to
the extractor and routes the records through the persistence gateway.

Layout of a run folder:

    <results_dir>/<run_id>/pages/<group>/data/browsertime.run-1.json
                                              coach.run-1.json
                                              pagexray.run-1.json

Each artifact is optional. A broken artifact or a branch that fails while
extracting or writing only skips that branch, and a failing page never
stops the pages after it, so re-running a partially ingested run
completes it.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .database.gateway import PersistenceGateway, WriteOutcome
from .exceptions import ArtifactReadError
from .extraction.artifact_extractor import ArtifactExtractor
from .models.run import Run, PageContext

logger = logging.getLogger(__name__)

TIMING_ARTIFACT = "browsertime.run-1.json"
ADVISORY_ARTIFACT = "coach.run-1.json"
CONTENT_ARTIFACT = "pagexray.run-1.json"

OUTCOME_KINDS = ('run', 'metrics', 'media', 'advice', 'category_scores', 'content_breakdown')


@dataclass
class IngestionReport:
    """Summary of one ingest_run call."""
    run_id: str
    pages_processed: int = 0
    pages_skipped: int = 0
    outcomes: Dict[str, WriteOutcome] = field(
        default_factory=lambda: {kind: WriteOutcome() for kind in OUTCOME_KINDS}
    )
    dropped_advice_ids: List[str] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    def record(self, kind: str, outcome: WriteOutcome) -> None:
        self.outcomes[kind].merge(outcome)

    @property
    def failed_writes(self) -> int:
        return sum(outcome.failed for outcome in self.outcomes.values())

    @property
    def success(self) -> bool:
        return self.failed_writes == 0 and not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'success': self.success,
            'pages_processed': self.pages_processed,
            'pages_skipped': self.pages_skipped,
            'outcomes': {kind: outcome.to_dict() for kind, outcome in self.outcomes.items()},
            'dropped_advice_ids': list(self.dropped_advice_ids),
            'errors': list(self.errors),
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None
        }


class ResultsIngestionOrchestrator:
    """Drives extraction and persistence for every page of a run."""

    def __init__(self, gateway: PersistenceGateway, extractor: ArtifactExtractor, results_dir):
        """
        Initialize orchestrator.

        Args:
            gateway: Persistence gateway
            extractor: Artifact extractor
            results_dir: Root folder holding one sub-folder per run
        """
        self.gateway = gateway
        self.extractor = extractor
        self.results_dir = Path(results_dir)

    def ingest_run(self, run_id: str, browser: str) -> IngestionReport:
        """
        Ingest every page of a run.

        Args:
            run_id: Run identifier, also the run's folder name
            browser: Browser label attached to timing and content records

        Returns:
            IngestionReport with per-kind write outcomes
        """
        run = Run(run_id=run_id, browser=browser)
        report = IngestionReport(run_id=run.run_id)

        report.record('run', self.gateway.save_run(run))

        pages_dir = self.results_dir / run.run_id / 'pages'
        if not pages_dir.is_dir():
            logger.warning(f"Pages directory not found: {pages_dir}")
            report.finished_at = datetime.now(timezone.utc)
            return report

        logger.info(f"Ingesting run {run.run_id} from {pages_dir}")

        for page_folder in sorted(p for p in pages_dir.iterdir() if p.is_dir()):
            page = PageContext(group=page_folder.name, data_dir=page_folder / 'data')
            if not page.data_dir.is_dir():
                logger.debug(f"No data folder for page {page.group}, skipping")
                report.pages_skipped += 1
                continue

            try:
                self._ingest_page(run, page, report)
                report.pages_processed += 1
            except Exception as e:
                logger.error(f"Failed to ingest page {page.group} of run {run.run_id}: {e}", exc_info=True)
                report.errors.append({'page': page.group, 'error': str(e)})

        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"Run {run.run_id}: {report.pages_processed} pages ingested, "
            f"{report.pages_skipped} skipped, {report.failed_writes} failed writes"
        )
        return report

    def _ingest_page(self, run: Run, page: PageContext, report: IngestionReport) -> None:
        logger.debug(f"Processing page {page.group}")

        for name, handler in (
            (TIMING_ARTIFACT, self._ingest_timing),
            (ADVISORY_ARTIFACT, self._ingest_advisory),
            (CONTENT_ARTIFACT, self._ingest_content),
        ):
            document = self._load_artifact(page, name, report)
            if document is None:
                continue
            try:
                handler(document, run, page, report)
            except Exception as e:
                logger.error(f"Failed to ingest {name} for page {page.group}: {e}", exc_info=True)
                report.errors.append({'page': page.group, 'artifact': name, 'error': str(e)})

    def _ingest_timing(self, document: Dict[str, Any], run: Run, page: PageContext,
                       report: IngestionReport) -> None:
        extraction = self.extractor.extract_timing(document, run.run_id, run.browser)
        page.url = extraction.url
        report.record('metrics', self.gateway.write_metrics(extraction.metrics))
        asset = self.extractor.media_asset_for(run.run_id, extraction.url, page.group, run.browser)
        report.record('media', self.gateway.write_media_asset(asset))

    def _ingest_advisory(self, document: Dict[str, Any], run: Run, page: PageContext,
                         report: IngestionReport) -> None:
        extraction = self.extractor.extract_advisory(document, run.run_id, page.group)
        advice_outcome, scores_outcome = self.gateway.save_advisory(extraction)
        report.record('advice', advice_outcome)
        report.record('category_scores', scores_outcome)
        report.dropped_advice_ids.extend(extraction.dropped_ids)

    def _ingest_content(self, document: Dict[str, Any], run: Run, page: PageContext,
                        report: IngestionReport) -> None:
        rows = self.extractor.extract_content_breakdown(document, run.run_id, page.group, run.browser)
        report.record('content_breakdown', self.gateway.save_content_breakdown(rows))

    def _load_artifact(self, page: PageContext, name: str,
                       report: IngestionReport) -> Optional[Dict[str, Any]]:
        """Parse one artifact; None when it is absent or unreadable."""
        path = page.data_dir / name
        if not path.is_file():
            logger.debug(f"{name} not present for {page.group}")
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            error = ArtifactReadError(str(path), e)
            logger.error(f"{error.message}: {e}")
            report.errors.append(error.to_dict())
            return None

        if not isinstance(document, dict):
            error = ArtifactReadError(str(path), TypeError("top-level JSON value is not an object"))
            logger.error(error.message)
            report.errors.append(error.to_dict())
            return None

        return document
