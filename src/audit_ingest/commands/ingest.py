#!/usr/bin/env python3
"""
Ingest command endpoints for loading run results into the stores.
"""

import logging
from argparse import Namespace

from .base import BaseCommand

logger = logging.getLogger(__name__)


class IngestCommand(BaseCommand):
    """Handle results ingestion operations."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute ingest subcommand."""
        try:
            if subcommand == "run":
                return self.run(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"ingest {subcommand}")

    def run(self, args: Namespace) -> int:
        """Ingest every page of one finished run."""
        browser = getattr(args, 'browser', None) or self.config.app.default_browser
        orchestrator = self.create_orchestrator(getattr(args, 'results_dir', None))

        print(f"📥 Ingesting run {args.run_id} ({browser}) from {orchestrator.results_dir}")
        report = orchestrator.ingest_run(args.run_id, browser)

        if getattr(args, 'json', False):
            self.print_json(report.to_dict())
            return 0 if report.success else 1

        print(f"\n=== Ingestion Summary ===")
        print(f"📄 Pages processed: {report.pages_processed}")
        if report.pages_skipped:
            print(f"⏭️  Pages skipped: {report.pages_skipped}")

        for kind, outcome in report.outcomes.items():
            if not outcome.total:
                continue
            line = f"  • {kind}: {outcome.written} written"
            if outcome.failed:
                line += f", {outcome.failed} failed"
            print(line)

        if report.dropped_advice_ids:
            dropped = sorted(set(report.dropped_advice_ids))
            print(f"⚠️  Unclassified advice dropped: {', '.join(dropped)}")

        for error in report.errors:
            print(f"❌ {error.get('message') or error.get('error')}")

        if report.success:
            print("✅ Ingestion completed")
            return 0

        print("⚠️  Ingestion completed with errors; re-run to complete the run")
        return 1
