#!/usr/bin/env python3
"""
Report command endpoints for reading stored run results.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from .. import transformers
from ..models.advice import CATEGORIES
from ..models.metrics import METRIC_NAMES

logger = logging.getLogger(__name__)


class ReportCommand(BaseCommand):
    """Handle stored run reporting operations."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute report subcommand."""
        try:
            if subcommand == "runs":
                return self.runs(args)
            elif subcommand == "advice":
                return self.advice(args)
            elif subcommand == "performance":
                return self.performance(args)
            elif subcommand == "breakdown":
                return self.breakdown(args)
            elif subcommand == "scores":
                return self.scores(args)
            elif subcommand == "media":
                return self.media(args)
            elif subcommand == "compare":
                return self.compare(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"report {subcommand}")

    def _service(self, args: Namespace):
        return self.create_report_service(getattr(args, 'source', 'relational'))

    def runs(self, args: Namespace) -> int:
        """List stored runs, newest first."""
        runs = self._service(args).list_runs(getattr(args, 'limit', 20))

        if getattr(args, 'json', False):
            self.print_json(runs)
            return 0

        if not runs:
            print("📭 No runs stored")
            return 0

        print(f"\n=== Runs ({len(runs)}) ===")
        for run in runs:
            created = run.get('created_at')
            created = created.strftime('%Y-%m-%d %H:%M') if created else '-'
            print(f"[{created}] {run['run_id']} ({run.get('browser') or '-'})")
        return 0

    def advice(self, args: Namespace) -> int:
        """Show advice grouped by category."""
        report = self._service(args).advice(args.run_id)

        if getattr(args, 'json', False):
            self.print_json(report)
            return 0

        for category in CATEGORIES:
            section = report[category]
            print(f"\n=== {category} (score {section['score']}) ===")
            advice_list = section['adviceList']
            if not advice_list:
                print("  (no advice)")
                continue
            for advice_id, advice in sorted(advice_list.items(), key=lambda item: item[1]['score']):
                print(f"  • [{advice['score']:>3}] {advice['title']} ({advice_id})")
        return 0

    def performance(self, args: Namespace) -> int:
        """Show timing and visual metrics."""
        metrics = self._service(args).performance(args.run_id)

        if getattr(args, 'json', False):
            self.print_json(metrics)
            return 0

        if not transformers.is_valid_metrics(metrics):
            print(f"📭 No performance metrics for {args.run_id}")
            return 0

        print(f"\n=== Performance: {args.run_id} ===")
        for name, display in transformers.format_metrics_for_display(metrics).items():
            print(f"  • {name}: {display}")
        return 0

    def breakdown(self, args: Namespace) -> int:
        """Show request and size totals per content type."""
        breakdown = self._service(args).content_breakdown(args.run_id)

        if getattr(args, 'json', False):
            self.print_json(breakdown)
            return 0

        if not breakdown['contentTypes']:
            print(f"📭 No content breakdown for {args.run_id}")
            return 0

        print(f"\n=== Content Breakdown: {args.run_id} ===")
        for content_type, counters in breakdown['contentTypes'].items():
            print(
                f"  • {content_type}: {counters['requests']} requests, "
                f"{counters['size']:,} bytes ({counters['transferSize']:,} transferred)"
            )
        print(f"\n📊 Total: {breakdown['totalRequests']} requests, {breakdown['totalSize']:,} bytes")
        return 0

    def scores(self, args: Namespace) -> int:
        """Show stored category scores."""
        scores = self._service(args).category_scores(args.run_id)

        if getattr(args, 'json', False):
            self.print_json(scores)
            return 0

        print(f"\n=== Category Scores: {args.run_id} ===")
        for category, score in scores.items():
            print(f"  • {category}: {score}")
        return 0

    def media(self, args: Namespace) -> int:
        """Show video and LCP screenshot pointers."""
        media = self._service(args).media(args.run_id)

        if getattr(args, 'json', False):
            self.print_json(media)
            return 0

        print(f"🎬 Video: {media['video'] or 'N/A'}")
        print(f"🖼️  LCP screenshot: {media['screenshot'] or 'N/A'}")
        return 0

    def compare(self, args: Namespace) -> int:
        """Show performance metrics of several runs side by side."""
        comparison = self._service(args).compare(args.run_ids)

        if getattr(args, 'json', False):
            self.print_json(comparison)
            return 0

        formatted = {
            run_id: transformers.format_metrics_for_display(metrics)
            for run_id, metrics in comparison.items()
        }
        name_width = max(len(name) for name in METRIC_NAMES)
        header = "".join(f"{run_id[:18]:>20}" for run_id in formatted)
        print(f"\n{'metric':<{name_width}}{header}")
        for name in METRIC_NAMES:
            row = "".join(f"{formatted[run_id][name]:>20}" for run_id in formatted)
            print(f"{name:<{name_width}}{row}")
        return 0
