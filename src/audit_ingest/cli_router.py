#!/usr/bin/env python3
"""
CLI Router for the audit results pipeline.

Modular command architecture: one command class per top-level command.
"""

import argparse
import logging
import sys
from typing import Optional, List

from .commands import get_command, COMMANDS

logger = logging.getLogger(__name__)

SOURCES = ['relational', 'timeseries']


class CLIRouter:
    """
    CLI router for results pipeline commands.

    Command structure:
    - python run.py ingest run <run_id> --browser chrome
    - python run.py report advice <run_id> --source timeseries
    - python run.py health database
    - python run.py schema init
    """

    def __init__(self):
        """Initialize CLI router."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Browser performance audit results pipeline",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_ingest_parser(subparsers)
        self._add_report_parser(subparsers)
        self._add_health_parser(subparsers)
        self._add_schema_parser(subparsers)

        return parser

    def _add_ingest_parser(self, subparsers):
        """Add ingest command parser."""
        ingest_parser = subparsers.add_parser(
            'ingest',
            help='Load finished run results into the stores'
        )

        ingest_subparsers = ingest_parser.add_subparsers(
            dest='subcommand',
            help='Ingest operations',
            metavar='{run}'
        )

        run_parser = ingest_subparsers.add_parser('run', help='Ingest every page of one run')
        run_parser.add_argument('run_id', help='Run identifier (the run folder name)')
        run_parser.add_argument('--browser', default=None, help='Browser label (default: DEFAULT_BROWSER)')
        run_parser.add_argument('--results-dir', dest='results_dir', default=None, help='Results root folder (default: RESULTS_DIR)')
        run_parser.add_argument('--json', action='store_true', help='Print the ingestion report as JSON')

    def _add_report_parser(self, subparsers):
        """Add report command parser."""
        report_parser = subparsers.add_parser(
            'report',
            help='Read stored run results'
        )

        report_subparsers = report_parser.add_subparsers(
            dest='subcommand',
            help='Report operations',
            metavar='{runs,advice,performance,breakdown,scores,media,compare}'
        )

        runs_parser = report_subparsers.add_parser('runs', help='List stored runs')
        runs_parser.add_argument('--limit', type=int, default=20, help='Runs to show (default: 20)')
        runs_parser.add_argument('--json', action='store_true', help='Print as JSON')

        for name, help_text in [
            ('advice', 'Advice grouped by category'),
            ('performance', 'Timing and visual metrics'),
            ('breakdown', 'Requests and sizes per content type'),
            ('scores', 'Stored category scores'),
            ('media', 'Video and LCP screenshot pointers'),
        ]:
            sub_parser = report_subparsers.add_parser(name, help=help_text)
            sub_parser.add_argument('run_id', help='Run identifier')
            sub_parser.add_argument('--source', choices=SOURCES, default='relational', help='Store to read from (default: relational)')
            sub_parser.add_argument('--json', action='store_true', help='Print as JSON')

        compare_parser = report_subparsers.add_parser('compare', help='Compare performance metrics of several runs')
        compare_parser.add_argument('run_ids', nargs='+', help='Run identifiers')
        compare_parser.add_argument('--source', choices=SOURCES, default='relational', help='Store to read from (default: relational)')
        compare_parser.add_argument('--json', action='store_true', help='Print as JSON')

    def _add_health_parser(self, subparsers):
        """Add health command parser."""
        health_parser = subparsers.add_parser(
            'health',
            help='Store health monitoring and diagnostics'
        )

        health_subparsers = health_parser.add_subparsers(
            dest='subcommand',
            help='Health operations',
            metavar='{database}'
        )

        health_subparsers.add_parser('database', help='Check relational and point store health')

    def _add_schema_parser(self, subparsers):
        """Add schema command parser."""
        schema_parser = subparsers.add_parser(
            'schema',
            help='Schema management'
        )

        schema_subparsers = schema_parser.add_subparsers(
            dest='subcommand',
            help='Schema operations',
            metavar='{init}'
        )

        schema_subparsers.add_parser('init', help='Create missing tables and indexes')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  # Bootstrap the stores once
  python run.py schema init

  # Ingest a finished run
  python run.py ingest run 2024-05-01-home --browser chrome
  python run.py ingest run 2024-05-01-home --results-dir /data/results

  # Read it back
  python run.py report advice 2024-05-01-home
  python run.py report performance 2024-05-01-home --source timeseries
  python run.py report compare run-a run-b --json
  python run.py health database
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            try:
                self.parser.parse_args([args.command, '--help'])
            except SystemExit:
                pass
            return 1

        try:
            command = get_command(args.command)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Apply LOG_LEVEL / LOG_FILE once configuration is readable
    try:
        from .config import get_config_manager
        get_config_manager().update_logging()
    except ValueError as e:
        logger.warning(f"Using default logging, configuration incomplete: {e}")

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    sys.exit(main())
