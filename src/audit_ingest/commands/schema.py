#!/usr/bin/env python3
"""
Schema command for bootstrapping the stores.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from ..database.schema import create_relational_schema, create_points_schema

logger = logging.getLogger(__name__)


class SchemaCommand(BaseCommand):
    """Handle schema management operations."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute schema subcommand."""
        try:
            if subcommand == "init":
                return self.init(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"schema {subcommand}")

    def init(self, args: Namespace) -> int:
        """Create any missing tables and indexes. Safe to re-run."""
        print("🛠️  Initializing schema")

        statements = create_relational_schema(self.relational_store.connection_manager)
        print(f"  ✅ Relational tables: {statements} statements applied")

        point_store = self.point_store
        statements = create_points_schema(point_store.connection_manager, point_store.table)
        print(f"  ✅ Point table {point_store.table}: {statements} statements applied")

        return 0
