#!/usr/bin/env python3
"""
Health check command for monitoring store status.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from ..env_loader import validate_database_config
from ..exceptions import DatabaseError

logger = logging.getLogger(__name__)


class HealthCommand(BaseCommand):
    """Handle store health monitoring and diagnostics."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute health subcommand."""
        try:
            if subcommand == "database":
                return self.database(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"health {subcommand}")

    def database(self, args: Namespace) -> int:
        """Check relational and point store health."""
        print("📊 Database Health Check")
        print("=" * 30)

        try:
            validate_database_config()
            print("✅ Database configuration valid")

            health = self.relational_store.health_check()
            if not health.get('connected'):
                print(f"❌ Relational store connection failed: {health.get('error')}")
                return 1

            print("✅ Relational store connection successful")
            tables = health.get('tables', {})
            if tables:
                print("\n📋 Table Statistics:")
                for table, info in tables.items():
                    if 'count' in info:
                        print(f"  • {table}: {info['count']:,} records")
                    else:
                        print(f"  • {table}: ⚠️  {info.get('error')}")

            point_store = self.point_store
            print(f"\n📈 Point store ({point_store.table}):")
            point_health = point_store.connection_manager.health_check()
            if not point_health.get('connected'):
                print(f"  ❌ Connection failed: {point_health.get('error')}")
                return 1
            print(f"  • points: {point_store.count_points():,} records")

            return 0

        except DatabaseError as e:
            print(f"❌ Database error: {e}")
            return 1
        except Exception as e:
            print(f"❌ Unexpected error: {e}")
            return 1
