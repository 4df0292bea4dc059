#!/usr/bin/env python3
"""
Command endpoints for the audit results pipeline.

Each top-level CLI command is handled by a dedicated command class.
"""

from typing import Dict, Type
from .base import BaseCommand
from .ingest import IngestCommand
from .report import ReportCommand
from .health import HealthCommand
from .schema import SchemaCommand

# Command registry for easy extension
COMMANDS: Dict[str, Type[BaseCommand]] = {
    'ingest': IngestCommand,
    'report': ReportCommand,
    'health': HealthCommand,
    'schema': SchemaCommand,
}


def get_command(command_name: str) -> BaseCommand:
    """Get a command instance by name."""
    if command_name not in COMMANDS:
        available = ', '.join(COMMANDS.keys())
        raise ValueError(f"Unknown command '{command_name}'. Available: {available}")

    command_class = COMMANDS[command_name]
    return command_class()
