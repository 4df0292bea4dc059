#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List
from argparse import Namespace

from ..container import get_container, create_orchestrator, create_report_service
from ..exceptions import PipelineError, DatabaseError, ConfigurationError

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides access to the configured stores and services through the
    dependency injection container, plus common error handling.
    """

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def classifier(self):
        """Get advice category classifier from container."""
        return self._container.get('classifier')

    @property
    def relational_store(self):
        """Get relational store from container."""
        return self._container.get('relational_store')

    @property
    def point_store(self):
        """Get time-series point store from container."""
        return self._container.get('point_store')

    def create_orchestrator(self, results_dir: str = None):
        """Create ingestion orchestrator, optionally for another results folder."""
        return create_orchestrator(results_dir)

    def create_report_service(self, source: str = "relational"):
        """Create report service reading from the given store."""
        return create_report_service(source)

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """Get list of available subcommands for this command."""
        methods = []
        for attr_name in dir(type(self)):
            if attr_name.startswith('_') or isinstance(getattr(type(self), attr_name), property):
                continue
            if callable(getattr(self, attr_name)) and attr_name not in [
                'execute', 'get_available_subcommands', 'handle_error',
                'print_json', 'create_orchestrator', 'create_report_service'
            ]:
                methods.append(attr_name)
        return methods

    def print_json(self, data: Any) -> None:
        """Print data as indented JSON."""
        print(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)
        self.logger.error(error_msg, exc_info=True)

        if isinstance(error, PipelineError):
            self.logger.debug(f"Error details: {error.to_dict()}")

        # Map common exceptions to exit codes
        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        elif isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, DatabaseError):
            return 3
        elif isinstance(error, (ConfigurationError, ValueError)):
            return 22
        else:
            return 1
