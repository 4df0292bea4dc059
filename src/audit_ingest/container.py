#!/usr/bin/env python3
"""
Dependency Injection Container

Provides a centralized way to manage dependencies and avoid scattered
instantiation throughout the codebase. Supports singleton and factory patterns.
"""

import logging
from typing import Any, Dict, Callable, TypeVar, Optional
from functools import wraps
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            factory._is_singleton = True
            self._factories[service_name] = factory
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as factory (new instance each time).

        Args:
            service_name: Unique name for the service
            factory: Function that creates service instances
        """
        with self._lock:
            self._factories[service_name] = factory

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register an existing instance as singleton."""
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        # Re-entrant: singleton factories resolve their own dependencies via get()
        with self._lock:
            factory = self._factories[service_name]

            if getattr(factory, '_is_singleton', False):
                if service_name not in self._singletons:
                    self._singletons[service_name] = factory()
                    logger.debug(f"Created singleton instance for '{service_name}'")
                return self._singletons[service_name]

            instance = factory()
            logger.debug(f"Created new instance for '{service_name}'")
            return instance

    def has(self, service_name: str) -> bool:
        """Check if service is registered."""
        return service_name in self._factories or service_name in self._singletons

    def clear(self) -> None:
        """Close what can be closed, then drop all services and instances."""
        with self._lock:
            for name, instance in list(self._singletons.items()):
                close = getattr(instance, 'close', None)
                if callable(close):
                    try:
                        close()
                    except Exception as e:
                        logger.warning(f"Error closing '{name}': {e}")
            self._factories.clear()
            self._singletons.clear()


def singleton(factory_func: Callable[[], T]) -> Callable[[], T]:
    """
    Decorator to mark a factory function as singleton.

    Usage:
        @singleton
        def create_classifier():
            return CategoryClassifier()
    """
    @wraps(factory_func)
    def wrapper():
        return factory_func()

    wrapper._is_singleton = True
    return wrapper


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                _setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations with configuration injection."""

    @singleton
    def create_config():
        from .config import get_config
        return get_config()

    @singleton
    def create_classifier():
        from .extraction.classifier import CategoryClassifier
        from .exceptions import CategoryMapError, ConfigurationError
        config = container.get('config')
        path = config.app.advice_categories_file
        if not path:
            return CategoryClassifier()
        try:
            return CategoryClassifier.from_json_file(path)
        except (OSError, ValueError, CategoryMapError) as e:
            raise ConfigurationError('ADVICE_CATEGORIES_FILE', str(e))

    @singleton
    def create_relational_connection():
        from .database.connection_manager import ConnectionManager
        config = container.get('config')
        return ConnectionManager(config.database.connection_string(), name="relational")

    @singleton
    def create_points_connection():
        from .database.connection_manager import ConnectionManager
        config = container.get('config')
        if not config.timeseries.dsn:
            return container.get('relational_connection')
        return ConnectionManager(config.timeseries.dsn, name="timeseries")

    @singleton
    def create_relational_store():
        from .database.relational_store import RelationalStore
        return RelationalStore(container.get('relational_connection'))

    @singleton
    def create_point_store():
        from .database.point_service import PointService
        config = container.get('config')
        return PointService(container.get('points_connection'), table=config.timeseries.table)

    @singleton
    def create_gateway():
        from .database.gateway import PersistenceGateway
        return PersistenceGateway(container.get('relational_store'), container.get('point_store'))

    @singleton
    def create_extractor():
        from .extraction.artifact_extractor import ArtifactExtractor
        return ArtifactExtractor(container.get('classifier'))

    def create_orchestrator():
        from .ingestion import ResultsIngestionOrchestrator
        config = container.get('config')
        return ResultsIngestionOrchestrator(
            container.get('gateway'),
            container.get('extractor'),
            config.app.results_dir
        )

    # Register services
    container.register_singleton('config', create_config)
    container.register_singleton('classifier', create_classifier)
    container.register_singleton('relational_connection', create_relational_connection)
    container.register_singleton('points_connection', create_points_connection)
    container.register_singleton('relational_store', create_relational_store)
    container.register_singleton('point_store', create_point_store)
    container.register_singleton('gateway', create_gateway)
    container.register_singleton('extractor', create_extractor)

    # Non-singletons
    container.register_factory('orchestrator', create_orchestrator)

    logger.debug("Default services registered in container")


# Convenience functions for common usage patterns

def create_orchestrator(results_dir: Optional[str] = None):
    """Create an ingestion orchestrator, optionally for another results folder."""
    orchestrator = get_container().get('orchestrator')
    if results_dir:
        from pathlib import Path
        orchestrator.results_dir = Path(results_dir)
    return orchestrator


def create_report_service(source: str = "relational"):
    """
    Create a report service reading from the given store.

    Args:
        source: 'relational' or 'timeseries'
    """
    from .reconstruction import RelationalRecordSource, TimeSeriesRecordSource
    from .reporting import ReportService

    container = get_container()
    relational_store = container.get('relational_store')
    point_store = container.get('point_store')

    if source == 'timeseries':
        record_source = TimeSeriesRecordSource(point_store)
    elif source == 'relational':
        record_source = RelationalRecordSource(relational_store, point_store)
    else:
        raise ValueError(f"Unknown record source: {source}")

    return ReportService(record_source, relational_store, container.get('classifier'))
