#!/usr/bin/env python3
"""
Database Connection Manager

One psycopg connection per store. The relational store and the point
store each get their own manager, or share one when they live in the same
database.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psycopg
from psycopg.rows import dict_row

from ..exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Lazily opened, self-healing connection with dict rows."""

    def __init__(self, conninfo: str, name: str = "relational"):
        """
        Initialize connection manager. Nothing connects until first use.

        Args:
            conninfo: libpq connection string or URI
            name: Store label used in logs and errors
        """
        self.conninfo = conninfo
        self.name = name
        self.connection: Optional[psycopg.Connection] = None
        self.reconnects = 0

    def _open(self) -> psycopg.Connection:
        try:
            connection = psycopg.connect(self.conninfo, row_factory=dict_row, autocommit=True)
        except psycopg.Error as e:
            raise DatabaseConnectionError(self.name, e)
        logger.debug(f"Opened {self.name} connection to {connection.info.dbname}")
        return connection

    def is_alive(self) -> bool:
        """True when the current connection answers a trivial query."""
        if self.connection is None or self.connection.closed:
            return False
        try:
            self.connection.execute("SELECT 1")
            return True
        except psycopg.Error:
            return False

    def get_connection(self) -> psycopg.Connection:
        """
        Return a working connection, reopening a dropped one.

        Raises:
            DatabaseConnectionError: If the store cannot be reached
        """
        if self.connection is None:
            self.connection = self._open()
        elif not self.is_alive():
            logger.warning(f"{self.name} connection lost, reconnecting")
            self.reconnects += 1
            self.connection = self._open()
        return self.connection

    @contextmanager
    def get_cursor(self):
        """Autocommit cursor: every statement stands alone."""
        with self.get_connection().cursor() as cursor:
            yield cursor

    @contextmanager
    def transaction(self):
        """Cursor whose statements commit together or not at all."""
        connection = self.get_connection()
        with connection.transaction():
            with connection.cursor() as cursor:
                yield cursor

    def close(self) -> None:
        if self.connection is not None and not self.connection.closed:
            self.connection.close()
            logger.debug(f"Closed {self.name} connection")
        self.connection = None

    def health_check(self) -> Dict[str, Any]:
        """
        Round-trip the store and describe the server.

        Returns:
            {'connected': bool, 'name', ...}; an 'error' key replaces the
            server details when the store is unreachable
        """
        started = time.perf_counter()
        try:
            connection = self.get_connection()
            with connection.cursor() as cursor:
                cursor.execute("SELECT current_database() AS database, version() AS version")
                row = cursor.fetchone()
        except (psycopg.Error, DatabaseConnectionError) as e:
            logger.error(f"{self.name} health check failed: {e}")
            return {'connected': False, 'name': self.name, 'error': str(e)}

        return {
            'connected': True,
            'name': self.name,
            'database': row['database'],
            'version': row['version'],
            'latency_ms': round((time.perf_counter() - started) * 1000, 1),
            'reconnects': self.reconnects
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
