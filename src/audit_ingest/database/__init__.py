#!/usr/bin/env python3
"""
Database package for the audit results pipeline.

Provides modular database services with proper separation of concerns.
"""

from .connection_manager import ConnectionManager
from .sinks import AppendSink, UpsertSink
from .run_service import RunService
from .advice_service import AdviceService
from .content_breakdown_service import ContentBreakdownService
from .point_service import PointService
from .relational_store import RelationalStore
from .gateway import PersistenceGateway, WriteOutcome
from .schema import create_relational_schema, create_points_schema
from ..exceptions import DatabaseError

__all__ = [
    'ConnectionManager',
    'DatabaseError',
    'AppendSink',
    'UpsertSink',
    'RunService',
    'AdviceService',
    'ContentBreakdownService',
    'PointService',
    'RelationalStore',
    'PersistenceGateway',
    'WriteOutcome',
    'create_relational_schema',
    'create_points_schema'
]
