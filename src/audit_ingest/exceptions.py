#!/usr/bin/env python3
"""
Standardized exception hierarchy for the audit results pipeline.

Provides specific exception types for different error conditions with
proper error context.
"""

from typing import Optional, Dict, Any


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Artifact-related exceptions
class ArtifactError(PipelineError):
    """Base exception for raw artifact errors."""
    pass


class ArtifactReadError(ArtifactError):
    """Artifact file exists but could not be read or decoded."""

    def __init__(self, path: str, original_error: Exception):
        message = f"Failed to read artifact {path}"
        context = {
            'path': path,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Classification-related exceptions
class ClassificationError(PipelineError):
    """Base exception for advice classification errors."""
    pass


class CategoryMapError(ClassificationError):
    """Advice category mapping violates its integrity rules."""

    def __init__(self, issue: str, advice_ids: Optional[list] = None):
        message = f"Invalid advice category map: {issue}"
        context = {
            'issue': issue,
            'advice_ids': sorted(advice_ids or [])
        }
        super().__init__(message, context=context)


# Database-related exceptions
class DatabaseError(PipelineError):
    """Base exception for database errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Failed to connect to database."""

    def __init__(self, connection_type: str, original_error: Exception):
        message = f"Failed to connect to database via {connection_type}"
        context = {
            'connection_type': connection_type,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class DatabaseOperationError(DatabaseError):
    """Database operation failed."""

    def __init__(self, operation: str, table: str, original_error: Exception):
        message = f"Database {operation} failed on table {table}"
        context = {
            'operation': operation,
            'table': table,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Reconstruction-related exceptions
class ReconstructionError(PipelineError):
    """A reconstructed flat record carries an unrecognized field."""

    def __init__(self, measurement: str, field: str):
        message = f"Unrecognized field '{field}' for measurement '{measurement}'"
        context = {
            'measurement': measurement,
            'field': field
        }
        super().__init__(message, context=context)


# Configuration-related exceptions
class ConfigurationError(PipelineError):
    """Configuration is invalid or missing."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)
