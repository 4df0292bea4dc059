#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration,
including environment variables, defaults, and validation.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

from psycopg.conninfo import make_conninfo

from .env_loader import load_env_file, get_env_var, validate_database_config

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class DatabaseConfig:
    """Relational store connection configuration."""
    host: str
    dbname: str
    user: str
    password: str
    port: int = 5432
    connection_timeout: int = 10

    def connection_string(self) -> str:
        """Build a libpq connection string."""
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.dbname,
            user=self.user,
            password=self.password,
            connect_timeout=self.connection_timeout
        )


@dataclass
class TimeSeriesConfig:
    """Append-only point store configuration."""
    dsn: Optional[str] = None  # None -> share the relational database
    table: str = "metric_points"


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    results_dir: str = "./results"
    default_browser: str = "chrome"
    advice_categories_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Master configuration container."""
    database: DatabaseConfig
    timeseries: TimeSeriesConfig
    app: ApplicationConfig


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
        """
        self._config: Optional[Config] = None
        self._env_file_path = env_file_path
        load_env_file(self._env_file_path)

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        validate_database_config()

        database_config = DatabaseConfig(
            host=get_env_var('POSTGRES_HOST', required=True),
            dbname=get_env_var('POSTGRES_DB', required=True),
            user=get_env_var('POSTGRES_USER', required=True),
            password=get_env_var('POSTGRES_PASSWORD', required=True),
            port=self._get_int_env('POSTGRES_PORT', 5432),
            connection_timeout=self._get_int_env('DB_CONNECTION_TIMEOUT', 10)
        )

        timeseries_config = TimeSeriesConfig(
            dsn=os.getenv('TIMESERIES_DSN') or None,
            table=os.getenv('TIMESERIES_TABLE', 'metric_points')
        )

        app_config = ApplicationConfig(
            results_dir=os.getenv('RESULTS_DIR', './results'),
            default_browser=os.getenv('DEFAULT_BROWSER', 'chrome'),
            advice_categories_file=os.getenv('ADVICE_CATEGORIES_FILE') or None,
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true',
            log_file=os.getenv('LOG_FILE') or None
        )

        config = Config(
            database=database_config,
            timeseries=timeseries_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def _get_int_env(self, key: str, default: int) -> int:
        """Get integer environment variable."""
        raw = os.getenv(key)
        if raw is None or raw == '':
            return default
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got {raw!r}")

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        errors = []

        if not 0 < config.database.port < 65536:
            errors.append("POSTGRES_PORT must be between 1 and 65535")

        if config.database.connection_timeout < 1:
            errors.append("DB_CONNECTION_TIMEOUT must be at least 1 second")

        if not config.timeseries.table.replace('_', '').isalnum():
            errors.append("TIMESERIES_TABLE must be a plain identifier")

        if config.app.advice_categories_file and not Path(config.app.advice_categories_file).is_file():
            errors.append(f"ADVICE_CATEGORIES_FILE not found: {config.app.advice_categories_file}")

        if not config.app.default_browser:
            errors.append("DEFAULT_BROWSER must not be empty")

        if config.app.log_level not in VALID_LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.info("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()
        root_logger = logging.getLogger()

        numeric_level = getattr(logging, config.app.log_level)
        root_logger.setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')

        if config.app.log_file and not any(
            isinstance(handler, logging.FileHandler) and handler.baseFilename == str(Path(config.app.log_file).resolve())
            for handler in root_logger.handlers
        ):
            root_logger.addHandler(logging.FileHandler(config.app.log_file, encoding='utf-8'))

        for handler in root_logger.handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(formatter)


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
