#!/usr/bin/env python3
"""
Environment settings for the pipeline.

Reads KEY=value pairs from an optional .env file into os.environ (values
already present in the environment are never overwritten) and checks that
the relational store settings are complete before anything connects.
"""

import os
import logging
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

REQUIRED_DATABASE_VARS = ('POSTGRES_HOST', 'POSTGRES_DB', 'POSTGRES_USER', 'POSTGRES_PASSWORD')
NUMERIC_DATABASE_VARS = ('POSTGRES_PORT', 'DB_CONNECTION_TIMEOUT')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def read_env_file(env_path: Path) -> Dict[str, str]:
    """
    Parse a .env file without touching the environment.

    Blank lines and # comments are ignored; malformed lines are logged
    and skipped.
    """
    settings: Dict[str, str] = {}
    with open(env_path, 'r', encoding='utf-8') as f:
        for line_num, raw in enumerate(f, 1):
            line = raw.strip()
            if not line or line.startswith('#'):
                continue
            if line.startswith('export '):
                line = line[len('export '):].lstrip()

            key, sep, value = line.partition('=')
            key = key.strip()
            if not sep or not key:
                logger.warning(f"{env_path}:{line_num}: expected KEY=value, got {line!r}")
                continue
            settings[key] = _unquote(value.strip())
    return settings


def load_env_file(env_file_path: str = ".env") -> int:
    """
    Load settings from a .env file into the process environment.

    Args:
        env_file_path: Absolute path, or path relative to the project root

    Returns:
        Number of variables added to os.environ
    """
    env_path = Path(env_file_path)
    if not env_path.is_absolute():
        env_path = PROJECT_ROOT / env_path

    if not env_path.is_file():
        logger.debug(f"No .env file at {env_path}")
        return 0

    try:
        settings = read_env_file(env_path)
    except OSError as e:
        logger.error(f"Could not read {env_path}: {e}")
        return 0

    added = [key for key in settings if key not in os.environ]
    for key in added:
        os.environ[key] = settings[key]

    logger.info(f"Loaded {len(added)} of {len(settings)} settings from {env_path}")
    return len(added)


def get_env_var(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Read one setting.

    Raises:
        ValueError: If required and unset or empty
    """
    value = os.environ.get(key, default)
    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set")
    return value


def database_config_problems() -> List[str]:
    """Every problem with the relational store settings, empty when usable."""
    problems = [f"{var} is not set" for var in REQUIRED_DATABASE_VARS if not os.environ.get(var)]
    for var in NUMERIC_DATABASE_VARS:
        value = os.environ.get(var)
        if value and not value.strip().isdigit():
            problems.append(f"{var} must be a whole number, got {value!r}")
    return problems


def validate_database_config() -> bool:
    """
    Check the relational store settings, reporting all problems at once.

    Raises:
        ValueError: If any required setting is missing or malformed
    """
    problems = database_config_problems()
    if problems:
        raise ValueError(f"Invalid database configuration: {'; '.join(problems)}")

    logger.debug("Database configuration validated")
    return True
