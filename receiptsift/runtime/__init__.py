"""Runtime infrastructure for receiptsift.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Parser settings via load_parser_config()

Usage:
    from receiptsift.runtime import get_logger, get_paths, load_parser_config

    logger = get_logger(__name__)
    config = load_parser_config()
"""

from receiptsift.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from receiptsift.runtime.paths import ProjectPaths, get_paths
from receiptsift.runtime.parser_settings import load_parser_config

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Settings
    "load_parser_config",
    # Paths
    "get_paths",
    "ProjectPaths",
]
