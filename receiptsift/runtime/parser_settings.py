"""Runtime loader for parser threshold overrides."""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from receiptsift.receipt.parser_config import ParserConfig, build_parser_config
from receiptsift.runtime.logging import get_logger
from receiptsift.runtime.paths import get_paths

logger = get_logger(__name__)

CONFIG_ENV_VAR = "RECEIPTSIFT_CONFIG"


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


def resolve_config_path(config_path: str | None = None) -> Path:
    """Explicit path first, then ``$RECEIPTSIFT_CONFIG``, then ``config/parser.toml``."""
    if config_path:
        return Path(config_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return get_paths().parser_config


@lru_cache(maxsize=8)
def _load_parser_config_cached(path: str) -> ParserConfig:
    resolved = Path(path)
    data = _load_toml(resolved)
    if data:
        logger.info("Loaded parser settings from %s", resolved)
    else:
        logger.debug("No parser settings at %s, using defaults", resolved)
    return build_parser_config(data)


def load_parser_config(config_path: str | None = None) -> ParserConfig:
    """
    Load parser thresholds from a TOML file layered over the defaults.

    A missing file means defaults. Malformed TOML raises
    ``tomllib.TOMLDecodeError``; bad values raise ``ValueError``.
    """
    return _load_parser_config_cached(str(resolve_config_path(config_path)))
