"""Startup configuration helpers.

Environment flags (optionally seeded from a ``.env`` file) and the
strict/non-strict validation mode shared by manifest loading and filter
configuration.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

STRICT_CONFIG_ENV = "CXXMETA_STRICT_CONFIG"
LOG_LEVEL_ENV = "CXXMETA_LOG_LEVEL"


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``CXXMETA_STRICT_CONFIG`` env."""
    return _env_flag(STRICT_CONFIG_ENV, default=default)


def resolve_log_level(default: int = logging.INFO, strict: bool = False) -> int:
    """Resolve the root log level from ``CXXMETA_LOG_LEVEL``.

    Accepts level names (``debug``, ``WARNING``) or numeric values.
    """
    raw = os.getenv(LOG_LEVEL_ENV)
    if raw is None or not raw.strip():
        return default

    text = raw.strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    if isinstance(level, int):
        return level

    msg = f"{LOG_LEVEL_ENV} has unknown level {raw!r}"
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using %s", msg, logging.getLevelName(default))
    return default


def get_section(
    payload: Mapping[str, Any],
    section_name: str,
    strict: bool = False,
) -> dict[str, Any]:
    """Fetch an optional mapping section from a loaded config payload.

    A missing section yields an empty dict. A section of the wrong type
    raises in strict mode and is replaced by an empty dict otherwise.
    """
    section = payload.get(section_name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        msg = f"config section '{section_name}' must be a mapping"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; using defaults", msg)
        return {}
    return section
