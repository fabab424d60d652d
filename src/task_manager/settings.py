from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

from .models import TaskFilter


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name (DEBUG, INFO, WARNING, ...); 'INFO' by default
    - DEFAULT_FILTER: filter a fresh store starts with: 'all' (default), 'active' or 'completed'
    """

    cors_allow_origins: List[str]
    log_level: int
    default_filter: TaskFilter


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    # getLevelName returns a string ("Level X") for unknown names
    return level if isinstance(level, int) else logging.INFO


def _parse_filter(value: str) -> TaskFilter:
    v = value.strip().lower()
    if v in {f.value for f in TaskFilter}:
        return TaskFilter(v)
    return TaskFilter.ALL


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
        default_filter=_parse_filter(_get_env("DEFAULT_FILTER", "all")),
    )
