"""
Service settings read from ``CHESS_AI_*`` environment variables.

Every field can be overridden by an environment variable named after it,
e.g. ``CHESS_AI_MOVE_TIMEOUT_S=5``. Values are clamped to safe ranges
instead of rejected, so a bad deployment variable degrades rather than
crashing the service at startup.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, field_validator

ENV_PREFIX = "CHESS_AI_"


class Settings(BaseModel):
    """
    Fields:
        host: Interface the HTTP server binds to.
        port: TCP port of the HTTP server.
        log_level: Root logging level name.
        search_workers: Size of the thread pool running engine searches.
        search_backlog: Searches allowed to wait for a free worker. Requests
            beyond workers plus backlog get the single-ply fallback at once.
        move_timeout_s: How long a request waits for the search before it
            answers with the single-ply fallback move.
    """

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    search_workers: int = 2
    search_backlog: int = 4
    move_timeout_s: float = 10.0

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        """Fall back to INFO for unknown level names."""
        level = v.upper()
        return level if isinstance(logging.getLevelName(level), int) else "INFO"

    @field_validator("search_workers")
    @classmethod
    def clamp_search_workers(cls, v: int) -> int:
        return max(1, min(v, 16))

    @field_validator("search_backlog")
    @classmethod
    def clamp_search_backlog(cls, v: int) -> int:
        return max(0, min(v, 64))

    @field_validator("move_timeout_s")
    @classmethod
    def clamp_move_timeout(cls, v: float) -> float:
        return max(0.1, min(v, 60.0))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (default: the process environment)."""
        env = os.environ if environ is None else environ
        values = {
            name: env[ENV_PREFIX + name.upper()]
            for name in cls.model_fields
            if ENV_PREFIX + name.upper() in env
        }
        return cls(**values)
