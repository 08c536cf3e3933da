"""Gateway configuration, read from environment variables and validated at boot.

Environment variables:
    DATABASE_URL             connection URL (postgres[ql]://..., file:..., *.db)
    DBWARDEN_ENV / NODE_ENV  development | test | production (default development)
    MCP_DEV_ONLY_DB_ACCESS   "true" enables the tools; anything else disables them
    MCP_DEFAULT_LIMIT        row limit appended to unbounded SELECTs (200)
    MCP_MAX_ROWS             hard cap on any requested row limit (2000)
    MCP_STMT_TIMEOUT_MS      statement timeout where the dialect supports it (10000)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from dbwarden.policy.enrich import DEFAULT_LIMIT, MAX_ROWS

DEFAULT_STATEMENT_TIMEOUT_MS = 10_000
DEFAULT_BASE_PATH = "/api/mcp"


class ConfigError(Exception):
    """Invalid or missing gateway configuration."""


class GatewayConfig(BaseModel):
    database_url: str = ""
    environment: Literal["development", "test", "production"] = "development"
    enabled: bool = False
    default_limit: int = DEFAULT_LIMIT
    max_rows: int = MAX_ROWS
    statement_timeout_ms: int = DEFAULT_STATEMENT_TIMEOUT_MS
    base_path: str = DEFAULT_BASE_PATH

    @field_validator("default_limit", "max_rows", "statement_timeout_ms")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @model_validator(mode="after")
    def _limit_within_max(self) -> GatewayConfig:
        if self.default_limit > self.max_rows:
            raise ValueError(
                f"default_limit ({self.default_limit}) exceeds max_rows ({self.max_rows})"
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewayConfig:
        """Build a config from environment variables (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        # Empty strings count as unset.
        def _get(key: str) -> str | None:
            value = env.get(key)
            return value if value else None

        values: dict[str, object] = {
            "database_url": _get("DATABASE_URL") or "",
            "enabled": _get("MCP_DEV_ONLY_DB_ACCESS") == "true",
        }
        environment = _get("DBWARDEN_ENV") or _get("NODE_ENV")
        if environment is not None:
            values["environment"] = environment
        for key, field_name in (
            ("MCP_DEFAULT_LIMIT", "default_limit"),
            ("MCP_MAX_ROWS", "max_rows"),
            ("MCP_STMT_TIMEOUT_MS", "statement_timeout_ms"),
        ):
            raw = _get(key)
            if raw is None:
                continue
            try:
                values[field_name] = int(raw)
            except ValueError as e:
                raise ConfigError(f"{key} must be an integer, got {raw!r}") from e

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(str(e)) from e
