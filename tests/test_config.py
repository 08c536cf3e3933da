"""Test gateway configuration loading and validation."""

import pytest

from dbwarden.config import ConfigError, GatewayConfig


def test_defaults() -> None:
    config = GatewayConfig.from_env({})
    assert config.database_url == ""
    assert config.environment == "development"
    assert config.is_development is True
    assert config.enabled is False
    assert config.default_limit == 200
    assert config.max_rows == 2000
    assert config.statement_timeout_ms == 10000
    assert config.base_path == "/api/mcp"


def test_reads_environment() -> None:
    config = GatewayConfig.from_env({
        "DATABASE_URL": "postgresql://localhost/app",
        "NODE_ENV": "production",
        "MCP_DEV_ONLY_DB_ACCESS": "true",
        "MCP_DEFAULT_LIMIT": "50",
        "MCP_MAX_ROWS": "500",
        "MCP_STMT_TIMEOUT_MS": "2500",
    })
    assert config.database_url == "postgresql://localhost/app"
    assert config.environment == "production"
    assert config.is_development is False
    assert config.enabled is True
    assert (config.default_limit, config.max_rows, config.statement_timeout_ms) == (50, 500, 2500)


def test_dbwarden_env_overrides_node_env() -> None:
    config = GatewayConfig.from_env({"DBWARDEN_ENV": "test", "NODE_ENV": "development"})
    assert config.environment == "test"


@pytest.mark.parametrize("flag", ["1", "TRUE", "yes", "True", ""])
def test_only_literal_true_enables(flag: str) -> None:
    assert GatewayConfig.from_env({"MCP_DEV_ONLY_DB_ACCESS": flag}).enabled is False


def test_empty_values_count_as_unset() -> None:
    config = GatewayConfig.from_env({"MCP_MAX_ROWS": "", "NODE_ENV": ""})
    assert config.max_rows == 2000
    assert config.environment == "development"


def test_non_integer_rejected() -> None:
    with pytest.raises(ConfigError, match="MCP_MAX_ROWS must be an integer"):
        GatewayConfig.from_env({"MCP_MAX_ROWS": "lots"})


@pytest.mark.parametrize("key", ["MCP_DEFAULT_LIMIT", "MCP_MAX_ROWS", "MCP_STMT_TIMEOUT_MS"])
def test_non_positive_rejected(key: str) -> None:
    with pytest.raises(ConfigError):
        GatewayConfig.from_env({key: "0"})


def test_default_limit_cannot_exceed_max_rows() -> None:
    with pytest.raises(ConfigError, match="exceeds max_rows"):
        GatewayConfig.from_env({"MCP_DEFAULT_LIMIT": "3000"})


def test_unknown_environment_rejected() -> None:
    with pytest.raises(ConfigError):
        GatewayConfig.from_env({"NODE_ENV": "staging"})


def test_reads_os_environ_by_default(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "file:./dev.db")
    assert GatewayConfig.from_env().database_url == "file:./dev.db"
