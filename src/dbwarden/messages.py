"""Fixed, user-visible messages returned by the gateway.

Grouped by the stage that produces them:
- access: environment / feature flag / origin gates
- policy: classifier and statement safety checks
"""

from __future__ import annotations

# Access gates
NOT_DEVELOPMENT = "MCP server is only available in development environment"
NOT_ENABLED = (
    "MCP database access is disabled. "
    "Set MCP_DEV_ONLY_DB_ACCESS=true in your environment to enable it."
)
NOT_LOCALHOST = "MCP server only accepts requests from localhost"

# Policy
NOT_SELECT = "Only SELECT statements are allowed"
NOT_DML = "Only INSERT, UPDATE, or DELETE statements are allowed"
NOT_EXPLAINABLE = "Error: Only SELECT statements can be explained"
FORBIDDEN_DDL = "SQL contains forbidden DDL or administrative commands"
INVALID_SQL = "No valid SQL statements found"
MULTIPLE_STATEMENTS = "Only a single SQL statement is allowed"
WRITABLE_CTE = "Data-modifying statements inside WITH clauses are not allowed"

HEALTHY = "MCP server is healthy and ready to accept commands"
