"""MCP server wiring: registers the database tools on a FastMCP instance.

Headers for the access gate come from the active HTTP request. Outside an
HTTP request there are no headers, so the origin gate denies every call.
"""

from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.server.dependencies import get_http_headers
from pydantic import Field

from dbwarden.audit import get_logger
from dbwarden.config import GatewayConfig
from dbwarden.tools import DatabaseTools

SERVER_NAME = "dbwarden-db"

SqlParams = Annotated[
    list[Any] | None,
    Field(description="Query parameters for parameterized queries"),
]


def _request_headers() -> dict[str, str]:
    # include_all keeps Host, which the default filter strips.
    return get_http_headers(include_all=True)


def create_server(config: GatewayConfig, tools: DatabaseTools | None = None) -> FastMCP:
    """Build the FastMCP server with all seven tools registered."""
    tools = tools or DatabaseTools(config)
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(name="health", description="Check MCP server health and configuration")
    async def health() -> str:
        return await tools.health(headers=_request_headers())

    @mcp.tool(
        name="get_schema_overview",
        description="Get high-level overview of database schema with table row counts",
    )
    async def get_schema_overview() -> str:
        return await tools.get_schema_overview(headers=_request_headers())

    @mcp.tool(
        name="get_table_details",
        description="Get detailed information about a specific table",
    )
    async def get_table_details(
        table: Annotated[str, Field(description="Table name to get details for")],
    ) -> str:
        return await tools.get_table_details(table, headers=_request_headers())

    @mcp.tool(name="execute_sql_select", description="Execute a SELECT query (read-only)")
    async def execute_sql_select(
        sql: Annotated[str, Field(description="SELECT SQL query to execute")],
        params: SqlParams = None,
        rowLimit: Annotated[  # noqa: N803
            int | None,
            Field(
                ge=1,
                le=config.max_rows,
                description=(
                    f"Maximum rows to return "
                    f"(default {config.default_limit}, max {config.max_rows})"
                ),
            ),
        ] = None,
    ) -> str:
        return await tools.execute_sql_select(
            sql, params, rowLimit, headers=_request_headers(),
        )

    @mcp.tool(
        name="execute_sql_mutation",
        description="Execute INSERT, UPDATE, or DELETE queries",
    )
    async def execute_sql_mutation(
        sql: Annotated[
            str, Field(description="DML SQL query to execute (INSERT, UPDATE, or DELETE)"),
        ],
        requireReason: Annotated[  # noqa: N803
            str, Field(description="Brief explanation of why this mutation is needed"),
        ],
        params: SqlParams = None,
    ) -> str:
        return await tools.execute_sql_mutation(
            sql, params, require_reason=requireReason, headers=_request_headers(),
        )

    @mcp.tool(name="explain_query", description="Explain a SELECT query with cost estimates")
    async def explain_query(
        sql: Annotated[str, Field(description="SELECT SQL query to explain")],
    ) -> str:
        return await tools.explain_query(sql, headers=_request_headers())

    @mcp.tool(name="validate_sql", description="Validate SQL syntax without executing")
    async def validate_sql(
        sql: Annotated[str, Field(description="SQL query to validate")],
    ) -> str:
        return await tools.validate_sql(sql, headers=_request_headers())

    return mcp


def run_server(
    config: GatewayConfig,
    *,
    host: str = "127.0.0.1",
    port: int = 3000,
    path: str | None = None,
) -> None:
    """Serve the tools over streamable HTTP until interrupted."""
    mcp = create_server(config)
    mount = path or config.base_path
    get_logger().info(
        "starting MCP server",
        host=host,
        port=port,
        path=mount,
        environment=config.environment,
        enabled=config.enabled,
    )
    mcp.run(transport="http", host=host, port=port, path=mount)
