"""
Covenant Finance MCP server (stdio transport).

Run with: python src/mcp_server.py
"""
from typing import Any, List
import asyncio
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from config import SERVER_NAME, ConfigurationError, logger
from services.covenant_session import CovenantSession
from services.tool_dispatcher import ToolDispatcher


def create_server(dispatcher: ToolDispatcher) -> Server:
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> List[Tool]:
        return [
            Tool(name=spec["name"], description=spec["description"], inputSchema=spec["input_schema"])
            for spec in dispatcher.list_tools()
        ]

    @app.call_tool()
    async def call_tool(name: str, arguments: Any) -> List[TextContent]:
        text = await dispatcher.dispatch(name, arguments or {})
        return [TextContent(type="text", text=text)]

    return app


async def serve() -> None:
    session = CovenantSession.from_config()
    app = create_server(ToolDispatcher.from_session(session))

    async with stdio_server() as (read_stream, write_stream):
        logger.info("Covenant Finance MCP Server running on stdio")
        await app.run(read_stream, write_stream, app.create_initialization_options())


def main() -> None:
    try:
        asyncio.run(serve())
    except ConfigurationError as e:
        logger.error(f"Fatal configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
