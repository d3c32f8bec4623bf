"""Content Workflow MCP Server - Expose GitHub, Notion, Calendar and web research to AI assistants."""
import sys
import asyncio
import logging
import traceback
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from contentflow_core.config import get_settings
from contentflow_core.errors import ConfigurationError, ContentFlowError
from contentflow_core.services import Services, build_services

from . import tools
from . import handlers


settings = get_settings()

# Configure logging to stderr; stdout carries the MCP protocol stream
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
    force=True
)
logger = logging.getLogger("contentflow-mcp")


# MCP Server instance
app = Server("contentflow-mcp")

# Connectors and orchestrator, built once in main()
_services: Optional[Services] = None


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools for content workflow automation."""
    return tools.get_tools()


# ============================================================================
# Tool Handlers
# ============================================================================


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle MCP tool calls by delegating to shared handlers.

    Domain errors are re-raised so the MCP runtime reports them as tool errors
    with the error message as text.
    """
    logger.info(f"Tool call: {name} with arguments: {arguments}")

    if _services is None:
        raise ConfigurationError("Server services are not initialized")

    try:
        return await handlers.dispatch(name, arguments, _services)

    except ContentFlowError:
        # Already logged by dispatch
        raise

    except Exception as e:
        # Catch-all for unexpected errors
        logger.error(f"Unexpected error during {name} call:")
        logger.error(f"  Error type: {type(e).__name__}")
        logger.error(f"  Error message: {str(e)}")
        logger.error(f"  Arguments: {arguments}")
        logger.error(f"  Traceback:\n{traceback.format_exc()}")
        raise


async def main():
    """Run the MCP server."""
    global _services

    try:
        _services = build_services(settings)
    except ConfigurationError as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)

    logger.info("Content workflow MCP server running on stdio")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    finally:
        await _services.aclose()


def run():
    """Console script entry point (`contentflow-mcp`)."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
