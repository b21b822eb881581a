"""Library Circulation MCP Server - FastMCP Implementation

Serves the circulation engine over the Model Context Protocol.
Clients connect via stdio transport.

Features exposed:
- Tools: borrow, return, due-date extension and the overdue sweep
- Resources: current, overdue and due-today loans, histories, statistics
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from .circulation import OverdueSweeper, get_engine
from .config import CirculationConfig, get_config
from .database.session import get_db_manager
from .resources import all_resources
from .tools import all_tools

# Initialize logging - stderr for logs, stdout for MCP protocol
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)


def build_server(config: CirculationConfig) -> FastMCP:
    """Create the FastMCP instance and register every resource and tool."""
    mcp = FastMCP(
        name=config.server_name,
        version=config.server_version,
        instructions=(
            "Library Circulation MCP Server - lends books to library members and "
            "tracks every loan. Use the tools to borrow, return and extend loans "
            "and to refresh overdue status; use the resources to see current, "
            "overdue and due-today loans, borrow histories and statistics."
        ),
    )

    for resource in all_resources:
        uri = resource.get("uri_template", resource.get("uri"))
        if not uri:
            logger.error("Resource missing URI: %s", resource)
            continue

        logger.debug("Registering resource: %s with URI: %s", resource["name"], uri)
        try:
            mcp.resource(
                uri=uri,
                name=resource["name"],
                description=resource["description"],
                mime_type=resource["mime_type"],
            )(resource["handler"])
        except Exception:
            logger.exception("Failed to register resource %s", resource["name"])
            raise

    logger.info("Registered %d resources", len(all_resources))

    for tool in all_tools:
        logger.debug("Registering tool: %s", tool["name"])
        try:
            mcp.tool(
                name=tool["name"],
                description=tool["description"],
            )(tool["handler"])
        except Exception:
            logger.exception("Failed to register tool %s", tool["name"])
            raise

    logger.info("Registered %d tools", len(all_tools))
    return mcp


def start_sweeper(config: CirculationConfig) -> OverdueSweeper | None:
    """Start the background overdue sweep unless it is disabled."""
    if config.overdue_sweep_interval_seconds <= 0:
        logger.info("Overdue sweeper disabled")
        return None
    sweeper = OverdueSweeper(get_engine(), config.overdue_sweep_interval_seconds)
    sweeper.start()
    return sweeper


def run_stdio_server(config: CirculationConfig) -> None:
    """Run the MCP server using stdio transport.

    Stdin receives JSON-RPC requests, stdout sends responses.
    """
    logger.info("Starting %s v%s on stdio transport", config.server_name, config.server_version)

    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled - verbose protocol logging active")
    else:
        logging.getLogger().setLevel(config.log_level)
        logging.getLogger("fastmcp").setLevel(logging.WARNING)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    db = get_db_manager()
    db.init_database()
    if not db.verify_connection():
        logger.error("Database is not reachable, refusing to start")
        sys.exit(1)

    mcp = build_server(config)
    sweeper = start_sweeper(config)
    try:
        logger.info("MCP Server ready and waiting for connections...")
        mcp.run(transport="stdio")
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)
    finally:
        if sweeper is not None:
            sweeper.stop()
        db.close()


def main() -> None:
    """Main entry point for the MCP server."""
    try:
        config = get_config()
        logger.info("=" * 60)
        logger.info("Library Circulation MCP Server")
        logger.info("Version: %s", config.server_version)
        logger.info("Debug Mode: %s", config.debug)
        logger.info("=" * 60)

        run_stdio_server(config)

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
