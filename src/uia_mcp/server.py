from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from .config import ServerConfig, UiaSettings, load_settings
from .tools import register_tools

logger = logging.getLogger(__name__)


def create_server(
    settings: UiaSettings | None = None,
    server_config: ServerConfig | None = None,
) -> FastMCP:
    resolved_settings = settings or load_settings()
    resolved_server_config = server_config or ServerConfig.from_env()

    server = FastMCP(
        name=resolved_server_config.name,
        instructions=resolved_server_config.instructions,
    )
    register_tools(server, resolved_settings)
    logger.info(
        "Configured %s with command '%s' and scripts in '%s'",
        resolved_server_config.name,
        resolved_settings.command,
        resolved_settings.scripts_dir,
    )
    return server


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    server = create_server()
    logger.info("Starting Windows UI Automation MCP server with stdio transport...")
    server.run()


if __name__ == "__main__":
    main()
