from mcp.server.fastmcp import FastMCP

from uia_mcp.config import UiaSettings
from uia_mcp.tools.actions import register as register_actions
from uia_mcp.tools.elements import register as register_elements
from uia_mcp.tools.health import register as register_health
from uia_mcp.tools.screenshot import register as register_screenshot
from uia_mcp.tools.windows import register as register_windows


def register_tools(server: FastMCP, settings: UiaSettings) -> None:
    register_windows(server, settings)
    register_elements(server, settings)
    register_actions(server, settings)
    register_screenshot(server, settings)
    register_health(server, settings)
