from __future__ import annotations

from functools import partial

import anyio
from mcp.server.fastmcp import Context, FastMCP

from uia_mcp.bridge import run_health_check
from uia_mcp.config import UiaSettings
from uia_mcp.types import HealthCheckResult


def register(server: FastMCP, settings: UiaSettings) -> None:
    @server.tool(
        name="uia_health_check",
        title="UIA health check",
        description="Check that the PowerShell command resolves and every UI Automation script is installed.",
        structured_output=True,
    )
    async def uia_health_check(*, context: Context | None = None) -> HealthCheckResult:
        if context is not None:
            await context.report_progress(0, 1, "Running UIA health check")
        result = await anyio.to_thread.run_sync(partial(run_health_check, settings))
        if context is not None:
            await context.report_progress(1, 1, "UIA health check complete")
        return result
