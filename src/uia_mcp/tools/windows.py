from __future__ import annotations

from functools import partial

import anyio
from mcp.server.fastmcp import FastMCP

from uia_mcp.capabilities import windows
from uia_mcp.config import UiaSettings
from uia_mcp.types import WindowInfo


def register(server: FastMCP, settings: UiaSettings) -> None:
    @server.tool(
        name="uia_list_windows",
        title="List windows",
        description="List visible desktop windows. Returns title, handle, PID, and class name for each window.",
        structured_output=True,
    )
    async def uia_list_windows(filter: str | None = None) -> list[WindowInfo]:
        return await anyio.to_thread.run_sync(partial(windows.list_windows, settings, filter=filter))

    @server.tool(
        name="uia_focus_window",
        title="Focus window",
        description="Bring a window to the foreground and give it focus. Specify by title, handle, or PID.",
        structured_output=True,
    )
    async def uia_focus_window(
        title: str | None = None,
        handle: int | None = None,
        process_id: int | None = None,
    ) -> WindowInfo:
        return await anyio.to_thread.run_sync(
            partial(
                windows.focus_window,
                settings,
                title=title,
                handle=handle,
                process_id=process_id,
            )
        )
