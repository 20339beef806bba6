from __future__ import annotations

from functools import partial
from typing import Any

import anyio
from mcp.server.fastmcp import FastMCP

from uia_mcp.capabilities import actions
from uia_mcp.config import UiaSettings
from uia_mcp.types import (
    ManyTexts,
    ReadTextToolResult,
    SendKeysResult,
    SingleText,
)


def register(server: FastMCP, settings: UiaSettings) -> None:
    @server.tool(
        name="uia_click",
        title="Click",
        description=(
            "Click a UI element by name or AutomationId within a window, "
            "or click at specific screen coordinates (x, y)."
        ),
        structured_output=True,
    )
    async def uia_click(
        window_title: str | None = None,
        window_handle: int | None = None,
        name: str | None = None,
        automation_id: str | None = None,
        x: int | None = None,
        y: int | None = None,
    ) -> dict[str, Any]:
        # A ClickResult; optional keys are returned only when the script sent them.
        return await anyio.to_thread.run_sync(
            partial(
                actions.click,
                settings,
                window_title=window_title,
                window_handle=window_handle,
                name=name,
                automation_id=automation_id,
                x=x,
                y=y,
            )
        )

    @server.tool(
        name="uia_read_text",
        title="Read text",
        description=(
            "Read text content from UI elements in a window. "
            "Can read from a specific element or all text elements."
        ),
        structured_output=True,
    )
    async def uia_read_text(
        window_title: str | None = None,
        window_handle: int | None = None,
        name: str | None = None,
        automation_id: str | None = None,
        all_text: bool = False,
    ) -> ReadTextToolResult:
        readout = await anyio.to_thread.run_sync(
            partial(
                actions.read_text,
                settings,
                window_title=window_title,
                window_handle=window_handle,
                name=name,
                automation_id=automation_id,
                all_text=all_text,
            )
        )
        match readout:
            case SingleText(result=result):
                return ReadTextToolResult(all_text=False, results=[result])
            case ManyTexts(results=results):
                return ReadTextToolResult(all_text=True, results=results)
        raise TypeError(f"Unexpected read_text result: {readout!r}")

    @server.tool(
        name="uia_send_keys",
        title="Send keys",
        description=(
            "Send keyboard input to the active window or a specific element. "
            "Uses SendKeys syntax: regular text, {ENTER}, {TAB}, {BACKSPACE}, {DELETE}, {ESC}, "
            "^c (Ctrl+C), %{F4} (Alt+F4), +{TAB} (Shift+Tab)."
        ),
        structured_output=True,
    )
    async def uia_send_keys(
        keys: str,
        window_title: str | None = None,
        window_handle: int | None = None,
        name: str | None = None,
        automation_id: str | None = None,
    ) -> SendKeysResult:
        return await anyio.to_thread.run_sync(
            partial(
                actions.send_keys,
                settings,
                keys=keys,
                window_title=window_title,
                window_handle=window_handle,
                name=name,
                automation_id=automation_id,
            )
        )
