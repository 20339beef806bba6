from __future__ import annotations

import base64
import binascii
from functools import partial

import anyio
from mcp.server.fastmcp import Context, FastMCP, Image

from uia_mcp.capabilities import UiaCommandError, screenshot
from uia_mcp.bridge import UiaCommand
from uia_mcp.config import UiaSettings


def register(server: FastMCP, settings: UiaSettings) -> None:
    @server.tool(
        name="uia_screenshot",
        title="Screenshot",
        description=(
            "Capture a screenshot as base64 PNG. "
            "Can capture the full screen, a specific window, or a rectangular region."
        ),
        structured_output=False,
    )
    async def uia_screenshot(
        window_title: str | None = None,
        window_handle: int | None = None,
        x: int | None = None,
        y: int | None = None,
        width: int | None = None,
        height: int | None = None,
        *,
        context: Context | None = None,
    ) -> list[Image | str]:
        if context is not None:
            await context.report_progress(0, 1, "Capturing screenshot")
        result = await anyio.to_thread.run_sync(
            partial(
                screenshot.capture_screenshot,
                settings,
                window_title=window_title,
                window_handle=window_handle,
                x=x,
                y=y,
                width=width,
                height=height,
            )
        )
        try:
            image_bytes = base64.b64decode(result["base64"], validate=True)
        except (KeyError, TypeError, binascii.Error) as exc:
            raise UiaCommandError(UiaCommand.SCREENSHOT, "Screenshot script returned invalid base64 data.") from exc
        if context is not None:
            await context.report_progress(1, 1, "Screenshot captured")
        return [
            Image(data=image_bytes, format="png"),
            f"Screenshot captured: {result['width']}x{result['height']} at ({result['x']}, {result['y']})",
        ]
