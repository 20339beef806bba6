from __future__ import annotations

from functools import partial

import anyio
from mcp.server.fastmcp import FastMCP

from uia_mcp.capabilities import elements
from uia_mcp.config import UiaSettings
from uia_mcp.types import ElementInfo


def register(server: FastMCP, settings: UiaSettings) -> None:
    @server.tool(
        name="uia_find_elements",
        title="Find elements",
        description=(
            "Search for UI elements within a window by name, AutomationId, or ControlType. "
            "Returns element properties and bounding rectangles."
        ),
        structured_output=True,
    )
    async def uia_find_elements(
        window_title: str | None = None,
        window_handle: int | None = None,
        name: str | None = None,
        automation_id: str | None = None,
        control_type: str | None = None,
        max_results: int = elements.DEFAULT_FIND_MAX_RESULTS,
    ) -> list[ElementInfo]:
        return await anyio.to_thread.run_sync(
            partial(
                elements.find_elements,
                settings,
                window_title=window_title,
                window_handle=window_handle,
                name=name,
                automation_id=automation_id,
                control_type=control_type,
                max_results=max_results,
            )
        )

    @server.tool(
        name="uia_get_element_tree",
        title="Get element tree",
        description=(
            "Get all UI elements of a window as a flat list. "
            "Useful for discovering what elements are available to interact with."
        ),
        structured_output=True,
    )
    async def uia_get_element_tree(
        window_title: str | None = None,
        window_handle: int | None = None,
        max_results: int = elements.DEFAULT_TREE_MAX_RESULTS,
    ) -> list[ElementInfo]:
        return await anyio.to_thread.run_sync(
            partial(
                elements.get_element_tree,
                settings,
                window_title=window_title,
                window_handle=window_handle,
                max_results=max_results,
            )
        )
