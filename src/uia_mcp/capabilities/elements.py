from __future__ import annotations

from typing import cast

from uia_mcp import bridge
from uia_mcp.bridge import ArgValue, UiaCommand
from uia_mcp.config import UiaSettings, normalize_optional_positive_int, normalize_optional_text
from uia_mcp.types import ElementInfo

from . import element_locator_args, unwrap_list, window_locator_args

DEFAULT_FIND_MAX_RESULTS = 50
DEFAULT_TREE_MAX_RESULTS = 100


def find_elements(
    settings: UiaSettings,
    window_title: str | None = None,
    window_handle: int | None = None,
    name: str | None = None,
    automation_id: str | None = None,
    control_type: str | None = None,
    max_results: int = DEFAULT_FIND_MAX_RESULTS,
) -> list[ElementInfo]:
    """Find elements of a window by name, AutomationId or ControlType.

    With no filters the script returns every element it scans, up to
    ``max_results``.
    """
    args: dict[str, ArgValue] = {
        **window_locator_args(window_title, window_handle),
        **element_locator_args(name, automation_id),
        "ControlType": normalize_optional_text(control_type, "control_type"),
        "MaxResults": normalize_optional_positive_int(max_results, "max_results"),
    }
    result = bridge.run_script(settings, UiaCommand.FIND_ELEMENTS, args)
    return cast(list[ElementInfo], unwrap_list(UiaCommand.FIND_ELEMENTS, result, "Failed to find elements"))


def get_element_tree(
    settings: UiaSettings,
    window_title: str | None = None,
    window_handle: int | None = None,
    max_results: int = DEFAULT_TREE_MAX_RESULTS,
) -> list[ElementInfo]:
    """Flat list of a window's elements; find_elements without filters."""
    return find_elements(
        settings,
        window_title=window_title,
        window_handle=window_handle,
        max_results=max_results,
    )
