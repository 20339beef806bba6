from __future__ import annotations

from typing import cast

from uia_mcp import bridge
from uia_mcp.bridge import ArgValue, UiaCommand
from uia_mcp.config import (
    ConfigError,
    UiaSettings,
    normalize_optional_positive_int,
    normalize_optional_text,
)
from uia_mcp.types import WindowInfo

from . import unwrap_list, unwrap_object


def list_windows(settings: UiaSettings, filter: str | None = None) -> list[WindowInfo]:
    """List visible top-level windows, optionally filtered by title substring."""
    args: dict[str, ArgValue] = {
        "Filter": normalize_optional_text(filter, "filter"),
    }
    result = bridge.run_script(settings, UiaCommand.LIST_WINDOWS, args)
    return cast(list[WindowInfo], unwrap_list(UiaCommand.LIST_WINDOWS, result, "Failed to list windows"))


def focus_window(
    settings: UiaSettings,
    title: str | None = None,
    handle: int | None = None,
    process_id: int | None = None,
) -> WindowInfo:
    """Bring a window to the foreground by title substring, handle or process id."""
    args: dict[str, ArgValue] = {
        "Title": normalize_optional_text(title, "title"),
        "Handle": normalize_optional_positive_int(handle, "handle"),
        "ProcessId": normalize_optional_positive_int(process_id, "process_id"),
    }
    if all(value is None for value in args.values()):
        raise ConfigError("One of title, handle or process_id is required to focus a window.")

    result = bridge.run_script(settings, UiaCommand.FOCUS_WINDOW, args)
    return cast(WindowInfo, unwrap_object(UiaCommand.FOCUS_WINDOW, result, "Failed to focus window"))
