from __future__ import annotations

from typing import cast

from uia_mcp import bridge
from uia_mcp.bridge import ArgValue, UiaCommand
from uia_mcp.config import (
    ConfigError,
    UiaSettings,
    normalize_optional_coordinate,
    normalize_optional_positive_int,
)
from uia_mcp.types import ScreenshotResult

from . import unwrap_object, window_locator_args


def capture_screenshot(
    settings: UiaSettings,
    window_title: str | None = None,
    window_handle: int | None = None,
    x: int | None = None,
    y: int | None = None,
    width: int | None = None,
    height: int | None = None,
) -> ScreenshotResult:
    """Capture a window, a screen region, or the full screen as base64 PNG."""
    window = window_locator_args(window_title, window_handle)
    region: dict[str, ArgValue] = {
        "X": normalize_optional_coordinate(x, "x"),
        "Y": normalize_optional_coordinate(y, "y"),
        "Width": normalize_optional_positive_int(width, "width"),
        "Height": normalize_optional_positive_int(height, "height"),
    }
    has_window = any(value is not None for value in window.values())
    has_region = any(value is not None for value in region.values())

    if has_window and has_region:
        raise ConfigError("Capture either a window or a region (x, y, width, height), not both.")
    if has_region and None in region.values():
        raise ConfigError("x, y, width and height are all required to capture a region.")

    result = bridge.run_script(
        settings,
        UiaCommand.SCREENSHOT,
        {**window, **region},
        timeout_ms=settings.screenshot_timeout_ms,
    )
    return cast(ScreenshotResult, unwrap_object(UiaCommand.SCREENSHOT, result, "Failed to capture screenshot"))
