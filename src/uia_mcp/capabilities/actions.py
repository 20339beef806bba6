"""UI actions: click, read text, send keys."""

from __future__ import annotations

from typing import cast

from uia_mcp import bridge
from uia_mcp.bridge import ArgValue, UiaCommand
from uia_mcp.config import ConfigError, UiaSettings, normalize_keys, normalize_optional_coordinate
from uia_mcp.types import ClickResult, ManyTexts, SendKeysResult, SingleText, TextReadout, TextResult

from . import element_locator_args, unwrap_list, unwrap_object, window_locator_args


def click(
    settings: UiaSettings,
    window_title: str | None = None,
    window_handle: int | None = None,
    name: str | None = None,
    automation_id: str | None = None,
    x: int | None = None,
    y: int | None = None,
) -> ClickResult:
    """Click an element by name/AutomationId, or a point in screen coordinates."""
    element = element_locator_args(name, automation_id)
    point = {
        "X": normalize_optional_coordinate(x, "x"),
        "Y": normalize_optional_coordinate(y, "y"),
    }
    targets_element = any(value is not None for value in element.values())
    targets_point = any(value is not None for value in point.values())

    if targets_element and targets_point:
        raise ConfigError("Click either an element (name/automation_id) or a point (x, y), not both.")
    if targets_point and None in point.values():
        raise ConfigError("x and y must be given together to click a screen point.")
    if not targets_element and not targets_point:
        raise ConfigError("name, automation_id or x and y are required to click.")

    args: dict[str, ArgValue] = {
        **window_locator_args(window_title, window_handle),
        **element,
        **point,
    }
    result = bridge.run_script(settings, UiaCommand.CLICK_ELEMENT, args)
    return cast(ClickResult, unwrap_object(UiaCommand.CLICK_ELEMENT, result, "Failed to click element"))


def read_text(
    settings: UiaSettings,
    window_title: str | None = None,
    window_handle: int | None = None,
    name: str | None = None,
    automation_id: str | None = None,
    all_text: bool = False,
) -> TextReadout:
    """Read text from one element, or from every text element when ``all_text`` is set."""
    args: dict[str, ArgValue] = {
        **window_locator_args(window_title, window_handle),
        **element_locator_args(name, automation_id),
        "AllText": bool(all_text),
    }
    result = bridge.run_script(settings, UiaCommand.READ_TEXT, args)

    if all_text:
        data = unwrap_list(UiaCommand.READ_TEXT, result, "Failed to read text")
        return ManyTexts(results=cast(list[TextResult], data))
    data = unwrap_object(UiaCommand.READ_TEXT, result, "Failed to read text")
    return SingleText(result=cast(TextResult, data))


def send_keys(
    settings: UiaSettings,
    keys: str,
    window_title: str | None = None,
    window_handle: int | None = None,
    name: str | None = None,
    automation_id: str | None = None,
) -> SendKeysResult:
    """Send a SendKeys sequence ({ENTER}, ^c, %{F4}, ...) to a window or element.

    The sequence is forwarded verbatim. Without a window locator the keys go
    to whatever window is active.
    """
    args: dict[str, ArgValue] = {
        "Keys": normalize_keys(keys),
        **window_locator_args(window_title, window_handle),
        **element_locator_args(name, automation_id),
    }
    result = bridge.run_script(settings, UiaCommand.SEND_KEYS, args)
    return cast(SendKeysResult, unwrap_object(UiaCommand.SEND_KEYS, result, "Failed to send keys"))
