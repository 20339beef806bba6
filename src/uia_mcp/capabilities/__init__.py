from __future__ import annotations

from typing import Any

from uia_mcp.bridge import ArgValue, CommandResult, Failure, UiaCommand
from uia_mcp.config import normalize_optional_positive_int, normalize_optional_text


class UiaCommandError(RuntimeError):
    """Raised when a UI Automation script call does not succeed."""

    def __init__(self, command: UiaCommand, message: str):
        super().__init__(message)
        self.command = command


def window_locator_args(window_title: str | None, window_handle: int | None) -> dict[str, ArgValue]:
    return {
        "WindowTitle": normalize_optional_text(window_title, "window_title"),
        "WindowHandle": normalize_optional_positive_int(window_handle, "window_handle"),
    }


def element_locator_args(name: str | None, automation_id: str | None) -> dict[str, ArgValue]:
    return {
        "Name": normalize_optional_text(name, "name"),
        "AutomationId": normalize_optional_text(automation_id, "automation_id"),
    }


def unwrap_list(command: UiaCommand, result: CommandResult[Any], fallback: str) -> list[Any]:
    data = _unwrap(command, result, fallback)
    if not isinstance(data, list):
        raise UiaCommandError(command, f"{fallback}: expected a list but received {type(data).__name__}.")
    return data


def unwrap_object(command: UiaCommand, result: CommandResult[Any], fallback: str) -> dict[str, Any]:
    data = _unwrap(command, result, fallback)
    if not isinstance(data, dict):
        raise UiaCommandError(command, f"{fallback}: expected an object but received {type(data).__name__}.")
    return data


def _unwrap(command: UiaCommand, result: CommandResult[Any], fallback: str) -> Any:
    if isinstance(result, Failure):
        raise UiaCommandError(command, result.error or fallback)
    if result.data is None:
        raise UiaCommandError(command, f"{fallback}: script returned no data.")
    return result.data
