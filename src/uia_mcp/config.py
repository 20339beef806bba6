from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import shlex
from typing import Mapping

DEFAULT_SERVER_NAME = "uia-mcp"
DEFAULT_INSTRUCTIONS = (
    "Expose Windows UI Automation tools backed by PowerShell scripts. "
    "List or focus windows, discover elements, click, read text, send keys and capture screenshots."
)
DEFAULT_COMMAND = "powershell.exe"
DEFAULT_BASE_ARGS = "-NoProfile -NonInteractive -ExecutionPolicy Bypass"
DEFAULT_SCRIPT_FLAG = "-File"
DEFAULT_SCRIPTS_DIR = Path(__file__).resolve().parent / "scripts"
DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_SCREENSHOT_TIMEOUT_MS = 15_000
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


class ConfigError(ValueError):
    """Raised when UIA MCP configuration or input is invalid."""


@dataclass(frozen=True, slots=True)
class UiaSettings:
    command: str
    base_args: tuple[str, ...]
    script_flag: str | None
    scripts_dir: str
    timeout_ms: int
    screenshot_timeout_ms: int
    max_output_bytes: int


@dataclass(frozen=True, slots=True)
class ServerConfig:
    name: str = DEFAULT_SERVER_NAME
    instructions: str = DEFAULT_INSTRUCTIONS

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ServerConfig":
        actual_env = env if env is not None else os.environ
        return cls(
            name=actual_env.get("UIA_MCP_NAME", DEFAULT_SERVER_NAME),
            instructions=actual_env.get("UIA_MCP_INSTRUCTIONS", DEFAULT_INSTRUCTIONS),
        )


def load_settings(env: Mapping[str, str] | None = None) -> UiaSettings:
    actual_env = env if env is not None else os.environ

    command = _require_non_empty(actual_env, "UIA_MCP_COMMAND", default=DEFAULT_COMMAND)
    base_args = tuple(_parse_shell_args(actual_env.get("UIA_MCP_BASE_ARGS", DEFAULT_BASE_ARGS)))
    script_flag = actual_env.get("UIA_MCP_SCRIPT_FLAG", DEFAULT_SCRIPT_FLAG).strip() or None
    scripts_dir = _parse_dir(actual_env.get("UIA_MCP_SCRIPTS_DIR"), "UIA_MCP_SCRIPTS_DIR")
    timeout_ms = _parse_positive_int(
        actual_env.get("UIA_MCP_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS)),
        "UIA_MCP_TIMEOUT_MS",
    )
    screenshot_timeout_ms = _parse_positive_int(
        actual_env.get("UIA_MCP_SCREENSHOT_TIMEOUT_MS", str(DEFAULT_SCREENSHOT_TIMEOUT_MS)),
        "UIA_MCP_SCREENSHOT_TIMEOUT_MS",
    )
    max_output_bytes = _parse_positive_int(
        actual_env.get("UIA_MCP_MAX_OUTPUT_BYTES", str(DEFAULT_MAX_OUTPUT_BYTES)),
        "UIA_MCP_MAX_OUTPUT_BYTES",
    )

    return UiaSettings(
        command=command,
        base_args=base_args,
        script_flag=script_flag,
        scripts_dir=scripts_dir,
        timeout_ms=timeout_ms,
        screenshot_timeout_ms=screenshot_timeout_ms,
        max_output_bytes=max_output_bytes,
    )


def normalize_optional_text(raw_value: str | None, field_name: str) -> str | None:
    if raw_value is None:
        return None
    value = raw_value.strip()
    if not value:
        return None
    if "\n" in value or "\r" in value:
        raise ConfigError(f"{field_name} cannot contain newline characters.")
    return value


def normalize_optional_positive_int(raw_value: int | None, field_name: str) -> int | None:
    if raw_value is None:
        return None
    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        raise ConfigError(f"{field_name} must be an integer.")
    if raw_value <= 0:
        raise ConfigError(f"{field_name} must be greater than zero.")
    return raw_value


def normalize_optional_coordinate(raw_value: int | None, field_name: str) -> int | None:
    if raw_value is None:
        return None
    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        raise ConfigError(f"{field_name} must be an integer.")
    return raw_value


def normalize_keys(raw_keys: str) -> str:
    # Key sequences are passed through untouched; whitespace can be meaningful.
    if not isinstance(raw_keys, str) or raw_keys == "":
        raise ConfigError("keys cannot be empty.")
    if "\n" in raw_keys or "\r" in raw_keys:
        raise ConfigError("keys cannot contain newline characters. Use {ENTER} instead.")
    return raw_keys


def _require_non_empty(env: Mapping[str, str], key: str, default: str | None = None) -> str:
    raw = env.get(key, default or "")
    value = raw.strip()
    if not value:
        raise ConfigError(f"{key} is required and must be non-empty.")
    return value


def _parse_shell_args(raw: str) -> list[str]:
    stripped = raw.strip()
    if not stripped:
        return []
    return shlex.split(stripped)


def _parse_dir(raw: str | None, field_name: str) -> str:
    if raw is None or not raw.strip():
        return str(DEFAULT_SCRIPTS_DIR)
    value = raw.strip()
    if "\n" in value or "\r" in value:
        raise ConfigError(f"{field_name} cannot contain newline characters.")
    return str(Path(value).expanduser().resolve())


def _parse_positive_int(raw: str, field_name: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be an integer.") from exc
    if value <= 0:
        raise ConfigError(f"{field_name} must be greater than zero.")
    return value
