"""Process invocation bridge for the UI Automation PowerShell scripts.

Every call spawns exactly one external process, waits for it under a hard
wall-clock timeout with bounded output buffers, and turns whatever happened
into a ``CommandResult``. Ordinary runtime conditions (spawn failure,
non-zero exit, timeout, oversized or malformed output) never raise; only
programmer errors such as an unknown command identifier do.

Scripts answer on stdout with a JSON envelope::

    {"success": true, "data": <payload>}
    {"success": false, "error": "<message>"}
"""

from __future__ import annotations

from dataclasses import dataclass
import enum
from functools import partial
import json
import logging
import os
from pathlib import Path
import shutil
import signal
import subprocess
import threading
import time
from typing import IO, Any, Callable, ClassVar, Generic, Mapping, TypeVar, Union

from .config import ConfigError, UiaSettings
from .types import HealthCheckResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
ArgValue = Union[str, int, float, bool, None]

ERROR_EXCERPT_CHARS = 200
_ENVELOPE_KEYS = frozenset({"success", "data", "error"})
_READ_CHUNK_BYTES = 64 * 1024
_READER_JOIN_SECONDS = 2.0


class UiaCommand(str, enum.Enum):
    LIST_WINDOWS = "uia-list-windows.ps1"
    FOCUS_WINDOW = "uia-focus-window.ps1"
    FIND_ELEMENTS = "uia-find-elements.ps1"
    CLICK_ELEMENT = "uia-click-element.ps1"
    READ_TEXT = "uia-read-text.ps1"
    SEND_KEYS = "uia-send-keys.ps1"
    SCREENSHOT = "uia-screenshot.ps1"


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Failure:
    error: str
    ok: ClassVar[bool] = False


CommandResult = Union[Success[T], Failure]


@dataclass(frozen=True, slots=True)
class ProcessOutcome:
    returncode: int | None
    stdout: bytes
    stderr: bytes
    timed_out: bool
    overflowed: bool


def resolve_script_path(settings: UiaSettings, command: UiaCommand | str) -> str:
    try:
        resolved = UiaCommand(command)
    except ValueError as exc:
        raise ConfigError(f"Unknown UIA command '{command}'.") from exc
    return str(Path(settings.scripts_dir) / resolved.value)


def build_script_args(args: Mapping[str, ArgValue]) -> list[str]:
    """Turn an ordered ``{Name: value}`` mapping into PowerShell parameter tokens.

    ``None``, ``""`` and ``False`` are dropped, ``True`` becomes a bare
    ``-Name`` switch, and strings or numbers become ``-Name value``.
    """
    tokens: list[str] = []
    for name, value in args.items():
        if value is None or value == "" or value is False:
            continue
        if value is True:
            tokens.append(f"-{name}")
        elif isinstance(value, (str, int, float)):
            tokens.extend([f"-{name}", _format_value(value)])
        else:
            raise TypeError(
                f"Unsupported value for argument '{name}': {type(value).__name__}."
            )
    return tokens


def build_command_line(settings: UiaSettings, script_path: str, script_args: list[str]) -> list[str]:
    command = [settings.command, *settings.base_args]
    if settings.script_flag:
        command.append(settings.script_flag)
    command.append(script_path)
    command.extend(script_args)
    return command


def parse_envelope(output: str) -> CommandResult[Any]:
    try:
        payload = json.loads(output)
    except (ValueError, RecursionError):
        return Failure(_invalid_output_message(output))

    if not _is_envelope(payload):
        return Failure(_invalid_output_message(output))
    if payload["success"]:
        return Success(payload["data"])
    return Failure(payload.get("error") or "")


def encode_envelope(result: CommandResult[Any]) -> str:
    """Inverse of ``parse_envelope``; stub scripts and round-trip checks use it."""
    if isinstance(result, Success):
        return json.dumps({"success": True, "data": result.data})
    return json.dumps({"success": False, "error": result.error})


def run_script(
    settings: UiaSettings,
    command: UiaCommand | str,
    args: Mapping[str, ArgValue] | None = None,
    timeout_ms: int | None = None,
) -> CommandResult[Any]:
    script_path = resolve_script_path(settings, command)
    script_args = build_script_args(args or {})
    effective_timeout_ms = settings.timeout_ms if timeout_ms is None else timeout_ms
    if effective_timeout_ms <= 0:
        raise ConfigError("timeout_ms must be greater than zero.")

    script_name = Path(script_path).name
    if not Path(script_path).is_file():
        return _failure(script_name, f"Script '{script_path}' was not found.")

    command_line = build_command_line(settings, script_path, script_args)
    logger.debug("Running %s with args %s (timeout %dms)", script_name, script_args, effective_timeout_ms)

    started_at = time.monotonic()
    try:
        outcome = _spawn(command_line, effective_timeout_ms, settings.max_output_bytes)
    except FileNotFoundError:
        return _failure(script_name, f"Command '{settings.command}' was not found.")
    except OSError as exc:
        return _failure(script_name, f"Failed to execute command: {exc}")

    result = _interpret(script_name, outcome, effective_timeout_ms, settings.max_output_bytes)
    logger.debug(
        "%s finished in %dms (ok=%s)",
        script_name,
        _duration_ms(started_at),
        result.ok,
    )
    return result


def run_health_check(settings: UiaSettings) -> HealthCheckResult:
    command_path = _resolve_command_path(settings.command)
    scripts_dir = Path(settings.scripts_dir)
    missing_scripts = [
        command.value for command in UiaCommand if not (scripts_dir / command.value).is_file()
    ]

    error_type: str | None = None
    error_message: str | None = None
    if command_path is None:
        error_type = "config"
        error_message = f"Command '{settings.command}' was not found."
    elif not scripts_dir.is_dir():
        error_type = "config"
        error_message = f"Scripts directory '{scripts_dir}' does not exist."
    elif missing_scripts:
        error_type = "config"
        error_message = f"Missing scripts: {', '.join(missing_scripts)}."

    return HealthCheckResult(
        ok=error_type is None,
        command=settings.command,
        command_path=command_path,
        scripts_dir=str(scripts_dir),
        missing_scripts=missing_scripts,
        error_type=error_type,
        error_message=error_message,
    )


def _interpret(
    script_name: str,
    outcome: ProcessOutcome,
    timeout_ms: int,
    max_output_bytes: int,
) -> CommandResult[Any]:
    if outcome.overflowed:
        return _failure(script_name, f"Script output exceeded {max_output_bytes} bytes")

    if outcome.timed_out:
        if outcome.stdout:
            logger.debug("Discarding %d bytes of partial output from %s", len(outcome.stdout), script_name)
        return _failure(script_name, f"Script timed out after {timeout_ms}ms")

    if outcome.returncode != 0:
        message = f"Script exited with status {outcome.returncode}"
        stderr = _decode(outcome.stderr).strip()
        if stderr:
            message = f"{message}: {stderr[:ERROR_EXCERPT_CHARS]}"
        return _failure(script_name, message)

    output = _decode(outcome.stdout).strip()
    if not output:
        return _failure(script_name, "No output from script")

    result = parse_envelope(output)
    if isinstance(result, Failure):
        logger.info("%s reported failure: %s", script_name, result.error or "<no error message>")
    return result


def _spawn(command_line: list[str], timeout_ms: int, max_output_bytes: int) -> ProcessOutcome:
    process = subprocess.Popen(
        command_line,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
        start_new_session=os.name != "nt",
    )
    assert process.stdout is not None and process.stderr is not None

    stdout_reader = _BoundedReader(process.stdout, max_output_bytes, on_overflow=partial(_kill_tree, process))
    stderr_reader = _BoundedReader(process.stderr, max_output_bytes, on_overflow=partial(_kill_tree, process))
    stdout_reader.start()
    stderr_reader.start()

    timed_out = False
    try:
        process.wait(timeout=timeout_ms / 1000)
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill_tree(process)
        process.wait()

    stdout_reader.join(_READER_JOIN_SECONDS)
    stderr_reader.join(_READER_JOIN_SECONDS)

    return ProcessOutcome(
        returncode=process.returncode,
        stdout=stdout_reader.data(),
        stderr=stderr_reader.data(),
        timed_out=timed_out,
        overflowed=stdout_reader.overflowed or stderr_reader.overflowed,
    )


def _kill_tree(process: subprocess.Popen[bytes]) -> None:
    # Child processes the script started may still hold the output pipes.
    if os.name == "nt":
        try:
            subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(process.pid)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
                check=False,
            )
        except OSError as exc:
            logger.debug("taskkill failed for pid %s: %s", process.pid, exc)
    else:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass
    if process.poll() is None:
        process.kill()


class _BoundedReader(threading.Thread):
    def __init__(self, stream: IO[bytes], limit: int, on_overflow: Callable[[], None]) -> None:
        super().__init__(daemon=True)
        self._stream = stream
        self._limit = limit
        self._on_overflow = on_overflow
        self._buffer = bytearray()
        self._lock = threading.Lock()
        self.overflowed = False

    def run(self) -> None:
        try:
            while True:
                chunk = self._stream.read1(_READ_CHUNK_BYTES)  # type: ignore[attr-defined]
                if not chunk:
                    return
                with self._lock:
                    remaining = self._limit - len(self._buffer)
                    self._buffer.extend(chunk[:remaining])
                    if len(chunk) > remaining:
                        self.overflowed = True
                if self.overflowed:
                    self._on_overflow()
                    return
        except (OSError, ValueError):
            return
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    def data(self) -> bytes:
        with self._lock:
            return bytes(self._buffer)


def _is_envelope(payload: object) -> bool:
    if not isinstance(payload, dict):
        return False
    if not set(payload) <= _ENVELOPE_KEYS:
        return False
    success = payload.get("success")
    if not isinstance(success, bool):
        return False
    if success:
        return "data" in payload and "error" not in payload
    if "data" in payload:
        return False
    return "error" not in payload or isinstance(payload["error"], str)


def _resolve_command_path(command: str) -> str | None:
    command_path = Path(command)
    if command_path.is_absolute() or "/" in command or "\\" in command:
        return str(command_path) if command_path.exists() else None
    return shutil.which(command)


def _format_value(value: str | int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8-sig", errors="replace")


def _invalid_output_message(output: str) -> str:
    return f"Invalid JSON output: {output[:ERROR_EXCERPT_CHARS]}"


def _failure(script_name: str, message: str) -> Failure:
    logger.warning("%s failed: %s", script_name, message)
    return Failure(message)


def _duration_ms(started_at: float) -> int:
    return max(0, int((time.monotonic() - started_at) * 1000))
