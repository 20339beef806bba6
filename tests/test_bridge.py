from __future__ import annotations

import json
import os
from pathlib import Path
import sys
import time

import pytest

from uia_mcp import bridge
from uia_mcp.bridge import Failure, Success, UiaCommand
from uia_mcp.config import ConfigError, load_settings


def test_build_script_args_omits_false_none_and_empty() -> None:
    tokens = bridge.build_script_args(
        {
            "WindowTitle": None,
            "Name": "",
            "AllText": False,
            "AutomationId": "btnSave",
        }
    )

    assert tokens == ["-AutomationId", "btnSave"]


def test_build_script_args_emits_bare_flag_for_true() -> None:
    assert bridge.build_script_args({"AllText": True}) == ["-AllText"]


def test_build_script_args_preserves_order_and_pairs_values() -> None:
    tokens = bridge.build_script_args(
        {
            "WindowTitle": "Notepad",
            "MaxResults": 50,
            "AllText": True,
            "X": 0,
            "Width": 640.0,
            "Scale": 1.5,
        }
    )

    assert tokens == [
        "-WindowTitle",
        "Notepad",
        "-MaxResults",
        "50",
        "-AllText",
        "-X",
        "0",
        "-Width",
        "640",
        "-Scale",
        "1.5",
    ]


def test_build_script_args_rejects_unsupported_types() -> None:
    with pytest.raises(TypeError, match="Filter"):
        bridge.build_script_args({"Filter": ["a", "b"]})  # type: ignore[dict-item]


def test_build_command_line_uses_powershell_defaults() -> None:
    settings = load_settings({"UIA_MCP_SCRIPTS_DIR": "/opt/uia/scripts"})
    script_path = bridge.resolve_script_path(settings, UiaCommand.LIST_WINDOWS)

    command = bridge.build_command_line(settings, script_path, ["-Filter", "Notepad"])

    assert command == [
        "powershell.exe",
        "-NoProfile",
        "-NonInteractive",
        "-ExecutionPolicy",
        "Bypass",
        "-File",
        str(Path("/opt/uia/scripts").resolve() / "uia-list-windows.ps1"),
        "-Filter",
        "Notepad",
    ]


def test_resolve_script_path_accepts_script_names(stub_settings) -> None:
    path = bridge.resolve_script_path(stub_settings(), "uia-send-keys.ps1")
    assert path.endswith("uia-send-keys.ps1")


def test_resolve_script_path_rejects_unknown_command(stub_settings) -> None:
    with pytest.raises(ConfigError, match="Unknown UIA command"):
        bridge.resolve_script_path(stub_settings(), "uia-format-disk.ps1")


def test_parse_envelope_success_and_failure() -> None:
    assert bridge.parse_envelope('{"success": true, "data": [1, 2]}') == Success([1, 2])
    assert bridge.parse_envelope('{"success": false, "error": "Element not found"}') == Failure(
        "Element not found"
    )


def test_parse_envelope_failure_without_error_has_empty_message() -> None:
    assert bridge.parse_envelope('{"success": false}') == Failure("")


@pytest.mark.parametrize(
    "output",
    [
        '{"success": true}',
        '{"success": true, "data": 1, "error": "x"}',
        '{"success": false, "data": 1}',
        '{"success": "yes", "data": 1}',
        '{"success": false, "error": 42}',
        '{"success": true, "data": 1, "extra": 2}',
        "[1, 2, 3]",
        '{"success": true, "data": {"clicked": "Sa',
    ],
)
def test_parse_envelope_rejects_other_shapes(output: str) -> None:
    assert bridge.parse_envelope(output) == Failure(f"Invalid JSON output: {output}")


def test_parse_envelope_truncates_excerpt_to_200_chars() -> None:
    output = "x" * 500

    result = bridge.parse_envelope(output)

    assert result == Failure("Invalid JSON output: " + "x" * 200)


def test_envelope_round_trip_preserves_data() -> None:
    data = {"title": "Untitled - Notepad", "handle": 132456, "processId": 4412, "className": "Notepad"}

    encoded = bridge.encode_envelope(Success(data))

    assert json.loads(encoded) == {"success": True, "data": data}
    assert bridge.parse_envelope(encoded) == Success(data)
    assert bridge.parse_envelope(bridge.encode_envelope(Failure("boom"))) == Failure("boom")


def test_run_script_returns_success_from_stub(stub_settings, write_script) -> None:
    write_script(
        "uia-list-windows.ps1",
        """
        import json
        print(json.dumps({"success": True, "data": [{"title": "Notepad", "handle": 1, "processId": 2, "className": "Notepad"}]}))
        """,
    )

    result = bridge.run_script(stub_settings(), UiaCommand.LIST_WINDOWS)

    assert isinstance(result, Success)
    assert result.data == [{"title": "Notepad", "handle": 1, "processId": 2, "className": "Notepad"}]


def test_run_script_passes_marshaled_arguments(stub_settings, write_script) -> None:
    write_script(
        "uia-read-text.ps1",
        """
        import json, sys
        print(json.dumps({"success": True, "data": sys.argv[1:]}))
        """,
    )

    result = bridge.run_script(
        stub_settings(),
        UiaCommand.READ_TEXT,
        {"WindowTitle": "Calc", "WindowHandle": None, "Name": "Display is 0", "AllText": True, "Skip": False},
    )

    assert result == Success(["-WindowTitle", "Calc", "-Name", "Display is 0", "-AllText"])


def test_run_script_passes_domain_failure_through(stub_settings, write_script) -> None:
    write_script(
        "uia-click-element.ps1",
        """
        import json
        print(json.dumps({"success": False, "error": "Element 'Save' not found"}))
        """,
    )

    result = bridge.run_script(stub_settings(), UiaCommand.CLICK_ELEMENT, {"Name": "Save"})

    assert result == Failure("Element 'Save' not found")


def test_run_script_reports_empty_output(stub_settings, write_script) -> None:
    write_script("uia-focus-window.ps1", "import sys\nsys.stdout.write('   \\n')\n")

    result = bridge.run_script(stub_settings(), UiaCommand.FOCUS_WINDOW)

    assert result == Failure("No output from script")


def test_run_script_reports_malformed_output(stub_settings, write_script) -> None:
    write_script("uia-focus-window.ps1", "print('not json')\n")

    result = bridge.run_script(stub_settings(), UiaCommand.FOCUS_WINDOW)

    assert result == Failure("Invalid JSON output: not json")


def test_run_script_tolerates_utf8_bom(stub_settings, write_script) -> None:
    write_script(
        "uia-send-keys.ps1",
        """
        import sys
        sys.stdout.buffer.write(b'\\xef\\xbb\\xbf{"success": true, "data": {"keysSent": "^c", "target": "active window"}}')
        """,
    )

    result = bridge.run_script(stub_settings(), UiaCommand.SEND_KEYS, {"Keys": "^c"})

    assert result == Success({"keysSent": "^c", "target": "active window"})


def test_run_script_reports_non_zero_exit_with_stderr(stub_settings, write_script) -> None:
    write_script(
        "uia-screenshot.ps1",
        """
        import sys
        sys.stderr.write("Add-Type : Cannot add type\\n")
        sys.exit(3)
        """,
    )

    result = bridge.run_script(stub_settings(), UiaCommand.SCREENSHOT)

    assert result == Failure("Script exited with status 3: Add-Type : Cannot add type")


def test_run_script_times_out_and_resolves_promptly(stub_settings, write_script) -> None:
    write_script(
        "uia-find-elements.ps1",
        """
        import json, sys, time
        sys.stdout.write('{"success": true, "data": [')
        sys.stdout.flush()
        time.sleep(30)
        """,
    )

    started = time.monotonic()
    result = bridge.run_script(stub_settings(), UiaCommand.FIND_ELEMENTS, timeout_ms=500)
    elapsed = time.monotonic() - started

    assert result == Failure("Script timed out after 500ms")
    assert elapsed < 5


def test_run_script_uses_settings_timeout_by_default(stub_settings, write_script) -> None:
    write_script("uia-list-windows.ps1", "import time\ntime.sleep(30)\n")

    result = bridge.run_script(stub_settings(timeout_ms=300), UiaCommand.LIST_WINDOWS)

    assert isinstance(result, Failure)
    assert "300ms" in result.error


@pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX signal 0 probing")
def test_run_script_kills_process_on_timeout(stub_settings, write_script, tmp_path: Path) -> None:
    pid_file = tmp_path / "stub.pid"
    write_script(
        "uia-list-windows.ps1",
        f"""
        import os, time
        with open({str(pid_file)!r}, "w") as handle:
            handle.write(str(os.getpid()))
        time.sleep(30)
        """,
    )

    result = bridge.run_script(stub_settings(), UiaCommand.LIST_WINDOWS, timeout_ms=2000)

    assert isinstance(result, Failure)
    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


@pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX process groups")
def test_run_script_timeout_is_not_held_open_by_grandchild(stub_settings, write_script) -> None:
    write_script(
        "uia-find-elements.ps1",
        """
        import subprocess, sys, time
        subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
        time.sleep(30)
        """,
    )

    started = time.monotonic()
    result = bridge.run_script(stub_settings(), UiaCommand.FIND_ELEMENTS, timeout_ms=1000)
    elapsed = time.monotonic() - started

    assert result == Failure("Script timed out after 1000ms")
    assert elapsed < 2.5


def test_run_script_caps_output(stub_settings, write_script) -> None:
    write_script(
        "uia-screenshot.ps1",
        """
        import sys
        sys.stdout.write("A" * 200000)
        sys.stdout.flush()
        """,
    )

    result = bridge.run_script(stub_settings(max_output_bytes=1024), UiaCommand.SCREENSHOT)

    assert result == Failure("Script output exceeded 1024 bytes")


def test_run_script_reports_missing_command(stub_settings, write_script) -> None:
    write_script("uia-list-windows.ps1", "print('{}')\n")

    result = bridge.run_script(stub_settings(command="uia-mcp-missing-shell"), UiaCommand.LIST_WINDOWS)

    assert result == Failure("Command 'uia-mcp-missing-shell' was not found.")


def test_run_script_reports_missing_script(stub_settings) -> None:
    result = bridge.run_script(stub_settings(), UiaCommand.READ_TEXT)

    assert isinstance(result, Failure)
    assert result.error.startswith("Script '")
    assert result.error.endswith("uia-read-text.ps1' was not found.")


def test_run_script_rejects_non_positive_timeout(stub_settings) -> None:
    with pytest.raises(ConfigError, match="timeout_ms"):
        bridge.run_script(stub_settings(), UiaCommand.LIST_WINDOWS, timeout_ms=0)


def test_run_health_check_reports_missing_scripts(stub_settings, write_script) -> None:
    write_script("uia-list-windows.ps1", "")

    result = bridge.run_health_check(stub_settings())

    assert result["ok"] is False
    assert result["error_type"] == "config"
    assert "uia-list-windows.ps1" not in result["missing_scripts"]
    assert "uia-screenshot.ps1" in result["missing_scripts"]


def test_run_health_check_ok_when_everything_installed(stub_settings, write_script) -> None:
    for command in UiaCommand:
        write_script(command.value, "")

    result = bridge.run_health_check(stub_settings())

    assert result["ok"] is True
    assert result["command_path"] == sys.executable
    assert result["missing_scripts"] == []


def test_run_health_check_reports_missing_command(stub_settings) -> None:
    result = bridge.run_health_check(stub_settings(command="uia-mcp-missing-shell"))

    assert result["ok"] is False
    assert result["command_path"] is None
    assert "was not found" in (result["error_message"] or "")
