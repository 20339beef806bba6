from __future__ import annotations

from pathlib import Path
import sys
import textwrap
from typing import Callable

import pytest

from uia_mcp.config import UiaSettings


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "scripts"
    directory.mkdir()
    return directory


@pytest.fixture
def write_script(scripts_dir: Path) -> Callable[[str, str], Path]:
    # Stub scripts are Python sources saved under the PowerShell script names.
    def _write(name: str, body: str) -> Path:
        path = scripts_dir / name
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def stub_settings(scripts_dir: Path) -> Callable[..., UiaSettings]:
    def _settings(**overrides: object) -> UiaSettings:
        defaults = dict(
            command=sys.executable,
            base_args=tuple(),
            script_flag=None,
            scripts_dir=str(scripts_dir),
            timeout_ms=10_000,
            screenshot_timeout_ms=15_000,
            max_output_bytes=10 * 1024 * 1024,
        )
        defaults.update(overrides)
        return UiaSettings(**defaults)

    return _settings
