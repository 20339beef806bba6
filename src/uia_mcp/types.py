from dataclasses import dataclass
from typing import Union

from typing_extensions import NotRequired, TypedDict


class WindowInfo(TypedDict):
    title: str
    handle: int
    processId: int
    className: str


class BoundingRectangle(TypedDict):
    x: float
    y: float
    width: float
    height: float


class ElementInfo(TypedDict):
    name: str
    automationId: str
    controlType: str
    className: str
    isEnabled: bool
    boundingRectangle: BoundingRectangle


class ClickResult(TypedDict):
    clicked: str
    automationId: NotRequired[str]
    controlType: NotRequired[str]
    x: NotRequired[int]
    y: NotRequired[int]


class TextResult(TypedDict):
    text: str
    name: NotRequired[str]
    automationId: NotRequired[str]
    controlType: NotRequired[str]
    source: NotRequired[str]


class SendKeysResult(TypedDict):
    keysSent: str
    target: str


class ScreenshotResult(TypedDict):
    base64: str
    width: int
    height: int
    x: int
    y: int


class ReadTextToolResult(TypedDict):
    all_text: bool
    results: list[TextResult]


class HealthCheckResult(TypedDict):
    ok: bool
    command: str
    command_path: str | None
    scripts_dir: str
    missing_scripts: list[str]
    error_type: str | None
    error_message: str | None


@dataclass(frozen=True, slots=True)
class SingleText:
    """One element's text, returned when ``all_text`` is not requested."""

    result: TextResult


@dataclass(frozen=True, slots=True)
class ManyTexts:
    """Every text element of the window, returned for ``all_text=True``."""

    results: list[TextResult]


TextReadout = Union[SingleText, ManyTexts]
