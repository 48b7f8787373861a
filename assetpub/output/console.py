"""Console output abstraction.

Progress and failures are the run's log. Services write to a
``ConsoleProtocol`` and never to stdout directly; the CLI picks the backend:

- ``RichConsole`` for an interactive terminal,
- ``ActionsConsole`` inside GitHub Actions, which also emits workflow
  commands so warnings and errors become run annotations,
- ``MockConsole`` in tests.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "ActionsConsole",
    "MockConsole",
    "OutputRecord",
    "console_for_env",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Styled, line-oriented output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None:
        """Start a new section of the log."""
        ...

    def newline(self) -> None: ...


_RICH_STYLES = {
    Style.DEFAULT: "",
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
}


class RichConsole:
    """Terminal output through Rich."""

    def __init__(self) -> None:
        from rich.console import Console

        # Asset names may contain brackets; never treat them as markup.
        self._console = Console(highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = _RICH_STYLES.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def _tagged(self, tag: str, tag_style: str, message: str) -> None:
        from rich.text import Text

        self._console.print(Text.assemble((tag, tag_style), " ", message))

    def success(self, message: str) -> None:
        self._tagged("OK", "green", message)

    def error(self, message: str) -> None:
        self._tagged("error:", "red bold", message)

    def warning(self, message: str) -> None:
        self._tagged("warning:", "yellow", message)

    def info(self, message: str) -> None:
        self._tagged("info:", "cyan", message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="blue bold", markup=False)

    def newline(self) -> None:
        self._console.print()


class WriteLine(Protocol):
    def __call__(self, line: str, /) -> None: ...


def _stdout_line(line: str) -> None:
    print(line, flush=True)


def _escape_command_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsConsole:
    """Plain output with GitHub Actions workflow commands.

    Headers open a collapsible ``::group::`` that the next header (or
    :meth:`close`) ends.
    """

    def __init__(self, write: WriteLine | None = None) -> None:
        self._write: WriteLine = write or _stdout_line
        self._group_open = False

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._write(message)

    def success(self, message: str) -> None:
        self._write(f"OK {message}")

    def error(self, message: str) -> None:
        self._write(f"::error::{_escape_command_data(message)}")

    def warning(self, message: str) -> None:
        self._write(f"::warning::{_escape_command_data(message)}")

    def info(self, message: str) -> None:
        self._write(message)

    def header(self, message: str) -> None:
        self.close()
        self._write(f"::group::{_escape_command_data(message)}")
        self._group_open = True

    def newline(self) -> None:
        self._write("")

    def close(self) -> None:
        if self._group_open:
            self._write("::endgroup::")
            self._group_open = False


def console_for_env(env: Mapping[str, str]) -> RichConsole | ActionsConsole:
    """Pick the backend matching the host."""
    if env.get("GITHUB_ACTIONS") == "true":
        return ActionsConsole()
    return RichConsole()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for assertions."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
