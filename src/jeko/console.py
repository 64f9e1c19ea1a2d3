"""Console side effects of running programs: colored output and line input."""

from __future__ import annotations

import sys
from typing import Protocol

from rich.console import Console
from rich.text import Text

from jeko.runtime.errors import InputError


class Output(Protocol):
    """Where the interpreter sends program output and reads input from."""

    def print(self, text: str) -> None: ...

    def prompt(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...

    def info(self, text: str) -> None: ...

    def read_line(self) -> str: ...


class RichOutput:
    """Standard streams rendered through ``rich``.

    ``print`` is green, input prompts yellow, errors red and informational
    lines cyan. Colors are dropped automatically when stdout is not a terminal
    or when ``color`` is false.
    """

    def __init__(self, console: Console | None = None, *, color: bool = True) -> None:
        self.console = console or Console(no_color=not color, highlight=False, soft_wrap=True)

    def _write(self, text: str | Text, style: str | None = None) -> None:
        self.console.print(text, style=style, markup=False, highlight=False, emoji=False)

    def print(self, text: str) -> None:
        self._write(text, "green")

    def prompt(self, text: str) -> None:
        self._write(text, "yellow")

    def error(self, text: str) -> None:
        self._write(Text.assemble("Error: ", (text, "red")))

    def info(self, text: str) -> None:
        self._write(text, "cyan")

    def read_line(self) -> str:
        """Block until a line is read from stdin.

        Raises:
            InputError: If stdin is unavailable or the read fails.
        """
        if sys.stdin is None:
            raise InputError("Standard input is not available")
        try:
            return sys.stdin.readline()
        except (OSError, ValueError) as exc:
            raise InputError(f"Failed to read from standard input: {exc}") from exc
