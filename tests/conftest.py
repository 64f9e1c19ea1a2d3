from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from jeko.config.settings import JekoSettings
from jeko.runner import build_interpreter, run_source
from jeko.runtime.interpreter import Interpreter


class RecordingOutput:
    """Output that records every side effect instead of writing to a terminal."""

    def __init__(self, lines: list[str] | None = None) -> None:
        self.printed: list[str] = []
        self.prompts: list[str] = []
        self.errors: list[str] = []
        self.infos: list[str] = []
        self.lines = list(lines or [])

    def print(self, text: str) -> None:
        self.printed.append(text)

    def prompt(self, text: str) -> None:
        self.prompts.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)

    def info(self, text: str) -> None:
        self.infos.append(text)

    def read_line(self) -> str:
        return self.lines.pop(0) if self.lines else ""


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path: Path) -> None:
    for name in ("JEKO_HOME", "JEKO_COLOR", "JEKO_PRELUDE", "JEKO_LOG_FILTER", "JEKO_MAX_CALL_DEPTH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def interpreter(output: RecordingOutput, tmp_path: Path) -> Interpreter:
    return build_interpreter(JekoSettings(), output=output, base_path=tmp_path)


@pytest.fixture
def run(interpreter: Interpreter, output: RecordingOutput) -> Callable[[str], list[str]]:
    """Run a program in a fresh interpreter and return the printed lines."""

    def _run(source: str) -> list[str]:
        run_source(source, interpreter)
        return output.printed

    return _run
