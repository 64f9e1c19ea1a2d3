"""Interactive Read-Eval-Print Loop."""

from __future__ import annotations

from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory

from jeko import __version__
from jeko.config.settings import JekoSettings
from jeko.console import Output
from jeko.runner import build_interpreter, check_source
from jeko.runtime.errors import JekoRuntimeError, ParseError, ResolveError, ScanError
from jeko.runtime.value import VNil, to_string
from jeko.syntax.ast import Expression, Stmt
from jeko.syntax.tokens import KEYWORDS

HELP_TEXT = """Commands:
  :quit, :q    Exit the REPL
  :help, :h    Show this help
  :env         List global names
  :{           Start multiline input
  :}           Run the multiline input

A bare expression prints its value; the trailing ';' may be omitted."""


class Repl:
    """Line-oriented REPL sharing one interpreter across inputs.

    Errors in one input are reported and the session continues; globals
    defined by earlier inputs stay visible.
    """

    COMMANDS = [":quit", ":q", ":help", ":h", ":env", ":{", ":}"]

    def __init__(self, settings: JekoSettings, *, output: Output | None = None) -> None:
        self.settings = settings
        self.interpreter = build_interpreter(settings, output=output, base_path=Path.cwd())
        self.output = self.interpreter.output
        self.multiline_buffer: list[str] = []
        self.in_multiline = False

    def run(self) -> None:
        self.output.info(f"Jeko {__version__}. Type :help for commands, :quit to exit.")
        session = self._build_prompt()
        while True:
            try:
                line = session.prompt("| " if self.in_multiline else "> ")
            except KeyboardInterrupt:
                if self.in_multiline:
                    self.multiline_buffer = []
                    self.in_multiline = False
                self.output.info("Interrupted. Use :quit to exit.")
                continue
            except EOFError:
                break
            if not self.handle_line(line):
                break
        self.output.info("Bye.")

    def _build_prompt(self) -> PromptSession[str]:
        history_file = self.settings.history_file
        history_file.parent.mkdir(parents=True, exist_ok=True)
        completer = WordCompleter(self._completions)
        return PromptSession(history=FileHistory(str(history_file)), completer=completer)

    def _completions(self) -> list[str]:
        return sorted(KEYWORDS) + self.interpreter.globals.names() + self.COMMANDS

    def handle_line(self, line: str) -> bool:
        """Process one input line. Returns False when the session should end."""
        if self.in_multiline:
            if line.strip() == ":}":
                self.in_multiline = False
                source = "\n".join(self.multiline_buffer)
                self.multiline_buffer = []
                self.evaluate(source)
            else:
                self.multiline_buffer.append(line)
            return True

        source = line.strip()
        if not source:
            return True
        if source.startswith(":"):
            return self._handle_command(source)
        self.evaluate(source)
        return True

    def _handle_command(self, source: str) -> bool:
        match source.split()[0]:
            case ":quit" | ":q":
                return False
            case ":help" | ":h":
                self.output.info(HELP_TEXT)
            case ":env":
                for name in sorted(self.interpreter.globals.values):
                    self.output.info(f"  {name} = {self.interpreter.globals.values[name]}")
            case ":{":
                self.in_multiline = True
                self.multiline_buffer = []
            case ":}":
                self.output.error("Not in multiline mode (use :{ first)")
            case command:
                self.output.error(f"Unknown command: {command}")
        return True

    def evaluate(self, source: str) -> None:
        """Run one input; a lone expression statement echoes its value."""
        try:
            statements = self._check(source)
            if len(statements) == 1 and isinstance(statements[0], Expression):
                value = self.interpreter.evaluate(statements[0].expression)
                if not isinstance(value, VNil):
                    self.output.info(to_string(value))
            else:
                self.interpreter.interpret(statements)
        except (ScanError, ParseError, ResolveError, JekoRuntimeError) as exc:
            self.output.error(str(exc))

    def _check(self, source: str) -> list[Stmt]:
        try:
            statements, locals_ = check_source(source, "<repl>")
        except ParseError:
            if source.rstrip().endswith((";", "}")):
                raise
            statements, locals_ = check_source(source + ";", "<repl>")
        self.interpreter.resolve(locals_)
        return statements
