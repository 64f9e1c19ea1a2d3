"""Typer CLI entrypoints."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Callable

import rich
import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from jeko.cli.repl import Repl
from jeko.config.settings import JekoSettings, load_settings
from jeko.logging_utils import configure_logging
from jeko.runner import build_interpreter, check_source, run_file, run_source
from jeko.runtime.errors import InvariantViolation, JekoRuntimeError, ParseError, ScanError
from jeko.runtime.interpreter import Interpreter

app = typer.Typer(name="jeko", help="Jeko scripting language interpreter", add_completion=False)

EXIT_RUNTIME_ERROR = 1
EXIT_SYNTAX_ERROR = 65
EXIT_FATAL = 70

_stderr = Console(stderr=True, soft_wrap=True)


def _fail(label: str, message: str, code: int) -> typer.Exit:
    _stderr.print(f"[red]{label}:[/red] {escape(message)}", highlight=False)
    return typer.Exit(code=code)


def _execute(
    action: Callable[[Interpreter], None],
    settings: JekoSettings,
    *,
    base_path: Path | None = None,
) -> None:
    try:
        interpreter = build_interpreter(settings, base_path=base_path)
        action(interpreter)
    except (ScanError, ParseError) as exc:
        raise _fail("Syntax error", str(exc), EXIT_SYNTAX_ERROR) from exc
    except JekoRuntimeError as exc:
        raise _fail("Error", str(exc), EXIT_RUNTIME_ERROR) from exc
    except InvariantViolation as exc:
        logger.error("runtime.fatal kind={} message={}", type(exc).__name__, str(exc))
        raise _fail("Fatal", str(exc), EXIT_FATAL) from exc


@app.callback(invoke_without_command=True)
def _default(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        repl()


@app.command()
def run(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable colored output.")] = False,
) -> None:
    """Run a Jeko script."""

    configure_logging()
    settings = load_settings(color=False if no_color else None)
    logger.info("run.start path={}", str(path))
    _execute(lambda interpreter: run_file(path, interpreter), settings, base_path=path.resolve().parent)


@app.command(name="eval")
def eval_(
    code: Annotated[str, typer.Argument(help="Source code to run.")],
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable colored output.")] = False,
) -> None:
    """Run Jeko source given on the command line."""

    configure_logging()
    settings = load_settings(color=False if no_color else None)
    _execute(lambda interpreter: run_source(code, interpreter, "<eval>"), settings, base_path=Path.cwd())


@app.command()
def check(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
) -> None:
    """Scan, parse, and resolve a script without running it."""

    configure_logging()
    try:
        statements, locals_ = check_source(path.read_text(encoding="utf-8"), str(path))
    except (ScanError, ParseError) as exc:
        raise _fail("Syntax error", str(exc), EXIT_SYNTAX_ERROR) from exc
    except InvariantViolation as exc:
        raise _fail("Fatal", str(exc), EXIT_FATAL) from exc
    logger.info("check.done path={} statements={} locals={}", str(path), len(statements), len(locals_))
    rich.print("[green]ok[/green]")


@app.command()
def repl(
    home: Annotated[Path | None, typer.Option("--home", help="State directory for history.")] = None,
) -> None:
    """Start the interactive REPL."""

    configure_logging(profile="repl")
    settings = load_settings(home=str(home) if home is not None else None)
    logger.info("repl.start home={}", str(settings.resolve_home()))
    try:
        Repl(settings).run()
    except InvariantViolation as exc:
        raise _fail("Fatal", str(exc), EXIT_FATAL) from exc
