"""Program pipeline: scan, parse, resolve, then interpret."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from jeko.console import Output, RichOutput
from jeko.config.settings import JekoSettings
from jeko.runtime.environment import Environment
from jeko.runtime.errors import JekoRuntimeError
from jeko.runtime.interpreter import Interpreter
from jeko.runtime.natives import register_natives
from jeko.runtime.resolver import Resolver
from jeko.syntax.ast import Stmt
from jeko.syntax.parser import parse

# Host frames one script call can use: evaluate, call, call_function, interpret,
# execute and the nested expressions of its body.
FRAMES_PER_CALL = 12
RECURSION_HEADROOM = 1000


def build_interpreter(
    settings: JekoSettings | None = None,
    *,
    output: Output | None = None,
    base_path: Path | None = None,
) -> Interpreter:
    """Create an interpreter whose global scope holds the native library.

    The configured prelude, if any, runs before this returns.
    """
    settings = settings or JekoSettings()
    _ensure_recursion_limit(settings.max_call_depth)
    environment = Environment()
    register_natives(environment)
    interpreter = Interpreter(
        environment,
        output if output is not None else RichOutput(color=settings.color),
        base_path=base_path,
        max_call_depth=settings.max_call_depth,
    )
    prelude = settings.resolve_prelude()
    if prelude is not None:
        logger.debug("prelude.load path={}", str(prelude))
        run_file(prelude, interpreter)
    return interpreter


def _ensure_recursion_limit(max_call_depth: int) -> None:
    needed = max_call_depth * FRAMES_PER_CALL + RECURSION_HEADROOM
    if sys.getrecursionlimit() < needed:
        logger.debug("recursion.limit old={} new={}", sys.getrecursionlimit(), needed)
        sys.setrecursionlimit(needed)


def check_source(source: str, filename: str | None = None) -> tuple[list[Stmt], dict[int, int]]:
    """Scan, parse, and resolve without executing anything."""
    statements = parse(source, filename)
    return statements, Resolver().resolve(statements)


def run_source(source: str, interpreter: Interpreter, filename: str | None = None) -> None:
    """Run a complete program.

    Resolution covers the whole program before the first statement executes,
    so static errors abort with no side effects.
    """
    statements, locals_ = check_source(source, filename)
    interpreter.resolve(locals_)
    logger.debug("program.run file={} statements={}", filename or "<string>", len(statements))
    interpreter.interpret(statements)


def run_file(path: Path, interpreter: Interpreter) -> None:
    path = path.resolve()
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise JekoRuntimeError(f"cannot read '{path}': {exc.strerror}") from exc
    interpreter.imported.add(path)
    enclosing_base = interpreter.base_path
    interpreter.base_path = path.parent
    try:
        run_source(source, interpreter, str(path))
    finally:
        interpreter.base_path = enclosing_base
