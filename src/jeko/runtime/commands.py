"""OS-command backed native functions.

Commands are tokenized by splitting on single spaces and deleting every
double-quote character from each token. This is not shell quoting: a quoted
argument containing spaces is split into several arguments.
"""

from __future__ import annotations

import subprocess

from loguru import logger

from jeko.runtime.errors import CommandError, JekoTypeError
from jeko.runtime.value import VNative, VString, Value, to_type


def split_command(command: str) -> list[str]:
    """Split a command string into argv the way command functions do."""
    return [part.replace('"', "") for part in command.split(" ")]


def run_command(command: str) -> str:
    """Run ``command`` to completion and return its decoded standard output.

    stderr is inherited, not captured. The exit status is ignored.

    Raises:
        CommandError: If the process cannot be spawned or its output is not
            valid UTF-8.
    """
    argv = split_command(command)
    logger.debug("command.spawn argv={}", argv)
    try:
        completed = subprocess.run(argv, stdout=subprocess.PIPE, check=False)
    except (OSError, ValueError) as exc:
        raise CommandError(f"Failed to run command {command!r}: {exc}") from exc
    try:
        return completed.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CommandError(f"Command {command!r} produced non UTF-8 output") from exc


def make_command_function(name: str, command: str) -> VNative:
    """Build the zero-argument native behind a ``cmd name = "...";`` declaration."""

    def _run(_args: list[Value]) -> Value:
        return VString(run_command(command))

    return VNative(name, 0, _run)


def native_exec(args: list[Value]) -> Value:
    """``exec(command)``: run an arbitrary command string."""
    (command,) = args
    if not isinstance(command, VString):
        raise JekoTypeError(f"exec expects a String command, not {to_type(command)}")
    return VString(run_command(command.value))
