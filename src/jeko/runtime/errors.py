"""Error types for the Jeko front end and runtime.

Two tiers exist. ``JekoRuntimeError`` and its subclasses are user/program
errors: they unwind the statement chain and are reported by whoever runs the
program. ``InvariantViolation`` and its subclasses mean an earlier phase is
broken or the host environment failed; callers are expected to abort.
"""

from jeko.utils.location import Location


class JekoError(Exception):
    """Base class for every error raised by Jeko."""


class ScanError(JekoError):
    """Unexpected character or unterminated literal in source text."""

    def __init__(self, message: str, location: Location):
        super().__init__(f"{location}: {message}")
        self.location = location


class ParseError(JekoError):
    """Token stream does not match the grammar."""

    def __init__(self, message: str, location: Location):
        super().__init__(f"{location}: {message}")
        self.location = location


class JekoRuntimeError(JekoError):
    """Recoverable program error, propagated to the top-level caller."""


class UnboundVariable(JekoRuntimeError):
    """Name not bound in any scope of the chain."""

    def __init__(self, name: str):
        super().__init__(f"Undefined variable '{name}'")
        self.name = name


class JekoTypeError(JekoRuntimeError):
    """Operation applied to a value of the wrong runtime type."""


class ClassDefinitionError(JekoRuntimeError):
    """A class value could not be bound to its global name."""

    def __init__(self, name: str):
        super().__init__(f"Class definition failed for {name}")
        self.name = name


class InvariantViolation(JekoError):
    """Unrecoverable condition: a phase bug or a failed host operation."""


class ResolveError(InvariantViolation):
    """Static scoping or placement rule broken; raised before execution."""

    def __init__(self, message: str, location: Location | None = None):
        if location is not None:
            message = f"{location}: {message}"
        super().__init__(message)
        self.location = location


class ScopeMismatch(InvariantViolation):
    """A resolved distance does not lead to a scope holding the name."""

    def __init__(self, name: str, distance: int):
        super().__init__(f"Variable '{name}' not found at scope distance {distance}")
        self.name = name
        self.distance = distance


class CommandError(InvariantViolation):
    """Native OS command could not be spawned or its output decoded."""


class InputError(InvariantViolation):
    """A line could not be read from standard input."""
