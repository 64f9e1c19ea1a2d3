"""Token definitions for the Jeko scanner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jeko.utils.location import Location

KEYWORDS = frozenset(
    {
        "and",
        "before",
        "bench",
        "break",
        "class",
        "cmd",
        "elif",
        "else",
        "error",
        "exit",
        "false",
        "fun",
        "if",
        "import",
        "input",
        "let",
        "nil",
        "or",
        "print",
        "return",
        "true",
        "var",
        "wait",
        "while",
    }
)


@dataclass(frozen=True)
class Token:
    """A lexical token.

    ``type`` is the token kind: an upper-case keyword name (``"WHILE"``), an
    operator name (``"BANG_EQUAL"``), ``"IDENT"``, ``"NUMBER"``, ``"STRING"``
    or ``"EOF"``. ``literal`` holds the decoded value of number and string
    tokens.
    """

    type: str
    lexeme: str
    location: Location
    literal: Any = None

    @property
    def line(self) -> int:
        return self.location.line

    def __str__(self) -> str:
        return f"{self.type}({self.lexeme!r})"
