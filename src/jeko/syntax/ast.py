"""Syntax tree for Jeko programs.

Expression nodes carry an ``id`` drawn from a process-wide counter. The
resolver keys its distance map by these ids, so ids stay unique across every
source parsed in one process (REPL lines, imported files).
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Union

from jeko.syntax.tokens import Token

_ids = itertools.count()


def next_id() -> int:
    """Allocate a fresh expression id."""
    return next(_ids)


class Expr:
    """Base class for expressions."""

    id: int

    def get_id(self) -> int:
        return self.id


class Stmt:
    """Base class for statements."""

    pass


# =============================================================================
# Expressions
# =============================================================================


@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    paren: Token
    arguments: list[Expr]
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Get(Expr):
    """Property access: ``object.name``."""

    object: Expr
    name: Token
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Grouping(Expr):
    expression: Expr
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Literal(Expr):
    """Literal value: ``None``, ``bool``, ``float`` or ``str``."""

    value: Any
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Set(Expr):
    """Property assignment: ``object.name = value``."""

    object: Expr
    name: Token
    value: Expr
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Variable(Expr):
    name: Token
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class Array(Expr):
    elements: list[Expr]
    id: int = field(default_factory=next_id, compare=False)


@dataclass(frozen=True)
class AnonFunction(Expr):
    """Function expression: ``fun (a, b) { ... }``."""

    paren: Token
    params: list[Token]
    body: list[Stmt]
    id: int = field(default_factory=next_id, compare=False)


# =============================================================================
# Statements
# =============================================================================


@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Input(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Errors(Stmt):
    """``error expr;`` -- report and terminate the process."""

    expression: Expr


@dataclass(frozen=True)
class Var(Stmt):
    name: Token
    initializer: Expr | None = None


@dataclass(frozen=True)
class Block(Stmt):
    statements: list[Stmt]


@dataclass(frozen=True)
class Class(Stmt):
    name: Token
    superclass: Expr | None
    methods: list[Stmt]


@dataclass(frozen=True)
class IfStmt(Stmt):
    """Braced ``if`` with optional ``elif`` chain and ``else``."""

    predicate: Expr
    then: Stmt
    elif_branches: list[tuple[Expr, Stmt]] = field(default_factory=list)
    els: Stmt | None = None


@dataclass(frozen=True)
class IfShortStmt(Stmt):
    """Single-statement ``if``: ``if (x) print x; else print 0;``."""

    predicate: Expr
    then: Stmt
    els: Stmt | None = None


@dataclass(frozen=True)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True)
class Function(Stmt):
    name: Token
    params: list[Token]
    body: list[Stmt]


@dataclass(frozen=True)
class CmdFunction(Stmt):
    """``cmd name = "program args";`` -- zero-argument OS command function."""

    name: Token
    cmd: str


@dataclass(frozen=True)
class ReturnStmt(Stmt):
    keyword: Token
    value: Expr | None = None


@dataclass(frozen=True)
class BreakStmt(Stmt):
    keyword: Token


@dataclass(frozen=True)
class BeforeBlock:
    """``before T { ... }`` clause of a wait statement."""

    time: Expr
    body: Stmt


@dataclass(frozen=True)
class WaitStmt(Stmt):
    """``wait T { ... }`` -- run the body after T milliseconds."""

    time: Expr
    body: Stmt
    before: BeforeBlock | None = None


@dataclass(frozen=True)
class BenchStmt(Stmt):
    keyword: Token
    body: Stmt


@dataclass(frozen=True)
class Exits(Stmt):
    keyword: Token


@dataclass(frozen=True)
class Import(Stmt):
    keyword: Token
    expression: Expr


ExprNode = Union[
    Assign,
    Binary,
    Call,
    Get,
    Grouping,
    Literal,
    Logical,
    Set,
    Unary,
    Variable,
    Array,
    AnonFunction,
]

StmtNode = Union[
    Expression,
    Print,
    Input,
    Errors,
    Var,
    Block,
    Class,
    IfStmt,
    IfShortStmt,
    WhileStmt,
    Function,
    CmdFunction,
    ReturnStmt,
    BreakStmt,
    WaitStmt,
    BenchStmt,
    Exits,
    Import,
]
