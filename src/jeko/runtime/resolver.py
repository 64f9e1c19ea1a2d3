"""Static resolver: scope validation and variable distance computation.

One forward pass over the statements, run before anything executes. It keeps
a stack of block/function scopes (globals are not tracked: they are looked up
by name at runtime) and records, for each variable reference it can place,
how many scopes separate the reference from its binding.
"""

from __future__ import annotations

from enum import Enum, auto

from loguru import logger

from jeko.runtime.errors import InvariantViolation, ResolveError
from jeko.syntax.ast import (
    AnonFunction,
    Array,
    Assign,
    BenchStmt,
    Binary,
    Block,
    BreakStmt,
    Call,
    Class,
    CmdFunction,
    Errors,
    Exits,
    Expr,
    Expression,
    Function,
    Get,
    Grouping,
    IfShortStmt,
    IfStmt,
    Import,
    Input,
    Literal,
    Logical,
    Print,
    ReturnStmt,
    Set,
    Stmt,
    Unary,
    Var,
    Variable,
    WaitStmt,
    WhileStmt,
)
from jeko.syntax.tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()


class LoopType(Enum):
    NONE = auto()
    LOOP = auto()


class Resolver:
    """Computes the distance map consumed by the interpreter.

    Each scope maps a name to ``False`` while it is declared but its
    initializer is still being resolved, and to ``True`` once it is ready.

    Raises ``ResolveError`` for duplicate declarations in one scope, reads of a
    local inside its own initializer, and ``return``/``break`` outside a
    function/loop. These abort resolution; nothing has executed yet.
    """

    def __init__(self) -> None:
        self.scopes: list[dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_loop = LoopType.NONE
        self.locals: dict[int, int] = {}

    def resolve(self, statements: list[Stmt]) -> dict[int, int]:
        """Resolve a program and return the node id -> distance map."""
        self.resolve_many(statements)
        logger.debug("resolve.done statements={} locals={}", len(statements), len(self.locals))
        return self.locals

    def resolve_many(self, statements: list[Stmt]) -> None:
        for statement in statements:
            self.resolve_stmt(statement)

    # =====================================================================
    # Statements
    # =====================================================================

    def resolve_stmt(self, stmt: Stmt) -> None:
        match stmt:
            case Block(statements):
                self._begin_scope()
                self.resolve_many(statements)
                self._end_scope()
            case Var(name, initializer):
                self._declare(name)
                if initializer is not None:
                    self.resolve_expr(initializer)
                self._define(name)
            case CmdFunction(name, _):
                self._declare(name)
                self._define(name)
            case Function(name, params, body):
                self._declare(name)
                self._define(name)
                self._resolve_function(params, body, FunctionType.FUNCTION)
            case Class(_, superclass, methods):
                self._resolve_class(superclass, methods)
            case Expression(expression) | Print(expression) | Input(expression):
                self.resolve_expr(expression)
            case Errors(expression) | Import(_, expression):
                self.resolve_expr(expression)
            case IfStmt(predicate, then, elif_branches, els):
                self.resolve_expr(predicate)
                self.resolve_stmt(then)
                for elif_predicate, elif_body in elif_branches:
                    self.resolve_expr(elif_predicate)
                    self.resolve_stmt(elif_body)
                if els is not None:
                    self.resolve_stmt(els)
            case IfShortStmt(predicate, then, els):
                self.resolve_expr(predicate)
                self.resolve_stmt(then)
                if els is not None:
                    self.resolve_stmt(els)
            case WhileStmt(condition, body):
                self.resolve_expr(condition)
                enclosing_loop = self.current_loop
                self.current_loop = LoopType.LOOP
                self.resolve_stmt(body)
                self.current_loop = enclosing_loop
            case ReturnStmt(keyword, value):
                if self.current_function == FunctionType.NONE:
                    raise ResolveError("Return statement is not allowed outside of a function", keyword.location)
                if value is not None:
                    self.resolve_expr(value)
            case BreakStmt(keyword):
                if self.current_loop == LoopType.NONE:
                    raise ResolveError("Break statement is not allowed outside of a loop", keyword.location)
            case WaitStmt(time, body, before):
                self.resolve_expr(time)
                self.resolve_stmt(body)
                if before is not None:
                    self.resolve_expr(before.time)
                    self.resolve_stmt(before.body)
            case BenchStmt(_, body):
                self.resolve_stmt(body)
            case Exits():
                pass
            case _:
                raise InvariantViolation(f"Resolver reached a non-statement: {stmt!r}")

    def _resolve_class(self, superclass: Expr | None, methods: list[Stmt]) -> None:
        # The class name is bound globally at runtime; no scope is opened here.
        if superclass is not None:
            self.resolve_expr(superclass)
        for method in methods:
            if not isinstance(method, Function):
                raise InvariantViolation(f"Class member is not a function: {method!r}")
            self._resolve_function(method.params, method.body, FunctionType.FUNCTION)

    def _resolve_function(self, params: list[Token], body: list[Stmt], kind: FunctionType) -> None:
        enclosing_function = self.current_function
        enclosing_loop = self.current_loop
        self.current_function = kind
        # break cannot cross a function boundary
        self.current_loop = LoopType.NONE
        self._begin_scope()
        for param in params:
            self._declare(param)
            self._define(param)
        self.resolve_many(body)
        self._end_scope()
        self.current_function = enclosing_function
        self.current_loop = enclosing_loop

    # =====================================================================
    # Expressions
    # =====================================================================

    def resolve_expr(self, expr: Expr) -> None:
        match expr:
            case Variable(name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    raise ResolveError("Can't read local variable in its own initializer", name.location)
                self._resolve_local(name, expr.id)
            case Assign(name, value):
                self.resolve_expr(value)
                self._resolve_local(name, expr.id)
            case Binary(left, _, right) | Logical(left, _, right):
                self.resolve_expr(left)
                self.resolve_expr(right)
            case Call(callee, _, arguments):
                self.resolve_expr(callee)
                for argument in arguments:
                    self.resolve_expr(argument)
            case Get(obj, _):
                self.resolve_expr(obj)
            case Set(obj, _, value):
                self.resolve_expr(value)
                self.resolve_expr(obj)
            case Grouping(inner) | Unary(_, inner):
                self.resolve_expr(inner)
            case Array(elements):
                for element in elements:
                    self.resolve_expr(element)
            case AnonFunction(_, params, body):
                self._resolve_function(params, body, FunctionType.FUNCTION)
            case Literal():
                pass
            case _:
                raise InvariantViolation(f"Resolver reached a non-expression: {expr!r}")

    # =====================================================================
    # Scopes
    # =====================================================================

    def _begin_scope(self) -> None:
        self.scopes.append({})

    def _end_scope(self) -> None:
        if not self.scopes:
            raise InvariantViolation("Resolver scope stack underflow")
        self.scopes.pop()

    def _declare(self, name: Token) -> None:
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            raise ResolveError(
                f"A variable named '{name.lexeme}' is already in scope", name.location
            )
        scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def _resolve_local(self, name: Token, node_id: int) -> None:
        for skipped, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[node_id] = skipped
                return


def resolve(statements: list[Stmt]) -> dict[int, int]:
    """Run a fresh resolver over ``statements``."""
    return Resolver().resolve(statements)
