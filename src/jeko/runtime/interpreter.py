"""Tree-walking interpreter for Jeko.

Statements execute against ``Interpreter.environment``, the current scope.
Variable reads and writes use the distance map produced by the resolver to
jump straight to the right scope; references the resolver did not place are
looked up by name along the chain.

Executing a statement returns an outcome instead of writing to a shared
return slot: ``Normal`` to continue with the next statement, ``Returned`` to
unwind to the enclosing call, ``Broke`` to leave the innermost loop. Every
statement list stops at the first outcome that is not ``Normal``.
"""

from __future__ import annotations

import math
import operator as op
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Union

from loguru import logger

from jeko.console import Output, RichOutput
from jeko.runtime.commands import make_command_function
from jeko.runtime.environment import Environment
from jeko.runtime.errors import (
    ClassDefinitionError,
    InvariantViolation,
    JekoRuntimeError,
    JekoTypeError,
    UnboundVariable,
)
from jeko.runtime.resolver import resolve
from jeko.runtime.value import (
    FALSE,
    NIL,
    TRUE,
    VArray,
    VClass,
    VFunction,
    VInstance,
    VNative,
    VNumber,
    VString,
    Value,
    from_literal,
    is_truthy,
    to_string,
    to_type,
    values_equal,
)
from jeko.syntax.ast import (
    AnonFunction,
    Array,
    Assign,
    BeforeBlock,
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
from jeko.syntax.parser import parse
from jeko.syntax.tokens import Token


@dataclass(frozen=True)
class Normal:
    """Statement completed; continue with the next one."""


@dataclass(frozen=True)
class Returned:
    """A ``return`` executed; unwind to the function call boundary."""

    value: Value


@dataclass(frozen=True)
class Broke:
    """A ``break`` executed; leave the innermost loop."""


Outcome = Union[Normal, Returned, Broke]

NORMAL = Normal()
BROKE = Broke()

MAX_CALL_DEPTH = 1000

_ARITHMETIC: dict[str, Callable[[float, float], float]] = {
    "MINUS": op.sub,
    "STAR": op.mul,
}
_COMPARISON: dict[str, Callable[[object, object], bool]] = {
    "GREATER": op.gt,
    "GREATER_EQUAL": op.ge,
    "LESS": op.lt,
    "LESS_EQUAL": op.le,
}


class Interpreter:
    """Executes resolved statements.

    Args:
        environment: Global scope to run in; a fresh one is created if omitted.
            Natives are registered into it by the caller.
        output: Console side effects; defaults to colored standard streams.
        base_path: Directory that relative ``import`` paths resolve against.
        max_call_depth: Nested script calls allowed before "Stack overflow".
    """

    def __init__(
        self,
        environment: Environment | None = None,
        output: Output | None = None,
        *,
        base_path: Path | None = None,
        max_call_depth: int = MAX_CALL_DEPTH,
    ) -> None:
        self.globals = environment if environment is not None else Environment()
        self.environment = self.globals
        self.locals: dict[int, int] = {}
        self.output: Output = output if output is not None else RichOutput()
        self.base_path = base_path
        self.imported: set[Path] = set()
        self.max_call_depth = max_call_depth
        self.call_depth = 0

    def resolve(self, locals_: dict[int, int]) -> None:
        """Merge a distance map produced by the resolver."""
        self.locals.update(locals_)

    @contextmanager
    def _scope(self, environment: Environment) -> Iterator[Environment]:
        """Make ``environment`` current, restoring the previous one on every exit path."""
        previous = self.environment
        self.environment = environment
        try:
            yield environment
        finally:
            self.environment = previous

    # =====================================================================
    # Statements
    # =====================================================================

    def interpret(self, statements: list[Stmt]) -> Outcome:
        """Execute statements in order, stopping at the first non-normal outcome."""
        for statement in statements:
            outcome = self.execute(statement)
            if not isinstance(outcome, Normal):
                return outcome
        return NORMAL

    def execute(self, stmt: Stmt) -> Outcome:
        match stmt:
            case Expression(expression):
                self.evaluate(expression)
            case Print(expression):
                self.output.print(to_string(self.evaluate(expression)))
            case Input(expression):
                self.output.prompt(to_string(self.evaluate(expression)))
                # The line is read to block for the user, then discarded.
                self.output.read_line()
            case Errors(expression):
                self.output.error(to_string(self.evaluate(expression)))
                raise SystemExit(1)
            case Var(name, initializer):
                value = self.evaluate(initializer) if initializer is not None else NIL
                self.environment.define(name.lexeme, value)
            case Block(statements):
                with self._scope(self.environment.enclose()):
                    return self.interpret(statements)
            case Class(name, superclass, methods):
                self._execute_class(name, superclass, methods)
            case IfStmt(predicate, then, elif_branches, els):
                branches = [(predicate, then), *elif_branches]
                return self._execute_if(branches, els)
            case IfShortStmt(predicate, then, els):
                return self._execute_if([(predicate, then)], els)
            case WhileStmt(condition, body):
                return self._execute_while(condition, body)
            case Function(name, params, body):
                function = VFunction(name.lexeme, params, body, self.environment)
                self.environment.define(name.lexeme, function)
            case CmdFunction(name, command):
                self.environment.define(name.lexeme, make_command_function(name.lexeme, command))
            case ReturnStmt(_, value):
                return Returned(self.evaluate(value) if value is not None else NIL)
            case BreakStmt():
                return BROKE
            case WaitStmt(delay, body, before):
                return self._execute_wait(delay, body, before)
            case BenchStmt(_, body):
                started = time.perf_counter()
                outcome = self.execute(body)
                elapsed = (time.perf_counter() - started) * 1000
                self.output.info(f"bench: {elapsed:.3f} ms")
                return outcome
            case Exits():
                raise SystemExit(0)
            case Import(keyword, expression):
                self._execute_import(keyword, self.evaluate(expression))
            case _:
                raise InvariantViolation(f"Interpreter reached a non-statement: {stmt!r}")
        return NORMAL

    def _execute_class(self, name: Token, superclass_expr: Expr | None, members: list[Stmt]) -> None:
        superclass: VClass | None = None
        if superclass_expr is not None:
            value = self.evaluate(superclass_expr)
            if not isinstance(value, VClass):
                raise JekoTypeError(f"Superclass must be a class, not {to_type(value)}")
            superclass = value

        # Placeholder so the name is bound while the methods are built.
        self.environment.define(name.lexeme, NIL)

        with self._scope(self.environment.enclose()) as method_env:
            if superclass is not None:
                method_env.define("super", superclass)
            methods: dict[str, VFunction] = {}
            for member in members:
                if not isinstance(member, Function):
                    raise InvariantViolation(f"Class member is not a function: {member!r}")
                methods[member.name.lexeme] = VFunction(
                    member.name.lexeme, member.params, member.body, method_env
                )
            klass = VClass(name.lexeme, methods, superclass)
            if not method_env.assign_global(name.lexeme, klass):
                raise ClassDefinitionError(name.lexeme)

        logger.debug(
            "class.define name={} superclass={} methods={}",
            name.lexeme,
            superclass.name if superclass is not None else "<none>",
            ",".join(methods),
        )

    def _execute_if(self, branches: list[tuple[Expr, Stmt]], els: Stmt | None) -> Outcome:
        for predicate, body in branches:
            if is_truthy(self.evaluate(predicate)):
                return self.execute(body)
        if els is not None:
            return self.execute(els)
        return NORMAL

    def _execute_while(self, condition: Expr, body: Stmt) -> Outcome:
        while is_truthy(self.evaluate(condition)):
            outcome = self.execute(body)
            if isinstance(outcome, Broke):
                break
            if isinstance(outcome, Returned):
                return outcome
        return NORMAL

    def _execute_wait(self, delay: Expr, body: Stmt, before: BeforeBlock | None) -> Outcome:
        total = self._milliseconds(self.evaluate(delay), "wait")
        if before is not None:
            lead = self._milliseconds(self.evaluate(before.time), "before")
            first = max(total - lead, 0.0)
            time.sleep(first / 1000)
            outcome = self.execute(before.body)
            if not isinstance(outcome, Normal):
                return outcome
            time.sleep((total - first) / 1000)
        else:
            time.sleep(total / 1000)
        return self.execute(body)

    @staticmethod
    def _milliseconds(value: Value, what: str) -> float:
        if not isinstance(value, VNumber):
            raise JekoTypeError(f"{what} time must be a Number, not {to_type(value)}")
        if value.value < 0 or math.isnan(value.value):
            raise JekoRuntimeError(f"{what} time must not be negative, got {value}")
        return value.value

    def _execute_import(self, keyword: Token, target: Value) -> None:
        if not isinstance(target, VString):
            raise JekoTypeError(f"import expects a String path, not {to_type(target)}")
        path = Path(target.value).expanduser()
        if not path.is_absolute():
            path = (self.base_path or Path.cwd()) / path
        path = path.resolve()
        if path in self.imported:
            return
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise JekoRuntimeError(f"{keyword.location}: cannot import '{target.value}': {exc.strerror}") from exc

        logger.debug("import.load path={}", str(path))
        statements = parse(source, str(path))
        self.resolve(resolve(statements))
        # Only a file that scanned, parsed and resolved counts as imported.
        self.imported.add(path)

        enclosing_base = self.base_path
        self.base_path = path.parent
        try:
            with self._scope(self.globals):
                self.interpret(statements)
        finally:
            self.base_path = enclosing_base

    # =====================================================================
    # Expressions
    # =====================================================================

    def evaluate(self, expr: Expr) -> Value:
        match expr:
            case Literal(value):
                return from_literal(value)
            case Grouping(inner):
                return self.evaluate(inner)
            case Variable(name):
                return self._look_up(name, expr)
            case Assign(name, value_expr):
                value = self.evaluate(value_expr)
                distance = self.locals.get(expr.id)
                if distance is not None:
                    self.environment.assign_at(distance, name.lexeme, value)
                else:
                    self.environment.assign(name.lexeme, value)
                return value
            case Unary(operator, right):
                return self._unary(operator, self.evaluate(right))
            case Binary(left, operator, right):
                return self._binary(operator, self.evaluate(left), self.evaluate(right))
            case Logical(left, operator, right):
                value = self.evaluate(left)
                if operator.type == "OR":
                    if is_truthy(value):
                        return value
                elif not is_truthy(value):
                    return value
                return self.evaluate(right)
            case Call(callee, _, arguments):
                function = self.evaluate(callee)
                args = [self.evaluate(argument) for argument in arguments]
                return self.call(function, args)
            case Get(obj, name):
                via_super = isinstance(obj, Variable) and obj.name.lexeme == "super"
                return self._get_property(self.evaluate(obj), name, bind_self=via_super)
            case Set(obj, name, value_expr):
                target = self.evaluate(obj)
                if not isinstance(target, VInstance):
                    raise JekoTypeError(f"Only instances have fields, not {to_type(target)}")
                value = self.evaluate(value_expr)
                target.fields[name.lexeme] = value
                return value
            case Array(elements):
                return VArray([self.evaluate(element) for element in elements])
            case AnonFunction(_, params, body):
                return VFunction("anonymous", params, body, self.environment)
            case _:
                raise InvariantViolation(f"Interpreter reached a non-expression: {expr!r}")

    def _look_up(self, name: Token, expr: Expr) -> Value:
        distance = self.locals.get(expr.id)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.environment.get(name.lexeme)

    def _unary(self, operator: Token, right: Value) -> Value:
        if operator.type == "BANG":
            return FALSE if is_truthy(right) else TRUE
        if isinstance(right, VNumber):
            return VNumber(-right.value)
        raise JekoTypeError(f"Operator '-' is not supported for {to_type(right)}")

    def _binary(self, operator: Token, left: Value, right: Value) -> Value:
        kind = operator.type
        if kind == "EQUAL_EQUAL":
            return TRUE if values_equal(left, right) else FALSE
        if kind == "BANG_EQUAL":
            return FALSE if values_equal(left, right) else TRUE

        match (left, right):
            case (VNumber(a), VNumber(b)):
                if kind == "PLUS":
                    return VNumber(a + b)
                if kind in _ARITHMETIC:
                    return VNumber(_ARITHMETIC[kind](a, b))
                if kind in ("SLASH", "PERCENT"):
                    if b == 0:
                        raise JekoRuntimeError("Division by zero")
                    return VNumber(a / b if kind == "SLASH" else math.fmod(a, b))
                if kind in _COMPARISON:
                    return TRUE if _COMPARISON[kind](a, b) else FALSE
            case (VString(a), VString(b)) if kind in _COMPARISON:
                return TRUE if _COMPARISON[kind](a, b) else FALSE
            case (VString(), _) | (_, VString()) if kind == "PLUS":
                return VString(to_string(left) + to_string(right))

        raise JekoTypeError(
            f"Operator '{operator.lexeme}' is not supported between {to_type(left)} and {to_type(right)}"
        )

    def _get_property(self, target: Value, name: Token, *, bind_self: bool = False) -> Value:
        match target:
            case VInstance(klass, fields):
                if name.lexeme in fields:
                    return fields[name.lexeme]
                method = klass.find_method(name.lexeme)
                if method is not None:
                    return method.bind(target)
                raise JekoRuntimeError(f"Undefined property '{name.lexeme}' on {target}")
            case VClass():
                method = target.find_method(name.lexeme)
                if method is None:
                    raise JekoRuntimeError(f"Undefined method '{name.lexeme}' on {target}")
                # Only super.method runs on the caller's self; Class.method stays unbound.
                receiver = self._current_self() if bind_self else None
                return method.bind(receiver) if receiver is not None else method
            case _:
                raise JekoTypeError(f"Only instances and classes have properties, not {to_type(target)}")

    def _current_self(self) -> VInstance | None:
        try:
            receiver = self.environment.get("self")
        except UnboundVariable:
            return None
        return receiver if isinstance(receiver, VInstance) else None

    # =====================================================================
    # Calls
    # =====================================================================

    def call(self, callee: Value, args: list[Value]) -> Value:
        """Invoke a function, native, or class with already evaluated arguments."""
        if not isinstance(callee, (VFunction, VNative, VClass)):
            raise JekoTypeError(f"Can only call functions and classes, not {to_type(callee)}")
        if len(args) != callee.arity:
            raise JekoRuntimeError(
                f"{callee} expected {callee.arity} arguments but got {len(args)}"
            )
        match callee:
            case VNative():
                return callee.fun(args)
            case VFunction():
                return self.call_function(callee, args)
            case VClass():
                instance = VInstance(callee)
                initializer = callee.find_method("init")
                if initializer is not None:
                    self.call_function(initializer.bind(instance), args)
                return instance

    def call_function(self, function: VFunction, args: list[Value]) -> Value:
        environment = function.closure.enclose()
        if function.bound_self is not None:
            environment.define("self", function.bound_self)
        for param, arg in zip(function.params, args):
            environment.define(param.lexeme, arg)
        if self.call_depth >= self.max_call_depth:
            raise JekoRuntimeError("Stack overflow")
        self.call_depth += 1
        try:
            with self._scope(environment):
                outcome = self.interpret(function.body)
        except RecursionError:
            # Deeply nested expressions can exhaust the host stack below the call limit.
            raise JekoRuntimeError("Stack overflow") from None
        finally:
            self.call_depth -= 1
        if isinstance(outcome, Returned):
            return outcome.value
        return NIL
