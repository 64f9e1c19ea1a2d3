import pytest

from jeko.runtime.errors import ParseError
from jeko.syntax.ast import (
    AnonFunction,
    Array,
    Assign,
    Binary,
    Block,
    Call,
    Class,
    CmdFunction,
    Expression,
    Function,
    Get,
    IfShortStmt,
    IfStmt,
    Literal,
    Logical,
    Print,
    Set,
    Var,
    Variable,
    WaitStmt,
    WhileStmt,
)
from jeko.syntax.parser import parse


def test_precedence_of_factor_over_term() -> None:
    (stmt,) = parse("print 1 + 2 * 3;")
    assert isinstance(stmt, Print)
    expr = stmt.expression
    assert isinstance(expr, Binary)
    assert expr.operator.type == "PLUS"
    assert expr.left == Literal(1.0)
    assert isinstance(expr.right, Binary)
    assert expr.right.operator.type == "STAR"


def test_binary_operators_are_left_associative() -> None:
    (stmt,) = parse("1 - 2 - 3;")
    expr = stmt.expression
    assert isinstance(expr.left, Binary)
    assert expr.right == Literal(3.0)


def test_logical_operators_bind_looser_than_equality() -> None:
    (stmt,) = parse("a == 1 or b and c;")
    expr = stmt.expression
    assert isinstance(expr, Logical)
    assert expr.operator.type == "OR"
    assert isinstance(expr.left, Binary)
    assert isinstance(expr.right, Logical)


def test_assignment_targets() -> None:
    (assign,) = parse("a = b = 1;")
    assert isinstance(assign, Expression)
    assert isinstance(assign.expression, Assign)
    assert isinstance(assign.expression.value, Assign)

    (set_stmt,) = parse("point.x = 2;")
    assert isinstance(set_stmt.expression, Set)
    assert isinstance(set_stmt.expression.object, Variable)
    assert set_stmt.expression.name.lexeme == "x"


def test_invalid_assignment_target() -> None:
    with pytest.raises(ParseError, match="Invalid assignment target"):
        parse("1 = 2;")


def test_var_and_let_declarations() -> None:
    first, second = parse("var a = 1; let b;")
    assert isinstance(first, Var) and first.initializer == Literal(1.0)
    assert isinstance(second, Var) and second.initializer is None


def test_call_and_property_chain() -> None:
    (stmt,) = parse("a.b(1, 2).c;")
    expr = stmt.expression
    assert isinstance(expr, Get)
    assert expr.name.lexeme == "c"
    assert isinstance(expr.object, Call)
    assert len(expr.object.arguments) == 2


def test_array_literal() -> None:
    (stmt,) = parse('[1, "two", [], nil];')
    expr = stmt.expression
    assert isinstance(expr, Array)
    assert len(expr.elements) == 4
    assert expr.elements[2] == Array([])


def test_function_and_anonymous_function() -> None:
    declaration, variable = parse("fun add(a, b) { return a + b; } var f = fun (x) { return x; };")
    assert isinstance(declaration, Function)
    assert [param.lexeme for param in declaration.params] == ["a", "b"]
    assert isinstance(variable.initializer, AnonFunction)
    assert [param.lexeme for param in variable.initializer.params] == ["x"]


def test_class_with_superclass_and_methods() -> None:
    (stmt,) = parse("class B < A { init(x) { self.x = x; } fun get() { return self.x; } }")
    assert isinstance(stmt, Class)
    assert stmt.name.lexeme == "B"
    assert isinstance(stmt.superclass, Variable)
    assert [method.name.lexeme for method in stmt.methods] == ["init", "get"]


def test_command_function_declaration() -> None:
    (stmt,) = parse('cmd listing = "ls -la";')
    assert isinstance(stmt, CmdFunction)
    assert stmt.name.lexeme == "listing"
    assert stmt.cmd == "ls -la"


def test_block_if_with_elif_and_else() -> None:
    (stmt,) = parse("if a { print 1; } elif b { print 2; } elif c { print 3; } else { print 4; }")
    assert isinstance(stmt, IfStmt)
    assert isinstance(stmt.then, Block)
    assert len(stmt.elif_branches) == 2
    assert isinstance(stmt.els, Block)


def test_short_if_takes_single_statements() -> None:
    (stmt,) = parse("if a print 1; else print 2;")
    assert isinstance(stmt, IfShortStmt)
    assert isinstance(stmt.then, Print)
    assert isinstance(stmt.els, Print)


def test_while_statement() -> None:
    (stmt,) = parse("while i < 3 i = i + 1;")
    assert isinstance(stmt, WhileStmt)
    assert isinstance(stmt.body, Expression)


def test_wait_with_before_block() -> None:
    (stmt,) = parse("wait 100 { print 1; } before 20 { print 2; }")
    assert isinstance(stmt, WaitStmt)
    assert stmt.time == Literal(100.0)
    assert stmt.before is not None
    assert stmt.before.time == Literal(20.0)


def test_missing_semicolon_reports_location() -> None:
    with pytest.raises(ParseError, match="Expected ';' after value") as excinfo:
        parse("print 1\nprint 2;")
    assert excinfo.value.location.line == 2


def test_expression_ids_are_unique() -> None:
    first, second = parse("a; a;")
    assert first.expression.id != second.expression.id
