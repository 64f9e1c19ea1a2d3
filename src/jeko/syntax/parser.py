"""Recursive descent parser for Jeko.

Grammar:
    program     ::= declaration* EOF

    declaration ::= "class" IDENT ("<" call)? "{" method* "}"
                  | "fun" IDENT "(" params? ")" block
                  | "cmd" IDENT "=" STRING ";"
                  | ("var" | "let") IDENT ("=" expression)? ";"
                  | statement

    method      ::= "fun"? IDENT "(" params? ")" block

    statement   ::= "print" expression ";"
                  | "input" expression ";"
                  | "error" expression ";"
                  | "return" expression? ";"
                  | "break" ";"
                  | "exit" ";"
                  | "import" expression ";"
                  | "if" expression block ("elif" expression block)* ("else" statement)?
                  | "if" expression statement ("else" statement)?
                  | "while" expression statement
                  | "wait" expression block ("before" expression block)?
                  | "bench" block
                  | block
                  | expression ";"

    expression  ::= (call ".")? IDENT "=" expression | or
    or          ::= and ("or" and)*
    and         ::= equality ("and" equality)*
    equality    ::= comparison (("!=" | "==") comparison)*
    comparison  ::= term ((">" | ">=" | "<" | "<=") term)*
    term        ::= factor (("-" | "+") factor)*
    factor      ::= unary (("/" | "*" | "%") unary)*
    unary       ::= ("!" | "-") unary | call
    call        ::= primary ("(" arguments? ")" | "." IDENT)*
    primary     ::= NUMBER | STRING | "true" | "false" | "nil" | IDENT
                  | "(" expression ")" | "[" arguments? "]"
                  | "fun" "(" params? ")" block
"""

from __future__ import annotations

from jeko.runtime.errors import ParseError
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
from jeko.syntax.scanner import scan
from jeko.syntax.tokens import Token

_BINARY_LEVELS: list[tuple[str, ...]] = [
    ("BANG_EQUAL", "EQUAL_EQUAL"),
    ("GREATER", "GREATER_EQUAL", "LESS", "LESS_EQUAL"),
    ("MINUS", "PLUS"),
    ("SLASH", "STAR", "PERCENT"),
]


class Parser:
    """Recursive descent parser over a scanned token list."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def _current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # EOF token

    def _peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def _advance(self) -> Token:
        token = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def _expect(self, token_type: str, message: str) -> Token:
        token = self._current()
        if token.type != token_type:
            found = "end of input" if token.type == "EOF" else repr(token.lexeme)
            raise ParseError(f"{message} (found {found})", token.location)
        return self._advance()

    def _match(self, *token_types: str) -> bool:
        return self._current().type in token_types

    def _consume(self, *token_types: str) -> bool:
        if self._match(*token_types):
            self._advance()
            return True
        return False

    def at_end(self) -> bool:
        return self._current().type == "EOF"

    # =====================================================================
    # Declarations
    # =====================================================================

    def parse(self) -> list[Stmt]:
        """Parse the whole token stream into a list of statements."""
        statements = []
        while not self.at_end():
            statements.append(self.parse_declaration())
        return statements

    def parse_declaration(self) -> Stmt:
        if self._consume("CLASS"):
            return self._class_declaration()
        if self._match("FUN") and self._peek(1).type == "IDENT":
            self._advance()
            return self._function("function")
        if self._consume("CMD"):
            return self._cmd_declaration()
        if self._consume("VAR", "LET"):
            return self._var_declaration()
        return self.parse_statement()

    def _class_declaration(self) -> Class:
        name = self._expect("IDENT", "Expected class name")
        superclass = None
        if self._consume("LESS"):
            superclass = self._call()
        self._expect("LEFT_BRACE", "Expected '{' before class body")
        methods: list[Stmt] = []
        while not self._match("RIGHT_BRACE") and not self.at_end():
            self._consume("FUN")
            methods.append(self._function("method"))
        self._expect("RIGHT_BRACE", "Expected '}' after class body")
        return Class(name, superclass, methods)

    def _function(self, kind: str) -> Function:
        name = self._expect("IDENT", f"Expected {kind} name")
        self._expect("LEFT_PAREN", f"Expected '(' after {kind} name")
        params = self._parameters()
        self._expect("LEFT_BRACE", f"Expected '{{' before {kind} body")
        return Function(name, params, self._block_statements())

    def _parameters(self) -> list[Token]:
        params: list[Token] = []
        if not self._match("RIGHT_PAREN"):
            params.append(self._expect("IDENT", "Expected parameter name"))
            while self._consume("COMMA"):
                params.append(self._expect("IDENT", "Expected parameter name"))
        self._expect("RIGHT_PAREN", "Expected ')' after parameters")
        return params

    def _cmd_declaration(self) -> CmdFunction:
        name = self._expect("IDENT", "Expected command function name")
        self._expect("EQUAL", "Expected '=' after command function name")
        command = self._expect("STRING", "Expected command string")
        self._expect("SEMICOLON", "Expected ';' after command")
        return CmdFunction(name, command.literal)

    def _var_declaration(self) -> Var:
        name = self._expect("IDENT", "Expected variable name")
        initializer = None
        if self._consume("EQUAL"):
            initializer = self.parse_expression()
        self._expect("SEMICOLON", "Expected ';' after variable declaration")
        return Var(name, initializer)

    # =====================================================================
    # Statements
    # =====================================================================

    def parse_statement(self) -> Stmt:
        token = self._current()
        match token.type:
            case "PRINT":
                self._advance()
                return Print(self._terminated_expression("value"))
            case "INPUT":
                self._advance()
                return Input(self._terminated_expression("prompt"))
            case "ERROR":
                self._advance()
                return Errors(self._terminated_expression("error message"))
            case "IMPORT":
                self._advance()
                return Import(token, self._terminated_expression("import path"))
            case "RETURN":
                self._advance()
                value = None
                if not self._match("SEMICOLON"):
                    value = self.parse_expression()
                self._expect("SEMICOLON", "Expected ';' after return value")
                return ReturnStmt(token, value)
            case "BREAK":
                self._advance()
                self._expect("SEMICOLON", "Expected ';' after 'break'")
                return BreakStmt(token)
            case "EXIT":
                self._advance()
                self._expect("SEMICOLON", "Expected ';' after 'exit'")
                return Exits(token)
            case "IF":
                self._advance()
                return self._if_statement()
            case "WHILE":
                self._advance()
                condition = self.parse_expression()
                return WhileStmt(condition, self.parse_statement())
            case "WAIT":
                self._advance()
                return self._wait_statement()
            case "BENCH":
                self._advance()
                return BenchStmt(token, self._block())
            case "LEFT_BRACE":
                return self._block()
            case _:
                return Expression(self._terminated_expression("expression"))

    def _terminated_expression(self, what: str) -> Expr:
        expr = self.parse_expression()
        self._expect("SEMICOLON", f"Expected ';' after {what}")
        return expr

    def _block(self) -> Block:
        self._expect("LEFT_BRACE", "Expected '{'")
        return Block(self._block_statements())

    def _block_statements(self) -> list[Stmt]:
        """Parse declarations up to the closing brace (opening brace already consumed)."""
        statements = []
        while not self._match("RIGHT_BRACE") and not self.at_end():
            statements.append(self.parse_declaration())
        self._expect("RIGHT_BRACE", "Expected '}' after block")
        return statements

    def _if_statement(self) -> Stmt:
        predicate = self.parse_expression()
        if not self._match("LEFT_BRACE"):
            then = self.parse_statement()
            els = self.parse_statement() if self._consume("ELSE") else None
            return IfShortStmt(predicate, then, els)

        then_block = self._block()
        elif_branches: list[tuple[Expr, Stmt]] = []
        while self._consume("ELIF"):
            elif_predicate = self.parse_expression()
            elif_branches.append((elif_predicate, self._block()))
        els = self.parse_statement() if self._consume("ELSE") else None
        return IfStmt(predicate, then_block, elif_branches, els)

    def _wait_statement(self) -> WaitStmt:
        time = self.parse_expression()
        body = self._block()
        before = None
        if self._consume("BEFORE"):
            before_time = self.parse_expression()
            before = BeforeBlock(before_time, self._block())
        return WaitStmt(time, body, before)

    # =====================================================================
    # Expressions
    # =====================================================================

    def parse_expression(self) -> Expr:
        return self._assignment()

    def _assignment(self) -> Expr:
        expr = self._or()
        if self._match("EQUAL"):
            equals = self._advance()
            value = self._assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            raise ParseError("Invalid assignment target", equals.location)
        return expr

    def _or(self) -> Expr:
        expr = self._and()
        while self._match("OR"):
            operator = self._advance()
            expr = Logical(expr, operator, self._and())
        return expr

    def _and(self) -> Expr:
        expr = self._binary(0)
        while self._match("AND"):
            operator = self._advance()
            expr = Logical(expr, operator, self._binary(0))
        return expr

    def _binary(self, level: int) -> Expr:
        """Left-associative binary operators, one precedence level per call."""
        if level == len(_BINARY_LEVELS):
            return self._unary()
        expr = self._binary(level + 1)
        while self._match(*_BINARY_LEVELS[level]):
            operator = self._advance()
            expr = Binary(expr, operator, self._binary(level + 1))
        return expr

    def _unary(self) -> Expr:
        if self._match("BANG", "MINUS"):
            operator = self._advance()
            return Unary(operator, self._unary())
        return self._call()

    def _call(self) -> Expr:
        expr = self._primary()
        while True:
            if self._match("LEFT_PAREN"):
                paren = self._advance()
                arguments = self._arguments("RIGHT_PAREN")
                self._expect("RIGHT_PAREN", "Expected ')' after arguments")
                expr = Call(expr, paren, arguments)
            elif self._consume("DOT"):
                name = self._expect("IDENT", "Expected property name after '.'")
                expr = Get(expr, name)
            else:
                return expr

    def _arguments(self, closing: str) -> list[Expr]:
        arguments: list[Expr] = []
        if not self._match(closing):
            arguments.append(self.parse_expression())
            while self._consume("COMMA"):
                arguments.append(self.parse_expression())
        return arguments

    def _primary(self) -> Expr:
        token = self._current()
        match token.type:
            case "NUMBER" | "STRING":
                self._advance()
                return Literal(token.literal)
            case "TRUE":
                self._advance()
                return Literal(True)
            case "FALSE":
                self._advance()
                return Literal(False)
            case "NIL":
                self._advance()
                return Literal(None)
            case "IDENT":
                self._advance()
                return Variable(token)
            case "LEFT_PAREN":
                self._advance()
                expr = self.parse_expression()
                self._expect("RIGHT_PAREN", "Expected ')' after expression")
                return Grouping(expr)
            case "LEFT_BRACKET":
                self._advance()
                elements = self._arguments("RIGHT_BRACKET")
                self._expect("RIGHT_BRACKET", "Expected ']' after array elements")
                return Array(elements)
            case "FUN":
                self._advance()
                paren = self._expect("LEFT_PAREN", "Expected '(' after 'fun'")
                params = self._parameters()
                self._expect("LEFT_BRACE", "Expected '{' before function body")
                return AnonFunction(paren, params, self._block_statements())
            case _:
                found = "end of input" if token.type == "EOF" else repr(token.lexeme)
                raise ParseError(f"Expected expression (found {found})", token.location)


def parse(source: str, filename: str | None = None) -> list[Stmt]:
    """Scan and parse source text into statements."""
    return Parser(scan(source, filename)).parse()
