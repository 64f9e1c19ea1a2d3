import pytest

from jeko.runtime.errors import ScanError
from jeko.syntax.scanner import Scanner, scan


def _types(source: str) -> list[str]:
    return [token.type for token in scan(source)]


def test_scans_variable_declaration() -> None:
    tokens = scan("var x = 1.5;")
    assert [token.type for token in tokens] == ["VAR", "IDENT", "EQUAL", "NUMBER", "SEMICOLON", "EOF"]
    assert tokens[3].literal == 1.5
    assert tokens[1].lexeme == "x"


def test_two_character_operators_win_over_prefixes() -> None:
    assert _types("!= == >= <= ! = > <") == [
        "BANG_EQUAL",
        "EQUAL_EQUAL",
        "GREATER_EQUAL",
        "LESS_EQUAL",
        "BANG",
        "EQUAL",
        "GREATER",
        "LESS",
        "EOF",
    ]


def test_punctuation_and_arithmetic() -> None:
    assert _types("( ) { } [ ] , . ; + - * / %") == [
        "LEFT_PAREN",
        "RIGHT_PAREN",
        "LEFT_BRACE",
        "RIGHT_BRACE",
        "LEFT_BRACKET",
        "RIGHT_BRACKET",
        "COMMA",
        "DOT",
        "SEMICOLON",
        "PLUS",
        "MINUS",
        "STAR",
        "SLASH",
        "PERCENT",
        "EOF",
    ]


def test_keywords_and_identifiers() -> None:
    assert _types("while whiles let cmd wait before bench elif") == [
        "WHILE",
        "IDENT",
        "LET",
        "CMD",
        "WAIT",
        "BEFORE",
        "BENCH",
        "ELIF",
        "EOF",
    ]


def test_comments_are_skipped_and_lines_tracked() -> None:
    tokens = scan("// a comment\n  print 1; // trailing\n")
    assert [token.type for token in tokens] == ["PRINT", "NUMBER", "SEMICOLON", "EOF"]
    assert tokens[0].line == 2
    assert tokens[0].location.column == 3


def test_string_escapes_are_decoded() -> None:
    (token, _eof) = scan('"a\\"b\\n\\\\"')
    assert token.type == "STRING"
    assert token.literal == 'a"b\n\\'


def test_location_carries_file_name() -> None:
    tokens = Scanner("x", "main.jeko").scan_tokens()
    assert str(tokens[0].location) == "main.jeko:1:1"


def test_unterminated_string() -> None:
    with pytest.raises(ScanError, match="Unterminated string"):
        scan('print "abc')


def test_unexpected_character() -> None:
    with pytest.raises(ScanError, match="Unexpected character: '@'") as excinfo:
        scan("var a = 1;\n@")
    assert excinfo.value.location.line == 2
