"""Scanner for Jeko source text.

Regex-driven tokenizer: one master pattern built from ``TOKEN_PATTERNS`` is
matched at the current position, whitespace and ``//`` comments are dropped,
identifiers matching a keyword become keyword tokens.
"""

from __future__ import annotations

import re

from jeko.runtime.errors import ScanError
from jeko.syntax.tokens import KEYWORDS, Token
from jeko.utils.location import Location

_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "r": "\r"}


class Scanner:
    """Turns source text into a list of tokens terminated by ``EOF``."""

    TOKEN_PATTERNS = [
        ("NEWLINE", r"\n|\r\n?"),
        ("WHITESPACE", r"[ \t]+"),
        ("COMMENT", r"//[^\n]*"),
        # Multi-character operators before their single-character prefixes
        ("BANG_EQUAL", r"!="),
        ("EQUAL_EQUAL", r"=="),
        ("GREATER_EQUAL", r">="),
        ("LESS_EQUAL", r"<="),
        ("BANG", r"!"),
        ("EQUAL", r"="),
        ("GREATER", r">"),
        ("LESS", r"<"),
        ("PLUS", r"\+"),
        ("MINUS", r"-"),
        ("STAR", r"\*"),
        ("SLASH", r"/"),
        ("PERCENT", r"%"),
        ("DOT", r"\."),
        ("COMMA", r","),
        ("SEMICOLON", r";"),
        ("LEFT_PAREN", r"\("),
        ("RIGHT_PAREN", r"\)"),
        ("LEFT_BRACE", r"\{"),
        ("RIGHT_BRACE", r"\}"),
        ("LEFT_BRACKET", r"\["),
        ("RIGHT_BRACKET", r"\]"),
        ("NUMBER", r"[0-9]+(?:\.[0-9]+)?"),
        ("STRING", r'"(?:[^"\\]|\\.)*"'),
        ("IDENT", r"[A-Za-z_][A-Za-z0-9_]*"),
    ]

    def __init__(self, source: str, filename: str | None = None):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self._pattern = re.compile(
            "|".join(f"(?P<{name}>{pattern})" for name, pattern in self.TOKEN_PATTERNS)
        )

    def scan_tokens(self) -> list[Token]:
        """Tokenize the whole source.

        Raises:
            ScanError: On an unexpected character or an unterminated string.
        """
        tokens: list[Token] = []
        while self.pos < len(self.source):
            match = self._pattern.match(self.source, self.pos)
            location = self._location()
            if match is None or match.lastgroup is None:
                char = self.source[self.pos]
                if char == '"':
                    raise ScanError("Unterminated string", location)
                raise ScanError(f"Unexpected character: {char!r}", location)

            kind = match.lastgroup
            text = match.group()
            self._advance(text)

            if kind in ("NEWLINE", "WHITESPACE", "COMMENT"):
                continue
            if kind == "NUMBER":
                tokens.append(Token("NUMBER", text, location, float(text)))
            elif kind == "STRING":
                tokens.append(Token("STRING", text, location, self._unescape(text[1:-1])))
            elif kind == "IDENT" and text in KEYWORDS:
                tokens.append(Token(text.upper(), text, location))
            else:
                tokens.append(Token(kind, text, location))

        tokens.append(Token("EOF", "", self._location()))
        return tokens

    def _location(self) -> Location:
        return Location(self.line, self.column, self.filename)

    def _advance(self, text: str) -> None:
        """Update line/column counters after consuming text."""
        for char in text:
            if char == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(text)

    @staticmethod
    def _unescape(raw: str) -> str:
        result = []
        i = 0
        while i < len(raw):
            char = raw[i]
            if char == "\\" and i + 1 < len(raw):
                escaped = raw[i + 1]
                result.append(_ESCAPES.get(escaped, "\\" + escaped))
                i += 2
                continue
            result.append(char)
            i += 1
        return "".join(result)


def scan(source: str, filename: str | None = None) -> list[Token]:
    """Convenience wrapper around ``Scanner(source).scan_tokens()``."""
    return Scanner(source, filename).scan_tokens()
