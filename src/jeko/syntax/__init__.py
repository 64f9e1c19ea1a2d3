"""Front end: scanner, syntax tree, and parser."""

from jeko.syntax.parser import Parser, parse
from jeko.syntax.scanner import Scanner, scan
from jeko.syntax.tokens import KEYWORDS, Token

__all__ = ["KEYWORDS", "Parser", "Scanner", "Token", "parse", "scan"]
