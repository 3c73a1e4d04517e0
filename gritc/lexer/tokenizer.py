"""
Turns Grit source text into a flat list of tokens.

Terminal patterns are declared in grit.lark and scanned with lark's basic
lexer. This module maps each lark token onto a TokenKind, attaches literal
payloads and resolves keywords. It never raises on malformed input: anything
the language does not recognize becomes an INVALID token that the parser
reports later.
"""

import logging
from importlib.resources import files as pkg_files
from typing import List

from lark import Lark
from lark import Token as LarkToken

from ..config import I64_MAX, KEYWORDS, TERMINAL_KINDS
from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

grit_terminals = (pkg_files("gritc.lexer") / "grit.lark").read_text(encoding="utf-8")

# Built once at import time. Each lex() call carries its own state.
LARK_LEXER = Lark(grit_terminals, parser=None, lexer="basic")


def tokenize(source: str) -> List[Token]:
    """Tokenizes the entire input. The result always ends with exactly one EOF token."""
    tokens = [_convert_token(lark_token) for lark_token in LARK_LEXER.lex(source)]

    # EOF sits just past the last character, trailing whitespace and comments included.
    eof_line = source.count("\n") + 1
    eof_column = len(source) - (source.rfind("\n") + 1) + 1
    tokens.append(Token(kind=TokenKind.EOF, line=eof_line, column=eof_column))
    logger.debug("Tokenized %d characters into %d tokens", len(source), len(tokens))
    return tokens


def _convert_token(lark_token: LarkToken) -> Token:
    line, column = lark_token.line, lark_token.column
    text = lark_token.value

    if lark_token.type == "FLOAT":
        return Token(kind=TokenKind.FLOAT, value=float(text), line=line, column=column)

    if lark_token.type == "INTEGER":
        value = int(text)
        if value > I64_MAX:
            return Token(kind=TokenKind.INVALID, value=text, line=line, column=column)
        return Token(kind=TokenKind.INTEGER, value=value, line=line, column=column)

    if lark_token.type == "STRING":
        return Token(kind=TokenKind.STRING, value=text[1:-1], line=line, column=column)

    if lark_token.type == "UNTERMINATED_STRING":
        # Reported at the opening quote; the rest of the input was swallowed by the match.
        return Token(kind=TokenKind.INVALID, value="'", line=line, column=column)

    if lark_token.type == "NAME":
        keyword = KEYWORDS.get(text)
        if keyword is not None:
            return Token(kind=keyword, line=line, column=column)
        return Token(kind=TokenKind.IDENTIFIER, value=text, line=line, column=column)

    kind = TERMINAL_KINDS.get(lark_token.type)
    if kind is None:
        # BAD_CHAR
        return Token(kind=TokenKind.INVALID, value=text, line=line, column=column)
    return Token(kind=kind, line=line, column=column)
