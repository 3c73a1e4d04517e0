"""
Token definitions shared by the tokenizer and the parser.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class TokenKind(Enum):
    # --- Literals ---
    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    IDENTIFIER = "Identifier"

    # --- Keywords ---
    FN = "Fn"
    IF = "If"
    ELIF = "Elif"
    ELSE = "Else"
    WHILE = "While"
    CLASS = "Class"
    SELF = "Self"

    # --- Operators ---
    PLUS = "Plus"
    MINUS = "Minus"
    STAR = "Multiply"
    SLASH = "Divide"
    ASSIGN = "Equals"
    EQ_EQ = "EqualEqual"
    NOT_EQ = "NotEqual"
    LT = "LessThan"
    LT_EQ = "LessThanOrEqual"
    GT = "GreaterThan"
    GT_EQ = "GreaterThanOrEqual"

    # --- Delimiters ---
    LPAREN = "LeftParen"
    RPAREN = "RightParen"
    LBRACE = "LeftBrace"
    RBRACE = "RightBrace"
    COMMA = "Comma"
    DOT = "Dot"
    NEWLINE = "Newline"

    # --- Special ---
    EOF = "Eof"
    INVALID = "Invalid"


class Token(BaseModel):
    """A single lexeme with its (1-based) source position."""

    model_config = ConfigDict(frozen=True)

    kind: TokenKind
    value: Optional[Union[int, float, str]] = None
    line: int
    column: int

    def __str__(self) -> str:
        if self.value is None:
            return f"{self.kind.value} @ {self.line}:{self.column}"
        return f"{self.kind.value}({self.value!r}) @ {self.line}:{self.column}"
