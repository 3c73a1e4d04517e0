"""
Static configuration data for the Grit transpiler.
This includes the keyword table, operator mappings, precedence levels,
built-in function names and the Rust spellings the code generator emits.
"""

from .lexer.tokens import TokenKind
from .parser.classes import BinaryOperator

KEYWORDS = {
    "fn": TokenKind.FN,
    "if": TokenKind.IF,
    "elif": TokenKind.ELIF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "class": TokenKind.CLASS,
    "self": TokenKind.SELF,
}

# Maps the lark terminal names declared in grit.lark to token kinds.
# INTEGER, FLOAT, STRING, NAME and the error terminals are handled separately
# because they carry a payload.
TERMINAL_KINDS = {
    "PLUS": TokenKind.PLUS,
    "MINUS": TokenKind.MINUS,
    "STAR": TokenKind.STAR,
    "SLASH": TokenKind.SLASH,
    "EQ_EQ": TokenKind.EQ_EQ,
    "NOT_EQ": TokenKind.NOT_EQ,
    "LT_EQ": TokenKind.LT_EQ,
    "GT_EQ": TokenKind.GT_EQ,
    "LT": TokenKind.LT,
    "GT": TokenKind.GT,
    "ASSIGN": TokenKind.ASSIGN,
    "LPAREN": TokenKind.LPAREN,
    "RPAREN": TokenKind.RPAREN,
    "LBRACE": TokenKind.LBRACE,
    "RBRACE": TokenKind.RBRACE,
    "COMMA": TokenKind.COMMA,
    "DOT": TokenKind.DOT,
    "NEWLINE": TokenKind.NEWLINE,
}

BINARY_OPERATOR_MAP = {
    TokenKind.PLUS: BinaryOperator.ADD,
    TokenKind.MINUS: BinaryOperator.SUB,
    TokenKind.STAR: BinaryOperator.MUL,
    TokenKind.SLASH: BinaryOperator.DIV,
    TokenKind.EQ_EQ: BinaryOperator.EQ,
    TokenKind.NOT_EQ: BinaryOperator.NOT_EQ,
    TokenKind.LT: BinaryOperator.LT,
    TokenKind.LT_EQ: BinaryOperator.LT_EQ,
    TokenKind.GT: BinaryOperator.GT,
    TokenKind.GT_EQ: BinaryOperator.GT_EQ,
}

# Binding power, lowest to highest. Unary minus binds tighter than all of them.
COMPARISON_PRECEDENCE = 1
ADDITIVE_PRECEDENCE = 2
MULTIPLICATIVE_PRECEDENCE = 3

OPERATOR_PRECEDENCE = {
    BinaryOperator.EQ: COMPARISON_PRECEDENCE,
    BinaryOperator.NOT_EQ: COMPARISON_PRECEDENCE,
    BinaryOperator.LT: COMPARISON_PRECEDENCE,
    BinaryOperator.LT_EQ: COMPARISON_PRECEDENCE,
    BinaryOperator.GT: COMPARISON_PRECEDENCE,
    BinaryOperator.GT_EQ: COMPARISON_PRECEDENCE,
    BinaryOperator.ADD: ADDITIVE_PRECEDENCE,
    BinaryOperator.SUB: ADDITIVE_PRECEDENCE,
    BinaryOperator.MUL: MULTIPLICATIVE_PRECEDENCE,
    BinaryOperator.DIV: MULTIPLICATIVE_PRECEDENCE,
}

OPERATOR_SYMBOLS = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUB: "-",
    BinaryOperator.MUL: "*",
    BinaryOperator.DIV: "/",
    BinaryOperator.EQ: "==",
    BinaryOperator.NOT_EQ: "!=",
    BinaryOperator.LT: "<",
    BinaryOperator.LT_EQ: "<=",
    BinaryOperator.GT: ">",
    BinaryOperator.GT_EQ: ">=",
}

# Human-readable names used in "expected X but found Y" messages.
FRIENDLY_TOKEN_NAMES = {
    TokenKind.INTEGER: "an integer",
    TokenKind.FLOAT: "a float",
    TokenKind.STRING: "a string literal",
    TokenKind.IDENTIFIER: "an identifier",
    TokenKind.FN: "the 'fn' keyword",
    TokenKind.IF: "the 'if' keyword",
    TokenKind.ELIF: "the 'elif' keyword",
    TokenKind.ELSE: "the 'else' keyword",
    TokenKind.WHILE: "the 'while' keyword",
    TokenKind.CLASS: "the 'class' keyword",
    TokenKind.SELF: "the 'self' keyword",
    TokenKind.PLUS: "'+'",
    TokenKind.MINUS: "'-'",
    TokenKind.STAR: "'*'",
    TokenKind.SLASH: "'/'",
    TokenKind.ASSIGN: "'='",
    TokenKind.EQ_EQ: "'=='",
    TokenKind.NOT_EQ: "'!='",
    TokenKind.LT: "'<'",
    TokenKind.LT_EQ: "'<='",
    TokenKind.GT: "'>'",
    TokenKind.GT_EQ: "'>='",
    TokenKind.LPAREN: "'('",
    TokenKind.RPAREN: "')'",
    TokenKind.LBRACE: "'{'",
    TokenKind.RBRACE: "'}'",
    TokenKind.COMMA: "','",
    TokenKind.DOT: "'.'",
    TokenKind.NEWLINE: "a newline",
    TokenKind.EOF: "the end of the file",
    TokenKind.INVALID: "an invalid character",
}

# --- Built-ins ---
PRINT_FUNCTION = "print"
CONVERSION_FUNCTIONS = {"to_int", "to_float", "to_string"}
CONSTRUCTOR_NAME = "new"
SELF_NAME = "self"

# --- Rust output ---
INDENT = "    "
RUST_INT = "i64"
RUST_FLOAT = "f64"
RUST_STRING = "String"
I64_MAX = 2**63 - 1
