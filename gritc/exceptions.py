"""
Custom exception types for the Grit transpiler.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):

    # --- Lexical Errors ---
    LEX_INVALID_CHARACTER = "Unrecognized character '{char}'."
    LEX_UNTERMINATED_STRING = "Unterminated string literal starting with {char}."
    LEX_INTEGER_OUT_OF_RANGE = "Integer literal '{char}' does not fit in a 64-bit signed integer."

    # --- Syntax Errors ---
    # 'expected' and 'found' are human-readable descriptions built by the parser,
    # e.g. expected="'{'", found="identifier 'x'".
    SYNTAX_UNEXPECTED_TOKEN = "Expected {expected} but found {found}."
    SYNTAX_INVALID_EXPRESSION = "Expected an expression but found {found}."
    SYNTAX_SELF_OUTSIDE_METHOD = "'self' can only be used inside a method body."

    # --- Generation Errors ---
    FORMAT_ARGUMENT_COUNT_MISMATCH = "Format string '{fmt}' has {specifiers} specifier(s) but {provided} argument(s) were given."
    DUPLICATE_FIELD = "Field '{field}' of class '{class_name}' is assigned more than once in its constructor."
    UNDEFINED_CLASS = "Class '{class_name}' is not defined."
    UNDEFINED_CONSTRUCTOR = "Class '{class_name}' has no 'new' constructor."
    UNDEFINED_MEMBER = "No class defines a field or method named '{name}'."
    UNDEFINED_STATIC_MEMBER = "Class '{class_name}' has no static member '{name}'; only 'new' can be called on the class itself."
    FIELD_NOT_CALLABLE = "'{name}' is a field, not a method, and cannot be called."
    UNDEFINED_FIELD = "Method '{method}' of class '{class_name}' assigns '{field}', which its constructor never declares."
    DUPLICATE_METHOD = "Method '{method}' of class '{class_name}' is defined more than once."
    DUPLICATE_CLASS = "Class '{class_name}' is defined more than once."
    CONVERSION_ARGUMENT_COUNT = "Built-in '{name}' expects exactly 1 argument, but got {provided}."
    METHOD_CALL_IN_CONSTRUCTOR = "Constructor of class '{class_name}' cannot call method '{name}'; the object does not exist until 'new' returns."

    # --- Limits ---
    # Raised by the parser or the generator when a tree is too deep to walk.
    NESTING_TOO_DEEP = "Code is nested too deeply to translate."


class CompileError(Exception):
    """Base class for every error a translation can report to its caller."""

    def __init__(
        self,
        code: ErrorCode,
        line: Optional[int] = None,
        column: Optional[int] = None,
        **kwargs,
    ):
        self.code = code
        self.line = line
        self.column = column
        self.details = kwargs

        # The template (e.g. "Class '{class_name}' is not defined.") is populated
        # with whatever extra data the raising stage passed in.
        core_message = code.value.format(**kwargs)
        self.reason = core_message

        location_prefix = ""
        if line is not None and column is not None:
            location_prefix = f"Error (Line: {line}, Column: {column}): "
        elif line is not None:
            location_prefix = f"Error (Line: {line}): "

        self.message = location_prefix + core_message

        super().__init__(self.message)


class LexError(CompileError):
    """Unrecognized character, unterminated string or out-of-range literal."""

    @property
    def char(self) -> str:
        return self.details.get("char", "")


class ParseError(CompileError):
    """Unexpected or missing token, or 'self' used outside a method."""

    @property
    def expected(self) -> str:
        return self.details.get("expected", "")

    @property
    def found(self) -> str:
        return self.details.get("found", "")


class GenerationError(CompileError):
    """The AST is well-formed but cannot be lowered to Rust."""


class InternalCompilerError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
