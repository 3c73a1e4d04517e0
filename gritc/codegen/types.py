"""
Static type tags for Grit expressions.

Grit has no type annotations. The generator only needs to know enough to pick
struct field types, choose a conversion strategy and decide when a string
literal must become an owned String. Anything it cannot infer falls back to
the 64-bit integer default.
"""

from enum import Enum
from typing import Mapping, Optional

from ..config import CONVERSION_FUNCTIONS, PRINT_FUNCTION, RUST_FLOAT, RUST_INT, RUST_STRING
from ..parser.classes import *

COMPARISON_OPERATORS = {
    BinaryOperator.EQ,
    BinaryOperator.NOT_EQ,
    BinaryOperator.LT,
    BinaryOperator.LT_EQ,
    BinaryOperator.GT,
    BinaryOperator.GT_EQ,
}


class TypeTag(Enum):
    INT = RUST_INT
    FLOAT = RUST_FLOAT
    STRING = RUST_STRING


CONVERSION_RESULT_TYPES = {
    "to_int": TypeTag.INT,
    "to_float": TypeTag.FLOAT,
    "to_string": TypeTag.STRING,
}

DEFAULT_VALUES = {
    TypeTag.INT: "0",
    TypeTag.FLOAT: "0.0",
    TypeTag.STRING: "String::new()",
}


def rust_type(tag: Optional[TypeTag]) -> str:
    """The Rust spelling of a tag; unknown types use the integer default."""
    return (tag or TypeTag.INT).value


def infer_type(expr: Expression, variables: Mapping[str, TypeTag], member_types: Optional[Mapping[str, TypeTag]] = None) -> Optional[TypeTag]:
    """
    Infers the tag of an expression without evaluating it.

    `variables` maps visible names (parameters, locals, and inside a method the
    fields of its class) to their tags. `member_types` maps field names to tags
    for `obj.field` and `self.field` reads. Returns None when nothing useful is
    known; comparisons are always None because Grit has no boolean values to
    store.
    """
    if isinstance(expr, IntegerLiteral):
        return TypeTag.INT
    if isinstance(expr, FloatLiteral):
        return TypeTag.FLOAT
    if isinstance(expr, StringLiteral):
        return TypeTag.STRING

    if isinstance(expr, Identifier):
        return variables.get(expr.name)

    if isinstance(expr, Grouped):
        return infer_type(expr.inner, variables, member_types)

    if isinstance(expr, UnaryOp):
        return infer_type(expr.operand, variables, member_types)

    if isinstance(expr, BinaryOp):
        if expr.op in COMPARISON_OPERATORS:
            return None
        left = infer_type(expr.left, variables, member_types)
        right = infer_type(expr.right, variables, member_types)
        # No implicit promotion: disagreeing operands give no tag at all.
        return left if left == right else None

    if isinstance(expr, FunctionCall):
        if expr.callee in CONVERSION_FUNCTIONS:
            return CONVERSION_RESULT_TYPES[expr.callee]
        if expr.callee == PRINT_FUNCTION:
            return None
        # User functions always return i64.
        return TypeTag.INT

    if isinstance(expr, FieldAccess):
        if expr.is_call or member_types is None:
            return None
        return member_types.get(expr.name)

    return None
