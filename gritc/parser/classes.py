"""
Defines the formal data structures (contracts) for the Abstract Syntax Tree (AST)
produced by the parser stage.

Each node is a frozen pydantic model and includes a `Span` object pointing at
the token that starts it, enabling precise error reporting in later stages.
The code generator only reads these nodes; nothing mutates them after parsing.
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

# --- Core Data Structures ---


class Span(BaseModel):
    """Represents a location in the source code for precise error reporting."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int


class ASTNode(BaseModel):
    """A base class for all AST nodes, ensuring they have a span."""

    model_config = ConfigDict(frozen=True)

    span: Span


class BinaryOperator(Enum):
    ADD = "Add"
    SUB = "Sub"
    MUL = "Mul"
    DIV = "Div"
    EQ = "Eq"
    NOT_EQ = "NotEq"
    LT = "Lt"
    LT_EQ = "LtEq"
    GT = "Gt"
    GT_EQ = "GtEq"


# --- Literals and Identifiers ---


class IntegerLiteral(ASTNode):
    value: int


class FloatLiteral(ASTNode):
    value: float


class StringLiteral(ASTNode):
    value: str


class Identifier(ASTNode):
    name: str


# --- Expressions ---
# A generic type hint for any expression node
Expression = Union[IntegerLiteral, FloatLiteral, StringLiteral, Identifier, "Grouped", "UnaryOp", "BinaryOp", "FunctionCall", "FieldAccess"]


class Grouped(ASTNode):
    """An explicitly parenthesized expression, kept so the generator can re-emit the parentheses."""

    inner: Expression


class UnaryOp(ASTNode):
    """Arithmetic negation, `-operand`."""

    operand: Expression


class BinaryOp(ASTNode):
    left: Expression
    op: BinaryOperator
    right: Expression


class FunctionCall(ASTNode):
    """A call to a free function or a built-in (`print`, `to_int`, `to_float`, `to_string`)."""

    callee: str
    args: List[Expression]


class FieldAccess(ASTNode):
    """
    `receiver.name`, optionally followed by an argument list.
    Covers `obj.field`, `obj.method`, `obj.method(args)` and `ClassName.new(args)`.
    """

    receiver: Expression
    name: str
    is_call: bool = False
    args: List[Expression] = []


# --- Statements ---


class ExpressionStatement(ASTNode):
    expression: Expression


class Assignment(ASTNode):
    """Declares `name` or rebinds it if it is already visible."""

    name: str
    value: Expression


class SelfFieldAssign(ASTNode):
    """`self.field = value`; only legal inside a method body."""

    field: str
    value: Expression


class ElifBranch(ASTNode):
    condition: Expression
    body: List["Statement"]


class If(ASTNode):
    condition: Expression
    then_branch: List["Statement"]
    elif_branches: List[ElifBranch] = []
    else_branch: Optional[List["Statement"]] = None


class While(ASTNode):
    condition: Expression
    body: List["Statement"]


class FunctionDef(ASTNode):
    name: str
    params: List[str]
    body: List["Statement"]


class MethodDef(ASTNode):
    class_name: str
    method_name: str
    params: List[str]
    body: List["Statement"]

    @property
    def is_constructor(self) -> bool:
        return self.method_name == "new"


class ClassDef(ASTNode):
    """A named class. Its fields are derived from the `new` method."""

    name: str


Statement = Union[ExpressionStatement, Assignment, SelfFieldAssign, If, While, FunctionDef, MethodDef, ClassDef]


# --- Top-level Structures ---


class Program(ASTNode):
    """The root of the AST, representing a single translation unit."""

    statements: List[Statement]


for _node in (Grouped, UnaryOp, BinaryOp, FunctionCall, FieldAccess, ExpressionStatement, Assignment, SelfFieldAssign, ElifBranch, If, While, FunctionDef, MethodDef, Program):
    _node.model_rebuild()
