"""
Class discovery for the code generator.

Grit declares a class with a bare `class Name` and attaches methods to it with
`fn Name > method(...)`. Before any Rust is written, the whole program is
scanned once to build a ClassInfo per class: its methods, the ordered field
list derived from its constructor, and which methods need `&mut self`.
"""

import logging
from typing import Dict, Iterator, List, Optional, Set

from pydantic import BaseModel

from ..config import CONSTRUCTOR_NAME, SELF_NAME
from ..exceptions import ErrorCode, GenerationError
from ..parser.classes import *
from .types import TypeTag, infer_type

logger = logging.getLogger(__name__)


class ClassInfo(BaseModel):
    """Everything the generator knows about one class."""

    name: str
    span: Span
    # Insertion order is the struct field order.
    fields: Dict[str, TypeTag] = {}
    methods: Dict[str, MethodDef] = {}
    mutating_methods: Set[str] = set()

    @property
    def constructor(self) -> Optional[MethodDef]:
        return self.methods.get(CONSTRUCTOR_NAME)


def iter_statements(body: List[Statement]) -> Iterator[Statement]:
    """Yields every statement of a body in source order, descending into nested blocks."""
    for statement in body:
        yield statement
        if isinstance(statement, If):
            yield from iter_statements(statement.then_branch)
            for branch in statement.elif_branches:
                yield from iter_statements(branch.body)
            if statement.else_branch is not None:
                yield from iter_statements(statement.else_branch)
        elif isinstance(statement, While):
            yield from iter_statements(statement.body)


def iter_expressions(expr: Expression) -> Iterator[Expression]:
    """Yields an expression and all of its sub-expressions."""
    yield expr
    if isinstance(expr, Grouped):
        yield from iter_expressions(expr.inner)
    elif isinstance(expr, UnaryOp):
        yield from iter_expressions(expr.operand)
    elif isinstance(expr, BinaryOp):
        yield from iter_expressions(expr.left)
        yield from iter_expressions(expr.right)
    elif isinstance(expr, FunctionCall):
        for arg in expr.args:
            yield from iter_expressions(arg)
    elif isinstance(expr, FieldAccess):
        yield from iter_expressions(expr.receiver)
        for arg in expr.args:
            yield from iter_expressions(arg)


def statement_expressions(statement: Statement) -> List[Expression]:
    """The expressions a single statement owns directly (nested blocks excluded)."""
    if isinstance(statement, (Assignment, SelfFieldAssign)):
        return [statement.value]
    if isinstance(statement, ExpressionStatement):
        return [statement.expression]
    if isinstance(statement, If):
        return [statement.condition] + [branch.condition for branch in statement.elif_branches]
    if isinstance(statement, While):
        return [statement.condition]
    return []


def is_self_reference(expr: Expression) -> bool:
    return isinstance(expr, Identifier) and expr.name == SELF_NAME


def collect_classes(program: Program) -> Dict[str, ClassInfo]:
    """
    Builds the class table for a program.

    Classes may be declared after the methods that reference them; only the
    existence of the declaration matters. Fields and mutability are filled in
    afterwards so that every method is known first.
    """
    classes: Dict[str, ClassInfo] = {}

    for statement in program.statements:
        if isinstance(statement, ClassDef):
            if statement.name in classes:
                raise GenerationError(ErrorCode.DUPLICATE_CLASS, line=statement.span.line, column=statement.span.column, class_name=statement.name)
            classes[statement.name] = ClassInfo(name=statement.name, span=statement.span)

    for statement in program.statements:
        if not isinstance(statement, MethodDef):
            continue
        info = classes.get(statement.class_name)
        if info is None:
            raise GenerationError(ErrorCode.UNDEFINED_CLASS, line=statement.span.line, column=statement.span.column, class_name=statement.class_name)
        if statement.method_name in info.methods:
            raise GenerationError(
                ErrorCode.DUPLICATE_METHOD,
                line=statement.span.line,
                column=statement.span.column,
                method=statement.method_name,
                class_name=statement.class_name,
            )
        info.methods[statement.method_name] = statement

    for info in classes.values():
        info.fields = collect_class_fields(info)
        _check_field_assignments(info)
    _find_mutating_methods(classes)

    logger.debug("Collected %d classes: %s", len(classes), ", ".join(classes))
    return classes


def collect_class_fields(info: ClassInfo) -> Dict[str, TypeTag]:
    """
    Pass 1 of class lowering: derives the ordered field list from the constructor.

    Fields appear in the order of their first `self.field = ...` assignment,
    scanning nested blocks in source order. Each field's type is the tag of the
    value assigned to it, with parameters typed as integers.
    """
    constructor = info.constructor
    if constructor is None:
        return {}

    fields: Dict[str, TypeTag] = {}
    variables: Dict[str, TypeTag] = {param: TypeTag.INT for param in constructor.params}

    for statement in iter_statements(constructor.body):
        if isinstance(statement, Assignment):
            variables.setdefault(statement.name, infer_type(statement.value, variables, fields) or TypeTag.INT)
        elif isinstance(statement, SelfFieldAssign):
            if statement.field in fields:
                raise GenerationError(
                    ErrorCode.DUPLICATE_FIELD,
                    line=statement.span.line,
                    column=statement.span.column,
                    field=statement.field,
                    class_name=info.name,
                )
            fields[statement.field] = infer_type(statement.value, variables, fields) or TypeTag.INT

    return fields


def _check_field_assignments(info: ClassInfo):
    """Only the constructor may introduce fields."""
    for method in info.methods.values():
        if method.is_constructor:
            continue
        for statement in iter_statements(method.body):
            if isinstance(statement, SelfFieldAssign) and statement.field not in info.fields:
                raise GenerationError(
                    ErrorCode.UNDEFINED_FIELD,
                    line=statement.span.line,
                    column=statement.span.column,
                    method=method.method_name,
                    class_name=info.name,
                    field=statement.field,
                )


def _calls_on_self(body: List[Statement]) -> Set[str]:
    names: Set[str] = set()
    for statement in iter_statements(body):
        for root in statement_expressions(statement):
            for expr in iter_expressions(root):
                if isinstance(expr, FieldAccess) and is_self_reference(expr.receiver):
                    names.add(expr.name)
    return names


def _find_mutating_methods(classes: Dict[str, ClassInfo]):
    """
    A method needs `&mut self` when it assigns a field, or when it calls
    another method of its own class that does.
    """
    for info in classes.values():
        for name, method in info.methods.items():
            if method.is_constructor:
                continue
            if any(isinstance(s, SelfFieldAssign) for s in iter_statements(method.body)):
                info.mutating_methods.add(name)

        changed = True
        while changed:
            changed = False
            for name, method in info.methods.items():
                if method.is_constructor or name in info.mutating_methods:
                    continue
                if _calls_on_self(method.body) & info.mutating_methods:
                    info.mutating_methods.add(name)
                    changed = True
