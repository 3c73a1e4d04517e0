"""
Lowers a Grit AST to the text of a single Rust program.

Classes and free functions become top-level Rust items in source order; every
other top-level statement goes into `fn main()`. The generator makes two
passes over the program: the first builds the class table and works out
which bodies end in a value, the second writes Rust.
"""

import logging
import math
from collections import ChainMap, Counter
from contextlib import contextmanager
from typing import Dict, List, Optional, Set, Tuple

from ..config import (
    CONSTRUCTOR_NAME,
    CONVERSION_FUNCTIONS,
    INDENT,
    OPERATOR_PRECEDENCE,
    OPERATOR_SYMBOLS,
    PRINT_FUNCTION,
    RUST_INT,
    SELF_NAME,
)
from ..exceptions import ErrorCode, GenerationError, InternalCompilerError
from ..parser.classes import *
from .builtins import render_conversion, render_print, rust_string_literal
from .classes import ClassInfo, collect_classes, is_self_reference, iter_expressions, iter_statements, statement_expressions
from .types import COMPARISON_OPERATORS, DEFAULT_VALUES, TypeTag, infer_type, rust_type

logger = logging.getLogger(__name__)


def count_assignments(body: List[Statement]) -> Counter:
    """How many times each name is assigned anywhere in a body, nested blocks included."""
    return Counter(s.name for s in iter_statements(body) if isinstance(s, Assignment))


def find_escaping_names(params: List[str], body: List[Statement]) -> Set[str]:
    """
    Names first assigned inside a nested block and read again after that block
    has closed. A Rust `let` ends with its block, so these are declared once at
    the top of the function and only assigned inside the blocks.
    """
    escaping: Set[str] = set()
    closed: Set[str] = set()
    scopes: List[Set[str]] = [set(params)]

    def is_declared(name: str) -> bool:
        return any(name in scope for scope in scopes)

    def read(expr: Expression):
        for node in iter_expressions(expr):
            if isinstance(node, Identifier) and node.name in closed and not is_declared(node.name):
                escaping.add(node.name)

    def walk_block(statements: List[Statement]):
        scopes.append(set())
        walk(statements)
        closed.update(scopes.pop())

    def walk(statements: List[Statement]):
        for statement in statements:
            if isinstance(statement, If):
                read(statement.condition)
                walk_block(statement.then_branch)
                for branch in statement.elif_branches:
                    read(branch.condition)
                    walk_block(branch.body)
                if statement.else_branch is not None:
                    walk_block(statement.else_branch)
            elif isinstance(statement, While):
                read(statement.condition)
                walk_block(statement.body)
            else:
                for expr in statement_expressions(statement):
                    read(expr)
                if isinstance(statement, Assignment) and not is_declared(statement.name):
                    scopes[-1].add(statement.name)

    walk(body)
    return escaping


@contextmanager
def nesting_limit(span: Span):
    """Reports a tree deeper than the interpreter's stack as a GenerationError at `span`."""
    try:
        yield
    except RecursionError:
        raise GenerationError(ErrorCode.NESTING_TOO_DEEP, line=span.line, column=span.column) from None


def format_float(value: float) -> str:
    """Renders a float so that Rust still reads it as an f64 literal (2.0, not 2)."""
    if math.isinf(value):
        return "f64::INFINITY"
    text = repr(value)
    if not any(marker in text for marker in (".", "e", "E")):
        text += ".0"
    return text


class FunctionContext:
    """
    Naming state for the body being generated: block scopes, the enclosing
    class (inside methods) and how each name must be declared.
    """

    def __init__(
        self,
        params: List[str],
        body: List[Statement],
        class_info: Optional[ClassInfo] = None,
        is_constructor: bool = False,
        mutating_methods: Set[str] = frozenset(),
    ):
        self.params = list(params)
        self.class_info = class_info
        self.is_constructor = is_constructor
        self.assignment_counts = count_assignments(body)
        self.scopes: List[Dict[str, TypeTag]] = [{param: TypeTag.INT for param in params}]
        self.escaping = find_escaping_names(params, body)
        # Escaping names assigned so far and their tag (None when it cannot be inferred).
        self.hoisted: Dict[str, Optional[TypeTag]] = {}
        self.mutated_receivers = {
            node.receiver.name
            for statement in iter_statements(body)
            for expr in statement_expressions(statement)
            for node in iter_expressions(expr)
            if isinstance(node, FieldAccess) and isinstance(node.receiver, Identifier) and node.name in mutating_methods
        }
        self.mutable_instances: Set[str] = set()
        # Constructor only: the local that holds each field until `Self { ... }` is built.
        self.field_bindings: Dict[str, str] = {}
        self.predeclared_fields: Set[str] = set()

    @contextmanager
    def block(self):
        self.scopes.append({})
        try:
            yield
        finally:
            self.scopes.pop()

    def is_visible(self, name: str) -> bool:
        return name in self.hoisted or any(name in scope for scope in self.scopes)

    def declare(self, name: str, tag: TypeTag):
        self.scopes[-1][name] = tag

    def needs_mut(self, name: str) -> bool:
        return self.assignment_counts[name] > 1 or name in self.mutated_receivers or name in self.mutable_instances

    def is_field_reference(self, name: str) -> bool:
        """A bare name refers to a field when the class has it and nothing local shadows it."""
        return self.class_info is not None and name in self.class_info.fields and not self.is_visible(name)

    def variables(self) -> ChainMap:
        fields = self.class_info.fields if self.class_info is not None else {}
        hoisted = {name: tag for name, tag in self.hoisted.items() if tag is not None}
        return ChainMap(*reversed(self.scopes), hoisted, fields)


class CodeGenerator:
    """
    Generates Rust for one Program. Create one generator per program; the
    class table and return-value analysis are computed by `generate`.
    """

    def __init__(self, program: Program):
        self.program = program
        self.classes: Dict[str, ClassInfo] = {}
        self.functions: Dict[str, FunctionDef] = {}
        self.member_types: Dict[str, TypeTag] = {}
        self.method_names: Set[str] = set()
        self.mutating_method_names: Set[str] = set()
        self.function_returns: Dict[str, bool] = {}
        self.method_returns: Dict[Tuple[str, str], bool] = {}

    # --- Entry points ---

    def generate(self) -> str:
        with nesting_limit(self.program.span):
            self._analyse_program()

        items: List[str] = []
        main_body: List[Statement] = []
        for statement in self.program.statements:
            if isinstance(statement, ClassDef):
                with nesting_limit(statement.span):
                    items.append(self._generate_class(self.classes[statement.name]))
            elif isinstance(statement, FunctionDef):
                with nesting_limit(statement.span):
                    items.append("\n".join(self._generate_function(statement)))
            elif isinstance(statement, MethodDef):
                # Emitted inside the impl block of its class.
                continue
            else:
                main_body.append(statement)

        with nesting_limit(main_body[0].span if main_body else self.program.span):
            items.append("\n".join(self._generate_main(main_body)))
        logger.debug("Generated %d top-level Rust items", len(items))
        return "\n\n".join(items) + "\n"

    def generate_expression(self, expr: Expression) -> str:
        """Renders one expression outside of any function or class."""
        self._analyse_program()
        with nesting_limit(expr.span):
            return self._render(expr, self._context([], []))

    def _context(self, params: List[str], body: List[Statement], class_info: Optional[ClassInfo] = None, is_constructor: bool = False) -> FunctionContext:
        return FunctionContext(params, body, class_info=class_info, is_constructor=is_constructor, mutating_methods=self.mutating_method_names)

    # --- Pass 1: program analysis ---

    def _analyse_program(self):
        self.classes = collect_classes(self.program)
        self.functions = {s.name: s for s in self.program.statements if isinstance(s, FunctionDef)}

        self.member_types = {}
        self.method_names = set()
        for info in self.classes.values():
            for field, tag in info.fields.items():
                self.member_types.setdefault(field, tag)
            self.method_names.update(name for name in info.methods if name != CONSTRUCTOR_NAME)
            self.mutating_method_names.update(info.mutating_methods)

        self._compute_return_values()

    def _compute_return_values(self):
        """
        Decides which functions and methods return a value. A body returns a
        value when its last statement is an expression that produces one; a
        call to print, or to a function that itself returns nothing, does not.
        Starts from "everything returns" and only ever flips entries to False,
        so the loop terminates.
        """
        self.function_returns = {name: True for name in self.functions}
        self.method_returns = {
            (info.name, name): True for info in self.classes.values() for name, method in info.methods.items() if not method.is_constructor
        }

        changed = True
        while changed:
            changed = False
            for name, function in self.functions.items():
                if self.function_returns[name] and not self._ends_with_value(function.body):
                    self.function_returns[name] = False
                    changed = True
            for key in self.method_returns:
                class_name, method_name = key
                method = self.classes[class_name].methods[method_name]
                if self.method_returns[key] and not self._ends_with_value(method.body):
                    self.method_returns[key] = False
                    changed = True

    def _ends_with_value(self, body: List[Statement]) -> bool:
        if not body or not isinstance(body[-1], ExpressionStatement):
            return False
        return self._is_value_expression(body[-1].expression)

    def _is_value_expression(self, expr: Expression) -> bool:
        if isinstance(expr, FunctionCall):
            if expr.callee == PRINT_FUNCTION:
                return False
            return self.function_returns.get(expr.callee, True)
        if isinstance(expr, FieldAccess) and expr.name in self.method_names:
            return any(returns for (_, method_name), returns in self.method_returns.items() if method_name == expr.name)
        return True

    # --- Pass 2: items ---

    def _generate_main(self, body: List[Statement]) -> List[str]:
        if len(body) == 1 and isinstance(body[0], ExpressionStatement) and not self._is_call(body[0].expression):
            ctx = self._context([], body)
            value = self._render(body[0].expression, ctx)
            return ["fn main() {", f"{INDENT}let result = {value};", f'{INDENT}println!("{{}}", result);', "}"]

        ctx = self._context([], body)
        return ["fn main() {"] + self._generate_function_body(body, ctx) + ["}"]

    @staticmethod
    def _is_call(expr: Expression) -> bool:
        return isinstance(expr, FunctionCall) or (isinstance(expr, FieldAccess) and expr.is_call)

    def _generate_function(self, function: FunctionDef) -> List[str]:
        ctx = self._context(function.params, function.body)
        returns = self.function_returns[function.name]
        params = ", ".join(self._render_param(param, ctx) for param in function.params)
        signature = f"fn {function.name}({params})" + (f" -> {RUST_INT}" if returns else "")
        return [signature + " {"] + self._generate_function_body(function.body, ctx, implicit_return=returns) + ["}"]

    @staticmethod
    def _render_param(param: str, ctx: FunctionContext) -> str:
        # Parameters that get reassigned must be declared mutable.
        prefix = "mut " if ctx.assignment_counts[param] > 0 else ""
        return f"{prefix}{param}: {RUST_INT}"

    def _generate_class(self, info: ClassInfo) -> str:
        """
        #[derive(Clone)]
        struct Name {
            field: T,
        }

        impl Name {
            fn new(...) -> Self { ... }
            fn method(&self, ...) { ... }
        }
        """
        struct_lines = ["#[derive(Clone)]"]
        if info.fields:
            struct_lines.append(f"struct {info.name} {{")
            struct_lines.extend(f"{INDENT}{field}: {rust_type(tag)}," for field, tag in info.fields.items())
            struct_lines.append("}")
        else:
            struct_lines.append(f"struct {info.name} {{}}")

        if not info.methods:
            return "\n".join(struct_lines)

        method_blocks = []
        for method in info.methods.values():
            method_lines = self._generate_constructor(info, method) if method.is_constructor else self._generate_method(info, method)
            method_blocks.append("\n".join(INDENT + line if line else line for line in method_lines))

        impl_text = f"impl {info.name} {{\n" + "\n\n".join(method_blocks) + "\n}"
        return "\n".join(struct_lines) + "\n\n" + impl_text

    def _generate_method(self, info: ClassInfo, method: MethodDef) -> List[str]:
        ctx = self._context(method.params, method.body, class_info=info)
        returns = self.method_returns[(info.name, method.method_name)]
        receiver = "&mut self" if method.method_name in info.mutating_methods else "&self"
        params = ", ".join([receiver] + [self._render_param(param, ctx) for param in method.params])
        signature = f"fn {method.method_name}({params})" + (f" -> {RUST_INT}" if returns else "")
        return [signature + " {"] + self._generate_function_body(method.body, ctx, implicit_return=returns) + ["}"]

    def _generate_constructor(self, info: ClassInfo, method: MethodDef) -> List[str]:
        ctx = self._context(method.params, method.body, class_info=info, is_constructor=True)
        params = ", ".join(self._render_param(param, ctx) for param in method.params)
        lines = [f"fn {CONSTRUCTOR_NAME}({params}) -> Self {{"]

        if self._is_plain_constructor(info, method):
            initializers = [f"{s.field}: {self._render_field_value(info, s.field, s.value, ctx)}" for s in method.body]
            lines.append(INDENT + self._struct_literal(initializers))
            lines.append("}")
            return lines

        # General form: each field lives in a local until the struct is built.
        taken = set(method.params) | {s.name for s in iter_statements(method.body) if isinstance(s, Assignment)}
        ctx.field_bindings = {field: (f"self_{field}" if field in taken else field) for field in info.fields}

        top_level = {s.field for s in method.body if isinstance(s, SelfFieldAssign)}
        for field, tag in info.fields.items():
            if field not in top_level:
                # Assigned only inside a nested block, so it needs a value on every path.
                lines.append(f"{INDENT}let mut {ctx.field_bindings[field]}: {rust_type(tag)} = {DEFAULT_VALUES[tag]};")
                ctx.predeclared_fields.add(field)

        lines.extend(self._generate_function_body(method.body, ctx))
        initializers = [f"{field}: {binding}" for field, binding in ctx.field_bindings.items()]
        lines.append(INDENT + self._struct_literal(initializers))
        lines.append("}")
        return lines

    @staticmethod
    def _struct_literal(initializers: List[str]) -> str:
        return "Self { " + ", ".join(initializers) + " }" if initializers else "Self {}"

    def _is_plain_constructor(self, info: ClassInfo, method: MethodDef) -> bool:
        """True when `new` only assigns fields from values that never read the object."""
        if not all(isinstance(s, SelfFieldAssign) for s in method.body):
            return False
        for statement in method.body:
            for expr in iter_expressions(statement.value):
                if is_self_reference(expr):
                    return False
                if isinstance(expr, Identifier) and expr.name in info.fields and expr.name not in method.params:
                    return False
        return True

    def _render_field_value(self, info: ClassInfo, field: str, value: Expression, ctx: FunctionContext) -> str:
        rendered = self._render(value, ctx)
        if info.fields.get(field) == TypeTag.STRING and isinstance(value, StringLiteral):
            return f"{rendered}.to_string()"
        return rendered

    # --- Pass 2: statements ---

    def _generate_function_body(self, body: List[Statement], ctx: FunctionContext, implicit_return: bool = False) -> List[str]:
        """The statements of a function, method or main, after the declarations of any escaping names."""
        lines = self._generate_body(body, ctx, depth=1, implicit_return=implicit_return)
        declarations = []
        for name, tag in ctx.hoisted.items():
            if tag is None:
                declarations.append(f"{INDENT}let mut {name};")
            else:
                declarations.append(f"{INDENT}let mut {name}: {rust_type(tag)} = {DEFAULT_VALUES[tag]};")
        return declarations + lines

    def _generate_body(self, body: List[Statement], ctx: FunctionContext, depth: int, implicit_return: bool = False) -> List[str]:
        lines: List[str] = []
        for index, statement in enumerate(body):
            is_return = implicit_return and index == len(body) - 1
            with nesting_limit(statement.span):
                lines.extend(self._generate_statement(statement, ctx, depth, is_return))
        return lines

    def _generate_statement(self, statement: Statement, ctx: FunctionContext, depth: int, is_return: bool = False) -> List[str]:
        indent = INDENT * depth

        if isinstance(statement, ExpressionStatement):
            code = self._render(statement.expression, ctx)
            return [indent + code] if is_return else [f"{indent}{code};"]

        if isinstance(statement, Assignment):
            return [indent + self._generate_assignment(statement, ctx)]

        if isinstance(statement, SelfFieldAssign):
            return [indent + self._generate_field_assignment(statement, ctx)]

        if isinstance(statement, If):
            lines = [f"{indent}if {self._render(statement.condition, ctx)} {{"]
            lines.extend(self._generate_block(statement.then_branch, ctx, depth + 1))
            for branch in statement.elif_branches:
                lines.append(f"{indent}}} else if {self._render(branch.condition, ctx)} {{")
                lines.extend(self._generate_block(branch.body, ctx, depth + 1))
            if statement.else_branch is not None:
                lines.append(f"{indent}}} else {{")
                lines.extend(self._generate_block(statement.else_branch, ctx, depth + 1))
            lines.append(indent + "}")
            return lines

        if isinstance(statement, While):
            lines = [f"{indent}while {self._render(statement.condition, ctx)} {{"]
            lines.extend(self._generate_block(statement.body, ctx, depth + 1))
            lines.append(indent + "}")
            return lines

        raise InternalCompilerError(f"{type(statement).__name__} is only valid at the top level (line {statement.span.line}).")

    def _generate_block(self, body: List[Statement], ctx: FunctionContext, depth: int) -> List[str]:
        with ctx.block():
            return self._generate_body(body, ctx, depth)

    def _generate_assignment(self, statement: Assignment, ctx: FunctionContext) -> str:
        # The value is rendered before the name is declared, so in `x = x + 1`
        # inside a method the right-hand `x` still reads the field.
        value = self._render(statement.value, ctx)

        if statement.name in ctx.escaping:
            # Declared at the top of the function by _generate_function_body.
            if statement.name not in ctx.hoisted:
                ctx.hoisted[statement.name] = infer_type(statement.value, ctx.variables(), self.member_types)
                if self._holds_mutable_instance(statement.value, ctx):
                    ctx.mutable_instances.add(statement.name)
            if ctx.hoisted[statement.name] == TypeTag.STRING and isinstance(statement.value, StringLiteral):
                value = f"{value}.to_string()"
            return f"{statement.name} = {value};"

        if ctx.is_visible(statement.name):
            return f"{statement.name} = {value};"

        tag = infer_type(statement.value, ctx.variables(), self.member_types)
        if self._holds_mutable_instance(statement.value, ctx):
            ctx.mutable_instances.add(statement.name)
        ctx.declare(statement.name, tag or TypeTag.INT)
        mutable = ctx.needs_mut(statement.name)
        return f"let {'mut ' if mutable else ''}{statement.name} = {value};"

    def _holds_mutable_instance(self, value: Expression, ctx: FunctionContext) -> bool:
        """A new instance of a class with `&mut self` methods, or another name that holds one."""
        if isinstance(value, Identifier):
            return value.name in ctx.mutable_instances
        if not (isinstance(value, FieldAccess) and value.name == CONSTRUCTOR_NAME and isinstance(value.receiver, Identifier)):
            return False
        info = self.classes.get(value.receiver.name)
        return info is not None and bool(info.mutating_methods)

    def _generate_field_assignment(self, statement: SelfFieldAssign, ctx: FunctionContext) -> str:
        info = ctx.class_info
        if info is None:
            raise InternalCompilerError(f"Field assignment outside of a method (line {statement.span.line}).")

        value = self._render_field_value(info, statement.field, statement.value, ctx)
        if not ctx.is_constructor:
            return f"self.{statement.field} = {value};"

        binding = ctx.field_bindings[statement.field]
        if statement.field in ctx.predeclared_fields:
            return f"{binding} = {value};"
        return f"let {binding} = {value};"

    # --- Pass 2: expressions ---

    def _render(self, expr: Expression, ctx: FunctionContext) -> str:
        if isinstance(expr, IntegerLiteral):
            return str(expr.value)

        if isinstance(expr, FloatLiteral):
            return format_float(expr.value)

        if isinstance(expr, StringLiteral):
            return rust_string_literal(expr.value)

        if isinstance(expr, Identifier):
            return self._render_identifier(expr, ctx)

        if isinstance(expr, Grouped):
            return f"({self._render(expr.inner, ctx)})"

        if isinstance(expr, UnaryOp):
            operand = self._render(expr.operand, ctx)
            if isinstance(expr.operand, (BinaryOp, UnaryOp)):
                operand = f"({operand})"
            return f"-{operand}"

        if isinstance(expr, BinaryOp):
            left = self._render_operand(expr.left, expr.op, ctx, is_right=False)
            right = self._render_operand(expr.right, expr.op, ctx, is_right=True)
            return f"{left} {OPERATOR_SYMBOLS[expr.op]} {right}"

        if isinstance(expr, FunctionCall):
            return self._render_call(expr, ctx)

        if isinstance(expr, FieldAccess):
            return self._render_field_access(expr, ctx)

        raise InternalCompilerError(f"Unknown expression node: {type(expr).__name__}")

    def _render_identifier(self, expr: Identifier, ctx: FunctionContext) -> str:
        if expr.name == SELF_NAME:
            return SELF_NAME
        if ctx.is_field_reference(expr.name):
            if ctx.is_constructor:
                return ctx.field_bindings.get(expr.name, expr.name)
            return f"self.{expr.name}"
        return expr.name

    def _render_operand(self, operand: Expression, parent_op: BinaryOperator, ctx: FunctionContext, is_right: bool) -> str:
        """
        Parenthesizes an operand only when Rust would otherwise group it
        differently: a looser child, an equally tight child on the right, or
        one comparison nested directly in another.
        """
        rendered = self._render(operand, ctx)
        if not isinstance(operand, BinaryOp):
            return rendered

        parent_precedence = OPERATOR_PRECEDENCE[parent_op]
        child_precedence = OPERATOR_PRECEDENCE[operand.op]
        needs_parens = (
            child_precedence < parent_precedence
            or (is_right and child_precedence == parent_precedence)
            or (parent_op in COMPARISON_OPERATORS and operand.op in COMPARISON_OPERATORS)
        )
        return f"({rendered})" if needs_parens else rendered

    def _render_call(self, call: FunctionCall, ctx: FunctionContext) -> str:
        render = lambda expr: self._render(expr, ctx)

        if call.callee == PRINT_FUNCTION:
            return render_print(call, render)

        if call.callee in CONVERSION_FUNCTIONS:
            type_of = lambda expr: infer_type(expr, ctx.variables(), self.member_types)
            return render_conversion(call, render, type_of)

        args = ", ".join(render(arg) for arg in call.args)
        return f"{call.callee}({args})"

    def _render_field_access(self, expr: FieldAccess, ctx: FunctionContext) -> str:
        args = ", ".join(self._render(arg, ctx) for arg in expr.args)
        receiver = expr.receiver
        span = expr.span

        if is_self_reference(receiver):
            return self._render_self_member(expr, args, ctx)

        # `Name.new(...)` where Name is not a variable in scope.
        if isinstance(receiver, Identifier) and not ctx.is_visible(receiver.name) and not ctx.is_field_reference(receiver.name):
            info = self.classes.get(receiver.name)
            if info is not None:
                if expr.name != CONSTRUCTOR_NAME:
                    raise GenerationError(ErrorCode.UNDEFINED_STATIC_MEMBER, line=span.line, column=span.column, class_name=info.name, name=expr.name)
                if info.constructor is None:
                    raise GenerationError(ErrorCode.UNDEFINED_CONSTRUCTOR, line=span.line, column=span.column, class_name=info.name)
                return f"{info.name}::{CONSTRUCTOR_NAME}({args})"
            if expr.name == CONSTRUCTOR_NAME:
                raise GenerationError(ErrorCode.UNDEFINED_CLASS, line=span.line, column=span.column, class_name=receiver.name)

        rendered_receiver = self._render(receiver, ctx)
        if isinstance(receiver, (BinaryOp, UnaryOp)):
            rendered_receiver = f"({rendered_receiver})"

        if expr.name in self.method_names:
            return f"{rendered_receiver}.{expr.name}({args})"
        if expr.name in self.member_types:
            if expr.is_call:
                raise GenerationError(ErrorCode.FIELD_NOT_CALLABLE, line=span.line, column=span.column, name=expr.name)
            return f"{rendered_receiver}.{expr.name}"
        raise GenerationError(ErrorCode.UNDEFINED_MEMBER, line=span.line, column=span.column, name=expr.name)

    def _render_self_member(self, expr: FieldAccess, args: str, ctx: FunctionContext) -> str:
        info = ctx.class_info
        span = expr.span
        if info is None:
            raise InternalCompilerError(f"'self' outside of a method (line {span.line}).")

        if expr.name in info.methods and expr.name != CONSTRUCTOR_NAME:
            if ctx.is_constructor:
                # `new` has no receiver to call through.
                raise GenerationError(ErrorCode.METHOD_CALL_IN_CONSTRUCTOR, line=span.line, column=span.column, class_name=info.name, name=expr.name)
            return f"self.{expr.name}({args})"
        if expr.name in info.fields:
            if expr.is_call:
                raise GenerationError(ErrorCode.FIELD_NOT_CALLABLE, line=span.line, column=span.column, name=expr.name)
            if ctx.is_constructor:
                return ctx.field_bindings.get(expr.name, f"self.{expr.name}")
            return f"self.{expr.name}"
        raise GenerationError(ErrorCode.UNDEFINED_MEMBER, line=span.line, column=span.column, name=expr.name)


def generate(program: Program) -> str:
    """High-level entry point for the code generation stage."""
    return CodeGenerator(program).generate()


def generate_expression(expr: Expression) -> str:
    return CodeGenerator(Program(span=expr.span, statements=[])).generate_expression(expr)
