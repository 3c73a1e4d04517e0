"""
Lowering of Grit's built-in functions: `print`, `to_int`, `to_float` and `to_string`.

Each renderer receives the call node plus two callbacks from the generator,
one rendering a sub-expression to Rust and one inferring its type tag, so this
module stays independent of scopes and class tables.
"""

from typing import Callable, List, Optional, Tuple

from ..config import RUST_FLOAT, RUST_INT
from ..exceptions import ErrorCode, GenerationError
from ..parser.classes import *
from .types import TypeTag

RenderFn = Callable[[Expression], str]
TypeFn = Callable[[Expression], Optional[TypeTag]]


def convert_format_string(fmt: str) -> Tuple[str, int]:
    """
    Rewrites a printf-style Grit format string into a Rust format string.

    `%d` and `%s` become `{}`, `%%` becomes a literal `%`, and literal braces
    are doubled so Rust does not read them as placeholders. Returns the new
    string and the number of placeholders it contains.
    """
    pieces: List[str] = []
    specifiers = 0
    i = 0
    while i < len(fmt):
        char = fmt[i]
        following = fmt[i + 1] if i + 1 < len(fmt) else ""
        if char == "%" and following in ("d", "s"):
            pieces.append("{}")
            specifiers += 1
            i += 2
            continue
        if char == "%" and following == "%":
            pieces.append("%")
            i += 2
            continue
        if char in "{}":
            pieces.append(char * 2)
        else:
            pieces.append(char)
        i += 1
    return "".join(pieces), specifiers


def rust_string_literal(value: str) -> str:
    # Backslashes pass through so Rust escapes such as '\n' keep working.
    return '"' + value.replace('"', '\\"') + '"'


def render_print(call: FunctionCall, render: RenderFn) -> str:
    """
    print()                  -> println!()
    print('x=%d', x)         -> println!("x={}", x)
    print(a, b)              -> println!("{} {}", a, b)
    """
    if not call.args:
        return "println!()"

    first, rest = call.args[0], call.args[1:]

    if isinstance(first, StringLiteral):
        rust_fmt, specifiers = convert_format_string(first.value)
        if specifiers != len(rest):
            raise GenerationError(
                ErrorCode.FORMAT_ARGUMENT_COUNT_MISMATCH,
                line=call.span.line,
                column=call.span.column,
                fmt=first.value,
                specifiers=specifiers,
                provided=len(rest),
            )
        arguments = [rust_string_literal(rust_fmt)] + [render(arg) for arg in rest]
        return f"println!({', '.join(arguments)})"

    placeholders = " ".join("{}" for _ in call.args)
    arguments = [f'"{placeholders}"'] + [render(arg) for arg in call.args]
    return f"println!({', '.join(arguments)})"


def render_conversion(call: FunctionCall, render: RenderFn, type_of: TypeFn) -> str:
    """
    to_int(x)    -> (x as i64)      or x.parse::<i64>().unwrap() for strings
    to_float(x)  -> (x as f64)      or x.parse::<f64>().unwrap() for strings
    to_string(x) -> x.to_string()
    """
    if len(call.args) != 1:
        raise GenerationError(
            ErrorCode.CONVERSION_ARGUMENT_COUNT,
            line=call.span.line,
            column=call.span.column,
            name=call.callee,
            provided=len(call.args),
        )

    (argument,) = call.args
    rendered = render(argument)
    # `as` and method calls bind tighter than any Grit operator.
    receiver = f"({rendered})" if isinstance(argument, (BinaryOp, UnaryOp)) else rendered

    if call.callee == "to_string":
        return f"{receiver}.to_string()"

    target = RUST_INT if call.callee == "to_int" else RUST_FLOAT
    if type_of(argument) == TypeTag.STRING:
        return f"{receiver}.parse::<{target}>().unwrap()"
    return f"({receiver if isinstance(argument, BinaryOp) else rendered} as {target})"
