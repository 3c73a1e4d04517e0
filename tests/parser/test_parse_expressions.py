import pytest

from gritc.exceptions import ErrorCode, LexError, ParseError
from gritc.lexer.tokenizer import tokenize
from gritc.parser.classes import *
from gritc.parser.parser import parse, parse_expression
from ..utils.assertion_helper import assert_asts_equal
from ..utils.factory_helpers import *


def parse_expr(source: str):
    return parse_expression(tokenize(source))


a, b, c = get_identifier("a"), get_identifier("b"), get_identifier("c")


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param("42", get_integer(42), id="integer"),
        pytest.param("3.14", get_float(3.14), id="float"),
        pytest.param("'hi'", get_string("hi"), id="string"),
        pytest.param("a", a, id="identifier"),
        pytest.param("(a)", get_grouped(a), id="grouped"),
        pytest.param("-a", get_negation(a), id="negation"),
        pytest.param("--a", get_negation(get_negation(a)), id="double_negation"),
        pytest.param(
            "a + b * c",
            get_binary_op(a, BinaryOperator.ADD, get_binary_op(b, BinaryOperator.MUL, c)),
            id="mul_binds_tighter_than_add",
        ),
        pytest.param(
            "(a + b) * c",
            get_binary_op(get_grouped(get_binary_op(a, BinaryOperator.ADD, b)), BinaryOperator.MUL, c),
            id="grouping_overrides_precedence",
        ),
        pytest.param(
            "a - b - c",
            get_binary_op(get_binary_op(a, BinaryOperator.SUB, b), BinaryOperator.SUB, c),
            id="subtraction_is_left_associative",
        ),
        pytest.param(
            "a / b / c",
            get_binary_op(get_binary_op(a, BinaryOperator.DIV, b), BinaryOperator.DIV, c),
            id="division_is_left_associative",
        ),
        pytest.param(
            "a + b < c",
            get_binary_op(get_binary_op(a, BinaryOperator.ADD, b), BinaryOperator.LT, c),
            id="comparison_is_loosest",
        ),
        pytest.param(
            "-a * b",
            get_binary_op(get_negation(a), BinaryOperator.MUL, b),
            id="unary_binds_tighter_than_mul",
        ),
        pytest.param(
            "a == b != c",
            get_binary_op(get_binary_op(a, BinaryOperator.EQ, b), BinaryOperator.NOT_EQ, c),
            id="comparisons_chain_left",
        ),
        pytest.param("f()", get_call("f"), id="call_without_args"),
        pytest.param("f(a, 1)", get_call("f", [a, get_integer(1)]), id="call_with_args"),
        pytest.param("f(\n  a,\n  b\n)", get_call("f", [a, b]), id="call_args_across_lines"),
        pytest.param("obj.x", get_field_access(get_identifier("obj"), "x"), id="field_access"),
        pytest.param("obj.run()", get_field_access(get_identifier("obj"), "run", is_call=True), id="method_call_empty_parens"),
        pytest.param(
            "Point.new(1, 2)",
            get_field_access(get_identifier("Point"), "new", is_call=True, args=[get_integer(1), get_integer(2)]),
            id="constructor_call",
        ),
        pytest.param(
            "a.b().c",
            get_field_access(get_field_access(a, "b", is_call=True), "c"),
            id="postfix_chains",
        ),
        pytest.param(
            "a.x * 2",
            get_binary_op(get_field_access(a, "x"), BinaryOperator.MUL, get_integer(2)),
            id="postfix_binds_tighter_than_operators",
        ),
    ],
)
def test_expression_parsed_correctly(source, expected):
    assert_asts_equal(parse_expr(source), expected)


def test_round_trip_example_structure():
    expr = parse_expr("(10 + 20) * (30 - 15) / 5")
    expected = get_binary_op(
        get_binary_op(
            get_grouped(get_binary_op(get_integer(10), BinaryOperator.ADD, get_integer(20))),
            BinaryOperator.MUL,
            get_grouped(get_binary_op(get_integer(30), BinaryOperator.SUB, get_integer(15))),
        ),
        BinaryOperator.DIV,
        get_integer(5),
    )
    assert_asts_equal(expr, expected)


def test_binary_op_span_starts_at_left_operand():
    expr = parse_expr("  a + b")
    assert (expr.span.line, expr.span.column) == (1, 3)


@pytest.mark.parametrize(
    "source, expected, found",
    [
        pytest.param("(a + b", "')'", "the end of the file", id="missing_close_paren"),
        pytest.param("f(a b)", "',' or ')'", "identifier 'b'", id="missing_comma_in_args"),
        pytest.param("obj.", "a field or method name", "the end of the file", id="dangling_dot"),
        pytest.param("a b", "the end of the file", "identifier 'b'", id="trailing_tokens"),
    ],
)
def test_expression_syntax_errors(source, expected, found):
    with pytest.raises(ParseError) as e:
        parse_expr(source)
    assert e.value.code == ErrorCode.SYNTAX_UNEXPECTED_TOKEN
    assert e.value.expected == expected
    assert e.value.found == found


@pytest.mark.parametrize(
    "source, found",
    [
        pytest.param("a + ", "the end of the file", id="missing_right_operand"),
        pytest.param("* a", "'*'", id="leading_operator"),
        pytest.param("()", "')'", id="empty_parens"),
    ],
)
def test_missing_expression(source, found):
    with pytest.raises(ParseError) as e:
        parse_expr(source)
    assert e.value.code == ErrorCode.SYNTAX_INVALID_EXPRESSION
    assert e.value.found == found


def test_self_outside_method_is_rejected_in_expressions():
    with pytest.raises(ParseError) as e:
        parse(tokenize("x = self"))
    assert e.value.code == ErrorCode.SYNTAX_SELF_OUTSIDE_METHOD
    assert (e.value.line, e.value.column) == (1, 5)


@pytest.mark.parametrize(
    "source, code, line, column",
    [
        pytest.param("x = 1 @ 2", ErrorCode.LEX_INVALID_CHARACTER, 1, 7, id="bad_character"),
        pytest.param("x = 'abc", ErrorCode.LEX_UNTERMINATED_STRING, 1, 5, id="unterminated_string"),
        pytest.param("x = 99999999999999999999", ErrorCode.LEX_INTEGER_OUT_OF_RANGE, 1, 5, id="integer_out_of_range"),
    ],
)
def test_invalid_tokens_are_reported_as_lex_errors(source, code, line, column):
    with pytest.raises(LexError) as e:
        parse(tokenize(source))
    assert e.value.code == code
    assert (e.value.line, e.value.column) == (line, column)


def test_lex_error_message_includes_location():
    with pytest.raises(LexError) as e:
        parse(tokenize("a = 1\nb = $"))
    assert e.value.message == "Error (Line: 2, Column: 5): Unrecognized character '$'."
    assert e.value.char == "$"


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("x = " + "(" * 2000 + "1" + ")" * 2000, id="nested_parentheses"),
        pytest.param("x = " + "-" * 3000 + "1", id="chained_negation"),
        pytest.param("if 1 < 2 {\n" * 1000 + "x = 1\n" + "}\n" * 1000, id="nested_blocks"),
    ],
)
def test_excessive_nesting_is_a_parse_error(source):
    with pytest.raises(ParseError) as e:
        parse(tokenize(source))
    assert e.value.code == ErrorCode.NESTING_TOO_DEEP
    assert e.value.line is not None


def test_excessive_nesting_in_a_single_expression():
    with pytest.raises(ParseError) as e:
        parse_expr("(" * 2000 + "a" + ")" * 2000)
    assert e.value.code == ErrorCode.NESTING_TOO_DEEP
    assert e.value.message.startswith("Error (Line: 1, Column: ")
