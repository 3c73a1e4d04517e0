import pytest

from gritc.codegen.builtins import convert_format_string
from gritc.codegen.generator import generate, generate_expression
from gritc.exceptions import ErrorCode, GenerationError
from gritc.lexer.tokenizer import tokenize
from gritc.parser.parser import parse, parse_expression


def render(source: str) -> str:
    return generate_expression(parse_expression(tokenize(source)))


def translate(source: str) -> str:
    return generate(parse(tokenize(source)))


@pytest.mark.parametrize(
    "fmt, expected, count",
    [
        pytest.param("a=%d b=%d", "a={} b={}", 2, id="two_ints"),
        pytest.param("name: %s", "name: {}", 1, id="string_specifier"),
        pytest.param("100%%", "100%", 0, id="escaped_percent"),
        pytest.param("{x}", "{{x}}", 0, id="braces_doubled"),
        pytest.param("50% off", "50% off", 0, id="lone_percent_kept"),
        pytest.param("%d%%", "{}%", 1, id="specifier_then_percent"),
        pytest.param("", "", 0, id="empty"),
    ],
)
def test_convert_format_string(fmt, expected, count):
    assert convert_format_string(fmt) == (expected, count)


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param("print('a=%d b=%d', 1, 2)", 'println!("a={} b={}", 1, 2)', id="format_with_args"),
        pytest.param("print()", "println!()", id="empty_print"),
        pytest.param("print('hello')", 'println!("hello")', id="plain_string"),
        pytest.param("print('100%% {ok}')", 'println!("100% {{ok}}")', id="percent_and_braces"),
        pytest.param("print('say \"%s\"', n)", 'println!("say \\"{}\\"", n)', id="quotes_in_format"),
        pytest.param("print(a)", 'println!("{}", a)', id="single_non_literal"),
        pytest.param("print(a, b + 1)", 'println!("{} {}", a, b + 1)', id="several_non_literals"),
        pytest.param("to_int(3.14)", "(3.14 as i64)", id="to_int_float"),
        pytest.param("to_float(42)", "(42 as f64)", id="to_float_int"),
        pytest.param("to_int(a + b)", "((a + b) as i64)", id="to_int_expression"),
        pytest.param("to_string(42)", "42.to_string()", id="to_string_int"),
        pytest.param("to_string(3.0)", "3.0.to_string()", id="to_string_float"),
        pytest.param("to_string(a + b)", "(a + b).to_string()", id="to_string_expression"),
        pytest.param("to_string(-a)", "(-a).to_string()", id="to_string_negation"),
        pytest.param("to_string(to_int(3.14))", "(3.14 as i64).to_string()", id="nested_conversion"),
        pytest.param("to_int('42')", '"42".parse::<i64>().unwrap()', id="to_int_string"),
        pytest.param("to_float('2.5')", '"2.5".parse::<f64>().unwrap()', id="to_float_string"),
        pytest.param("to_int(to_string(7))", "7.to_string().parse::<i64>().unwrap()", id="to_int_of_to_string"),
    ],
)
def test_render_builtin(source, expected):
    assert render(source) == expected


def test_print_statement_in_main():
    assert translate("print('a=%d b=%d', 1, 2)") == 'fn main() {\n    println!("a={} b={}", 1, 2);\n}\n'


def test_empty_print_statement_in_main():
    assert translate("print()") == "fn main() {\n    println!();\n}\n"


def test_to_int_of_string_variable():
    output = translate("s = '12'\nn = to_int(s)\nprint('%d', n)")
    assert "let n = s.parse::<i64>().unwrap();" in output


@pytest.mark.parametrize(
    "source, specifiers, provided",
    [
        pytest.param("print('%d %d', a)", 2, 1, id="too_few_args"),
        pytest.param("print('%d', a, b)", 1, 2, id="too_many_args"),
        pytest.param("print('no specifiers', a)", 0, 1, id="args_without_specifiers"),
    ],
)
def test_format_argument_count_mismatch(source, specifiers, provided):
    with pytest.raises(GenerationError) as e:
        render(source)
    assert e.value.code == ErrorCode.FORMAT_ARGUMENT_COUNT_MISMATCH
    assert e.value.details["specifiers"] == specifiers
    assert e.value.details["provided"] == provided
    assert (e.value.line, e.value.column) == (1, 1)


@pytest.mark.parametrize(
    "source, provided",
    [
        pytest.param("to_int()", 0, id="to_int_no_args"),
        pytest.param("to_float(1, 2)", 2, id="to_float_two_args"),
        pytest.param("to_string(1, 2, 3)", 3, id="to_string_three_args"),
    ],
)
def test_conversion_argument_count(source, provided):
    with pytest.raises(GenerationError) as e:
        render(source)
    assert e.value.code == ErrorCode.CONVERSION_ARGUMENT_COUNT
    assert e.value.details["provided"] == provided
