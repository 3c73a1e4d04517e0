import json

import pytest

from gritc.cli import main


@pytest.fixture
def source_file(tmp_path):
    def _write(content: str, name: str = "prog.grit"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


def test_translates_file_to_stdout(source_file, capsys):
    main([source_file("fn add(a, b) { a + b }\nprint('%d', add(1, 2))")])
    out = capsys.readouterr().out
    assert out.startswith("fn add(a: i64, b: i64) -> i64 {")
    assert 'println!("{}", add(1, 2));' in out


def test_writes_output_file(source_file, tmp_path, capsys):
    output = tmp_path / "out" / "prog.rs"
    main([source_file("print('hi')"), "-o", str(output)])
    assert output.read_text(encoding="utf-8") == 'fn main() {\n    println!("hi");\n}\n'
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize(
    "source, expected_message",
    [
        pytest.param("x = 1 @ 2", "Error (Line: 1, Column: 7): Unrecognized character '@'.", id="lex_error"),
        pytest.param("x = (1 + 2", "Error (Line: 1, Column: 11): Expected ')' but found the end of the file.", id="parse_error"),
        pytest.param("print('%d %d', 1)", "Error (Line: 1, Column: 1): Format string '%d %d' has 2 specifier(s) but 1 argument(s) were given.", id="generation_error"),
    ],
)
def test_compile_errors_exit_with_status_one(source_file, capsys, source, expected_message):
    with pytest.raises(SystemExit) as e:
        main([source_file(source)])
    assert e.value.code == 1
    captured = capsys.readouterr()
    assert expected_message in captured.err
    assert captured.out == ""


def test_missing_file_exits_with_status_one(tmp_path, capsys):
    with pytest.raises(SystemExit) as e:
        main([str(tmp_path / "missing.grit")])
    assert e.value.code == 1
    assert "not found" in capsys.readouterr().err


def test_dump_tokens_as_json(source_file, capsys):
    main([source_file("x = 1"), "-c", "tokens"])
    tokens = json.loads(capsys.readouterr().out)
    assert [t["kind"] for t in tokens] == ["Identifier", "Equals", "Integer", "Eof"]
    assert tokens[0]["value"] == "x"
    assert (tokens[2]["line"], tokens[2]["column"]) == (1, 5)


def test_dump_ast_as_json(source_file, capsys):
    main([source_file("class P"), "-c", "ast"])
    ast = json.loads(capsys.readouterr().out)
    assert ast["statements"] == [{"span": {"line": 1, "column": 1}, "name": "P"}]


def test_intermediate_stage_is_saved_next_to_input(source_file, tmp_path, capsys):
    main([source_file("x = 1"), "-c", "ast"])
    printed = json.loads(capsys.readouterr().out)
    saved = json.loads((tmp_path / "prog.ast.json").read_text(encoding="utf-8"))
    assert saved == printed
    assert not (tmp_path / "prog.tokens.json").exists()


def test_full_translation_saves_no_artifacts(source_file, tmp_path, capsys):
    main([source_file("x = 1")])
    assert sorted(p.name for p in tmp_path.iterdir()) == ["prog.grit"]


def test_compile_rust_stage_is_the_full_pipeline(source_file, capsys):
    main([source_file("print()"), "-c", "rust"])
    assert capsys.readouterr().out == "fn main() {\n    println!();\n}\n"


def test_malformed_input_never_crashes(source_file, capsys):
    with pytest.raises(SystemExit) as e:
        main([source_file("fn fn fn ((( '")])
    assert e.value.code == 1
    assert "UNEXPECTED" not in capsys.readouterr().err
