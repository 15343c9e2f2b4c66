from __future__ import annotations

import io

import pytest
from prompt_toolkit.document import Document

from loam import config as loam_config
from loam.config import LoamConfig, debug_py_trace_enabled
from loam.repl import eval_entry, handle_slash, open_depth
from loam.repl_highlight import GROUP_STYLE, LoamLexer, highlight_line
from loam.runner import EXIT_DATAERR, EXIT_SOFTWARE, main, repl_eval, scan
from tests.support.harness import Interpreter, LoamNameError, ParseError


def test_main_runs_literal_source(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(['let a = 2; print a * 3;']) == 0
    assert capsys.readouterr().out == "6\n"


def test_main_runs_file(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    script = tmp_path / "hello.loam"
    script.write_text('print "hi from file";\n', encoding="utf-8")

    assert main([str(script)]) == 0
    assert capsys.readouterr().out == "hi from file\n"


def test_main_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("print 1 + 1;"))

    assert main(["-"]) == 0
    assert capsys.readouterr().out == "2\n"


def test_main_empty_stdin_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))

    with pytest.raises(SystemExit, match="No input provided"):
        main([])


@pytest.mark.parametrize(
    "source, status, message",
    [
        pytest.param('print "open;', EXIT_DATAERR, "Error: Unterminated string", id="lexical"),
        pytest.param("let = 1;", EXIT_DATAERR, "Error: Expected variable name", id="syntax"),
        pytest.param(
            "print " + "[" * 300 + "]" * 300 + ";",
            EXIT_DATAERR,
            "Error: Expression nested too deeply",
            id="deep-nesting",
        ),
        pytest.param("print nope;", EXIT_SOFTWARE, "Error: Cannot read undefined variable 'nope'", id="runtime"),
    ],
)
def test_main_exit_codes(source: str, status: int, message: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([source]) == status
    assert message in capsys.readouterr().err


def test_main_reports_every_syntax_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["let = 1; let y = 2; print +;"]) == EXIT_DATAERR

    err_lines = [line for line in capsys.readouterr().err.splitlines() if line.startswith("Error:")]
    assert len(err_lines) == 2


def test_main_python_traceback_on_request(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv(loam_config.ENV_DEBUG_PY_TRACE, "1")

    assert main(["print 1 / 0;"]) == EXIT_SOFTWARE
    err = capsys.readouterr().err
    assert "Error: Division by zero" in err
    assert "Python traceback:" in err


def test_main_tokens_mode(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--tokens", "let x;"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("Tok(LET, 'let'")
    assert out[-1].startswith("Tok(EOF, None")


def test_main_ast_mode(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--ast", "print 1 + 2;"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("program")
    assert "printstmt" in out and "binary" in out


@pytest.mark.parametrize("flags", [["--max-depth", "3"], ["--max-depth=3"]], ids=["separate", "inline"])
def test_main_max_depth(flags, capsys: pytest.CaptureFixture[str]) -> None:
    source = "fn f(n) { if (n == 0) return 0; return f(n - 1); } print f(5);"

    assert main(flags + [source]) == EXIT_SOFTWARE
    assert "Maximum call depth of 3 exceeded" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv, message",
    [
        pytest.param(["--max-depth"], "requires a number", id="missing-value"),
        pytest.param(["--max-depth", "many", "x;"], "expects an integer", id="not-a-number"),
        pytest.param(["--max-depth=0", "x;"], "at least 1", id="zero"),
        pytest.param(["a;", "b;"], "Unexpected argument", id="two-sources"),
    ],
)
def test_main_bad_arguments(argv, message: str) -> None:
    with pytest.raises(SystemExit, match=message):
        main(argv)


def test_main_rejects_bad_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(loam_config.ENV_MAX_CALL_DEPTH, "deep")

    with pytest.raises(SystemExit, match="LOAM_MAX_CALL_DEPTH"):
        main(["print 1;"])


def test_scan_matches_lexer() -> None:
    assert [tok.type.name for tok in scan("a;")] == ["IDENT", "SEMI", "EOF"]


# ---------------- config ----------------

def test_config_defaults() -> None:
    config = LoamConfig.from_env({})
    assert config == LoamConfig()
    assert config.max_call_depth == 200
    assert config.debug_py_trace is False
    assert config.log_level == "WARNING"


def test_config_from_env_values() -> None:
    config = LoamConfig.from_env({
        "LOAM_MAX_CALL_DEPTH": " 64 ",
        "LOAM_DEBUG_PY_TRACE": "yes",
        "LOAM_LOG_LEVEL": "debug",
    })
    assert config == LoamConfig(max_call_depth=64, debug_py_trace=True, log_level="DEBUG")


@pytest.mark.parametrize(
    "environ, name",
    [
        pytest.param({"LOAM_MAX_CALL_DEPTH": "x"}, "LOAM_MAX_CALL_DEPTH", id="depth-not-int"),
        pytest.param({"LOAM_MAX_CALL_DEPTH": "0"}, "LOAM_MAX_CALL_DEPTH", id="depth-zero"),
        pytest.param({"LOAM_DEBUG_PY_TRACE": "maybe"}, "LOAM_DEBUG_PY_TRACE", id="trace-flag"),
        pytest.param({"LOAM_LOG_LEVEL": "LOUD"}, "LOAM_LOG_LEVEL", id="log-level"),
    ],
)
def test_config_rejects_bad_values(environ, name: str) -> None:
    with pytest.raises(ValueError, match=name):
        LoamConfig.from_env(environ)


# ---------------- REPL helpers ----------------

def test_repl_eval_echoes_bare_expression() -> None:
    interp = Interpreter(out=io.StringIO())

    result, echo = repl_eval("let x = 20;", interp)
    assert result is None and echo is False

    result, echo = repl_eval("x + 1", interp)
    assert echo is True
    assert result.value == 21


def test_repl_eval_adds_missing_semicolon_to_statements() -> None:
    out = io.StringIO()
    interp = Interpreter(out=out)

    _, echo = repl_eval("let y = 3", interp)
    assert echo is False
    repl_eval("print y", interp)
    assert out.getvalue() == "3\n"


def test_repl_eval_keeps_real_syntax_errors() -> None:
    interp = Interpreter(out=io.StringIO())

    with pytest.raises(ParseError):
        repl_eval("let = ;", interp)


def test_eval_entry_reports_errors(capsys: pytest.CaptureFixture[str]) -> None:
    interp = Interpreter(out=io.StringIO())

    assert eval_entry("undefined_thing", interp) is None
    assert "Cannot read undefined variable 'undefined_thing'" in capsys.readouterr().err

    assert eval_entry('"a" + [1, "b"]', interp) == "a[1, b]"


def test_slash_reset_and_traceback_toggle(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.delenv(loam_config.ENV_DEBUG_PY_TRACE, raising=False)
    interp = Interpreter(out=io.StringIO())
    repl_eval("let kept = 1;", interp)

    assert handle_slash("/reset", interp)
    with pytest.raises(LoamNameError):
        repl_eval("kept;", interp)

    assert handle_slash("/py-traceback on", interp)
    assert debug_py_trace_enabled()
    assert handle_slash("/py-traceback", interp)
    assert not debug_py_trace_enabled()

    assert handle_slash("/nope", interp)
    assert "Unknown command: /nope" in capsys.readouterr().err

    assert not handle_slash("print 1;", interp)


@pytest.mark.parametrize(
    "text, depth",
    [
        pytest.param("fn f() {", 1, id="open-brace"),
        pytest.param("print [1, (2", 2, id="nested-open"),
        pytest.param("f(1);", 0, id="balanced"),
        pytest.param('"unterminated {', 0, id="unlexable"),
        pytest.param("}}", 0, id="extra-close"),
    ],
)
def test_open_depth(text: str, depth: int) -> None:
    assert open_depth(text) == depth


def test_highlight_line_styles_tokens() -> None:
    fragments = highlight_line('let s = "x"; // note')

    assert "".join(text for _, text in fragments) == 'let s = "x"; // note'
    assert (GROUP_STYLE["keyword"], "let") in fragments
    assert (GROUP_STYLE["string"], '"x"') in fragments
    assert (GROUP_STYLE["comment"], "// note") in fragments


def test_highlight_line_leaves_bad_input_unstyled() -> None:
    assert highlight_line('print "open') == [("", 'print "open')]
    assert highlight_line("") == [("", "")]


def test_lexer_highlights_each_document_line() -> None:
    get_line = LoamLexer().lex_document(Document("let a = 1;\nprint a;"))

    assert "".join(text for _, text in get_line(1)) == "print a;"
    assert get_line(5) == [("", "")]
