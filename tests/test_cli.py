"""Tests for CLI helpers: _fmt_inline, _fmt_inspect, _process_line, main."""

import io

from qs_core import Absent, QSRepl
from qs_core.repl import _fmt_inline, _fmt_inspect, _process_line, main


# ---------------------------------------------------------------------------
# _fmt_inline
# ---------------------------------------------------------------------------

def test_fmt_inline_scalars():
    assert _fmt_inline("hi") == '"hi"'
    assert _fmt_inline(7) == "7"
    assert _fmt_inline(True) == "true"

def test_fmt_inline_absent():
    assert _fmt_inline(Absent) == "<absent>"

def test_fmt_inline_nested():
    value = {"a": [1, Absent, "x"], "b": True}
    assert _fmt_inline(value) == '{a: [1, <absent>, "x"], b: true}'


# ---------------------------------------------------------------------------
# _fmt_inspect
# ---------------------------------------------------------------------------

def test_fmt_inspect_tree():
    assert _fmt_inspect({"a": [1]}) == "{\n  a: [\n    0: 1\n  ]\n}"

def test_fmt_inspect_empty_containers():
    assert _fmt_inspect({}) == "{}"
    assert _fmt_inspect({"a": []}) == "{\n  a: []\n}"

def test_fmt_inspect_scalar():
    assert _fmt_inspect("x") == '"x"'


# ---------------------------------------------------------------------------
# _process_line
# ---------------------------------------------------------------------------

def run_lines(*lines, repl=None):
    repl = repl or QSRepl()
    out = io.StringIO()
    for line in lines:
        if not _process_line(repl, line, out):
            break
    return out.getvalue()

def test_decode_line():
    assert run_lines("a[]=1&a[]=2") == "{a: [1, 2]}\n"

def test_blank_line_is_ignored():
    assert run_lines("   ") == ""

def test_quit_stops_session():
    repl = QSRepl()
    assert _process_line(repl, ":q", io.StringIO()) is False
    assert _process_line(repl, ":quit", io.StringIO()) is False

def test_encode_line():
    assert run_lines('? {"a": {"b": 1}}') == "a[b]=1\n"

def test_inspect_line():
    assert run_lines("i(a[b]=1)") == "{\n  a: {\n    b: 1\n  }\n}\n"
    assert run_lines("inspect(a)") == "{\n  a: true\n}\n"

def test_delim_command():
    assert run_lines(":delim ;", "a=1;b=2") == "{a: 1, b: 2}\n"

def test_bad_delim_reports_error(capsys):
    repl = QSRepl()
    _process_line(repl, ":delim =", io.StringIO())
    assert "Error:" in capsys.readouterr().err
    assert repl.delimiter == "&"

def test_last_command():
    assert run_lines(":last") == "  (nothing decoded yet)\n"
    assert run_lines("a=1", ":last") == "{a: 1}\n{\n  a: 1\n}\n"

def test_reset_command():
    repl = QSRepl()
    run_lines(":delim ;", "a=1", ":reset", repl=repl)
    assert repl.last is None
    assert repl.delimiter == "&"

def test_codec_error_goes_to_stderr(capsys):
    out = run_lines("a=%", "b=2")
    assert out == "{b: 2}\n"
    assert "Decode error" in capsys.readouterr().err

def test_syntax_error_goes_to_stderr(capsys):
    run_lines("a=1&a[b]=2")
    assert "Syntax error: unexpected" in capsys.readouterr().err

def test_bad_json_goes_to_stderr(capsys):
    assert run_lines("? {oops") == ""
    assert "Error:" in capsys.readouterr().err

def test_batch_file(tmp_path):
    script = tmp_path / "batch.qs"
    script.write_text("a=1\n:delim ;\nb=2;c\n", encoding="utf-8")
    assert run_lines(f"?<< {script}") == "{a: 1}\n{b: 2, c: true}\n"

def test_batch_file_missing(tmp_path, capsys):
    run_lines(f"?<< {tmp_path / 'missing.qs'}")
    assert "Error reading" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------

def test_main_decodes_arguments(capsys):
    assert main(["a=1", "b[]=x"]) == 0
    assert capsys.readouterr().out == "{a: 1}\n{b: [\"x\"]}\n"

def test_main_encode(capsys):
    assert main(["--encode", '{"a": [1, 2]}']) == 0
    assert capsys.readouterr().out == "a[0]=1&a[1]=2\n"

def test_main_delimiter(capsys):
    assert main(["-d", ";", "a=1;b"]) == 0
    assert capsys.readouterr().out == "{a: 1, b: true}\n"

def test_main_stops_on_error(capsys):
    assert main(["a=1", "a=%", "b=2"]) == 1
    captured = capsys.readouterr()
    assert captured.out == "{a: 1}\n"
    assert "Decode error" in captured.err

def test_main_rejects_delimiter(capsys):
    assert main(["-d", "=", "a"]) == 2
    assert "Error:" in capsys.readouterr().err
