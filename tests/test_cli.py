"""Tests for the smallc command line."""

import io
import sys

from smallc.cli import main


def _write(tmp_path, text: str, name: str = "prog.sml"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_compiles_to_class_file(tmp_path):
    src = _write(tmp_path, "print 1 + 2\n")
    assert main([str(src)]) == 0
    out = tmp_path / "prog.j"
    assert out.read_text().startswith(".class public prog\n")


def test_output_and_class_flags(tmp_path):
    src = _write(tmp_path, "x = 1\n")
    dest = tmp_path / "out.j"
    assert main(["--class", "Demo", "-o", str(dest), str(src)]) == 0
    text = dest.read_text()
    assert text.startswith(".class public Demo\n")
    assert ".limit locals 2\n" in text


def test_ast_flag(tmp_path, capsys):
    src = _write(tmp_path, "x = 1 + 2 * 3\n")
    assert main(["--ast", str(src)]) == 0
    assert capsys.readouterr().out == "(program (= x (+ 1 (* 2 3))))\n"


def test_run_flag(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("4\n"))
    src = _write(tmp_path, "read n\nprint n * n\n")
    assert main(["--run", str(src)]) == 0
    assert capsys.readouterr().out == "16\n"


def test_type_errors_reported_and_output_written(tmp_path, capsys):
    src = _write(tmp_path, 'x = "a" * 2\n')
    assert main([str(src)]) == 1
    assert "smallc: error: <string> * <int> is illegal at line 1 col 5" in capsys.readouterr().err
    assert (tmp_path / "prog.j").exists()


def test_parse_error_writes_nothing(tmp_path, capsys):
    src = _write(tmp_path, "if x then\n")
    assert main([str(src)]) == 1
    assert "smallc: parse error: expected 'end'" in capsys.readouterr().err
    assert not (tmp_path / "prog.j").exists()


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.sml")]) == 1
    assert "No such file or directory" in capsys.readouterr().err


def test_usage_errors(capsys):
    assert main([]) == 2
    assert main(["--bogus", "a.sml"]) == 2
    assert main(["-o"]) == 2
    assert main(["a.sml", "b.sml"]) == 2


def test_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out.startswith("smallc [OPTIONS] FILE")
