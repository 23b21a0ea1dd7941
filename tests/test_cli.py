#!/usr/bin/env python3
"""
Command line tests: exit codes, diagnostics and the --emit/--dump/--stats modes.
"""

import io

import pytest

from bfinterp.cli import main


@pytest.fixture
def write_program(tmp_path):
    def _write(source, name="prog.bf"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return str(path)
    return _write


def test_runs_program(write_program, capsys):
    assert main([write_program("+++++++++[>++++++++<-]>.")]) == 0
    assert capsys.readouterr().out == "H"


def test_reads_program_input(write_program, capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("A\n"))
    assert main([write_program(",.")]) == 0
    assert capsys.readouterr().out == "A"


def test_rejects_wrong_extension(write_program, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([write_program("+", name="prog.txt")])
    assert excinfo.value.code == 2
    assert "source file extension is not valid" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.bf")]) == 1
    assert capsys.readouterr().err.startswith("file reading error:")


def test_parse_error(write_program, capsys):
    assert main([write_program("+[")]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("parsing error: unclosed loop at line 1 char 2")


def test_parse_error_without_positions(write_program, capsys):
    assert main([write_program("]"), "--no-positions"]) == 1
    assert capsys.readouterr().err == "parsing error: missing loop start\n"


def test_execution_error(write_program, capsys):
    assert main([write_program("+.<.")]) == 1
    captured = capsys.readouterr()
    assert captured.out == "\x01"
    assert captured.err.startswith("execution error: out of bounds")


def test_emit(write_program, capsys):
    assert main([write_program("+++++ [-] .\n"), "--emit"]) == 0
    assert capsys.readouterr().out == "+++++[-].\n"


def test_dump(write_program, capsys):
    assert main([write_program("+++[-]."), "--dump"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert "Reset()" in lines[1]


def test_dump_without_optimization(write_program, capsys):
    assert main([write_program("+++[-]."), "--dump", "--no-optimize"]) == 0
    assert len(capsys.readouterr().out.splitlines()) == 7


def test_stats(write_program, capsys):
    assert main([write_program("++."), "--stats"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "\x02"
    assert "Execution took" in captured.err
    assert "(2 steps)" in captured.err


def test_tape_length(write_program, capsys):
    assert main([write_program(">>>>"), "--tape-length", "4"]) == 1
    assert "out of bounds" in capsys.readouterr().err


@pytest.mark.parametrize("length", ["0", "-5", "many"])
def test_rejects_bad_tape_length(write_program, capsys, length):
    with pytest.raises(SystemExit) as excinfo:
        main([write_program("+"), "--tape-length", length])
    assert excinfo.value.code == 2
    assert "--tape-length" in capsys.readouterr().err
