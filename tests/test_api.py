#!/usr/bin/env python3
"""
End-to-end tests for the string/file helpers and their structured results.
"""

import io
from pathlib import Path

from bfinterp import RunOptions, compile_string, run_file, run_string
from bfinterp.errors import OutOfBoundsError, UnmatchedCloseError, UnmatchedOpenError
from bfinterp.instructions import Reset


def test_run_string_success():
    result = run_string("+++.")
    assert result.ok
    assert result.output == "\x03"
    assert result.error is None
    assert result.instructions == 2
    assert result.steps == 2


def test_run_string_parse_error():
    result = run_string("[[]")
    assert not result.ok
    assert isinstance(result.error, UnmatchedOpenError)
    assert result.output == ""
    assert result.steps == 0


def test_run_string_unmatched_close():
    result = run_string("[]]")
    assert isinstance(result.error, UnmatchedCloseError)


def test_run_string_execution_error_keeps_prior_output():
    result = run_string("+.<.")
    assert not result.ok
    assert isinstance(result.error, OutOfBoundsError)
    assert result.output == "\x01"


def test_run_string_with_input():
    result = run_string(",[.,]", input_data="A\nB\n")
    assert result.output == "AB"


def test_run_string_with_streams():
    out = io.StringIO()
    result = run_string(",+.", stdin=io.StringIO("a\n"), stdout=out)
    assert result.ok
    assert result.output is None
    assert out.getvalue() == "b"


def test_optimize_option():
    source = "+++++[-]."
    optimized = run_string(source)
    plain = run_string(source, options=RunOptions(optimize=False))
    assert optimized.output == plain.output == "\x00"
    assert optimized.instructions == 3
    assert plain.instructions == 9


def test_compile_string_folds_clear_loops():
    assert Reset() in compile_string("+[-]")
    assert Reset() not in compile_string("+[-]", options=RunOptions(optimize=False))


def test_track_positions_option():
    result = run_string("]", options=RunOptions(track_positions=False))
    assert result.error.line is None
    assert str(result.error) == "missing loop start"


def test_tape_length_option():
    result = run_string(">" * 10, options=RunOptions(tape_length=10))
    assert isinstance(result.error, OutOfBoundsError)
    assert run_string(">" * 9, options=RunOptions(tape_length=10)).ok


def test_run_file(tmp_path):
    path = tmp_path / "three.bf"
    path.write_text("+++ comment\n.", encoding="utf-8")
    result = run_file(path)
    assert result.ok
    assert result.output == "\x03"


NESTED_LOOPS = Path(__file__).resolve().parent.parent / "examples" / "06_nested_loops.bf"


def test_nested_loops_example_with_and_without_optimizer():
    plain = run_file(NESTED_LOOPS, options=RunOptions(optimize=False))
    optimized = run_file(NESTED_LOOPS)
    assert plain.ok and optimized.ok
    assert plain.output == optimized.output == "H"
    assert optimized.instructions < plain.instructions
    assert optimized.steps < plain.steps
