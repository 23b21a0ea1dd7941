from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from .errors import BFError, BFExecutionError
from .executor import TAPE_LENGTH, Executor
from .instructions import Program
from .optimizer import optimize
from .parser import parse


@dataclass(frozen=True)
class RunOptions:
    optimize: bool = True
    tape_length: int = TAPE_LENGTH
    track_positions: bool = True


@dataclass(frozen=True)
class RunResult:
    ok: bool
    output: Optional[str]
    error: Optional[BFError] = None
    instructions: int = 0
    steps: int = 0


def compile_string(source: str, *, options: Optional[RunOptions] = None) -> Program:
    opts = options or RunOptions()
    program = parse(source, track_positions=opts.track_positions)
    if opts.optimize:
        program = optimize(program)
    return program


def run_string(
    source: str,
    *,
    input_data: Optional[str] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Parse, optimize and execute `source`.

    Parse and execution failures are reported in the result rather than raised.
    `output` holds what the program printed unless a `stdout` stream was given.
    """
    opts = options or RunOptions()
    if input_data is not None:
        stdin = io.StringIO(input_data)
    captured = io.StringIO() if stdout is None else None

    try:
        program = compile_string(source, options=opts)
    except BFError as e:
        return RunResult(ok=False, output=_text(captured), error=e)

    out = stdout if stdout is not None else captured
    executor = Executor(program, stdin=stdin, stdout=out, tape_length=opts.tape_length)
    try:
        executor.run()
    except BFExecutionError as e:
        return RunResult(ok=False, output=_text(captured), error=e,
                         instructions=len(program), steps=executor.steps)
    return RunResult(ok=True, output=_text(captured), instructions=len(program), steps=executor.steps)


def run_file(
    path: str | Path,
    *,
    encoding: str = "utf-8",
    input_data: Optional[str] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    options: Optional[RunOptions] = None,
) -> RunResult:
    p = Path(path)
    return run_string(p.read_text(encoding=encoding), input_data=input_data, stdin=stdin,
                      stdout=stdout, options=options)


def _text(captured: Optional[io.StringIO]) -> Optional[str]:
    return None if captured is None else captured.getvalue()
