from .parser import parse
from .optimizer import emit, optimize
from .executor import TAPE_LENGTH, Executor, execute, read_input
from .errors import (
    BFError,
    BFExecutionError,
    BFParseError,
    OutOfBoundsError,
    UnmatchedCloseError,
    UnmatchedOpenError,
)
from .api import RunOptions, RunResult, compile_string, run_file, run_string

__all__ = [
    'parse',
    'optimize',
    'emit',
    'Executor',
    'execute',
    'read_input',
    'TAPE_LENGTH',
    'BFError',
    'BFParseError',
    'BFExecutionError',
    'UnmatchedOpenError',
    'UnmatchedCloseError',
    'OutOfBoundsError',
    'RunOptions',
    'RunResult',
    'compile_string',
    'run_string',
    'run_file',
]
