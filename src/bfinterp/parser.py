from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from .errors import UnmatchedCloseError, UnmatchedOpenError, make_parse_error
from .instructions import (
    Decrement,
    Increment,
    Input,
    Instruction,
    LoopEnd,
    LoopStart,
    MoveLeft,
    MoveRight,
    Output,
    Program,
)

BF_OPS = set("+-<>[],.")

_SIMPLE: Dict[str, Callable[[], Instruction]] = {
    '>': MoveRight,
    '<': MoveLeft,
    '+': Increment,
    '-': Decrement,
    '.': Output,
    ',': Input,
}


@dataclass
class _PendingLoop:
    index: int
    line: int
    column: int


def parse(source: str, *, track_positions: bool = True) -> Program:
    """Turn source text into a Program with every loop resolved to its partner.

    Characters outside BF_OPS are comments. Positions are 1-based and counted
    per line, so comments never shift the position reported for a bracket.
    Raises UnmatchedCloseError on a ']' with no open loop and
    UnmatchedOpenError for the earliest '[' still open at the end of input.
    """
    program: Program = []
    pending: List[_PendingLoop] = []

    for line_no, line in enumerate(source.split('\n'), start=1):
        for column, ch in enumerate(line, start=1):
            if ch not in BF_OPS:
                continue
            if ch == '[':
                pending.append(_PendingLoop(len(program), line_no, column))
                program.append(LoopStart(0))  # patched when the loop closes
            elif ch == ']':
                if not pending:
                    raise _error(UnmatchedCloseError, source, line_no, column, track_positions)
                opened = pending.pop()
                program[opened.index] = LoopStart(len(program))
                program.append(LoopEnd(opened.index))
            else:
                program.append(_SIMPLE[ch]())

    if pending:
        first = pending[0]
        raise _error(UnmatchedOpenError, source, first.line, first.column, track_positions)
    return program


def _error(kind, source: str, line: int, column: int, track_positions: bool):
    if not track_positions:
        return make_parse_error(kind, source=source)
    return make_parse_error(kind, source=source, line=line, column=column)
