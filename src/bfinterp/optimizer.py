#
# Peephole optimizer for parsed programs.
#
#   - run-length coalescing: >>> becomes MoveRight(3), +++ becomes Increment(3), ...
#   - clear-cell folding:    [-] and [+] become Reset()
#
# Instead of deleting from the list and shifting every later jump, a new list is
# built while recording where each surviving loop boundary ends up; jump targets
# are rewritten through that map in a second pass.
#
from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from .instructions import (
    COUNTED,
    JUMPS,
    VALUE_CHANGES,
    Instruction,
    LoopEnd,
    LoopStart,
    Program,
    Reset,
    with_count,
)

logger = logging.getLogger(__name__)


def is_clear_loop(program: Sequence[Instruction], index: int) -> bool:
    """True when program[index] opens a loop whose whole body is a single +1 or -1."""
    start = program[index]
    if not isinstance(start, LoopStart) or start.target != index + 2:
        return False
    if index + 2 >= len(program):
        return False
    body = program[index + 1]
    return (
        isinstance(body, VALUE_CHANGES)
        and body.count == 1
        and isinstance(program[index + 2], LoopEnd)
    )


def coalesce_run(program: Sequence[Instruction], index: int) -> int:
    """Return the end (exclusive) of the run of same-kind instructions starting at index."""
    kind = type(program[index])
    end = index + 1
    while end < len(program) and type(program[end]) is kind:
        end += 1
    return end


def optimize(program: Sequence[Instruction]) -> Program:
    """Return an equivalent program with runs merged and clear loops folded.

    Never fails on a well-formed program; the result is well-formed too.
    """
    out: List[Instruction] = []
    new_index: Dict[int, int] = {}

    i = 0
    n = len(program)
    while i < n:
        ins = program[i]
        if isinstance(ins, LoopStart) and is_clear_loop(program, i):
            out.append(Reset())
            i += 3
            continue
        if isinstance(ins, COUNTED):
            end = coalesce_run(program, i)
            total = sum(program[j].count for j in range(i, end))
            out.append(with_count(ins, total))
            i = end
            continue
        if isinstance(ins, JUMPS):
            new_index[i] = len(out)
        out.append(ins)
        i += 1

    result = [_retarget(ins, new_index) for ins in out]
    logger.debug("optimized %d instructions into %d", n, len(result))
    return result


def _retarget(ins: Instruction, new_index: Dict[int, int]) -> Instruction:
    if isinstance(ins, LoopStart):
        return LoopStart(new_index[ins.target])
    if isinstance(ins, LoopEnd):
        return LoopEnd(new_index[ins.target])
    return ins


def emit(program: Sequence[Instruction]) -> str:
    """Render a program back into source text."""
    return "".join(ins.render() for ins in program)


def count_static_ops(program: Sequence[Instruction]) -> int:
    """Number of source characters the program stands for."""
    return sum(len(ins.render()) for ins in program)
