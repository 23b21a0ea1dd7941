from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Optional, Sequence, TextIO

from .errors import make_out_of_bounds_error
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
    Reset,
)

logger = logging.getLogger(__name__)

TAPE_LENGTH = 30_000


def read_input(stream: TextIO) -> int:
    """Block for one input character and return its byte value.

    A line holding exactly one ASCII character followed by a line separator
    is accepted. End of stream yields 0. Anything else, an unterminated final
    line included, is reported and the read is retried.
    """
    while True:
        try:
            line = stream.readline()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("input error: %s", e)
            continue

        if not line:
            return 0
        if not line.endswith('\n'):
            logger.warning("input must end with a line separator")
            continue
        char = line.rstrip('\r\n')
        if len(char) != 1:
            logger.warning("input must be a single character")
            continue
        if not char.isascii():
            logger.warning("input must be an ascii character")
            continue
        return ord(char)


@dataclass(frozen=True)
class Snapshot:
    pc: int
    pointer: int
    steps: int
    tape: bytes


class Executor:
    """Tape machine running a parsed (optionally optimized) program.

    The tape, data pointer and program counter belong to this executor alone;
    run several programs side by side with several executors.
    """

    def __init__(
        self,
        program: Sequence[Instruction],
        *,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        tape_length: int = TAPE_LENGTH,
    ):
        if tape_length < 1:
            raise ValueError(f"tape length must be at least 1, got {tape_length}")
        self.program = list(program)
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.tape_length = tape_length
        self.reset()

    def reset(self) -> None:
        self.tape = bytearray(self.tape_length)
        self.pointer = 0
        self.pc = 0
        self.steps = 0

    @property
    def finished(self) -> bool:
        return self.pc >= len(self.program)

    def current(self) -> Optional[Instruction]:
        if self.finished:
            return None
        return self.program[self.pc]

    def step(self) -> bool:
        """Execute one instruction. Returns False once the program has halted."""
        if self.finished:
            return False
        self._execute(self.program[self.pc])
        self.pc += 1
        self.steps += 1
        return not self.finished

    def run(self) -> None:
        """Run until the program counter passes the end or a fault is raised."""
        program = self.program
        length = len(program)
        execute = self._execute
        try:
            while self.pc < length:
                execute(program[self.pc])
                self.pc += 1
                self.steps += 1
        finally:
            self.stdout.flush()
        logger.debug("halted after %d steps, pointer at %d", self.steps, self.pointer)

    def snapshot(self) -> Snapshot:
        return Snapshot(self.pc, self.pointer, self.steps, bytes(self.tape))

    def _execute(self, ins: Instruction) -> None:
        tape = self.tape
        ptr = self.pointer

        if isinstance(ins, Increment):
            tape[ptr] = (tape[ptr] + ins.count) & 0xFF
        elif isinstance(ins, Decrement):
            tape[ptr] = (tape[ptr] - ins.count) & 0xFF
        elif isinstance(ins, MoveRight):
            moved = ptr + ins.count
            if moved >= self.tape_length:
                raise make_out_of_bounds_error(pc=self.pc, pointer=ptr, move=ins.count,
                                               tape_length=self.tape_length)
            self.pointer = moved
        elif isinstance(ins, MoveLeft):
            if ins.count > ptr:
                raise make_out_of_bounds_error(pc=self.pc, pointer=ptr, move=-ins.count,
                                               tape_length=self.tape_length)
            self.pointer = ptr - ins.count
        elif isinstance(ins, LoopStart):
            if tape[ptr] == 0:
                self.pc = ins.target
        elif isinstance(ins, LoopEnd):
            if tape[ptr] != 0:
                self.pc = ins.target
        elif isinstance(ins, Reset):
            tape[ptr] = 0
        elif isinstance(ins, Output):
            self.stdout.write(chr(tape[ptr]))
        elif isinstance(ins, Input):
            self.stdout.flush()
            tape[ptr] = read_input(self.stdin)
        else:
            raise TypeError(f"Unknown instruction: {ins!r}")


def execute(
    program: Sequence[Instruction],
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    tape_length: int = TAPE_LENGTH,
) -> Executor:
    """Run a program to completion and return the executor holding its final state."""
    executor = Executor(program, stdin=stdin, stdout=stdout, tape_length=tape_length)
    executor.run()
    return executor
