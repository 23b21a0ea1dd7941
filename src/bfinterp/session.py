from __future__ import annotations

import io
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

import numpy as np

from .api import RunOptions, compile_string
from .errors import BFExecutionError
from .executor import TAPE_LENGTH, Executor, Snapshot
from .instructions import Decrement, Increment, Input, Instruction, Program, Reset
from .optimizer import emit

logger = logging.getLogger(__name__)

HISTORY_EVERY = 10


class InputBuffer:
    """Line-per-character stream the executor reads from while stepping."""

    def __init__(self):
        self.chars: Deque[str] = deque()
        self.closed = False

    def feed(self, text: str) -> None:
        for ch in text:
            if ch in "\r\n":
                continue
            if ch.isascii():
                self.chars.append(ch)
            else:
                logger.warning("dropping non-ascii input character %r", ch)

    def close(self) -> None:
        self.closed = True

    def readline(self) -> str:
        if not self.chars:
            return ""
        return self.chars.popleft() + "\n"


@dataclass(frozen=True)
class StepResult:
    continues: bool
    old_pointer: int
    new_pointer: int
    changed_address: int = -1
    waiting: bool = False


def instruction_spans(program: Program) -> List[Tuple[int, int]]:
    """Character span of each instruction inside emit(program)."""
    spans: List[Tuple[int, int]] = []
    pos = 0
    for ins in program:
        width = len(ins.render())
        spans.append((pos, pos + width))
        pos += width
    return spans


class TapeSession:
    """Step-by-step execution state behind the visualizer."""

    def __init__(self, *, optimize: bool = True, tape_length: int = TAPE_LENGTH):
        self.optimize = optimize
        self.tape_length = tape_length
        self.program: Program = []
        self.program_text = ""
        self.spans: List[Tuple[int, int]] = []
        self.reset()

    def load_program(self, source: str) -> None:
        """Parse (and optimize) `source`; parse errors propagate and leave the session untouched."""
        options = RunOptions(optimize=self.optimize, tape_length=self.tape_length)
        program = compile_string(source, options=options)
        self.program = program
        self.program_text = emit(program)
        self.spans = instruction_spans(program)
        self.reset()

    def reset(self) -> None:
        self.input = InputBuffer()
        self.output = io.StringIO()
        self.executor = Executor(self.program, stdin=self.input, stdout=self.output,
                                 tape_length=self.tape_length)
        self.history: List[Tuple[int, int]] = []
        self.error: Optional[BFExecutionError] = None

    # ---- state ----
    @property
    def memory(self) -> np.ndarray:
        return np.frombuffer(self.executor.tape, dtype=np.uint8)

    @property
    def pointer(self) -> int:
        return self.executor.pointer

    @property
    def pc(self) -> int:
        return self.executor.pc

    @property
    def step_count(self) -> int:
        return self.executor.steps

    @property
    def finished(self) -> bool:
        return self.executor.finished or self.error is not None

    @property
    def output_text(self) -> str:
        return self.output.getvalue()

    def current_instruction(self) -> Optional[Instruction]:
        return self.executor.current()

    def current_span(self) -> Optional[Tuple[int, int]]:
        if self.executor.finished:
            return None
        return self.spans[self.executor.pc]

    def nonzero_cells(self) -> np.ndarray:
        return np.nonzero(self.memory)[0]

    def copy_state(self) -> Snapshot:
        return self.executor.snapshot()

    # ---- input ----
    def feed_input(self, text: str) -> None:
        self.input.feed(text)

    def close_input(self) -> None:
        self.input.close()

    def waiting_for_input(self) -> bool:
        return (
            isinstance(self.executor.current(), Input)
            and not self.input.chars
            and not self.input.closed
        )

    # ---- execution ----
    def step(self) -> StepResult:
        """Execute one instruction, or report that input is needed first.

        Execution errors are recorded on the session and re-raised.
        """
        ex = self.executor
        old = ex.pointer
        if self.finished:
            return StepResult(False, old, old)
        if self.waiting_for_input():
            return StepResult(True, old, old, waiting=True)

        ins = ex.current()
        try:
            ex.step()
        except BFExecutionError as e:
            self.error = e
            raise

        changed = old if isinstance(ins, (Increment, Decrement, Reset, Input)) else -1
        if ex.steps % HISTORY_EVERY == 0:
            self.history.append((ex.steps, ex.pc))
        return StepResult(not ex.finished, old, ex.pointer, changed)

    def run(self, max_steps: int) -> Tuple[StepResult, int]:
        """Step until halted, waiting for input, or `max_steps` instructions ran."""
        before = self.executor.steps
        result = StepResult(not self.finished, self.pointer, self.pointer)
        while self.executor.steps - before < max_steps:
            result = self.step()
            if result.waiting or not result.continues:
                break
        return result, self.executor.steps - before
